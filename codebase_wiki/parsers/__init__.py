"""Tree-sitter adapters: parser loading, CFG building, call and symbol extraction."""

from .call_extraction import (
    CallExtractionStrategy,
    CallSite,
    PatternCallExtractor,
    SyntaxTreeCallExtractor,
)
from .cfg_builder import CfgProvider, TreeSitterCfgBuilder
from .parser_loader import detect_language, load_parser, load_parsers
from .symbol_extractor import SymbolExtractor

__all__ = [
    "CallExtractionStrategy",
    "CallSite",
    "CfgProvider",
    "PatternCallExtractor",
    "SymbolExtractor",
    "SyntaxTreeCallExtractor",
    "TreeSitterCfgBuilder",
    "detect_language",
    "load_parser",
    "load_parsers",
]
