"""Builds an AnalysisResult by scanning a directory with tree-sitter."""

import os
from pathlib import Path

from loguru import logger
from tree_sitter import Node, Parser

from ..errors import InputUnavailableError
from ..graph.node_types import AnalysisResult, FileInfo, Symbol, SymbolKind
from ..utils.ast_helpers import get_declared_name, get_parent_of_type, iter_preorder
from .parser_loader import detect_language, load_parser

IGNORE_DIRS = {
    ".git",
    ".hg",
    ".venv",
    "venv",
    "__pycache__",
    "node_modules",
    "target",
    "build",
    "dist",
    ".mypy_cache",
    ".pytest_cache",
}

# syntax node type -> kind, per language
DECLARATION_NODE_TYPES: dict[str, dict[str, SymbolKind]] = {
    "python": {
        "function_definition": SymbolKind.FUNCTION,
        "class_definition": SymbolKind.CLASS,
    },
    "javascript": {
        "function_declaration": SymbolKind.FUNCTION,
        "generator_function_declaration": SymbolKind.FUNCTION,
        "method_definition": SymbolKind.METHOD,
        "class_declaration": SymbolKind.CLASS,
    },
    "rust": {
        "function_item": SymbolKind.FUNCTION,
        "struct_item": SymbolKind.STRUCT,
        "enum_item": SymbolKind.ENUM,
        "trait_item": SymbolKind.TRAIT,
        "mod_item": SymbolKind.MODULE,
        "const_item": SymbolKind.CONSTANT,
        "static_item": SymbolKind.CONSTANT,
    },
}

# Functions nested in these become methods
METHOD_CONTAINERS = {"class_definition", "class_body", "impl_item", "trait_item"}


class SymbolExtractor:
    """Collects declared symbols from every supported file under a root."""

    def __init__(self, root_path: str | Path):
        self.root_path = Path(root_path)
        self._parsers: dict[str, Parser | None] = {}

    def _parser_for(self, language: str) -> Parser | None:
        if language not in self._parsers:
            self._parsers[language] = load_parser(language)
        return self._parsers[language]

    def collect_files(self) -> list[Path]:
        """Supported source files below the root, in sorted walk order."""
        files = []
        for root_str, dirs, filenames in os.walk(self.root_path, topdown=True):
            dirs[:] = sorted(d for d in dirs if d not in IGNORE_DIRS)
            for filename in sorted(filenames):
                filepath = Path(root_str) / filename
                if detect_language(filepath) is not None:
                    files.append(filepath)
        return files

    def extract_symbols(self, root_node: Node, source_code: str, language: str) -> list[Symbol]:
        declaration_types = DECLARATION_NODE_TYPES.get(language, {})
        symbols = []
        for node in iter_preorder(root_node):
            kind = declaration_types.get(node.type)
            if kind is None:
                continue
            name = get_declared_name(node, source_code)
            if not name:
                continue
            if kind == SymbolKind.FUNCTION and get_parent_of_type(node, METHOD_CONTAINERS):
                kind = SymbolKind.METHOD
            symbols.append(Symbol(name=name, kind=kind))
        return symbols

    def analyze_file(self, filepath: Path) -> FileInfo:
        """Parse one file; raises InputUnavailableError if it cannot be read or parsed."""
        relative_path = filepath.relative_to(self.root_path).as_posix()
        language = detect_language(filepath)
        if language is None:
            raise InputUnavailableError(relative_path, "unsupported file extension")

        try:
            content = filepath.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise InputUnavailableError(relative_path, str(e)) from e

        parser = self._parser_for(language)
        if parser is None:
            raise InputUnavailableError(relative_path, f"no tree-sitter grammar for {language}")

        tree = parser.parse(content.encode("utf-8"))
        return FileInfo(
            path=relative_path,
            language=language,
            symbols=self.extract_symbols(tree.root_node, content, language),
            lines=content.count("\n") + 1 if content else 0,
        )

    def analyze(self) -> AnalysisResult:
        """Scan the root directory; unreadable files are logged and skipped."""
        if not self.root_path.is_dir():
            raise InputUnavailableError(str(self.root_path), "not a directory")

        result = AnalysisResult(root_path=self.root_path)
        for filepath in self.collect_files():
            try:
                result.files.append(self.analyze_file(filepath))
            except InputUnavailableError as e:
                logger.warning(f"Skipping {e.path}: {e.reason}")

        logger.info(
            f"Analyzed {result.total_files} files ({result.total_lines} lines) "
            f"under {self.root_path}"
        )
        return result
