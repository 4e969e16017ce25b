"""Tree-sitter parser loading for the supported languages."""

import importlib
from functools import lru_cache
from pathlib import Path

from loguru import logger
from tree_sitter import Language, Parser

# language name -> grammar package
GRAMMAR_MODULES = {
    "python": "tree_sitter_python",
    "javascript": "tree_sitter_javascript",
    "rust": "tree_sitter_rust",
}

LANGUAGE_EXTENSIONS = {
    ".py": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".rs": "rust",
}


def detect_language(path: str | Path) -> str | None:
    """Guess the language of a file from its extension."""
    return LANGUAGE_EXTENSIONS.get(Path(path).suffix.lower())


@lru_cache(maxsize=None)
def _load_language(language: str) -> Language | None:
    module_name = GRAMMAR_MODULES.get(language)
    if module_name is None:
        return None
    try:
        grammar = importlib.import_module(module_name)
    except ImportError:
        logger.debug(f"Grammar package {module_name} not installed, {language} unavailable")
        return None
    return Language(grammar.language())


def load_parser(language: str) -> Parser | None:
    """Create a parser for `language`, or None when no grammar is available."""
    ts_language = _load_language(language)
    if ts_language is None:
        return None
    return Parser(ts_language)


def load_parsers() -> dict[str, Parser]:
    """Create parsers for every language whose grammar is installed."""
    parsers = {}
    for language in GRAMMAR_MODULES:
        parser = load_parser(language)
        if parser is not None:
            parsers[language] = parser
    logger.info(f"Loaded parsers: {', '.join(sorted(parsers)) or 'none'}")
    return parsers
