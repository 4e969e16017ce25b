"""Heuristic call-site extraction strategies for sequence diagrams."""

import re
from bisect import bisect_right
from dataclasses import dataclass
from typing import Protocol

from loguru import logger

from ..errors import InputUnavailableError
from ..utils.ast_helpers import get_callee_name, get_declared_name, get_parent_of_type, iter_preorder
from .cfg_builder import CALL_NODE_TYPES
from .parser_loader import load_parser


@dataclass(frozen=True)
class CallSite:
    """A caller -> callee pair found in source text."""
    caller: str
    callee: str
    line_number: int = 0


class CallExtractionStrategy(Protocol):
    """Finds call sites in a file's text."""

    def extract_calls(self, source_code: str, language: str) -> list[CallSite]:
        ...


NON_CALL_KEYWORDS = frozenset({
    "if", "elif", "else", "for", "while", "loop", "match", "switch", "case",
    "return", "catch", "except", "function", "fn", "def", "class", "struct",
    "sizeof", "typeof", "with", "assert", "lambda", "not", "and", "or", "in",
    "await", "yield", "impl", "where", "new", "delete", "do",
})

DECLARATION_PATTERN = re.compile(r"\b(?:def|fn|function)\s+([A-Za-z_]\w*)")

# `name(`, `obj.name(` or `mod::name(`; group 1 is the last segment.
CALL_PATTERN = re.compile(r"(?:\b[A-Za-z_]\w*(?:\.|::))*\b([A-Za-z_]\w*)\s*\(")


class PatternCallExtractor:
    """Regex-based call extraction.

    Each call is attributed to the closest preceding function declaration,
    which approximates scoping for top-level functions and methods. Calls
    before the first declaration are module-level and dropped.
    """

    def __init__(self, ignored_names: frozenset[str] = NON_CALL_KEYWORDS):
        self.ignored_names = ignored_names

    def extract_calls(self, source_code: str, language: str) -> list[CallSite]:
        declarations = list(DECLARATION_PATTERN.finditer(source_code))
        if not declarations:
            return []

        decl_starts = [m.start() for m in declarations]
        decl_name_spans = {m.span(1) for m in declarations}

        calls = []
        for match in CALL_PATTERN.finditer(source_code):
            if match.span(1) in decl_name_spans:
                continue
            callee = match.group(1)
            if callee in self.ignored_names:
                continue
            index = bisect_right(decl_starts, match.start(1)) - 1
            if index < 0:
                continue
            caller = declarations[index].group(1)
            line_number = source_code.count("\n", 0, match.start(1)) + 1
            calls.append(CallSite(caller=caller, callee=callee, line_number=line_number))
        return calls


FUNCTION_NODE_TYPES = {
    "function_definition",
    "function_declaration",
    "method_definition",
    "function_item",
}


class SyntaxTreeCallExtractor:
    """Call extraction from tree-sitter syntax trees, attributed to the enclosing function."""

    def extract_calls(self, source_code: str, language: str) -> list[CallSite]:
        parser = load_parser(language)
        if parser is None:
            raise InputUnavailableError(language, "no tree-sitter grammar available")

        tree = parser.parse(source_code.encode("utf-8"))
        call_types = CALL_NODE_TYPES.get(language, set())

        calls = []
        for node in iter_preorder(tree.root_node):
            if node.type not in call_types:
                continue
            function_node = get_parent_of_type(node, FUNCTION_NODE_TYPES)
            if function_node is None:
                continue
            caller = get_declared_name(function_node, source_code)
            callee = get_callee_name(node, source_code)
            if caller and callee:
                calls.append(
                    CallSite(caller=caller, callee=callee, line_number=node.start_point[0] + 1)
                )
        logger.debug(f"Extracted {len(calls)} call sites from {language} syntax tree")
        return calls
