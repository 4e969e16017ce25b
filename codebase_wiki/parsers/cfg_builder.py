"""Control-flow graph construction from tree-sitter syntax trees."""

from typing import Protocol

from loguru import logger
from tree_sitter import Node

from ..errors import InputUnavailableError
from ..graph.node_types import BranchNode, CallNode, CfgNode, ControlFlowGraph, OtherNode
from ..utils.ast_helpers import get_callee_name, get_line_number, iter_preorder
from .parser_loader import load_parser

BRANCH_NODE_TYPES: dict[str, set[str]] = {
    "python": {
        "if_statement",
        "for_statement",
        "while_statement",
        "match_statement",
        "conditional_expression",
    },
    "javascript": {
        "if_statement",
        "for_statement",
        "for_in_statement",
        "while_statement",
        "do_statement",
        "switch_statement",
        "ternary_expression",
    },
    "rust": {
        "if_expression",
        "if_let_expression",
        "match_expression",
        "while_expression",
        "while_let_expression",
        "loop_expression",
        "for_expression",
    },
}

CALL_NODE_TYPES: dict[str, set[str]] = {
    "python": {"call"},
    "javascript": {"call_expression"},
    "rust": {"call_expression"},
}

OTHER_NODE_TYPES: dict[str, set[str]] = {
    "python": {"function_definition", "return_statement"},
    "javascript": {"function_declaration", "method_definition", "return_statement"},
    "rust": {"function_item", "return_expression"},
}


class CfgProvider(Protocol):
    """Builds a control-flow graph from source text."""

    def build(self, source_code: str, language: str) -> ControlFlowGraph:
        ...


class TreeSitterCfgBuilder:
    """Builds a flat, ordered control-flow graph from a tree-sitter parse."""

    def build(self, source_code: str, language: str) -> ControlFlowGraph:
        """Parse `source_code` and collect branch, call and other nodes in order.

        Raises InputUnavailableError when no grammar is installed for the
        language or the parse produced no tree.
        """
        parser = load_parser(language)
        if parser is None:
            raise InputUnavailableError(language, "no tree-sitter grammar available")

        tree = parser.parse(source_code.encode("utf-8"))
        if tree is None or tree.root_node is None:
            raise InputUnavailableError(language, "parse produced no syntax tree")

        nodes = self.collect_nodes(tree.root_node, source_code, language)
        logger.debug(
            f"Built CFG for {language}: {len(nodes)} nodes "
            f"({sum(isinstance(n, BranchNode) for n in nodes)} decision points)"
        )
        return ControlFlowGraph(nodes=tuple(nodes))

    def collect_nodes(self, root_node: Node, source_code: str, language: str) -> list[CfgNode]:
        branch_types = BRANCH_NODE_TYPES.get(language, set())
        call_types = CALL_NODE_TYPES.get(language, set())
        other_types = OTHER_NODE_TYPES.get(language, set())

        nodes: list[CfgNode] = []
        for node in iter_preorder(root_node):
            if node.type in branch_types:
                nodes.append(BranchNode(node_type=node.type))
            elif node.type in call_types:
                name = get_callee_name(node, source_code)
                if name:
                    nodes.append(CallNode(function_name=name, line_number=get_line_number(node)))
            elif node.type in other_types:
                nodes.append(OtherNode(node_type=node.type))
        return nodes
