"""AST helper functions for tree-sitter parsing."""

from collections.abc import Iterator

from tree_sitter import Node

# Field names that hold the final segment of a callee expression, per grammar:
# python `attribute`, javascript `property`, rust `field` / `name`.
CALLEE_NAME_FIELDS = ("attribute", "property", "field", "name")

NAME_NODE_TYPES = {
    "identifier",
    "property_identifier",
    "field_identifier",
    "type_identifier",
}


def get_node_text(node: Node, source_code: str) -> str:
    """Extract text content from a tree-sitter node."""
    if not node:
        return ""
    if node.text is not None:
        return node.text.decode("utf-8", errors="replace")
    return source_code.encode("utf-8")[node.start_byte:node.end_byte].decode(
        "utf-8", errors="replace"
    )


def iter_preorder(node: Node) -> Iterator[Node]:
    """Yield a node and all its descendants in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def get_parent_of_type(node: Node, parent_types: set[str]) -> Node | None:
    """Find the closest ancestor whose type is one of `parent_types`."""
    current = node.parent
    while current:
        if current.type in parent_types:
            return current
        current = current.parent
    return None


def get_declared_name(node: Node, source_code: str) -> str | None:
    """Extract the declared name of a function, class or item node."""
    name_node = node.child_by_field_name("name")
    if name_node is not None:
        return get_node_text(name_node, source_code)
    for child in node.children:
        if child.type in NAME_NODE_TYPES:
            return get_node_text(child, source_code)
    return None


def get_callee_name(call_node: Node, source_code: str) -> str | None:
    """Return the called name of a call expression.

    `obj.method()` and `module::func()` both resolve to their last segment.
    """
    function_node = call_node.child_by_field_name("function")
    if function_node is None:
        return None

    if function_node.type in NAME_NODE_TYPES:
        return get_node_text(function_node, source_code)

    for field_name in CALLEE_NAME_FIELDS:
        segment = function_node.child_by_field_name(field_name)
        if segment is not None and segment.type in NAME_NODE_TYPES:
            return get_node_text(segment, source_code)

    # Fall back to the last identifier-like child
    for child in reversed(function_node.children):
        if child.type in NAME_NODE_TYPES:
            return get_node_text(child, source_code)
    return None


def get_line_number(node: Node) -> int:
    """Get the line number of a node (1-indexed)."""
    return node.start_point[0] + 1
