"""Small helpers over tree-sitter nodes of the TypeScript grammar."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

# Anonymous function nodes; a chain never continues across one of these.
FUNCTION_BOUNDARY_TYPES = frozenset(
    {
        "arrow_function",
        "function_expression",
        "function",
        "generator_function",
    }
)

# Expression wrappers that do not change the value of the inner expression.
TRANSPARENT_EXPRESSION_TYPES = frozenset(
    {
        "parenthesized_expression",
        "non_null_expression",
    }
)


def node_text(node: Any) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def same_node(a: Any, b: Any) -> bool:
    """Identity check that survives tree-sitter's re-created node wrappers."""
    if a is None or b is None:
        return False
    return a.start_byte == b.start_byte and a.end_byte == b.end_byte and a.type == b.type


def walk(root: Any) -> Iterator[Any]:
    """Pre-order depth-first traversal without recursion."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def unwrap_expression(node: Any) -> Any:
    """Strip parentheses and non-null assertions."""
    while node is not None and node.type in TRANSPARENT_EXPRESSION_TYPES:
        inner = node.named_children
        if not inner:
            break
        node = inner[0]
    return node


def member_parts(node: Any) -> tuple[Any, Any, Any] | None:
    """Return (object, dot_token, property) of a plain ``a.b`` member expression.

    Optional chaining (``a?.b``) and computed access (``a[b]``) return None.
    """
    if node is None or node.type != "member_expression":
        return None
    obj = node.child_by_field_name("object")
    prop = node.child_by_field_name("property")
    if obj is None or prop is None or prop.type != "property_identifier":
        return None
    dot = None
    for child in node.children:
        if child.type == ".":
            dot = child
            break
        if child.type == "optional_chain":
            return None
    if dot is None:
        return None
    return obj, dot, prop


def is_function_boundary(node: Any) -> bool:
    return node is not None and node.type in FUNCTION_BOUNDARY_TYPES


def string_fragment(node: Any) -> Any:
    """The ``string_fragment`` child of a string literal, if non-empty."""
    if node is None or node.type != "string":
        return None
    for child in node.named_children:
        if child.type == "string_fragment":
            return child
    return None


def line_col(source: bytes, offset: int) -> tuple[int, int]:
    """1-based line and 0-based column of a byte offset."""
    line = source.count(b"\n", 0, offset) + 1
    line_start = source.rfind(b"\n", 0, offset) + 1
    return line, len(source[line_start:offset].decode("utf-8", errors="replace"))
