"""Stream-type predicate."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from rxmigrate.migrate.tables import STREAM_NAMESPACE
from rxmigrate.oracle.models import TypeDescriptor, TypeOracle
from rxmigrate.parsing.nodes import unwrap_expression

DEFAULT_STREAM_TYPES: tuple[str, ...] = (STREAM_NAMESPACE,)


def is_stream_like(
    type_: TypeDescriptor | None,
    root_names: Sequence[str] = DEFAULT_STREAM_TYPES,
) -> bool:
    """True if ``type_`` is, or derives from, one of ``root_names``.

    Generic instantiations are compared by their declaration; a union or
    intersection qualifies when any member does.
    """
    pending: list[TypeDescriptor] = [type_] if type_ is not None else []
    seen: set[str] = set()
    while pending:
        current = pending.pop()
        target = current.target
        if target is not None:
            current = target
        name = current.symbol_name
        if name is not None:
            if name in root_names:
                return True
            # cyclic heritage in broken sources
            if name in seen:
                continue
            seen.add(name)
        if current.is_union_or_intersection:
            pending.extend(current.members)
        else:
            pending.extend(current.base_types())
    return False


def returns_stream_like(
    call: Any,
    oracle: TypeOracle,
    root_names: Sequence[str] = DEFAULT_STREAM_TYPES,
) -> bool:
    return is_stream_like(oracle.return_type(call), root_names)


def expression_is_stream_like(
    node: Any,
    oracle: TypeOracle,
    root_names: Sequence[str] = DEFAULT_STREAM_TYPES,
) -> bool:
    """Calls and ``new`` by their resolved return type, anything else by its type."""
    node = unwrap_expression(node)
    if node is None:
        return False
    if node.type in ("call_expression", "new_expression"):
        return returns_stream_like(node, oracle, root_names)
    return is_stream_like(oracle.type_of(node), root_names)
