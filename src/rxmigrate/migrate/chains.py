"""Patched operator chains -> ``.pipe(...)``.

``foo.do(log).map(f).subscribe(fn)`` becomes
``foo.pipe(tap(log), map(f)).subscribe(fn)`` plus the missing
``import { tap } from 'rxjs/operators';`` statements.

A chain is detected at its head, the innermost call, whose receiver is a
stream but not itself an operator call. From there the walk goes outward
through ``.op(...)`` links while each enclosing call is still an operator
call returning a stream. Chains nested in callback arguments are separate
chains with their own head.
"""

from __future__ import annotations

from typing import Any

from rxmigrate.core.logging import get_logger
from rxmigrate.migrate.context import PassContext
from rxmigrate.migrate.imports import statement_removal
from rxmigrate.migrate.models import Chain, Edit, Finding
from rxmigrate.migrate.streams import expression_is_stream_like, returns_stream_like
from rxmigrate.migrate.tables import (
    INSTANCE_OPERATORS,
    OPERATORS_MODULE,
    PATCHED_OPERATOR_PREFIXES,
    PIPE_CLOSE,
    PIPE_OPEN,
    STREAM_NAMESPACE,
    canonical_operator,
)
from rxmigrate.parsing.nodes import member_parts, node_text, same_node, walk

log = get_logger("migrate.chains")

RULE_ID = "pipeable-operators"
MESSAGE = "Prefer pipeable operators."


def operator_member(call: Any) -> tuple[Any, Any, Any] | None:
    """(receiver, dot, property) when ``call`` looks like ``x.op(...)``.

    Purely syntactic: the property must be a known instance operator and the
    receiver must not be the ``Observable`` namespace.
    """
    if call is None or call.type != "call_expression":
        return None
    parts = member_parts(call.child_by_field_name("function"))
    if parts is None:
        return None
    obj, _, prop = parts
    if node_text(prop) not in INSTANCE_OPERATORS:
        return None
    if node_text(obj) == STREAM_NAMESPACE:
        return None
    return parts


class PipeableOperatorRule:
    """Rewrites chains of patched operators into pipeable form."""

    rule_id = RULE_ID

    def __init__(self, ctx: PassContext) -> None:
        self._ctx = ctx

    def is_eligible(self, node: Any) -> bool:
        if operator_member(node) is None:
            return False
        return returns_stream_like(node, self._ctx.oracle, self._ctx.stream_types)

    def is_head(self, call: Any) -> bool:
        parts = operator_member(call)
        if parts is None:
            return False
        root = parts[0]
        if self.is_eligible(root):
            return False
        if not returns_stream_like(call, self._ctx.oracle, self._ctx.stream_types):
            return False
        return expression_is_stream_like(root, self._ctx.oracle, self._ctx.stream_types)

    def collect_chain(self, head: Any) -> Chain:
        """Walk outward from ``head`` to the last link of the chain."""
        calls = [head]
        current = head
        while True:
            member = current.parent
            if member is None or member.type != "member_expression":
                break
            if not same_node(member.child_by_field_name("object"), current):
                break
            outer = member.parent
            if outer is None or outer.type != "call_expression":
                break
            if not same_node(outer.child_by_field_name("function"), member):
                break
            if not self.is_eligible(outer):
                break
            calls.append(outer)
            current = outer
        parts = operator_member(head)
        return Chain(root=parts[0], calls=calls)

    def rewrite(self, chain: Chain) -> Finding:
        source = self._ctx.source
        edits = [Edit.insert(chain.root.end_byte, PIPE_OPEN)]
        needed: list[str] = []
        last = len(chain.calls) - 1
        first_dot = None
        for i, call in enumerate(chain.calls):
            _, dot, prop = member_parts(call.child_by_field_name("function"))
            if first_dot is None:
                first_dot = dot
            name = canonical_operator(node_text(prop))
            edits.append(Edit(dot.start_byte, prop.end_byte, name))
            if name not in needed:
                needed.append(name)
            if i < last:
                following = source[call.end_byte : call.end_byte + 1]
                edits.append(Edit.insert(call.end_byte, "," if following.isspace() else ", "))
        edits.append(Edit.insert(chain.tail.end_byte, PIPE_CLOSE))
        edits.extend(
            self._ctx.registry.request(OPERATORS_MODULE, [(name, None) for name in needed])
        )
        return Finding(
            rule=RULE_ID,
            start=first_dot.start_byte,
            end=chain.tail.end_byte,
            message=MESSAGE,
            edits=edits,
        )

    def find_chains(self) -> list[Chain]:
        """Every chain in the file, in source order of their heads."""
        return [self.collect_chain(n) for n in walk(self._ctx.root) if self.is_head(n)]

    def run(self) -> list[Finding]:
        findings = self.remove_patched_imports()
        for node in walk(self._ctx.root):
            if node.type != "call_expression":
                continue
            try:
                if not self.is_head(node):
                    continue
                chain = self.collect_chain(node)
                findings.append(self.rewrite(chain))
            except Exception as e:
                log.warning(
                    "chain_rewrite_failed",
                    offset=node.start_byte,
                    error=str(e),
                    exc_info=True,
                )
                continue
            log.debug(
                "chain_found",
                offset=node.start_byte,
                links=len(chain),
                root=node_text(chain.root)[:40],
            )
        return findings

    def remove_patched_imports(self) -> list[Finding]:
        findings: list[Finding] = []
        for stmt in self._ctx.registry.imports:
            module = stmt.module
            if not module or not module.startswith(PATCHED_OPERATOR_PREFIXES):
                continue
            start, end = stmt.node.start_byte, stmt.node.end_byte
            findings.append(
                Finding(
                    rule=RULE_ID,
                    start=start,
                    end=end,
                    message=MESSAGE,
                    edits=[statement_removal(stmt, self._ctx.source)],
                )
            )
        return findings
