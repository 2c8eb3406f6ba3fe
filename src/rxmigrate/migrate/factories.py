"""``Observable.of(...)`` -> ``observableOf(...)`` with an aliased import."""

from __future__ import annotations

from typing import Any

from rxmigrate.core.logging import get_logger
from rxmigrate.migrate.context import PassContext
from rxmigrate.migrate.imports import statement_removal
from rxmigrate.migrate.models import Edit, Finding
from rxmigrate.migrate.streams import returns_stream_like
from rxmigrate.migrate.tables import (
    FACTORIES_MODULE,
    PATCHED_FACTORY_PREFIXES,
    STATIC_FACTORIES,
    STREAM_NAMESPACE,
    canonical_factory,
    factory_alias,
)
from rxmigrate.parsing.nodes import member_parts, node_text, walk

log = get_logger("migrate.factories")

RULE_ID = "static-factories"
CALL_MESSAGE = "prefer function calls"
IMPORT_MESSAGE = "prefer operator imports with no side-effects"


class StaticFactoryRule:
    """Rewrites static factory calls on the ``Observable`` namespace."""

    rule_id = RULE_ID

    def __init__(self, ctx: PassContext) -> None:
        self._ctx = ctx

    def factory_member(self, node: Any) -> Any:
        """The ``Observable.name`` member expression of a factory call, or None."""
        if node.type != "call_expression":
            return None
        member = node.child_by_field_name("function")
        parts = member_parts(member)
        if parts is None:
            return None
        obj, _, prop = parts
        if node_text(obj) != STREAM_NAMESPACE or node_text(prop) not in STATIC_FACTORIES:
            return None
        if not returns_stream_like(node, self._ctx.oracle, self._ctx.stream_types):
            return None
        return member

    def run(self) -> list[Finding]:
        findings = self.remove_patched_imports()
        for node in walk(self._ctx.root):
            member = self.factory_member(node)
            if member is None:
                continue
            name = node_text(member.child_by_field_name("property"))
            canonical = canonical_factory(name)
            alias = factory_alias(canonical)
            edits = [Edit(member.start_byte, member.end_byte, alias)]
            edits.extend(self._ctx.registry.request(FACTORIES_MODULE, [(canonical, alias)]))
            findings.append(
                Finding(
                    rule=RULE_ID,
                    start=member.start_byte,
                    end=member.end_byte,
                    message=CALL_MESSAGE,
                    edits=edits,
                )
            )
            log.debug("factory_rewrite", name=name, alias=alias, offset=member.start_byte)
        return findings

    def remove_patched_imports(self) -> list[Finding]:
        findings: list[Finding] = []
        for stmt in self._ctx.registry.imports:
            module = stmt.module
            if not module or not module.startswith(PATCHED_FACTORY_PREFIXES):
                continue
            start, end = stmt.node.start_byte, stmt.node.end_byte
            findings.append(
                Finding(
                    rule=RULE_ID,
                    start=start,
                    end=end,
                    message=IMPORT_MESSAGE,
                    edits=[statement_removal(stmt, self._ctx.source)],
                )
            )
        return findings
