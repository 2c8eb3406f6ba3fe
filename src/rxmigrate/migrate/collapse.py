"""Merge duplicate named imports from the same RxJS module."""

from __future__ import annotations

from rxmigrate.core.logging import get_logger
from rxmigrate.migrate.context import PassContext
from rxmigrate.migrate.imports import ImportStatement
from rxmigrate.migrate.models import Edit, Finding
from rxmigrate.migrate.tables import LIBRARY
from rxmigrate.parsing.nodes import node_text

log = get_logger("migrate.collapse")

RULE_ID = "collapse-imports"
MESSAGE = "duplicate RxJS import"


def _is_type_only(stmt: ImportStatement) -> bool:
    return any(child.type == "type" for child in stmt.node.children)


class CollapseImportsRule:
    """Collapses ``import { a } from 'rxjs'; import { b } from 'rxjs';``.

    The first statement in source order keeps all bindings. Later ones are
    removed with any comment trailing them on the same line; comments
    above them stay.
    """

    rule_id = RULE_ID

    def __init__(self, ctx: PassContext) -> None:
        self._ctx = ctx

    def groups(self) -> dict[str, list[ImportStatement]]:
        groups: dict[str, list[ImportStatement]] = {}
        for stmt in self._ctx.registry.imports:
            path = stmt.module
            if not path or not path.startswith(LIBRARY):
                continue
            if not stmt.is_named_only or _is_type_only(stmt):
                continue
            groups.setdefault(path, []).append(stmt)
        return groups

    def run(self) -> list[Finding]:
        findings: list[Finding] = []
        for path, statements in self.groups().items():
            if len(statements) < 2:
                continue
            first = statements[0]
            combined = ", ".join(node_text(s.named_imports)[1:-1] for s in statements)
            edits = [
                Edit(
                    first.named_imports.start_byte,
                    first.named_imports.end_byte,
                    "{" + combined + "}",
                )
            ]
            edits.extend(self._removal(stmt) for stmt in statements[1:])
            findings.append(
                Finding(
                    rule=RULE_ID,
                    start=first.node.start_byte,
                    end=first.node.end_byte,
                    message=MESSAGE,
                    edits=edits,
                )
            )
            log.debug("imports_collapsed", path=path, statements=len(statements))
        return findings

    def _removal(self, stmt: ImportStatement) -> Edit:
        source = self._ctx.source
        start = stmt.node.start_byte
        while start > 0 and source[start - 1 : start].isspace():
            start -= 1
        end = stmt.node.end_byte
        trailing = stmt.node.next_sibling
        if trailing is not None and trailing.type == "comment":
            if b"\n" not in source[end : trailing.start_byte]:
                end = trailing.end_byte
        return Edit.delete(start, end)
