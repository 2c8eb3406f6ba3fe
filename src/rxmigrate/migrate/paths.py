"""Deprecated RxJS import paths and renamed exported symbols."""

from __future__ import annotations

from rxmigrate.core.logging import get_logger
from rxmigrate.migrate.context import PassContext
from rxmigrate.migrate.imports import ImportStatement
from rxmigrate.migrate.models import Edit, Finding
from rxmigrate.migrate.tables import (
    DEPRECATED_SYMBOLS,
    OPERATOR_PATH_PATTERN,
    OPERATORS_MODULE,
    migrate_path,
)

log = get_logger("migrate.paths")

RULE_ID = "import-paths"
PATH_MESSAGE = "outdated import path"
SYMBOL_MESSAGE = "imported symbol no longer exists"


class ImportPathRule:
    """Rewrites module specifiers and renamed symbols of RxJS 5 imports."""

    rule_id = RULE_ID

    def __init__(self, ctx: PassContext) -> None:
        self._ctx = ctx

    def run(self) -> list[Finding]:
        findings: list[Finding] = []
        for stmt in self._ctx.registry.imports:
            path = stmt.module
            fragment = stmt.path_node
            if not path or fragment is None:
                continue
            if stmt.is_side_effect_only:
                new_path = OPERATORS_MODULE if OPERATOR_PATH_PATTERN.match(path) else None
            else:
                findings.extend(self._migrate_symbols(stmt, path))
                new_path = migrate_path(path)
            if new_path is None or new_path == path:
                continue
            findings.append(
                Finding(
                    rule=RULE_ID,
                    start=fragment.start_byte,
                    end=fragment.end_byte,
                    message=PATH_MESSAGE,
                    edits=[Edit(fragment.start_byte, fragment.end_byte, new_path)],
                )
            )
            log.debug("import_path_migrated", old=path, new=new_path)
        return findings

    def _migrate_symbols(self, stmt: ImportStatement, path: str) -> list[Finding]:
        findings: list[Finding] = []
        for spec in stmt.specifiers:
            renamed = DEPRECATED_SYMBOLS.get((path, spec.imported))
            if renamed is None:
                continue
            _, new_symbol = renamed
            name = spec.name
            if spec.alias is None:
                text = f"{new_symbol} as {spec.imported}"
            else:
                text = new_symbol
            findings.append(
                Finding(
                    rule=RULE_ID,
                    start=name.start_byte,
                    end=name.end_byte,
                    message=SYMBOL_MESSAGE,
                    edits=[Edit(name.start_byte, name.end_byte, text)],
                )
            )
        return findings
