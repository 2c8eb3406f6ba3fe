"""Migration operations - rule passes, edit application and the fix loop.

One pass runs the enabled rules over a freshly parsed file and returns
their findings. ``apply_edits`` applies every finding that does not overlap
an earlier one; the rest are left for the next round. ``migrate_source``
repeats pass and apply until a pass finds nothing.
"""

from __future__ import annotations

import difflib
from collections import Counter
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import Any

from rxmigrate.config.models import MigrationConfig
from rxmigrate.core.errors import InternalError, MigrationError
from rxmigrate.core.logging import get_logger
from rxmigrate.core.progress import progress
from rxmigrate.migrate.chains import PipeableOperatorRule
from rxmigrate.migrate.collapse import CollapseImportsRule
from rxmigrate.migrate.context import PassContext
from rxmigrate.migrate.factories import StaticFactoryRule
from rxmigrate.migrate.models import (
    Diagnostic,
    Edit,
    FileMigration,
    Finding,
    MigrationReport,
    PassResult,
)
from rxmigrate.migrate.paths import ImportPathRule
from rxmigrate.oracle.declarations import DeclarationIndex
from rxmigrate.oracle.models import TypeOracle
from rxmigrate.oracle.resolver import DeclarationOracle
from rxmigrate.parsing.nodes import line_col
from rxmigrate.parsing.parser import (
    ParseResult,
    TreeSitterParser,
    detect_language,
    is_declaration_file,
)

log = get_logger("migrate.ops")

# Rule classes in the order their findings are accepted.
RULES: dict[str, type] = {
    PipeableOperatorRule.rule_id: PipeableOperatorRule,
    StaticFactoryRule.rule_id: StaticFactoryRule,
    ImportPathRule.rule_id: ImportPathRule,
    CollapseImportsRule.rule_id: CollapseImportsRule,
}

OracleFactory = Callable[[Any], TypeOracle]
"""Builds a type oracle for the root node of a freshly parsed file."""

_SOURCE_KEY = "<source>"


def apply_edits(
    source: bytes, findings: Iterable[Finding]
) -> tuple[bytes, list[Finding], list[Finding]]:
    """Apply the edits of non-overlapping findings in one pass.

    Findings are accepted in order. One whose edits overlap an accepted
    edit is deferred whole, so each finding is applied all or nothing.

    Returns:
        (new source, applied findings, deferred findings)
    """
    accepted: list[Edit] = []
    applied: list[Finding] = []
    deferred: list[Finding] = []
    for finding in findings:
        _check_disjoint(finding)
        if any(edit.overlaps(other) for edit in finding.edits for other in accepted):
            deferred.append(finding)
            continue
        accepted.extend(finding.edits)
        applied.append(finding)

    order = sorted(
        range(len(accepted)),
        key=lambda i: (accepted[i].start, 0 if accepted[i].is_insertion else 1, i),
    )
    out = bytearray()
    cursor = 0
    for i in order:
        edit = accepted[i]
        out += source[cursor : edit.start]
        out += edit.text.encode("utf-8")
        cursor = max(cursor, edit.end)
    out += source[cursor:]
    return bytes(out), applied, deferred


def _check_disjoint(finding: Finding) -> None:
    edits = finding.edits
    for i, edit in enumerate(edits):
        for other in edits[i + 1 :]:
            if edit.overlaps(other):
                raise InternalError.unexpected(
                    "overlapping edits in one finding",
                    rule=finding.rule,
                    start=edit.start,
                    other=other.start,
                )


def unified_diff(path: str, before: bytes, after: bytes) -> str:
    return "".join(
        difflib.unified_diff(
            before.decode("utf-8", errors="replace").splitlines(keepends=True),
            after.decode("utf-8", errors="replace").splitlines(keepends=True),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
        )
    )


class MigrationOps:
    """RxJS 5 -> 6 migration over sources and project files.

    Holds the project-wide declaration index that backs the type oracle.
    Each file is re-indexed after every round so later rounds see the
    rewritten declarations.
    """

    def __init__(
        self,
        project_root: Path,
        *,
        config: MigrationConfig | None = None,
        parser: TreeSitterParser | None = None,
    ) -> None:
        """Initialize migration ops.

        Args:
            project_root: Directory that relative paths and discovery start from
            config: Migration settings. Defaults to ``MigrationConfig()``.
            parser: Shared parser. A new one is created if not given.
        """
        self._root = project_root
        self._config = config or MigrationConfig()
        self._parser = parser or TreeSitterParser()
        self._index = DeclarationIndex()

    @property
    def index(self) -> DeclarationIndex:
        return self._index

    @property
    def config(self) -> MigrationConfig:
        return self._config

    # ------------------------------------------------------------------
    # Single pass
    # ------------------------------------------------------------------

    def oracle_for(self, key: str) -> OracleFactory:
        """Oracle factory that indexes the parsed file under ``key`` first."""

        def factory(root: Any) -> TypeOracle:
            self._index.add_file(key, root)
            return DeclarationOracle(self._index, root)

        return factory

    def run_pass(
        self,
        source: bytes,
        *,
        oracle: OracleFactory | None = None,
        language: str = "typescript",
    ) -> PassResult:
        """Parse ``source`` and run every enabled rule once."""
        parsed = self._parser.parse_source(source, language=language)
        return self._run_rules(parsed, oracle or self.oracle_for(_SOURCE_KEY))

    def _run_rules(self, parsed: ParseResult, oracle: OracleFactory) -> PassResult:
        ctx = PassContext(
            root=parsed.root_node,
            source=parsed.source,
            oracle=oracle(parsed.root_node),
            stream_types=tuple(self._config.stream_types),
        )
        result = PassResult(parse_errors=parsed.error_count)
        for rule_id, rule_cls in RULES.items():
            if rule_id in self._config.rules:
                result.findings.extend(rule_cls(ctx).run())
        return result

    # ------------------------------------------------------------------
    # Fix loop
    # ------------------------------------------------------------------

    def migrate_source(
        self,
        source: bytes,
        *,
        path: str = _SOURCE_KEY,
        language: str = "typescript",
        oracle: OracleFactory | None = None,
        strict: bool = True,
    ) -> tuple[bytes, FileMigration]:
        """Run passes until one finds nothing.

        Args:
            source: File content
            path: Name used for the declaration index and diagnostics
            language: Grammar name (``typescript`` or ``tsx``)
            oracle: Oracle factory. Defaults to the project declaration oracle.
            strict: Raise when ``max_rounds`` is exhausted. Otherwise the
                partially migrated text is returned with ``converged=False``.

        Raises:
            MigrationError: The file did not converge and ``strict`` is set.
        """
        factory = oracle or self.oracle_for(path)
        migration = FileMigration(path=path)
        fixes: Counter[str] = Counter()
        current = source
        while True:
            parsed = self._parser.parse_source(current, language=language)
            if migration.rounds == 0:
                migration.parse_errors = parsed.error_count
            result = self._run_rules(parsed, factory)
            if not result.findings:
                break
            if migration.rounds >= self._config.max_rounds:
                migration.converged = False
                break
            updated, applied, deferred = apply_edits(current, result.findings)
            migration.rounds += 1
            for finding in applied:
                fixes[finding.rule] += 1
                line, col = line_col(current, finding.start)
                migration.diagnostics.append(
                    Diagnostic(path, line, col, finding.rule, finding.message)
                )
            log.debug(
                "round_applied",
                path=path,
                round=migration.rounds,
                applied=len(applied),
                deferred=len(deferred),
            )
            if updated == current:
                migration.converged = False
                break
            current = updated

        migration.fixes = dict(fixes)
        migration.changed = current != source
        if not migration.converged:
            log.warning("migration_not_converged", path=path, rounds=migration.rounds)
            if strict:
                raise MigrationError.not_converged(path, migration.rounds)
        return current, migration

    # ------------------------------------------------------------------
    # Project files
    # ------------------------------------------------------------------

    def discover(self, paths: list[Path] | None = None) -> list[Path]:
        """TypeScript files under ``paths`` (default: the project root)."""
        found: dict[Path, None] = {}
        for base in paths or [self._root]:
            base = base if base.is_absolute() else self._root / base
            if base.is_file():
                if detect_language(base) is not None:
                    found[base] = None
                continue
            for candidate in sorted(base.rglob("*")):
                if not candidate.is_file() or detect_language(candidate) is None:
                    continue
                rel_parts = candidate.relative_to(base).parts[:-1]
                if any(part in self._config.excluded_dirs for part in rel_parts):
                    continue
                found[candidate] = None
        return list(found)

    def _targets(self, files: list[Path]) -> Iterator[Path]:
        for path in files:
            if is_declaration_file(path) and not self._config.include_declaration_files:
                continue
            yield path

    def _display(self, path: Path) -> str:
        try:
            return str(path.relative_to(self._root))
        except ValueError:
            return str(path)

    def build_index(self, files: list[Path]) -> None:
        """Index the declarations of every file, including ``.d.ts`` files."""
        for path in progress(files, desc="Indexing", unit="files"):
            parsed = self._parser.parse(path)
            self._index.add_file(self._display(path), parsed.root_node)

    def migrate_paths(
        self,
        paths: list[Path] | None = None,
        *,
        dry_run: bool = False,
    ) -> MigrationReport:
        """Migrate every TypeScript file under ``paths``.

        Changed files are written back unless ``dry_run`` is set, in which
        case each changed file carries a unified diff instead.

        Raises:
            MigrationError: A changed file could not be written.
        """
        files = self.discover(paths)
        self.build_index(self.discover() if paths else files)
        report = MigrationReport(dry_run=dry_run)
        for path in progress(list(self._targets(files)), desc="Migrating", unit="files"):
            display = self._display(path)
            language = detect_language(path) or "typescript"
            before = path.read_bytes()
            after, migration = self.migrate_source(
                before, path=display, language=language, strict=False
            )
            report.files.append(migration)
            if not migration.changed:
                continue
            if dry_run:
                migration.diff = unified_diff(display, before, after)
            else:
                try:
                    path.write_bytes(after)
                except OSError as e:
                    raise MigrationError.write_failed(display, str(e)) from e
            log.info(
                "file_migrated",
                path=display,
                rounds=migration.rounds,
                fixes=migration.fix_count,
                dry_run=dry_run,
            )
        return report

    def check_paths(self, paths: list[Path] | None = None) -> list[Diagnostic]:
        """Single pass over every file, without applying anything."""
        files = self.discover(paths)
        self.build_index(self.discover() if paths else files)
        diagnostics: list[Diagnostic] = []
        for path in self._targets(files):
            display = self._display(path)
            parsed = self._parser.parse(path)
            result = self._run_rules(parsed, self.oracle_for(display))
            for finding in result.findings:
                line, col = line_col(parsed.source, finding.start)
                diagnostics.append(Diagnostic(display, line, col, finding.rule, finding.message))
        return diagnostics
