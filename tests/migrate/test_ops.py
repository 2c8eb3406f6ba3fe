"""Tests for migration operations.

Covers:
- Edit application and overlap deferral
- The fix loop and its round limit
- Project discovery, indexing, writing and dry runs
- Check mode
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest

from rxmigrate.core.errors import ErrorCode, InternalError, MigrationError
from rxmigrate.migrate.models import Edit, Finding
from rxmigrate.migrate.ops import MigrationOps, apply_edits, unified_diff

HEADER = "import { Observable } from 'rxjs';\ndeclare const foo: Observable<number>;\n"

MakeOps = Callable[..., MigrationOps]


def _finding(*edits: Edit) -> Finding:
    return Finding(
        rule="pipeable-operators",
        start=edits[0].start,
        end=edits[0].end,
        message="m",
        edits=list(edits),
    )


def _write(root: Path, rel: str, content: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestEditOverlap:
    """Tests for Edit.overlaps."""

    def test_adjacent_replacements(self) -> None:
        assert not Edit(0, 2, "x").overlaps(Edit(2, 4, "y"))

    def test_intersecting_replacements(self) -> None:
        assert Edit(0, 3, "x").overlaps(Edit(2, 4, "y"))

    def test_insertions_never_overlap(self) -> None:
        assert not Edit.insert(3, "a").overlaps(Edit.insert(3, "b"))

    def test_insertion_at_replacement_boundary(self) -> None:
        assert not Edit.insert(2, "a").overlaps(Edit(2, 4, "y"))
        assert not Edit(0, 2, "y").overlaps(Edit.insert(2, "a"))

    def test_insertion_inside_replacement(self) -> None:
        assert Edit.insert(3, "a").overlaps(Edit(2, 4, "y"))


class TestApplyEdits:
    """Tests for apply_edits."""

    def test_disjoint_findings_all_applied(self) -> None:
        first = _finding(Edit(0, 1, "X"))
        second = _finding(Edit(3, 4, "Y"))

        out, applied, deferred = apply_edits(b"abcdef", [first, second])

        assert out == b"XbcYef"
        assert applied == [first, second]
        assert deferred == []

    def test_overlapping_finding_is_deferred(self) -> None:
        first = _finding(Edit(0, 3, "X"))
        second = _finding(Edit(2, 4, "Y"))

        out, applied, deferred = apply_edits(b"abcdef", [first, second])

        assert out == b"Xdef"
        assert applied == [first]
        assert deferred == [second]

    def test_deferred_finding_applies_none_of_its_edits(self) -> None:
        first = _finding(Edit(0, 2, "X"))
        second = _finding(Edit(4, 5, "Z"), Edit(1, 2, "Q"))

        out, _, deferred = apply_edits(b"abcdef", [first, second])

        assert out == b"Xcdef"
        assert deferred == [second]

    def test_insertions_keep_acceptance_order_before_replacement(self) -> None:
        findings = [
            _finding(Edit.insert(0, "A")),
            _finding(Edit.insert(0, "B")),
            _finding(Edit(0, 1, "X")),
        ]

        out, applied, _ = apply_edits(b"abc", findings)

        assert out == b"ABXbc"
        assert len(applied) == 3

    def test_insertion_inside_accepted_replacement_is_deferred(self) -> None:
        first = _finding(Edit(0, 4, "X"))
        second = _finding(Edit.insert(2, "I"))

        out, _, deferred = apply_edits(b"abcdef", [first, second])

        assert out == b"Xef"
        assert deferred == [second]

    def test_overlap_inside_one_finding_is_an_internal_error(self) -> None:
        broken = _finding(Edit(0, 3, "X"), Edit(1, 2, "Y"))

        with pytest.raises(InternalError) as exc_info:
            apply_edits(b"abcdef", [broken])

        assert exc_info.value.code == ErrorCode.INTERNAL_ERROR

    def test_multibyte_offsets_are_bytes(self) -> None:
        source = "const s = 'é'; x".encode()
        start = source.index(b"x")

        out, _, _ = apply_edits(source, [_finding(Edit(start, start + 1, "y"))])

        assert out.decode() == "const s = 'é'; y"


class TestUnifiedDiff:
    def test_paths_are_prefixed(self) -> None:
        diff = unified_diff("src/app.ts", b"a\nb\n", b"a\nc\n")

        assert diff.startswith("--- a/src/app.ts\n+++ b/src/app.ts\n")
        assert "-b\n+c\n" in diff

    def test_no_change_is_empty(self) -> None:
        assert unified_diff("x.ts", b"same\n", b"same\n") == ""


class TestMigrateSource:
    """Tests for the fix loop over one source."""

    def test_given_chain_when_migrated_then_imports_collapse_in_second_round(
        self, make_ops: MakeOps
    ) -> None:
        # Given
        source = HEADER + (
            "const subs = foo.do(console.log)\n"
            "  .map(x => 2 * x)\n"
            "  .do(console.log)\n"
            "  .switchMap(y => foo)\n"
            "  .subscribe(fn);\n"
        )

        # When
        fixed, migration = make_ops().migrate_source(source.encode(), path="app.ts")

        # Then
        assert fixed.decode() == (
            "import { tap ,  map ,  switchMap } from 'rxjs/operators';\n"
            + HEADER
            + "const subs = foo.pipe(tap(console.log),\n"
            "  map(x => 2 * x),\n"
            "  tap(console.log),\n"
            "  switchMap(y => foo))\n"
            "  .subscribe(fn);\n"
        )
        assert migration.rounds == 2
        assert migration.converged
        assert migration.changed
        assert migration.fixes == {"pipeable-operators": 1, "collapse-imports": 1}
        assert [str(d) for d in migration.diagnostics] == [
            "app.ts:3:16 pipeable-operators Prefer pipeable operators.",
            "app.ts:1:0 collapse-imports duplicate RxJS import",
        ]

    def test_given_clean_source_when_migrated_then_unchanged(self, make_ops: MakeOps) -> None:
        source = b"import { map } from 'rxjs/operators';\nconst x = 1;\n"

        fixed, migration = make_ops().migrate_source(source)

        assert fixed == source
        assert migration.rounds == 0
        assert migration.converged
        assert not migration.changed
        assert migration.fix_count == 0

    def test_given_factory_and_patch_import_when_migrated_then_fully_rewritten(
        self, make_ops: MakeOps
    ) -> None:
        # Given
        source = (
            "import { Observable } from 'rxjs/Observable';\n"
            "import 'rxjs/add/observable/of';\n"
            "const xs = Observable.of(1, 2);\n"
        )

        # When
        fixed, migration = make_ops().migrate_source(source.encode())

        # Then
        assert "import 'rxjs/add/observable/of'" not in fixed.decode()
        assert "const xs = observableOf(1, 2);" in fixed.decode()
        assert "'rxjs/Observable'" not in fixed.decode()
        assert migration.converged

    def test_round_limit_strict_raises(self, make_ops: MakeOps) -> None:
        source = (
            "import { filter } from 'rxjs/operators';\n" + HEADER + "foo.map(f);\n"
        ).encode()

        with pytest.raises(MigrationError) as exc_info:
            make_ops(max_rounds=1).migrate_source(source, path="app.ts")

        assert exc_info.value.code == ErrorCode.MIGRATION_NOT_CONVERGED

    def test_round_limit_lenient_returns_partial_result(self, make_ops: MakeOps) -> None:
        source = (
            "import { filter } from 'rxjs/operators';\n" + HEADER + "foo.map(f);\n"
        ).encode()

        fixed, migration = make_ops(max_rounds=1).migrate_source(source, strict=False)

        assert not migration.converged
        assert migration.rounds == 1
        assert migration.changed
        assert b"foo.pipe(map(f));" in fixed

    def test_parse_errors_are_counted_not_raised(self, make_ops: MakeOps) -> None:
        _, migration = make_ops().migrate_source(b"const = ;\n")

        assert migration.parse_errors > 0
        assert migration.converged

    def test_disabled_rule_does_not_run(self, make_ops: MakeOps) -> None:
        source = (HEADER + "foo.map(f);\n").encode()

        fixed, migration = make_ops(rules=["import-paths"]).migrate_source(source)

        assert fixed == source
        assert migration.rounds == 0

    def test_tsx_source(self, make_ops: MakeOps) -> None:
        source = (HEADER + "const el = <div>{foo.map(f)}</div>;\n").encode()

        fixed, _ = make_ops().migrate_source(source, language="tsx")

        assert b"<div>{foo.pipe(map(f))}</div>" in fixed


class TestDiscover:
    def test_typescript_files_only(self, tmp_path: Path, make_ops: MakeOps) -> None:
        _write(tmp_path, "src/a.ts", "")
        _write(tmp_path, "src/b.tsx", "")
        _write(tmp_path, "src/c.js", "")
        _write(tmp_path, "README.md", "")

        found = make_ops().discover()

        assert sorted(p.relative_to(tmp_path).as_posix() for p in found) == [
            "src/a.ts",
            "src/b.tsx",
        ]

    def test_excluded_dirs_are_skipped(self, tmp_path: Path, make_ops: MakeOps) -> None:
        _write(tmp_path, "src/a.ts", "")
        _write(tmp_path, "node_modules/rxjs/index.d.ts", "")
        _write(tmp_path, "gen/b.ts", "")

        found = make_ops(excluded_dirs=["node_modules", "gen"]).discover()

        assert [p.relative_to(tmp_path).as_posix() for p in found] == ["src/a.ts"]

    def test_relative_paths_join_the_root(self, tmp_path: Path, make_ops: MakeOps) -> None:
        _write(tmp_path, "src/a.ts", "")
        _write(tmp_path, "lib/b.ts", "")

        found = make_ops().discover([Path("lib")])

        assert found == [tmp_path / "lib" / "b.ts"]


class TestMigratePaths:
    """Tests for migrate_paths over a project directory."""

    def test_changed_file_is_written(self, tmp_path: Path, make_ops: MakeOps) -> None:
        app = _write(tmp_path, "src/app.ts", HEADER + "foo.map(f);\n")
        clean = _write(tmp_path, "src/clean.ts", "export const x = 1;\n")

        report = make_ops().migrate_paths()

        assert "foo.pipe(map(f));" in app.read_text()
        assert clean.read_text() == "export const x = 1;\n"
        assert report.files_changed == 1
        assert report.total_fixes == 1
        assert not report.dry_run
        assert {f.path for f in report.files} == {"src/app.ts", "src/clean.ts"}

    def test_dry_run_leaves_files_and_attaches_diff(
        self, tmp_path: Path, make_ops: MakeOps
    ) -> None:
        original = HEADER + "foo.map(f);\n"
        app = _write(tmp_path, "src/app.ts", original)

        report = make_ops().migrate_paths(dry_run=True)

        assert app.read_text() == original
        (migration,) = report.files
        assert migration.diff is not None
        assert migration.diff.startswith("--- a/src/app.ts\n+++ b/src/app.ts\n")
        assert "+foo.pipe(map(f));" in migration.diff

    def test_declaration_files_are_indexed_not_migrated(
        self, tmp_path: Path, make_ops: MakeOps
    ) -> None:
        _write(
            tmp_path,
            "src/shared.d.ts",
            "import { Observable } from 'rxjs';\nexport declare const shared: Observable<number>;\n",
        )
        app = _write(tmp_path, "src/app.ts", "import { shared } from './shared';\nshared.map(f);\n")

        report = make_ops().migrate_paths()

        assert [f.path for f in report.files] == ["src/app.ts"]
        assert "shared.pipe(map(f));" in app.read_text()

    def test_subclass_from_other_file_is_a_stream(
        self, tmp_path: Path, make_ops: MakeOps
    ) -> None:
        _write(
            tmp_path,
            "src/streams.ts",
            "import { Observable } from 'rxjs';\nexport class Store<T> extends Observable<T> {}\n",
        )
        app = _write(
            tmp_path,
            "src/app.ts",
            "import { Store } from './streams';\ndeclare const s: Store<number>;\ns.filter(f);\n",
        )

        make_ops().migrate_paths([app])

        assert "s.pipe(filter(f));" in app.read_text()

    def test_given_explicit_path_when_migrated_then_other_files_untouched(
        self, tmp_path: Path, make_ops: MakeOps
    ) -> None:
        # Given
        source = HEADER + "foo.map(f);\n"
        target = _write(tmp_path, "src/a.ts", source)
        other = _write(tmp_path, "src/b.ts", source)

        # When
        report = make_ops().migrate_paths([target])

        # Then
        assert [f.path for f in report.files] == ["src/a.ts"]
        assert "foo.pipe" in target.read_text()
        assert other.read_text() == source

    def test_write_failure_raises(self, tmp_path: Path, make_ops: MakeOps) -> None:
        _write(tmp_path, "app.ts", HEADER + "foo.map(f);\n")

        with (
            patch.object(Path, "write_bytes", side_effect=OSError("disk full")),
            pytest.raises(MigrationError) as exc_info,
        ):
            make_ops().migrate_paths()

        assert exc_info.value.code == ErrorCode.MIGRATION_WRITE_FAILED
        assert "app.ts" in str(exc_info.value)

    def test_unconverged_file_is_reported(self, tmp_path: Path, make_ops: MakeOps) -> None:
        _write(
            tmp_path,
            "app.ts",
            "import { filter } from 'rxjs/operators';\n" + HEADER + "foo.map(f);\n",
        )

        report = make_ops(max_rounds=1).migrate_paths()

        assert [f.path for f in report.unconverged] == ["app.ts"]


class TestCheckPaths:
    def test_findings_are_listed_without_writing(
        self, tmp_path: Path, make_ops: MakeOps
    ) -> None:
        source = "import { Observable } from 'rxjs/Observable';\n"
        app = _write(tmp_path, "src/app.ts", source)

        diagnostics = make_ops().check_paths()

        assert [str(d) for d in diagnostics] == [
            "src/app.ts:1:28 import-paths outdated import path"
        ]
        assert app.read_text() == source

    def test_clean_project_has_no_findings(self, tmp_path: Path, make_ops: MakeOps) -> None:
        _write(tmp_path, "src/app.ts", "import { Observable } from 'rxjs';\n")

        assert make_ops().check_paths() == []
