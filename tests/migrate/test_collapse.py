"""Tests for merging duplicate RxJS imports."""

from __future__ import annotations

from collections.abc import Callable

from rxmigrate.migrate.collapse import MESSAGE
from rxmigrate.migrate.models import PassResult

Migrate = Callable[..., tuple[str, PassResult]]


class TestCollapseImports:
    def test_two_imports_become_one(self, migrate: Migrate) -> None:
        source = (
            "import { Observable } from 'rxjs';\n"
            "import { Subject } from 'rxjs';\n"
            "const x = 1;\n"
        )

        fixed, result = migrate(source)

        assert fixed == "import { Observable ,  Subject } from 'rxjs';\nconst x = 1;\n"
        assert [f.message for f in result.findings] == [MESSAGE]

    def test_three_imports_keep_source_order(self, migrate: Migrate) -> None:
        source = (
            "import { map } from 'rxjs/operators';\n"
            "import { filter } from 'rxjs/operators';\n"
            "import { tap } from 'rxjs/operators';\n"
        )

        fixed, result = migrate(source)

        assert fixed == "import { map ,  filter ,  tap } from 'rxjs/operators';\n"
        assert len(result.findings) == 1

    def test_aliases_are_preserved(self, migrate: Migrate) -> None:
        source = "import { of as observableOf } from 'rxjs';\nimport { Subject } from 'rxjs';\n"

        fixed, _ = migrate(source)

        assert fixed == "import { of as observableOf ,  Subject } from 'rxjs';\n"

    def test_comment_above_stays_trailing_comment_goes(self, migrate: Migrate) -> None:
        source = (
            "import { Observable } from 'rxjs';\n"
            "// keep me\n"
            "import { Subject } from 'rxjs'; // drop me\n"
            "const x = 1;\n"
        )

        fixed, _ = migrate(source)

        assert fixed == "import { Observable ,  Subject } from 'rxjs';\n// keep me\nconst x = 1;\n"

    def test_each_module_collapses_separately(self, migrate: Migrate) -> None:
        source = (
            "import { Observable } from 'rxjs';\n"
            "import { map } from 'rxjs/operators';\n"
            "import { Subject } from 'rxjs';\n"
            "import { filter } from 'rxjs/operators';\n"
        )

        fixed, result = migrate(source)

        assert len(result.findings) == 2
        assert fixed == (
            "import { Observable ,  Subject } from 'rxjs';\n"
            "import { map ,  filter } from 'rxjs/operators';\n"
        )


class TestImportsLeftAlone:
    def test_single_import_is_kept(self, migrate: Migrate) -> None:
        _, result = migrate("import { Observable, Subject } from 'rxjs';\n")

        assert result.findings == []

    def test_non_rxjs_duplicates_are_kept(self, migrate: Migrate) -> None:
        source = "import { a } from './util';\nimport { b } from './util';\n"

        _, result = migrate(source)

        assert result.findings == []

    def test_namespace_and_default_imports_are_kept(self, migrate: Migrate) -> None:
        source = (
            "import * as Rx from 'rxjs';\n"
            "import { Subject } from 'rxjs';\n"
            "import rx, { Observable } from 'rxjs';\n"
        )

        _, result = migrate(source)

        assert result.findings == []

    def test_type_only_imports_are_kept(self, migrate: Migrate) -> None:
        source = "import type { Observer } from 'rxjs';\nimport { Subject } from 'rxjs';\n"

        _, result = migrate(source)

        assert result.findings == []
