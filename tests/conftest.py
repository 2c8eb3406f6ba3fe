"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and provides helpers that run the migration over TypeScript snippets.
"""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local rxmigrate package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from rxmigrate.config.models import MigrationConfig  # noqa: E402
from rxmigrate.migrate.models import PassResult  # noqa: E402
from rxmigrate.migrate.ops import MigrationOps, apply_edits  # noqa: E402
from rxmigrate.parsing.parser import TreeSitterParser  # noqa: E402


@pytest.fixture
def parser() -> TreeSitterParser:
    return TreeSitterParser()


@pytest.fixture
def make_ops(tmp_path: Path) -> Callable[..., MigrationOps]:
    """Build MigrationOps over tmp_path with MigrationConfig overrides."""

    def make(**config: Any) -> MigrationOps:
        return MigrationOps(tmp_path, config=MigrationConfig(**config))

    return make


@pytest.fixture
def migrate(make_ops: Callable[..., MigrationOps]) -> Callable[..., tuple[str, PassResult]]:
    """Run one pass over a snippet and apply its non-overlapping findings."""

    def run(source: str, **config: Any) -> tuple[str, PassResult]:
        ops = make_ops(**config)
        data = source.encode("utf-8")
        result = ops.run_pass(data)
        fixed, _, _ = apply_edits(data, result.findings)
        return fixed.decode("utf-8"), result

    return run


@pytest.fixture
def migrate_all(make_ops: Callable[..., MigrationOps]) -> Callable[..., str]:
    """Run the fix loop over a snippet until nothing changes."""

    def run(source: str, **config: Any) -> str:
        fixed, _ = make_ops(**config).migrate_source(source.encode("utf-8"))
        return fixed.decode("utf-8")

    return run
