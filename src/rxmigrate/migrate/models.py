"""Migration models - edits, findings and per-file results."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Literal

RuleId = Literal[
    "pipeable-operators",
    "static-factories",
    "import-paths",
    "collapse-imports",
]


@dataclass(frozen=True, slots=True)
class Edit:
    """Replace ``[start, end)`` of the original source with ``text``.

    Offsets are UTF-8 byte offsets. ``text == ""`` deletes, ``start == end``
    inserts.
    """

    start: int
    end: int
    text: str = ""

    @classmethod
    def insert(cls, offset: int, text: str) -> Edit:
        return cls(offset, offset, text)

    @classmethod
    def delete(cls, start: int, end: int) -> Edit:
        return cls(start, end, "")

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end

    def overlaps(self, other: Edit) -> bool:
        """True if the two edits cannot both be applied to the same text."""
        if self.is_insertion and other.is_insertion:
            return False
        if self.is_insertion:
            return other.start < self.start < other.end
        if other.is_insertion:
            return self.start < other.start < self.end
        return self.start < other.end and other.start < self.end


@dataclass
class Finding:
    """One diagnostic with the edits that fix it."""

    rule: RuleId
    start: int
    end: int
    message: str
    edits: list[Edit] = field(default_factory=list)

    @property
    def span(self) -> tuple[int, int]:
        return self.start, self.end


@dataclass
class Chain:
    """A maximal run ``root.op1(..).op2(..)...opN(..)`` of operator calls."""

    root: Any
    calls: list[Any]

    @property
    def head(self) -> Any:
        return self.calls[0]

    @property
    def tail(self) -> Any:
        return self.calls[-1]

    def __len__(self) -> int:
        return len(self.calls)


@dataclass
class PassResult:
    """Findings of one pass over one file."""

    findings: list[Finding] = field(default_factory=list)
    parse_errors: int = 0

    @property
    def edit_count(self) -> int:
        return sum(len(f.edits) for f in self.findings)

    def by_rule(self) -> dict[str, int]:
        return dict(Counter(f.rule for f in self.findings))


@dataclass(frozen=True)
class Diagnostic:
    """A finding located in a file, for reporting."""

    path: str
    line: int
    column: int
    rule: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column} {self.rule} {self.message}"


@dataclass
class FileMigration:
    """Outcome of the fixed-point migration of one file."""

    path: str
    rounds: int = 0
    converged: bool = True
    changed: bool = False
    fixes: dict[str, int] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    diff: str | None = None
    parse_errors: int = 0

    @property
    def fix_count(self) -> int:
        return sum(self.fixes.values())


@dataclass
class MigrationReport:
    """Aggregated result of a migration run."""

    dry_run: bool
    files: list[FileMigration] = field(default_factory=list)

    @property
    def files_changed(self) -> int:
        return sum(1 for f in self.files if f.changed)

    @property
    def total_fixes(self) -> int:
        return sum(f.fix_count for f in self.files)

    @property
    def unconverged(self) -> list[FileMigration]:
        return [f for f in self.files if not f.converged]

    def to_dict(self) -> dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "files_changed": self.files_changed,
            "total_fixes": self.total_fixes,
            "files": [
                {
                    "path": f.path,
                    "rounds": f.rounds,
                    "converged": f.converged,
                    "changed": f.changed,
                    "fixes": f.fixes,
                    "parse_errors": f.parse_errors,
                    "diff": f.diff,
                }
                for f in self.files
            ],
        }
