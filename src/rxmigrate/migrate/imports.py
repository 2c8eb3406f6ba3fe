"""Import statement reading and the per-pass import registry."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from rxmigrate.migrate.models import Edit
from rxmigrate.migrate.tables import OPERATOR_PATH_PATTERN, OPERATORS_MODULE
from rxmigrate.parsing.nodes import node_text, string_fragment

# (symbol, alias)
Binding = tuple[str, str | None]


@dataclass
class ImportSpecifier:
    """``name`` or ``name as alias`` inside ``{ ... }``."""

    node: Any
    name: Any
    alias: Any = None

    @property
    def imported(self) -> str:
        return node_text(self.name)

    @property
    def local(self) -> str:
        return node_text(self.alias) if self.alias is not None else self.imported

    @property
    def binding(self) -> Binding:
        return self.imported, node_text(self.alias) if self.alias is not None else None


@dataclass
class ImportStatement:
    """One top-level ``import`` statement."""

    node: Any
    source: Any  # string node, None for malformed statements
    clause: Any = None
    default: Any = None
    namespace: Any = None
    named_imports: Any = None
    specifiers: list[ImportSpecifier] = field(default_factory=list)

    @property
    def module(self) -> str | None:
        if self.source is None:
            return None
        fragment = string_fragment(self.source)
        return node_text(fragment) if fragment is not None else ""

    @property
    def path_node(self) -> Any:
        """The text between the quotes."""
        return string_fragment(self.source)

    @property
    def is_side_effect_only(self) -> bool:
        return self.clause is None

    @property
    def is_named_only(self) -> bool:
        return (
            self.named_imports is not None and self.default is None and self.namespace is None
        )

    @property
    def bindings(self) -> list[Binding]:
        return [s.binding for s in self.specifiers]


def read_import(node: Any) -> ImportStatement:
    stmt = ImportStatement(node=node, source=node.child_by_field_name("source"))
    for child in node.named_children:
        if child.type == "import_clause":
            stmt.clause = child
        elif child.type == "string" and stmt.source is None:
            stmt.source = child
    if stmt.clause is None:
        return stmt
    for part in stmt.clause.named_children:
        if part.type == "identifier":
            stmt.default = part
        elif part.type == "namespace_import":
            stmt.namespace = part
        elif part.type == "named_imports":
            stmt.named_imports = part
            for spec in part.named_children:
                if spec.type != "import_specifier":
                    continue
                name = spec.child_by_field_name("name")
                if name is None:
                    continue
                stmt.specifiers.append(
                    ImportSpecifier(node=spec, name=name, alias=spec.child_by_field_name("alias"))
                )
    return stmt


def read_imports(root: Any) -> list[ImportStatement]:
    """Top-level import statements in source order."""
    return [read_import(c) for c in root.named_children if c.type == "import_statement"]


def statement_removal(stmt: ImportStatement, source: bytes) -> Edit:
    """Delete an import statement together with the line break that ends it."""
    start, end = stmt.node.start_byte, stmt.node.end_byte
    if source[end : end + 2] == b"\r\n":
        end += 2
    elif source[end : end + 1] == b"\n":
        end += 1
    return Edit.delete(start, end)


def insertion_point(root: Any, source: bytes) -> int:
    """Offset for new imports.

    Right after a leading file overview comment when a blank line follows
    it, otherwise the start of the file.
    """
    first = root.children[0] if root.children else None
    if first is None or first.type != "comment":
        return 0
    if source[: first.start_byte].strip():
        return 0
    end = first.end_byte
    if source[end : end + 2] == b"\n\n":
        return end + 2
    return 0


def import_text(module: str, binding: Binding) -> str:
    symbol, alias = binding
    name = f"{symbol} as {alias}" if alias else symbol
    return f"import {{ {name} }} from '{module}';\n"


class ImportRegistry:
    """Tracks which named bindings a file already imports during one pass.

    Rules ask for the bindings their rewrites need; the registry answers
    with insertion edits for the missing ones and remembers them, so a
    binding is never inserted twice in the same pass.
    """

    def __init__(self, root: Any, source: bytes) -> None:
        self._root = root
        self._source = source
        self._imports = read_imports(root)
        self._present: set[tuple[str, str, str | None]] = set()
        self._seeded: set[str] = set()
        self._insertion_point: int | None = None

    @property
    def imports(self) -> list[ImportStatement]:
        return self._imports

    @property
    def insertion_point(self) -> int:
        if self._insertion_point is None:
            self._insertion_point = insertion_point(self._root, self._source)
        return self._insertion_point

    def has(self, module: str, binding: Binding) -> bool:
        self._seed(module)
        return (module, *binding) in self._present

    def request(self, module: str, bindings: Iterable[Binding]) -> list[Edit]:
        """Insertion edits for the bindings not yet imported from ``module``."""
        self._seed(module)
        edits: list[Edit] = []
        for symbol, alias in bindings:
            key = (module, symbol, alias)
            if key in self._present:
                continue
            self._present.add(key)
            edits.append(Edit.insert(self.insertion_point, import_text(module, (symbol, alias))))
        return edits

    def _seed(self, module: str) -> None:
        if module in self._seeded:
            return
        self._seeded.add(module)
        for stmt in self._imports:
            path = stmt.module
            if not path:
                continue
            if path == module or (
                module == OPERATORS_MODULE and OPERATOR_PATH_PATTERN.match(path)
            ):
                for symbol, alias in stmt.bindings:
                    self._present.add((module, symbol, alias))
