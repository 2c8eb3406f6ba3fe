"""Type oracle interfaces and the type/declaration records behind them.

The rewrite rules only talk to the ``TypeOracle`` and ``TypeDescriptor``
protocols. ``TypeRef`` and ``ClassDecl`` are the records used by the
declaration-based oracle shipped with the CLI.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import Any, Literal, Protocol

TypeKind = Literal["named", "union", "intersection", "array", "function"]


class TypeDescriptor(Protocol):
    """Opaque type handle returned by a type oracle."""

    @property
    def symbol_name(self) -> str | None: ...

    @property
    def target(self) -> TypeDescriptor | None:
        """Generic declaration of an instantiation (``Observable<T>`` for ``Observable<number>``)."""
        ...

    @property
    def is_union_or_intersection(self) -> bool: ...

    @property
    def members(self) -> Sequence[TypeDescriptor]: ...

    def base_types(self) -> Sequence[TypeDescriptor]: ...


class TypeOracle(Protocol):
    """Resolves static types of expressions and return types of calls.

    Both methods return None when the type cannot be determined.
    """

    def type_of(self, node: Any) -> TypeDescriptor | None: ...

    def return_type(self, call: Any) -> TypeDescriptor | None: ...


@dataclass(frozen=True)
class TypeRef:
    """A resolved (or, before resolution, annotated) TypeScript type."""

    kind: TypeKind
    name: str | None = None
    arguments: tuple[TypeRef, ...] = ()
    members: tuple[TypeRef, ...] = ()
    bases: tuple[TypeRef, ...] = ()
    returns: TypeRef | None = None  # for function types

    @classmethod
    def named(cls, name: str, *arguments: TypeRef) -> TypeRef:
        return cls(kind="named", name=name, arguments=tuple(arguments))

    @classmethod
    def array(cls, element: TypeRef | None = None) -> TypeRef:
        return cls(kind="array", name="Array", arguments=(element,) if element else ())

    @property
    def symbol_name(self) -> str | None:
        return self.name if self.kind in ("named", "array") else None

    @property
    def target(self) -> TypeRef | None:
        if self.arguments:
            return replace(self, arguments=())
        return None

    @property
    def is_union_or_intersection(self) -> bool:
        return self.kind in ("union", "intersection")

    def base_types(self) -> tuple[TypeRef, ...]:
        return self.bases

    def __str__(self) -> str:
        if self.kind in ("union", "intersection"):
            sep = " | " if self.kind == "union" else " & "
            return sep.join(str(m) for m in self.members)
        if self.kind == "function":
            return f"() => {self.returns}"
        if self.kind == "array" and self.arguments:
            return f"{self.arguments[0]}[]"
        if self.arguments:
            return f"{self.name}<{', '.join(str(a) for a in self.arguments)}>"
        return str(self.name)


@dataclass
class ClassDecl:
    """A class or interface declaration, by name."""

    name: str
    kind: Literal["class", "interface"] = "class"
    bases: list[TypeRef] = field(default_factory=list)
    fields: dict[str, TypeRef] = field(default_factory=dict)
    methods: dict[str, TypeRef | None] = field(default_factory=dict)
    static_methods: dict[str, TypeRef | None] = field(default_factory=dict)


@dataclass
class FileDeclarations:
    """Top-level declarations contributed by one source file."""

    path: str
    classes: dict[str, ClassDecl] = field(default_factory=dict)
    functions: dict[str, TypeRef | None] = field(default_factory=dict)
    variables: dict[str, TypeRef] = field(default_factory=dict)
    aliases: dict[str, TypeRef] = field(default_factory=dict)
