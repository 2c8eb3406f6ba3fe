"""Whole-program declaration index.

Collects the top-level classes, interfaces, functions, annotated variables
and type aliases of every project file, on top of the built-in library
declarations. Type annotations are read into ``TypeRef`` records; ``resolve``
later expands aliases and attaches declared supertypes.
"""

from __future__ import annotations

from typing import Any

from rxmigrate.core.logging import get_logger
from rxmigrate.oracle.library import LIBRARY_PATH, library_declarations
from rxmigrate.oracle.models import ClassDecl, FileDeclarations, TypeRef
from rxmigrate.parsing.nodes import node_text

log = get_logger("oracle.declarations")

# Statements that wrap a declaration without changing it.
_WRAPPER_TYPES = frozenset({"export_statement", "ambient_declaration"})

_CLASS_TYPES = frozenset({"class_declaration", "abstract_class_declaration", "class"})

_FUNCTION_DECL_TYPES = frozenset(
    {"function_declaration", "function_signature", "generator_function_declaration"}
)


def read_type(node: Any) -> TypeRef | None:
    """Read a type node (or a ``type_annotation``) into an unresolved TypeRef."""
    if node is None:
        return None
    kind = node.type
    if kind in ("type_annotation", "parenthesized_type", "readonly_type"):
        inner = node.named_children
        return read_type(inner[-1]) if inner else None
    if kind == "type_identifier":
        return TypeRef.named(node_text(node))
    if kind == "nested_type_identifier":
        name = node.child_by_field_name("name")
        return TypeRef.named(node_text(name)) if name is not None else None
    if kind == "predefined_type":
        return TypeRef.named(node_text(node))
    if kind == "generic_type":
        name = read_type(node.child_by_field_name("name"))
        if name is None:
            return None
        args_node = node.child_by_field_name("type_arguments")
        args = []
        if args_node is not None:
            args = [a for a in (read_type(c) for c in args_node.named_children) if a is not None]
        if name.name in ("Array", "ReadonlyArray"):
            return TypeRef.array(args[0] if args else None)
        return TypeRef.named(name.name or "", *args)
    if kind == "array_type":
        inner = node.named_children
        return TypeRef.array(read_type(inner[0]) if inner else None)
    if kind in ("union_type", "intersection_type"):
        combined = "union" if kind == "union_type" else "intersection"
        members: list[TypeRef] = []
        for child in node.named_children:
            member = read_type(child)
            if member is None:
                continue
            # The grammar nests binary unions; flatten them.
            if member.kind == combined:
                members.extend(member.members)
            else:
                members.append(member)
        if not members:
            return None
        return TypeRef(kind=combined, members=tuple(members))  # type: ignore[arg-type]
    if kind == "function_type":
        return TypeRef(kind="function", returns=read_type(node.child_by_field_name("return_type")))
    return None


def _heritage(node: Any) -> list[TypeRef]:
    """Declared supertypes from a class heritage or interface extends clause."""
    bases: list[TypeRef] = []
    for child in node.named_children:
        if child.type == "class_heritage":
            for clause in child.named_children:
                if clause.type != "extends_clause":
                    # implements clauses describe shape only
                    continue
                values = clause.children_by_field_name("value") or [
                    c for c in clause.named_children if c.type in ("identifier", "member_expression")
                ]
                for value in values:
                    name = node_text(value).rsplit(".", 1)[-1]
                    if name:
                        bases.append(TypeRef.named(name))
        elif child.type == "extends_type_clause":
            for type_node in child.named_children:
                base = read_type(type_node)
                if base is not None:
                    bases.append(base)
    return bases


def _is_static(member: Any) -> bool:
    return any(child.type == "static" for child in member.children)


def _read_class(node: Any, kind: str) -> ClassDecl | None:
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return None
    decl = ClassDecl(name=node_text(name_node), kind=kind, bases=_heritage(node))  # type: ignore[arg-type]
    body = node.child_by_field_name("body")
    if body is None:
        return decl
    for member in body.named_children:
        member_name = node_text(member.child_by_field_name("name"))
        if not member_name:
            continue
        if member.type in ("method_definition", "method_signature", "abstract_method_signature"):
            returns = read_type(member.child_by_field_name("return_type"))
            if member_name == "constructor":
                _read_parameter_properties(member, decl)
            elif _is_static(member):
                decl.static_methods[member_name] = returns
            else:
                decl.methods[member_name] = returns
        elif member.type in ("public_field_definition", "property_signature"):
            field_type = read_type(member.child_by_field_name("type"))
            if field_type is None:
                field_type = _infer_initializer(member.child_by_field_name("value"))
            if field_type is not None and not _is_static(member):
                decl.fields[member_name] = field_type
    return decl


def _read_parameter_properties(constructor: Any, decl: ClassDecl) -> None:
    """``constructor(private store: Store<T>)`` declares a field."""
    params = constructor.child_by_field_name("parameters")
    if params is None:
        return
    for param in params.named_children:
        if param.type not in ("required_parameter", "optional_parameter"):
            continue
        if not any(c.type in ("accessibility_modifier", "readonly") for c in param.children):
            continue
        pattern = param.child_by_field_name("pattern")
        param_type = read_type(param.child_by_field_name("type"))
        if pattern is not None and pattern.type == "identifier" and param_type is not None:
            decl.fields[node_text(pattern)] = param_type


def _infer_initializer(value: Any) -> TypeRef | None:
    """Type of an initializer that is readable without a resolver."""
    if value is None:
        return None
    if value.type == "new_expression":
        ctor = value.child_by_field_name("constructor")
        if ctor is not None and ctor.type in ("identifier", "member_expression"):
            return TypeRef.named(node_text(ctor).rsplit(".", 1)[-1])
    if value.type == "array":
        return TypeRef.array()
    if value.type in ("as_expression", "satisfies_expression"):
        named = value.named_children
        return read_type(named[-1]) if len(named) > 1 else None
    return None


def _declared_statements(root: Any) -> list[Any]:
    """Top-level statements, with export/declare wrappers removed."""
    out: list[Any] = []
    for stmt in root.named_children:
        while stmt is not None and stmt.type in _WRAPPER_TYPES:
            inner = stmt.child_by_field_name("declaration")
            if inner is None:
                named = [c for c in stmt.named_children if c.type != "comment"]
                inner = named[0] if named else None
            stmt = inner
        if stmt is not None:
            out.append(stmt)
    return out


def scan_file(path: str, root: Any) -> FileDeclarations:
    """Collect the top-level declarations of one parsed file."""
    decls = FileDeclarations(path=path)
    for stmt in _declared_statements(root):
        kind = stmt.type
        if kind in _CLASS_TYPES:
            cls = _read_class(stmt, "class")
            if cls is not None:
                decls.classes[cls.name] = cls
        elif kind == "interface_declaration":
            iface = _read_class(stmt, "interface")
            if iface is not None:
                decls.classes[iface.name] = iface
        elif kind in _FUNCTION_DECL_TYPES:
            name = node_text(stmt.child_by_field_name("name"))
            if name:
                decls.functions[name] = read_type(stmt.child_by_field_name("return_type"))
        elif kind in ("lexical_declaration", "variable_declaration"):
            for declarator in stmt.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name_node = declarator.child_by_field_name("name")
                if name_node is None or name_node.type != "identifier":
                    continue
                var_type = read_type(declarator.child_by_field_name("type"))
                if var_type is None:
                    var_type = _infer_initializer(declarator.child_by_field_name("value"))
                if var_type is not None:
                    decls.variables[node_text(name_node)] = var_type
        elif kind == "type_alias_declaration":
            name = node_text(stmt.child_by_field_name("name"))
            value = read_type(stmt.child_by_field_name("value"))
            if name and value is not None:
                decls.aliases[name] = value
    return decls


class DeclarationIndex:
    """Merged view over the declarations of all indexed files.

    Project files shadow the built-in library declarations by name.
    """

    def __init__(self, *, include_library: bool = True) -> None:
        self._files: dict[str, FileDeclarations] = {}
        self._merged: FileDeclarations | None = None
        if include_library:
            self._files[LIBRARY_PATH] = library_declarations()

    def add_file(self, path: str, root: Any) -> FileDeclarations:
        """Index (or re-index) one parsed file."""
        decls = scan_file(path, root)
        self._files[path] = decls
        self._merged = None
        log.debug(
            "file_indexed",
            path=path,
            classes=len(decls.classes),
            functions=len(decls.functions),
            variables=len(decls.variables),
        )
        return decls

    def remove_file(self, path: str) -> None:
        if self._files.pop(path, None) is not None:
            self._merged = None

    def __len__(self) -> int:
        return len(self._files)

    @property
    def merged(self) -> FileDeclarations:
        if self._merged is None:
            merged = FileDeclarations(path="<merged>")
            library = self._files.get(LIBRARY_PATH)
            ordered = ([library] if library else []) + [
                d for p, d in self._files.items() if p != LIBRARY_PATH
            ]
            for decls in ordered:
                merged.classes.update(decls.classes)
                merged.functions.update(decls.functions)
                merged.variables.update(decls.variables)
                merged.aliases.update(decls.aliases)
            self._merged = merged
        return self._merged

    def library_function(self, name: str) -> TypeRef | None:
        library = self._files.get(LIBRARY_PATH)
        return library.functions.get(name) if library else None

    def get_class(self, name: str | None) -> ClassDecl | None:
        if name is None:
            return None
        return self.merged.classes.get(name)

    def resolve(self, ref: TypeRef | None, _seen: frozenset[str] = frozenset()) -> TypeRef | None:
        """Expand aliases and attach declared supertypes, recursively."""
        if ref is None:
            return None
        if ref.kind in ("union", "intersection"):
            members = tuple(m for m in (self.resolve(m, _seen) for m in ref.members) if m)
            return TypeRef(kind=ref.kind, members=members)
        if ref.kind == "function":
            return TypeRef(kind="function", returns=self.resolve(ref.returns, _seen))
        name = ref.name
        if name is None or name in _seen:
            return ref
        seen = _seen | {name}
        alias = self.merged.aliases.get(name)
        if alias is not None and ref.kind == "named":
            return self.resolve(alias, seen)
        decl = self.merged.classes.get(name)
        if decl is None or not decl.bases:
            return ref
        bases = tuple(b for b in (self.resolve(b, seen) for b in decl.bases) if b)
        return TypeRef(kind=ref.kind, name=name, arguments=ref.arguments, bases=bases)

    def member_type(self, owner: TypeRef | None, member: str) -> TypeRef | None:
        """Field type of ``owner.member``, following supertypes."""
        return self._lookup(owner, member, "fields")

    def method_return(self, owner: TypeRef | None, method: str) -> TypeRef | None:
        """Return type of ``owner.method(...)``, following supertypes."""
        return self._lookup(owner, method, "methods")

    def static_return(self, class_name: str, method: str) -> TypeRef | None:
        decl = self.get_class(class_name)
        seen: set[str] = set()
        while decl is not None and decl.name not in seen:
            seen.add(decl.name)
            if method in decl.static_methods:
                return self.resolve(decl.static_methods[method])
            decl = self.get_class(decl.bases[0].name) if decl.bases else None
        return None

    def has_static(self, class_name: str, method: str) -> bool:
        return self.static_return(class_name, method) is not None

    def _lookup(self, owner: TypeRef | None, member: str, table: str) -> TypeRef | None:
        if owner is None:
            return None
        if owner.kind in ("union", "intersection"):
            for candidate in owner.members:
                found = self._lookup(candidate, member, table)
                if found is not None:
                    return found
            return None
        pending = [owner.name]
        seen: set[str] = set()
        while pending:
            name = pending.pop(0)
            if name is None or name in seen:
                continue
            seen.add(name)
            decl = self.get_class(name)
            if decl is None:
                alias = self.merged.aliases.get(name)
                if alias is not None:
                    return self._lookup(alias, member, table)
                continue
            entries: dict[str, TypeRef | None] = getattr(decl, table)
            if member in entries:
                return self.resolve(entries[member])
            pending.extend(b.name for b in decl.bases)
        return None
