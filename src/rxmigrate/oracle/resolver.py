"""Declaration-based type oracle.

Resolves expression types from what the source states: annotations,
initializers, class members, function return types and the built-in RxJS
declarations. Anything it cannot see is reported as unknown (None), which
the rewrite rules treat as "not a stream".
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from rxmigrate.migrate.tables import LIBRARY
from rxmigrate.oracle.declarations import DeclarationIndex, read_type
from rxmigrate.oracle.models import TypeRef
from rxmigrate.parsing.nodes import node_text, unwrap_expression

_FUNCTION_SCOPES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "function",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)

_BLOCK_SCOPES = frozenset({"program", "statement_block", "switch_case", "switch_default"})

_CLASS_NODES = frozenset({"class_declaration", "abstract_class_declaration", "class"})


@dataclass(frozen=True)
class _Binding:
    """A local declaration found by scope lookup."""

    declared: TypeRef | None = None
    value: Any = None
    returns: TypeRef | None = None


class DeclarationOracle:
    """``TypeOracle`` over a ``DeclarationIndex`` for one parsed file.

    Usage::

        index = DeclarationIndex()
        index.add_file("app.ts", result.root_node)
        oracle = DeclarationOracle(index, result.root_node)
        oracle.type_of(node)
    """

    def __init__(self, index: DeclarationIndex, root: Any) -> None:
        self._index = index
        self._root = root
        self._imports = _read_import_bindings(root)
        self._active: set[tuple[int, int, str]] = set()

    # ------------------------------------------------------------------
    # TypeOracle
    # ------------------------------------------------------------------

    def type_of(self, node: Any) -> TypeRef | None:
        node = unwrap_expression(node)
        if node is None:
            return None
        key = (node.start_byte, node.end_byte, node.type)
        if key in self._active:
            return None
        self._active.add(key)
        try:
            return self._type_of(node)
        finally:
            self._active.discard(key)

    def return_type(self, call: Any) -> TypeRef | None:
        if call is None:
            return None
        if call.type == "new_expression":
            return self._constructed_type(call)
        if call.type != "call_expression":
            return None
        key = (call.start_byte, call.end_byte, "return")
        if key in self._active:
            return None
        self._active.add(key)
        try:
            return self._call_return(call)
        finally:
            self._active.discard(key)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _type_of(self, node: Any) -> TypeRef | None:
        kind = node.type
        if kind == "identifier":
            return self._identifier_type(node)
        if kind == "this":
            return self._this_type(node)
        if kind == "member_expression":
            obj = node.child_by_field_name("object")
            prop = node.child_by_field_name("property")
            if obj is None or prop is None:
                return None
            return self._index.member_type(self.type_of(obj), node_text(prop))
        if kind in ("call_expression", "new_expression"):
            return self.return_type(node)
        if kind in ("as_expression", "satisfies_expression"):
            named = node.named_children
            return self._resolve(read_type(named[-1])) if len(named) > 1 else None
        if kind == "array":
            return TypeRef.array()
        if kind == "subscript_expression":
            owner = self.type_of(node.child_by_field_name("object"))
            if owner is not None and owner.kind == "array" and owner.arguments:
                return self._resolve(owner.arguments[0])
            return None
        if kind == "ternary_expression":
            branches = [
                self.type_of(node.child_by_field_name("consequence")),
                self.type_of(node.child_by_field_name("alternative")),
            ]
            members = tuple(b for b in branches if b is not None)
            if len(members) == 2:
                return TypeRef(kind="union", members=members)
            return None
        if kind == "assignment_expression":
            return self.type_of(node.child_by_field_name("right"))
        return None

    def _identifier_type(self, node: Any) -> TypeRef | None:
        name = node_text(node)
        binding = self._find_binding(name, node)
        if binding is not None:
            if binding.declared is not None:
                return self._resolve(binding.declared)
            if binding.value is not None:
                return self.type_of(binding.value)
            return None
        imported = self._imports.get(name)
        if imported is None:
            return None
        module, original = imported
        if module.startswith(LIBRARY):
            return None
        return self._resolve(self._index.merged.variables.get(original))

    def _this_type(self, node: Any) -> TypeRef | None:
        for anc in _ancestors(node):
            if anc.type in _CLASS_NODES:
                name = anc.child_by_field_name("name")
                return self._resolve(TypeRef.named(node_text(name))) if name else None
        return None

    def _constructed_type(self, node: Any) -> TypeRef | None:
        ctor = node.child_by_field_name("constructor")
        if ctor is None or ctor.type not in ("identifier", "member_expression"):
            return None
        name = node_text(ctor).rsplit(".", 1)[-1]
        name = self._original_name(name)
        args = node.child_by_field_name("type_arguments")
        type_args: list[TypeRef] = []
        if args is not None:
            type_args = [t for t in (read_type(c) for c in args.named_children) if t]
        return self._resolve(TypeRef.named(name, *type_args))

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def _call_return(self, call: Any) -> TypeRef | None:
        fn = unwrap_expression(call.child_by_field_name("function"))
        if fn is None:
            return None
        if fn.type == "member_expression":
            obj = unwrap_expression(fn.child_by_field_name("object"))
            prop = fn.child_by_field_name("property")
            if obj is None or prop is None:
                return None
            method = node_text(prop)
            namespace = self._namespace_class(obj)
            if namespace is not None and self._index.has_static(namespace, method):
                return self._index.static_return(namespace, method)
            owner = self.type_of(obj)
            returned = self._index.method_return(owner, method)
            if returned is not None:
                return returned
            field_type = self._index.member_type(owner, method)
            if field_type is not None and field_type.kind == "function":
                return self._resolve(field_type.returns)
            return None
        if fn.type == "identifier":
            return self._function_return(node_text(fn), fn)
        return None

    def _namespace_class(self, obj: Any) -> str | None:
        """Class name when ``obj`` names a class rather than a value."""
        if obj.type == "identifier":
            name = node_text(obj)
            if self._find_binding(name, obj) is not None:
                return None
        elif obj.type != "member_expression":
            return None
        name = self._original_name(node_text(obj).rsplit(".", 1)[-1])
        return name if self._index.get_class(name) is not None else None

    def _function_return(self, name: str, node: Any) -> TypeRef | None:
        binding = self._find_binding(name, node)
        if binding is not None:
            if binding.returns is not None:
                return self._resolve(binding.returns)
            declared = binding.declared
            if declared is not None and declared.kind == "function":
                return self._resolve(declared.returns)
            value = unwrap_expression(binding.value)
            if value is not None and value.type in ("arrow_function", "function_expression"):
                return self._resolve(read_type(value.child_by_field_name("return_type")))
            return None
        imported = self._imports.get(name)
        if imported is None:
            return None
        module, original = imported
        if module.startswith(LIBRARY):
            return self._resolve(self._index.library_function(original))
        return self._resolve(self._index.merged.functions.get(original))

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def _find_binding(self, name: str, node: Any) -> _Binding | None:
        """Innermost local declaration of ``name`` visible from ``node``."""
        for anc in _ancestors(node):
            if anc.type in _FUNCTION_SCOPES:
                found = _parameter_binding(anc, name)
                if found is not None:
                    return found
            elif anc.type in ("for_in_statement", "catch_clause"):
                field_name = "left" if anc.type == "for_in_statement" else "parameter"
                target = anc.child_by_field_name(field_name)
                if target is not None and node_text(target) == name:
                    return _Binding()
            if anc.type in _BLOCK_SCOPES:
                found = _block_binding(anc, name)
                if found is not None:
                    return found
        return None

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    def _original_name(self, name: str) -> str:
        imported = self._imports.get(name)
        if imported is not None and imported[1] != "*":
            return imported[1]
        return name

    def _resolve(self, ref: TypeRef | None) -> TypeRef | None:
        return self._index.resolve(self._localize(ref))

    def _localize(self, ref: TypeRef | None) -> TypeRef | None:
        """Map locally aliased type names back to their exported names."""
        if ref is None:
            return None
        if ref.kind in ("union", "intersection"):
            members = tuple(m for m in (self._localize(m) for m in ref.members) if m)
            return TypeRef(kind=ref.kind, members=members)
        if ref.kind == "function":
            return TypeRef(kind="function", returns=self._localize(ref.returns))
        if ref.name is None:
            return ref
        original = self._original_name(ref.name)
        if original == ref.name:
            return ref
        return TypeRef(kind=ref.kind, name=original, arguments=ref.arguments)


def _ancestors(node: Any) -> Iterator[Any]:
    current = node.parent
    while current is not None:
        yield current
        current = current.parent


def _parameter_binding(function: Any, name: str) -> _Binding | None:
    single = function.child_by_field_name("parameter")
    if single is not None and node_text(single) == name:
        return _Binding()
    params = function.child_by_field_name("parameters")
    if params is None:
        return None
    for param in params.named_children:
        pattern = param.child_by_field_name("pattern")
        if pattern is not None and pattern.type == "identifier" and node_text(pattern) == name:
            return _Binding(
                declared=read_type(param.child_by_field_name("type")),
                value=param.child_by_field_name("value"),
            )
    return None


def _block_binding(block: Any, name: str) -> _Binding | None:
    for stmt in block.named_children:
        while stmt is not None and stmt.type in ("export_statement", "ambient_declaration"):
            inner = stmt.child_by_field_name("declaration")
            if inner is None:
                named = [c for c in stmt.named_children if c.type != "comment"]
                inner = named[0] if named else None
            stmt = inner
        if stmt is None:
            continue
        if stmt.type in ("lexical_declaration", "variable_declaration"):
            for declarator in stmt.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name_node = declarator.child_by_field_name("name")
                if name_node is not None and node_text(name_node) == name:
                    return _Binding(
                        declared=read_type(declarator.child_by_field_name("type")),
                        value=declarator.child_by_field_name("value"),
                    )
        elif stmt.type in (
            "function_declaration",
            "function_signature",
            "generator_function_declaration",
        ):
            if node_text(stmt.child_by_field_name("name")) == name:
                return _Binding(returns=read_type(stmt.child_by_field_name("return_type")))
        elif stmt.type in _CLASS_NODES:
            if node_text(stmt.child_by_field_name("name")) == name:
                return _Binding()
    return None


def _read_import_bindings(root: Any) -> dict[str, tuple[str, str]]:
    """Local name -> (module path, exported name) for the file's imports."""
    bindings: dict[str, tuple[str, str]] = {}
    for stmt in root.named_children:
        if stmt.type != "import_statement":
            continue
        source = stmt.child_by_field_name("source")
        module = node_text(source)[1:-1] if source is not None else ""
        if not module:
            continue
        for clause in stmt.named_children:
            if clause.type != "import_clause":
                continue
            for part in clause.named_children:
                if part.type == "identifier":
                    bindings[node_text(part)] = (module, "default")
                elif part.type == "namespace_import":
                    for ident in part.named_children:
                        bindings[node_text(ident)] = (module, "*")
                elif part.type == "named_imports":
                    for spec in part.named_children:
                        if spec.type != "import_specifier":
                            continue
                        imported = node_text(spec.child_by_field_name("name"))
                        alias = spec.child_by_field_name("alias")
                        local = node_text(alias) if alias is not None else imported
                        bindings[local] = (module, imported)
    return bindings
