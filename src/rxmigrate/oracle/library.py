"""Built-in declarations for the RxJS 5 surface and the JS builtins it meets.

Sources that import from ``rxjs`` never contain the library's own
declarations, so the oracle seeds its index with this pseudo-file.
"""

from __future__ import annotations

from rxmigrate.oracle.models import ClassDecl, FileDeclarations, TypeRef

LIBRARY_PATH = "<rxjs>"

_OBSERVABLE = TypeRef.named("Observable")
_SUBJECT = TypeRef.named("Subject")
_SUBSCRIPTION = TypeRef.named("Subscription")
_PROMISE = TypeRef.named("Promise")
_ARRAY = TypeRef.array()

# Array methods sharing a name with an operator but not returning a stream.
_ARRAY_SELF_METHODS = ("map", "filter", "concat", "slice", "sort", "reverse", "flat", "flatMap")
_ARRAY_UNKNOWN_METHODS = ("reduce", "reduceRight", "find", "pop", "shift", "at")


def _observable_class() -> ClassDecl:
    from rxmigrate.migrate.tables import INSTANCE_OPERATORS, STATIC_FACTORIES

    methods: dict[str, TypeRef | None] = {name: _OBSERVABLE for name in INSTANCE_OPERATORS}
    methods.update(
        {
            "pipe": _OBSERVABLE,
            "let": _OBSERVABLE,
            "lift": _OBSERVABLE,
            "subscribe": _SUBSCRIPTION,
            "toPromise": _PROMISE,
            "forEach": _PROMISE,
        }
    )
    statics: dict[str, TypeRef | None] = {name: _OBSERVABLE for name in STATIC_FACTORIES}
    statics["create"] = _OBSERVABLE
    return ClassDecl(name="Observable", methods=methods, static_methods=statics)


def _subject_class(name: str, base: TypeRef) -> ClassDecl:
    return ClassDecl(
        name=name,
        bases=[base],
        methods={
            "next": None,
            "error": None,
            "complete": None,
            "asObservable": _OBSERVABLE,
        },
    )


def library_declarations() -> FileDeclarations:
    """Declarations for ``rxjs`` classes plus ``Array`` and ``Promise``."""
    from rxmigrate.migrate.tables import CREATION_FUNCTIONS

    decls = FileDeclarations(path=LIBRARY_PATH)
    classes = [
        _observable_class(),
        _subject_class("Subject", _OBSERVABLE),
        _subject_class("BehaviorSubject", _SUBJECT),
        _subject_class("ReplaySubject", _SUBJECT),
        _subject_class("AsyncSubject", _SUBJECT),
        # Angular's EventEmitter extends Subject
        _subject_class("EventEmitter", _SUBJECT),
        ClassDecl(
            name="ConnectableObservable",
            bases=[_OBSERVABLE],
            methods={"connect": _SUBSCRIPTION},
        ),
        ClassDecl(name="GroupedObservable", bases=[_OBSERVABLE]),
        ClassDecl(
            name="Subscription",
            methods={"add": _SUBSCRIPTION, "remove": None, "unsubscribe": None},
        ),
        ClassDecl(
            name="Array",
            kind="interface",
            methods={
                **{name: _ARRAY for name in _ARRAY_SELF_METHODS},
                **{name: None for name in _ARRAY_UNKNOWN_METHODS},
            },
        ),
        ClassDecl(
            name="Promise",
            kind="interface",
            methods={"then": _PROMISE, "catch": _PROMISE, "finally": _PROMISE},
        ),
    ]
    decls.classes = {c.name: c for c in classes}
    decls.functions = {name: _OBSERVABLE for name in CREATION_FUNCTIONS}
    return decls
