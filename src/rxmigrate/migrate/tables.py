"""Fixed migration tables for the RxJS 5 -> 6 upgrade.

These are data, not configuration: they are versioned together with the
migration targets and never changed at runtime.
"""

from __future__ import annotations

import re

LIBRARY = "rxjs"
"""Module prefix shared by every import the migration touches."""

STREAM_NAMESPACE = "Observable"
"""Identifier of the stream class used as a namespace for static factories."""

OPERATORS_MODULE = "rxjs/operators"
"""Canonical module of the pipeable operators."""

FACTORIES_MODULE = "rxjs"
"""Canonical module of the creation functions."""

PIPE_OPEN = ".pipe("
PIPE_CLOSE = ")"

# =============================================================================
# Instance operators (RxJS v5 patched operators, including the renamed ones)
# =============================================================================

INSTANCE_OPERATORS: frozenset[str] = frozenset(
    {
        "audit",
        "auditTime",
        "buffer",
        "bufferCount",
        "bufferTime",
        "bufferToggle",
        "bufferWhen",
        "catchError",
        "combineAll",
        "combineLatest",
        "concat",
        "concatAll",
        "concatMap",
        "concatMapTo",
        "count",
        "debounce",
        "debounceTime",
        "defaultIfEmpty",
        "delay",
        "delayWhen",
        "dematerialize",
        "distinct",
        "distinctUntilChanged",
        "distinctUntilKeyChanged",
        "elementAt",
        "every",
        "exhaust",
        "exhaustMap",
        "expand",
        "filter",
        "finalize",
        "find",
        "findIndex",
        "first",
        "groupBy",
        "ignoreElements",
        "isEmpty",
        "last",
        "map",
        "mapTo",
        "materialize",
        "max",
        "merge",
        "mergeAll",
        "mergeMap",
        "mergeMapTo",
        "mergeScan",
        "min",
        "multicast",
        "observeOn",
        "onErrorResumeNext",
        "pairwise",
        "partition",
        "pluck",
        "publish",
        "publishBehavior",
        "publishLast",
        "publishReplay",
        "race",
        "reduce",
        "refCount",
        "repeat",
        "repeatWhen",
        "retry",
        "retryWhen",
        "sample",
        "sampleTime",
        "scan",
        "sequenceEqual",
        "share",
        "shareReplay",
        "single",
        "skip",
        "skipLast",
        "skipUntil",
        "skipWhile",
        "startWith",
        "subscribeOn",
        "switchAll",
        "switchMap",
        "switchMapTo",
        "take",
        "takeLast",
        "takeUntil",
        "takeWhile",
        "tap",
        "throttle",
        "throttleTime",
        "timeInterval",
        "timeout",
        "timeoutWith",
        "timestamp",
        "toArray",
        "window",
        "windowCount",
        "windowTime",
        "windowToggle",
        "windowWhen",
        "withLatestFrom",
        "zip",
        "zipAll",
        # Renamed in the pipeable form
        "do",
        "catch",
        "flatMap",
        "flatMapTo",
        "finally",
        "switch",
    }
)

OPERATOR_RENAMES: dict[str, str] = {
    "do": "tap",
    "catch": "catchError",
    "flatMap": "mergeMap",
    "flatMapTo": "mergeMapTo",
    "finally": "finalize",
    "switch": "switchAll",
}
"""Patched operator names that collide with reserved words or were renamed."""

# =============================================================================
# Static factories (Observable.xxx)
# =============================================================================

STATIC_FACTORIES: frozenset[str] = frozenset(
    {
        "bindCallback",
        "bindNodeCallback",
        "combineLatest",
        "concat",
        "defer",
        "empty",
        "forkJoin",
        "from",
        "fromEvent",
        "fromEventPattern",
        "fromPromise",
        "generate",
        "if",
        "interval",
        "merge",
        "never",
        "of",
        "onErrorResumeNext",
        "pairs",
        "race",
        "range",
        "throw",
        "timer",
        "using",
        "zip",
    }
)

FACTORY_RENAMES: dict[str, str] = {
    "throw": "throwError",
    "if": "iif",
    "fromPromise": "from",
}

CREATION_FUNCTIONS: frozenset[str] = frozenset(
    {FACTORY_RENAMES.get(name, name) for name in STATIC_FACTORIES}
)
"""Standalone functions exported by ``rxjs`` that return an Observable."""

# =============================================================================
# Deprecated module paths
# =============================================================================

PATCHED_OPERATOR_PREFIXES: tuple[str, ...] = ("rxjs/add/operator/", "rxjs/operator/")
"""Imports that patch operators onto the prototype; removed by the chain rule."""

PATCHED_FACTORY_PREFIXES: tuple[str, ...] = ("rxjs/add/observable/",)
"""Imports that patch static factories onto Observable; removed by the factory rule."""

OPERATOR_PATH_PATTERN = re.compile(r"^rxjs/operators/.+$")
"""Per-operator deep import, e.g. ``rxjs/operators/map``."""

DEPRECATED_PATHS: dict[str, str] = {
    # Prefix entries (trailing slash): the remainder of the path is kept.
    "rxjs/util/": "rxjs/internal/util/",
    "rxjs/testing/": "rxjs/internal/testing/",
    "rxjs/scheduler/": "rxjs/internal/scheduler/",
    # Exact entries
    "rxjs/interfaces": "rxjs",
    "rxjs/AsyncSubject": "rxjs",
    "rxjs/BehaviorSubject": "rxjs",
    "rxjs/Notification": "rxjs",
    "rxjs/Observable": "rxjs",
    "rxjs/Observer": "rxjs",
    "rxjs/Operator": "rxjs",
    "rxjs/ReplaySubject": "rxjs",
    "rxjs/Subject": "rxjs",
    "rxjs/Subscriber": "rxjs",
    "rxjs/Scheduler": "rxjs",
    "rxjs/Subscription": "rxjs",
    "rxjs/observable/bindCallback": "rxjs",
    "rxjs/observable/combineLatest": "rxjs",
    "rxjs/observable/concat": "rxjs",
    "rxjs/observable/ConnectableObservable": "rxjs",
    "rxjs/observable/defer": "rxjs",
    "rxjs/observable/forkJoin": "rxjs",
    "rxjs/observable/from": "rxjs",
    "rxjs/observable/fromEvent": "rxjs",
    "rxjs/observable/fromEventPattern": "rxjs",
    "rxjs/observable/interval": "rxjs",
    "rxjs/observable/merge": "rxjs",
    "rxjs/observable/of": "rxjs",
    "rxjs/observable/race": "rxjs",
    "rxjs/observable/range": "rxjs",
    "rxjs/observable/timer": "rxjs",
    "rxjs/observable/zip": "rxjs",
    "rxjs/observable/fromPromise": "rxjs",
    "rxjs/observable/if": "rxjs",
    "rxjs/observable/throw": "rxjs",
    "rxjs/observable/never": "rxjs",
    "rxjs/observable/empty": "rxjs",
    "rxjs/observable/FromEventObservable": "rxjs/internal/observable/fromEvent",
}

DEPRECATED_SYMBOLS: dict[tuple[str, str], tuple[str, str]] = {
    ("rxjs/observable/empty", "empty"): ("rxjs", "EMPTY"),
    ("rxjs/observable/never", "never"): ("rxjs", "NEVER"),
    ("rxjs/Subscription", "AnonymousSubscription"): ("rxjs", "Unsubscribable"),
    ("rxjs/Subscription", "ISubscription"): ("rxjs", "SubscriptionLike"),
}
"""(old path, old symbol) -> (new path, new symbol)."""


def canonical_operator(name: str) -> str:
    return OPERATOR_RENAMES.get(name, name)


def canonical_factory(name: str) -> str:
    return FACTORY_RENAMES.get(name, name)


def factory_alias(canonical: str) -> str:
    """Local name for an imported creation function, e.g. ``of`` -> ``observableOf``."""
    return "observable" + canonical[0].upper() + canonical[1:]


def migrate_path(path: str) -> str | None:
    """Canonical module path for a deprecated one, or None if it is current."""
    if path in DEPRECATED_PATHS and not path.endswith("/"):
        return DEPRECATED_PATHS[path]
    for old, new in DEPRECATED_PATHS.items():
        if old.endswith("/") and path.startswith(old) and len(path) > len(old):
            return new + path[len(old) :]
    if OPERATOR_PATH_PATTERN.match(path):
        return OPERATORS_MODULE
    return None
