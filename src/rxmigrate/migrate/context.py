"""Per-pass state shared by the rewrite rules."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from rxmigrate.migrate.imports import ImportRegistry
from rxmigrate.migrate.streams import DEFAULT_STREAM_TYPES
from rxmigrate.oracle.models import TypeOracle


@dataclass
class PassContext:
    """Everything one pass over one file needs.

    Created fresh for every pass; the registry must never outlive it.
    """

    root: Any
    source: bytes
    oracle: TypeOracle
    stream_types: Sequence[str] = DEFAULT_STREAM_TYPES
    registry: ImportRegistry = field(init=False)

    def __post_init__(self) -> None:
        self.registry = ImportRegistry(self.root, self.source)
