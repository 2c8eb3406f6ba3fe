"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (RXMIGRATE__SECTION__KEY)
3. Project YAML (.rxmigrate.yaml in the project root)
4. Built-in defaults (this file)

Environment Variable Format:
    RXMIGRATE__<SECTION>__<KEY>=<VALUE>

Examples:
    RXMIGRATE__LOGGING__LEVEL=DEBUG
    RXMIGRATE__MIGRATION__MAX_ROUNDS=20
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

RuleName = Literal[
    "pipeable-operators",
    "static-factories",
    "import-paths",
    "collapse-imports",
]

ALL_RULES: tuple[RuleName, ...] = (
    "pipeable-operators",
    "static-factories",
    "import-paths",
    "collapse-imports",
)


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        RXMIGRATE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. DEBUG logs every chain and import rewrite.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class MigrationConfig(BaseModel):
    """Migration driver configuration.

    Env vars:
        RXMIGRATE__MIGRATION__MAX_ROUNDS: Fix rounds per file before giving up
        RXMIGRATE__MIGRATION__STREAM_TYPES: JSON list of stream root type names
    """

    max_rounds: int = Field(
        default=10,
        description="Maximum pass/apply rounds per file. Overlapping fixes are "
        "deferred to the next round, so a file usually converges in 2-3 rounds.",
    )
    rules: list[RuleName] = Field(
        default_factory=lambda: list(ALL_RULES),
        description="Enabled rewrite rules.",
    )
    stream_types: list[str] = Field(
        default_factory=lambda: ["Observable"],
        description="Type names treated as the reactive-stream root type. "
        "Subclasses are detected through their declared supertypes.",
    )
    excluded_dirs: list[str] = Field(
        default_factory=lambda: ["node_modules", "dist", "build", "coverage", ".git"],
        description="Directory names skipped during file discovery.",
    )
    include_declaration_files: bool = Field(
        default=False,
        description="Also rewrite .d.ts files. They are always indexed for types.",
    )

    @field_validator("max_rounds")
    @classmethod
    def validate_max_rounds(cls, v: int) -> int:
        if not (1 <= v <= 100):
            raise ValueError(f"max_rounds must be 1-100, got {v}")
        return v

    @field_validator("stream_types")
    @classmethod
    def validate_stream_types(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("stream_types must name at least one type")
        return v


class RxMigrateConfig(BaseModel):
    """Root configuration for rxmigrate."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    migration: MigrationConfig = Field(default_factory=MigrationConfig)
