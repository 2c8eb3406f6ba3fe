"""Core module exports."""

from rxmigrate.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    MigrationError,
    ParseError,
    RxMigrateError,
)
from rxmigrate.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)
from rxmigrate.core.progress import pluralize, progress, status

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "MigrationError",
    "ParseError",
    "RxMigrateError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
    # Progress
    "pluralize",
    "progress",
    "status",
]
