"""Config module exports."""

from rxmigrate.config.loader import CONFIG_FILE_NAME, load_config
from rxmigrate.config.models import (
    ALL_RULES,
    LoggingConfig,
    MigrationConfig,
    RxMigrateConfig,
)

__all__ = [
    "ALL_RULES",
    "CONFIG_FILE_NAME",
    "load_config",
    "LoggingConfig",
    "MigrationConfig",
    "RxMigrateConfig",
]
