"""CLI utilities."""

from pathlib import Path

import click

from rxmigrate.config.loader import load_config
from rxmigrate.config.models import RxMigrateConfig
from rxmigrate.core.errors import ConfigError
from rxmigrate.core.logging import configure_logging, set_run_id


def load_project(
    ctx: click.Context, project: Path, config_file: Path | None = None
) -> tuple[Path, RxMigrateConfig]:
    """Resolve the project root, load its config and set up logging.

    Raises:
        click.ClickException: If the project configuration is invalid
    """
    project_root = project.resolve()
    try:
        config = load_config(project_root, config_file=config_file)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if ctx.obj and ctx.obj.get("verbose"):
        config.logging.level = "DEBUG"
    configure_logging(config=config.logging)
    set_run_id()
    return project_root, config
