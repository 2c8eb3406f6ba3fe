"""rxmigrate check command - report what migrate would change."""

import json
from pathlib import Path

import click

from rxmigrate.cli.utils import load_project
from rxmigrate.core.errors import RxMigrateError
from rxmigrate.core.progress import pluralize, status
from rxmigrate.migrate.ops import MigrationOps


@click.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option(
    "-p",
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Project root (default: current directory)",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use instead of <project>/.rxmigrate.yaml",
)
@click.option("--json", "as_json", is_flag=True, help="Output findings as JSON")
@click.pass_context
def check_command(
    ctx: click.Context,
    paths: tuple[Path, ...],
    project: Path,
    config_file: Path | None,
    as_json: bool,
) -> None:
    """List RxJS 5 usages without changing any file.

    Exits with status 1 when anything would be migrated.
    """
    project_root, config = load_project(ctx, project, config_file)
    ops = MigrationOps(project_root, config=config.migration)
    try:
        diagnostics = ops.check_paths([p.resolve() for p in paths] or None)
    except RxMigrateError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "path": d.path,
                        "line": d.line,
                        "column": d.column,
                        "rule": d.rule,
                        "message": d.message,
                    }
                    for d in diagnostics
                ],
                indent=2,
            )
        )
    else:
        for diagnostic in diagnostics:
            click.echo(str(diagnostic))
        if diagnostics:
            status(f"{pluralize(len(diagnostics), 'finding')}", style="warning")
        else:
            status("Cannot find any possible migrations", style="success")

    if diagnostics:
        ctx.exit(1)
