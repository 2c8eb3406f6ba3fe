"""rxmigrate migrate command - rewrite RxJS 5 code in place."""

import json
from pathlib import Path

import click

from rxmigrate.cli.utils import load_project
from rxmigrate.core.errors import RxMigrateError
from rxmigrate.core.progress import get_console, pluralize, status
from rxmigrate.migrate.models import MigrationReport
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
@click.option("--dry-run", is_flag=True, help="Print diffs instead of writing files")
@click.option("--json", "as_json", is_flag=True, help="Output the report as JSON")
@click.pass_context
def migrate_command(
    ctx: click.Context,
    paths: tuple[Path, ...],
    project: Path,
    config_file: Path | None,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Migrate patched operators, static factories and imports to RxJS 6.

    PATHS are files or directories to migrate (default: the project root).
    Every TypeScript file under the project is read for type information.
    """
    project_root, config = load_project(ctx, project, config_file)
    ops = MigrationOps(project_root, config=config.migration)

    try:
        report = ops.migrate_paths([p.resolve() for p in paths] or None, dry_run=dry_run)
    except RxMigrateError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return
    _print_report(report)


def _print_report(report: MigrationReport) -> None:
    console = get_console()

    if report.dry_run:
        for migration in report.files:
            if migration.diff:
                click.echo(migration.diff, nl=False)

    diagnostics = [d for f in report.files for d in f.diagnostics]
    if not diagnostics:
        status("Cannot find any possible migrations", style="info")
        return

    console.print("[blue]Found and fixed the following deprecations:[/blue]")
    for diagnostic in diagnostics:
        console.print(f"  [yellow]{diagnostic}[/yellow]", highlight=False)
    console.print()

    verb = "Would change" if report.dry_run else "Changed"
    status(
        f"{verb} {pluralize(report.files_changed, 'file')} "
        f"({pluralize(report.total_fixes, 'fix', 'fixes')})",
        style="success",
    )
    for migration in report.unconverged:
        status(
            f"{migration.path}: still changing after {migration.rounds} rounds",
            style="warning",
        )
