"""rxmigrate CLI - rxmigrate command."""

import click

from rxmigrate import __version__
from rxmigrate.cli.check import check_command
from rxmigrate.cli.migrate import migrate_command
from rxmigrate.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="rxmigrate")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """rxmigrate - Migrate TypeScript sources from RxJS 5 to RxJS 6."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(migrate_command, name="migrate")
cli.add_command(check_command, name="check")


if __name__ == "__main__":
    cli()
