"""Allow ``python -m rxmigrate``."""

from rxmigrate.cli.main import cli

if __name__ == "__main__":
    cli()
