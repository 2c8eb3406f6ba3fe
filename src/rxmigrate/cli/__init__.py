"""Command line interface - rxmigrate command."""
