"""CLI package for keypurge.

This package contains the Typer application and all subcommands.
"""

from keypurge.cli.main import app

__all__ = ["app"]
