"""CLI commands for keypurge.

This package contains all subcommand implementations.
"""

from keypurge.cli.commands import config, list_keys, purge

__all__ = ["config", "list_keys", "purge"]
