"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from keypurge import __version__
from keypurge.cli.commands import config, list_keys, purge
from keypurge.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="keypurge",
    help="Find and delete key-value store entries by value.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"keypurge version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route keypurge log records to stderr through Rich when verbose."""
    if not verbose:
        return

    package_logger = logging.getLogger("keypurge")
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging (scan cursors, batch sizes, store calls).",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress progress and headers.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            envvar="KEYPURGE_CONFIG",
            help="Config file to use instead of ~/.config/keypurge/config.toml.",
        ),
    ] = None,
) -> None:
    """keypurge - find and delete key-value store entries by value.

    Walks the whole keyspace, reads every value, and lists or deletes the
    keys whose value matches a pattern.
    """
    configure_logging(verbose)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = config_path


# Register commands
app.command(name="list")(list_keys.list_keys)
app.command(name="purge")(purge.purge_keys)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
