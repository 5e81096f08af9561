"""Config command implementation.

Shows the effective configuration and writes a default config file.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from keypurge.core.config import KeypurgeConfig, dump_config, load_config, save_config
from keypurge.core.errors import ConfigError
from keypurge.core.paths import get_config_path
from keypurge.utils.formatting import console, print_error, print_success, print_warning

app = typer.Typer(
    help="Show or initialise the configuration file.",
    no_args_is_help=True,
)


def _config_path(ctx: typer.Context) -> Path:
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    return obj.get("config_path") or get_config_path()


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the configuration file contents merged with defaults, as TOML.

    Environment variables and command-line flags are not included; they
    apply per run.
    """
    path = _config_path(ctx)
    try:
        config = load_config(path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    console.print(f"[muted]# {escape(str(path))}[/]", soft_wrap=True)
    console.print(escape(dump_config(config)), end="", soft_wrap=True)


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing config file.",
        ),
    ] = False,
) -> None:
    """Write a config file containing the default settings."""
    path = _config_path(ctx)

    if path.exists() and not force:
        print_warning(f"Config file already exists: {path} (use --force to overwrite)")
        raise typer.Exit(code=1)

    try:
        saved = save_config(KeypurgeConfig(), path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Wrote default configuration to {saved}")
