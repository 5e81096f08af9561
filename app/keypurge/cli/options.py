"""Shared options and helpers for CLI commands.

Both ``list`` and ``purge`` accept the same store and matching options.
Each option can also be set through an environment variable; anything
left unset falls back to the config file, then to the defaults.
"""

from pathlib import Path
from typing import Annotated, Any

import typer

from keypurge.core.config import KeypurgeConfig, load_config
from keypurge.store.base import KeyValueStore
from keypurge.store.redis_store import RedisStore

_STORE = "Store connection"
_MATCH = "Matching"

AddrOption = Annotated[
    str | None,
    typer.Option(
        "--addr",
        envvar="REDIS_ADDR",
        help="Store address as host:port.",
        rich_help_panel=_STORE,
        show_default=False,
    ),
]
TlsOption = Annotated[
    bool | None,
    typer.Option(
        "--tls/--no-tls",
        envvar="TLS",
        help="Connect over TLS (default: on).",
        rich_help_panel=_STORE,
        show_default=False,
    ),
]
PasswordOption = Annotated[
    str | None,
    typer.Option(
        "--password",
        envvar="REDIS_PASSWORD",
        help="Store password.",
        rich_help_panel=_STORE,
        show_default=False,
    ),
]
DbOption = Annotated[
    int | None,
    typer.Option(
        "--db",
        envvar="REDIS_DB",
        help="Database number.",
        rich_help_panel=_STORE,
        show_default=False,
    ),
]
ReadTimeoutOption = Annotated[
    float | None,
    typer.Option(
        "--read-timeout",
        envvar="READ_TIMEOUT",
        help="Per-call timeout in seconds (default: 180).",
        rich_help_panel=_STORE,
        show_default=False,
    ),
]
AccessModeOption = Annotated[
    str | None,
    typer.Option(
        "--access-mode",
        "-a",
        envvar="ACCESS_MODE",
        help="Read values as 'flat' strings or 'fieldmap' hashes (default: fieldmap).",
        rich_help_panel=_MATCH,
        show_default=False,
    ),
]
SizeThresholdOption = Annotated[
    int | None,
    typer.Option(
        "--size-threshold",
        "-s",
        envvar="SIZE_THRESHOLD",
        help="Only consider values of at least this many bytes.",
        rich_help_panel=_MATCH,
        show_default=False,
    ),
]
MinOccurrencesOption = Annotated[
    int | None,
    typer.Option(
        "--min-occurrences",
        "-m",
        envvar="REQUIRED_MATCH_COUNT",
        help="Match values containing the pattern at least N times (0 = exact match).",
        rich_help_panel=_MATCH,
        show_default=False,
    ),
]
BatchSizeOption = Annotated[
    int | None,
    typer.Option(
        "--batch-size",
        envvar="SCAN_BATCH_SIZE",
        help="Keys requested per scan call (default: 50).",
        rich_help_panel=_MATCH,
        show_default=False,
    ),
]
ProgressOption = Annotated[
    bool | None,
    typer.Option(
        "--progress/--no-progress",
        envvar="PROGRESS",
        help="Show progress on interactive terminals (default: on).",
        show_default=False,
    ),
]
PatternArgument = Annotated[
    str,
    typer.Argument(
        help="Value to match exactly, or substring with --min-occurrences. "
        "An empty string matches any value.",
        show_default=False,
    ),
]


def resolve_config(
    ctx: typer.Context,
    store: dict[str, Any],
    purge: dict[str, Any],
) -> KeypurgeConfig:
    """Merge command-line values over the config file.

    Args:
        ctx: Typer context holding the ``config_path`` chosen at the top level.
        store: Store options given on the command line (None = not given).
        purge: Purge options given on the command line (None = not given).

    Returns:
        Effective configuration.

    Raises:
        ConfigError: If the file or an override is invalid.
    """
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    config_path: Path | None = obj.get("config_path")
    return load_config(config_path).with_overrides(store=store, purge=purge)


def open_store(config: KeypurgeConfig) -> KeyValueStore:
    """Create the store described by the configuration."""
    return RedisStore.from_config(config.store)


def is_quiet(ctx: typer.Context) -> bool:
    """Check whether --quiet was given at the top level."""
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    return bool(obj.get("quiet", False))
