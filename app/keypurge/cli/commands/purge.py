"""Purge command implementation.

Deletes keys whose values match a pattern, optionally re-checking the
deleted keys until other clients stop writing them back.
"""

from typing import Annotated

import typer
from rich.markup import escape

from keypurge.cli.display import ConsoleReporter
from keypurge.cli.options import (
    AccessModeOption,
    AddrOption,
    BatchSizeOption,
    DbOption,
    MinOccurrencesOption,
    PasswordOption,
    PatternArgument,
    ProgressOption,
    ReadTimeoutOption,
    SizeThresholdOption,
    TlsOption,
    is_quiet,
    open_store,
    resolve_config,
)
from keypurge.core.errors import KeypurgeError
from keypurge.core.purger import KeyPurger
from keypurge.utils.formatting import print_error

_RECONCILE = "Reconciliation"


def purge_keys(
    ctx: typer.Context,
    pattern: PatternArgument,
    reconcile: Annotated[
        bool | None,
        typer.Option(
            "--reconcile/--no-reconcile",
            "-r",
            envvar="WAIT_AND_REDELETE",
            help="After deleting, re-check the deleted keys and delete them again "
            "until they stay deleted.",
            rich_help_panel=_RECONCILE,
            show_default=False,
        ),
    ] = None,
    min_clean_passes: Annotated[
        int | None,
        typer.Option(
            "--min-clean-passes",
            envvar="CLEAN_DELETE_MIN",
            help="Consecutive passes without resurrected keys required (default: 500).",
            rich_help_panel=_RECONCILE,
            show_default=False,
        ),
    ] = None,
    pass_interval_ms: Annotated[
        int | None,
        typer.Option(
            "--pass-interval-ms",
            envvar="CLEAN_DELETE_WAIT_MS",
            help="Milliseconds to wait before each pass (default: 150).",
            rich_help_panel=_RECONCILE,
            show_default=False,
        ),
    ] = None,
    max_passes: Annotated[
        int | None,
        typer.Option(
            "--max-passes",
            envvar="CLEAN_DELETE_MAX_PASSES",
            help="Give up after this many passes (default: no limit).",
            rich_help_panel=_RECONCILE,
            show_default=False,
        ),
    ] = None,
    access_mode: AccessModeOption = None,
    size_threshold: SizeThresholdOption = None,
    min_occurrences: MinOccurrencesOption = None,
    batch_size: BatchSizeOption = None,
    addr: AddrOption = None,
    tls: TlsOption = None,
    password: PasswordOption = None,
    db: DbOption = None,
    read_timeout: ReadTimeoutOption = None,
    progress: ProgressOption = None,
) -> None:
    """Delete keys whose value matches PATTERN.

    Matching works as for 'keypurge list'. Keys that fail to delete are
    reported and counted; the purge carries on.

    With --reconcile, deleted keys are checked again every
    --pass-interval-ms and deleted again if they reappear, until
    --min-clean-passes consecutive checks find none of them. Without
    --max-passes this runs for as long as something keeps re-creating them.

    Examples:
        keypurge purge null                       # Delete values exactly "null"
        keypurge purge null -m 3                  # Values with 3+ "null"s
        keypurge purge null --reconcile           # Wait until they stay deleted
        keypurge purge null -r --max-passes 2000  # ...but not forever
    """
    try:
        config = resolve_config(
            ctx,
            store={
                "addr": addr,
                "tls": tls,
                "password": password,
                "db": db,
                "read_timeout": read_timeout,
            },
            purge={
                "access_mode": access_mode,
                "size_threshold": size_threshold,
                "min_occurrences": min_occurrences,
                "scan_batch_size": batch_size,
                "progress": progress,
                "reconcile": reconcile,
                "min_clean_passes": min_clean_passes,
                "pass_interval_ms": pass_interval_ms,
                "max_passes": max_passes,
            },
        )
        condition = config.purge.condition(pattern)
        store = open_store(config)
    except (KeypurgeError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    reporter = ConsoleReporter(
        progress=config.purge.progress,
        quiet=is_quiet(ctx),
        min_clean_passes=config.purge.min_clean_passes,
    )
    with reporter:
        reporter.header(
            f"deleting keys from {escape(store.describe())} "
            f"with value matching {escape(condition.describe())}"
        )
        purger = KeyPurger.from_config(store, config.purge, reporter=reporter)
        try:
            summary = purger.purge_matching(condition, reconcile=config.purge.reconcile)
        except KeypurgeError as e:
            print_error(escape(f"error deleting keys matching {condition.describe()}: {e}"))
            raise typer.Exit(code=1) from e

    if summary.reconciliation is not None and not summary.reconciliation.converged:
        raise typer.Exit(code=1)
