"""List command implementation.

Lists keys whose values match a pattern without modifying the store.
"""

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


def list_keys(
    ctx: typer.Context,
    pattern: PatternArgument,
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
    """List keys whose value matches PATTERN.

    PATTERN must equal the whole value unless --min-occurrences is set, in
    which case values containing PATTERN at least that many times match.

    Examples:
        keypurge list null                        # Values exactly "null"
        keypurge list null -m 1                   # Values containing "null"
        keypurge list "" --size-threshold 100000  # Values of 100kB or more
        keypurge list null --access-mode flat     # Read values as strings
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
            },
        )
        condition = config.purge.condition(pattern)
        store = open_store(config)
    except (KeypurgeError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    with ConsoleReporter(progress=config.purge.progress, quiet=is_quiet(ctx)) as reporter:
        reporter.header(
            f"listing keys on {escape(store.describe())} "
            f"with value matching {escape(condition.describe())}"
        )
        purger = KeyPurger.from_config(store, config.purge, reporter=reporter)
        try:
            purger.list_matching(condition)
        except KeypurgeError as e:
            print_error(escape(f"error listing keys matching {condition.describe()}: {e}"))
            raise typer.Exit(code=1) from e
