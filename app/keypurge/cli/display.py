"""Console reporting for list and purge runs.

Renders KeyPurger events with Rich: one stdout line per matching key,
``>``-prefixed diagnostics and the final summary on stderr, and an
optional transient progress bar on interactive terminals.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskID,
    TaskProgressColumn,
    TextColumn,
)

from keypurge.core.purger import PurgeReporter
from keypurge.utils.formatting import (
    console,
    err_console,
    format_key,
    format_size,
    print_diagnostic,
    print_key_line,
    print_success,
    print_warning,
)

if TYPE_CHECKING:
    from keypurge.core.errors import FetchError
    from keypurge.models.condition import MatchCondition
    from keypurge.models.results import (
        DeleteResult,
        MatchedKey,
        ReconciliationState,
        RunSummary,
    )

logger = logging.getLogger(__name__)


def format_list_summary(summary: RunSummary, condition: MatchCondition) -> str:
    """Format the list-mode summary line."""
    return (
        f"found {summary.matched_count} keys (total size: {summary.total_bytes}, "
        f"average size: {summary.average_size:.1f}) matching {condition.describe()}"
    )


def format_purge_summary(summary: RunSummary, condition: MatchCondition) -> str:
    """Format the purge-mode summary line."""
    return (
        f"deleted {summary.deleted_count} keys ({summary.deleted_bytes} total size, "
        f"average size: {summary.average_deleted_size:.1f}) matching {condition.describe()}, "
        f"{summary.failed_delete_count} keys failed delete"
    )


class ConsoleReporter(PurgeReporter):
    """PurgeReporter that writes to the shared Rich consoles.

    Use as a context manager so the progress display is always stopped.

    Attributes:
        min_clean_passes: Clean passes required, shown in reconciliation progress.
    """

    def __init__(
        self,
        *,
        progress: bool = True,
        quiet: bool = False,
        min_clean_passes: int = 0,
    ) -> None:
        """Initialize the reporter.

        Args:
            progress: Show a progress bar if stderr is a terminal.
            quiet: Suppress progress and headers; results and summary still print.
            min_clean_passes: Clean passes required by reconciliation.
        """
        self.quiet = quiet
        self.min_clean_passes = min_clean_passes
        self._progress: Progress | None = None
        self._scan_task: TaskID | None = None
        self._reconcile_task: TaskID | None = None

        if progress and not quiet and err_console.is_terminal:
            self._progress = Progress(
                TextColumn("[info]{task.description}[/]"),
                BarColumn(),
                MofNCompleteColumn(),
                TaskProgressColumn(),
                console=err_console,
                transient=True,
                redirect_stdout=False,
                redirect_stderr=False,
            )

    def __enter__(self) -> ConsoleReporter:
        if self._progress is not None:
            self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()

    def stop(self) -> None:
        """Stop the progress display, if any."""
        if self._progress is not None:
            self._progress.stop()
            self._progress = None

    def header(self, message: str) -> None:
        """Print a run header unless quiet."""
        if not self.quiet:
            self._diagnostic(message)

    def _emit(self, line: str) -> None:
        # Keep result lines above the live bar when both share a terminal
        if self._progress is not None and console.is_terminal:
            self._progress.console.print(line, soft_wrap=True)
        else:
            print_key_line(line)

    def _diagnostic(self, message: str) -> None:
        if self._progress is not None:
            self._progress.console.print(f"[muted]>[/] {message}", soft_wrap=True)
        else:
            print_diagnostic(message)

    def scan_started(self, total_estimate: int) -> None:
        logger.debug("Store reports %d keys", total_estimate)
        if self._progress is not None:
            self._scan_task = self._progress.add_task("Visiting keys", total=total_estimate)

    def batch_visited(self, start: int, end: int, total_estimate: int) -> None:
        if self._progress is not None and self._scan_task is not None:
            # The estimate can be stale; let the total grow with what we see
            self._progress.update(
                self._scan_task,
                completed=end,
                total=max(end, total_estimate),
            )

    def key_matched(self, matched: MatchedKey, deleted: DeleteResult | None) -> None:
        line = f"{format_key(matched.key)} {format_size(matched.size)}"
        if deleted is None:
            self._emit(line)
            return

        self._emit(f"[deleted]DELETE[/] {line}")

    def delete_failed(self, result: DeleteResult) -> None:
        self._diagnostic(
            f"[warning]failed to delete key {format_key(repr(result.key), 'text')}: "
            f"{escape(result.error or 'unknown error')}, continuing[/]"
        )

    def fetch_failed(self, error: FetchError) -> None:
        key = format_key(repr(error.key), "text")
        self._diagnostic(f"fetch error reading {key} ({escape(error.cause)}), skipping")

    def reconcile_pass(self, state: ReconciliationState, key_count: int) -> None:
        if self._progress is None:
            return
        description = (
            f"Reconciling {key_count} keys, pass {state.pass_number + 1}, "
            f"clean {state.consecutive_clean_passes}/{self.min_clean_passes}"
        )
        if self._reconcile_task is None:
            self._reconcile_task = self._progress.add_task(
                description, total=self.min_clean_passes or None
            )
        self._progress.update(
            self._reconcile_task,
            description=description,
            completed=state.consecutive_clean_passes,
        )

    def key_resurrected(self, key: str) -> None:
        self._emit(f"[resurrected]DELETE[/] {format_key(key)}")

    def summary(self, summary: RunSummary, condition: MatchCondition, deleting: bool) -> None:
        self.stop()
        if not deleting:
            print_diagnostic(escape(format_list_summary(summary, condition)))
            return

        print_diagnostic(escape(format_purge_summary(summary, condition)))
        state = summary.reconciliation
        if state is None:
            return
        if state.converged:
            print_success(
                f"Deleted keys stayed deleted for {state.consecutive_clean_passes} "
                f"consecutive passes ({state.pass_number} passes, "
                f"{state.resurrected_count} resurrected keys deleted again)"
            )
        else:
            print_warning(
                f"Deleted keys did not converge after {state.pass_number} passes "
                f"({state.consecutive_clean_passes}/{self.min_clean_passes} clean)"
            )
