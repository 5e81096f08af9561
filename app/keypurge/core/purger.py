"""Listing and purging keys by value.

Provides the KeyPurger, which walks the keyspace, reads and matches
each value, and either reports or deletes matching keys. Everything
runs sequentially in enumeration order so totals and output are
deterministic for a given store state.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

from keypurge.accessors import get_accessor
from keypurge.core.enumerator import DEFAULT_BATCH_SIZE, KeyspaceEnumerator
from keypurge.core.errors import FetchError
from keypurge.core.reconcile import (
    DEFAULT_MIN_CLEAN_PASSES,
    DEFAULT_PASS_INTERVAL_MS,
    ReconciliationLoop,
)
from keypurge.models.results import MatchedKey, RunSummary
from keypurge.operators.delete import KeyDeleter

if TYPE_CHECKING:
    from keypurge.core.config import PurgeConfig
    from keypurge.models.condition import MatchCondition
    from keypurge.models.results import DeleteResult, ReconciliationState
    from keypurge.store.base import KeyValueStore

logger = logging.getLogger(__name__)


class PurgeReporter:
    """Receives progress events from a KeyPurger.

    All methods do nothing by default; subclasses override what they
    want to display.
    """

    def scan_started(self, total_estimate: int) -> None:
        """Called once before enumeration with the store's key count."""

    def batch_visited(self, start: int, end: int, total_estimate: int) -> None:
        """Called after each batch with the range of keys visited so far."""

    def key_matched(self, matched: MatchedKey, deleted: DeleteResult | None) -> None:
        """Called for each matching key; ``deleted`` is None in list mode."""

    def fetch_failed(self, error: FetchError) -> None:
        """Called when a key's value could not be read and the key is skipped."""

    def delete_failed(self, result: DeleteResult) -> None:
        """Called when deleting a matched key failed and the purge continues."""

    def reconcile_pass(self, state: ReconciliationState, key_count: int) -> None:
        """Called before each reconciliation pass."""

    def key_resurrected(self, key: str) -> None:
        """Called when a deleted key is found again and re-deleted."""

    def summary(self, summary: RunSummary, condition: MatchCondition, deleting: bool) -> None:
        """Called exactly once at the end of a run, even after a fatal error."""


class KeyPurger:
    """Lists or deletes keys whose values match a condition.

    Attributes:
        store: Store being operated on.
        batch_size: Keys requested per enumeration call.

    Example:
        >>> purger = KeyPurger(store)
        >>> condition = MatchCondition(pattern=b"null")
        >>> summary = purger.list_matching(condition)
        >>> summary.matched_count
        2
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        min_clean_passes: int = DEFAULT_MIN_CLEAN_PASSES,
        pass_interval_ms: int = DEFAULT_PASS_INTERVAL_MS,
        max_passes: int | None = None,
        reporter: PurgeReporter | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the purger.

        Args:
            store: Store to operate on.
            batch_size: Keys requested per enumeration call.
            min_clean_passes: Clean passes required by reconciliation.
            pass_interval_ms: Wait before each reconciliation pass.
            max_passes: Optional reconciliation pass ceiling.
            reporter: Receiver for progress events.
            sleep: Wait function used by reconciliation.
        """
        self.store = store
        self.batch_size = batch_size
        self._min_clean_passes = min_clean_passes
        self._pass_interval_ms = pass_interval_ms
        self._max_passes = max_passes
        self._reporter = reporter or PurgeReporter()
        self._sleep = sleep
        self._deleter = KeyDeleter(store)

    @classmethod
    def from_config(
        cls,
        store: KeyValueStore,
        config: PurgeConfig,
        reporter: PurgeReporter | None = None,
    ) -> KeyPurger:
        """Create a purger from purge settings.

        Args:
            store: Store to operate on.
            config: Purge settings.
            reporter: Receiver for progress events.

        Returns:
            Configured KeyPurger.
        """
        return cls(
            store,
            batch_size=config.scan_batch_size,
            min_clean_passes=config.min_clean_passes,
            pass_interval_ms=config.pass_interval_ms,
            max_passes=config.max_passes,
            reporter=reporter,
        )

    def list_matching(self, condition: MatchCondition) -> RunSummary:
        """Report every key whose value matches, without modifying the store.

        Args:
            condition: Match condition.

        Returns:
            RunSummary with matched counts and sizes.

        Raises:
            StoreUnavailableError: If enumeration fails.
        """
        summary = RunSummary()
        logger.info("Listing keys on %s matching %s", self.store.describe(), condition)

        try:
            for matched in self._matching_keys(condition):
                summary.record_match(matched)
                self._reporter.key_matched(matched, None)
        finally:
            self._reporter.summary(summary, condition, False)

        return summary

    def purge_matching(self, condition: MatchCondition, reconcile: bool = False) -> RunSummary:
        """Delete every key whose value matches.

        Delete failures are counted and the purge continues. If
        ``reconcile`` is set and enumeration completed, the deleted keys
        are then re-checked until they stay deleted.

        Args:
            condition: Match condition.
            reconcile: Re-check deleted keys after the initial pass.

        Returns:
            RunSummary with match, delete and failure counts. When
            reconciliation ran, ``summary.reconciliation`` holds its state.

        Raises:
            StoreUnavailableError: If enumeration fails.
            ExistsError: If an existence check fails during reconciliation.
            DeleteError: If a re-delete fails during reconciliation.
        """
        summary = RunSummary()
        deleted_keys: list[str] = []
        logger.info("Deleting keys from %s matching %s", self.store.describe(), condition)

        try:
            for matched in self._matching_keys(condition):
                summary.record_match(matched)
                result = self._deleter.delete(matched.key)
                summary.record_delete(matched, result)
                self._reporter.key_matched(matched, result)
                if result.success:
                    deleted_keys.append(matched.key)
                else:
                    self._reporter.delete_failed(result)

            if reconcile and deleted_keys:
                loop = ReconciliationLoop(
                    self._deleter,
                    min_clean_passes=self._min_clean_passes,
                    pass_interval_ms=self._pass_interval_ms,
                    max_passes=self._max_passes,
                    sleep=self._sleep,
                    on_pass=self._reporter.reconcile_pass,
                    on_resurrected=self._reporter.key_resurrected,
                )
                summary.reconciliation = loop.run(deleted_keys)
            elif reconcile:
                logger.info("No keys deleted, skipping reconciliation")
        finally:
            self._reporter.summary(summary, condition, True)

        return summary

    def _matching_keys(self, condition: MatchCondition) -> Iterator[MatchedKey]:
        """Yield matching keys in enumeration order.

        Keys whose value cannot be read are reported and skipped.
        """
        accessor = get_accessor(condition.access_mode)
        enumerator = KeyspaceEnumerator(self.store)

        total = enumerator.estimate_total()
        self._reporter.scan_started(total)

        visited = 0
        for batch in enumerator.batches(self.batch_size):
            self._reporter.batch_visited(visited, visited + len(batch), total)
            visited += len(batch)

            for key in batch:
                try:
                    value = accessor.fetch(self.store, key)
                except FetchError as e:
                    logger.warning("Error reading %r (%s), skipping", key, e.cause)
                    self._reporter.fetch_failed(e)
                    continue

                if condition.matches(value):
                    yield MatchedKey(key=key, value=value)
