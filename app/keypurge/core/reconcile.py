"""Re-verification of deleted keys.

Other clients may write a key back right after it was deleted. After the
initial purge, the reconciliation loop keeps checking the deleted keys,
deleting any that reappear, until a run of consecutive passes finds none
of them.

There is no pass limit unless ``max_passes`` is given: a writer that keeps
resurrecting keys keeps the loop running.
"""

import logging
import time
from collections.abc import Callable, Sequence

from keypurge.models.results import ReconciliationState
from keypurge.operators.delete import KeyDeleter

logger = logging.getLogger(__name__)

DEFAULT_MIN_CLEAN_PASSES = 500
DEFAULT_PASS_INTERVAL_MS = 150

PassCallback = Callable[[ReconciliationState, int], None]
KeyCallback = Callable[[str], None]


class ReconciliationLoop:
    """Deletes resurrected keys until the deleted set stays deleted.

    Each pass waits ``pass_interval_ms``, then checks every key; keys that
    exist are deleted again and make the pass dirty. A dirty pass resets the
    clean-pass counter, a clean pass increments it. The loop ends once the
    counter reaches ``min_clean_passes``.

    Resurrection is detected by existence only; values are not re-matched.

    Attributes:
        min_clean_passes: Consecutive clean passes required to converge.
        pass_interval_ms: Wait before each pass, in milliseconds.
        max_passes: Optional ceiling on total passes.
    """

    def __init__(
        self,
        deleter: KeyDeleter,
        *,
        min_clean_passes: int = DEFAULT_MIN_CLEAN_PASSES,
        pass_interval_ms: int = DEFAULT_PASS_INTERVAL_MS,
        max_passes: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
        on_pass: PassCallback | None = None,
        on_resurrected: KeyCallback | None = None,
    ) -> None:
        """Initialize the loop.

        Args:
            deleter: Deleter used for existence checks and re-deletes.
            min_clean_passes: Consecutive clean passes required (>= 1).
            pass_interval_ms: Wait before each pass (>= 0).
            max_passes: Stop unconverged after this many passes. None
                means no limit.
            sleep: Function used to wait, taking seconds.
            on_pass: Called before each pass with the state and key count.
            on_resurrected: Called for each key found existing.

        Raises:
            ValueError: If a numeric setting is out of range.
        """
        if min_clean_passes < 1:
            msg = f"min_clean_passes must be at least 1, got {min_clean_passes}"
            raise ValueError(msg)
        if pass_interval_ms < 0:
            msg = f"pass_interval_ms must be non-negative, got {pass_interval_ms}"
            raise ValueError(msg)
        if max_passes is not None and max_passes < 1:
            msg = f"max_passes must be at least 1, got {max_passes}"
            raise ValueError(msg)

        self._deleter = deleter
        self.min_clean_passes = min_clean_passes
        self.pass_interval_ms = pass_interval_ms
        self.max_passes = max_passes
        self._sleep = sleep
        self._on_pass = on_pass
        self._on_resurrected = on_resurrected

    def run(self, keys: Sequence[str]) -> ReconciliationState:
        """Re-check and re-delete keys until they stay deleted.

        Args:
            keys: Keys deleted in the initial pass. Not modified.

        Returns:
            Final state. ``converged`` is False only if ``max_passes`` was
            reached first.

        Raises:
            ExistsError: If an existence check fails.
            DeleteError: If re-deleting a resurrected key fails.
        """
        state = ReconciliationState()
        logger.info(
            "Reconciling %d deleted key(s): %d clean pass(es) required, %dms interval",
            len(keys),
            self.min_clean_passes,
            self.pass_interval_ms,
        )

        while state.consecutive_clean_passes < self.min_clean_passes:
            if self.max_passes is not None and state.pass_number >= self.max_passes:
                logger.warning(
                    "Reconciliation stopped after %d passes without converging "
                    "(%d/%d clean)",
                    state.pass_number,
                    state.consecutive_clean_passes,
                    self.min_clean_passes,
                )
                return state

            self._sleep(self.pass_interval_ms / 1000)
            if self._on_pass is not None:
                self._on_pass(state, len(keys))

            resurrected = self.run_pass(keys)
            state.record_pass(len(resurrected))
            if resurrected:
                logger.info(
                    "Pass %d: deleted %d resurrected key(s)", state.pass_number, len(resurrected)
                )

        state.converged = True
        logger.info("Reconciliation converged after %d passes", state.pass_number)
        return state

    def run_pass(self, keys: Sequence[str]) -> list[str]:
        """Run a single pass over the keys.

        Args:
            keys: Keys to check.

        Returns:
            Keys that existed and were deleted again.

        Raises:
            ExistsError: If an existence check fails.
            DeleteError: If a re-delete fails.
        """
        resurrected: list[str] = []
        for key in keys:
            if not self._deleter.exists(key):
                continue

            resurrected.append(key)
            if self._on_resurrected is not None:
                self._on_resurrected(key)
            self._deleter.delete_or_raise(key)
        return resurrected
