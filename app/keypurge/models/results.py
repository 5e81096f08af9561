"""Result models for list and purge runs.

This module defines the transient per-key records produced while walking
the keyspace and the totals accumulated over a whole run.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class MatchedKey:
    """A key whose value satisfied the match condition.

    Attributes:
        key: The matching key.
        value: Byte content that was matched.
    """

    key: str
    value: bytes

    @property
    def size(self) -> int:
        """Size of the matched value in bytes."""
        return len(self.value)


@dataclass(frozen=True, slots=True)
class DeleteResult:
    """Result of deleting a single key.

    Attributes:
        key: Key that was deleted.
        success: Whether the delete call completed.
        existed: Whether the store actually removed something. Deleting an
            absent key succeeds with ``existed=False``.
        error: Error message if the delete failed.
    """

    key: str
    success: bool
    existed: bool = False
    error: str | None = None

    @property
    def failed(self) -> bool:
        """Check if the delete failed."""
        return not self.success


@dataclass(slots=True)
class ReconciliationState:
    """Progress of the re-verification loop over deleted keys.

    Attributes:
        consecutive_clean_passes: Passes in a row that found no resurrected key.
        pass_number: Total passes run so far.
        resurrected_count: Total resurrected keys deleted again.
        converged: Whether the clean-pass threshold was reached.
    """

    consecutive_clean_passes: int = 0
    pass_number: int = 0
    resurrected_count: int = 0
    converged: bool = False

    def record_pass(self, resurrected: int) -> None:
        """Account for one completed pass.

        Args:
            resurrected: Number of keys found existing during the pass.
        """
        self.pass_number += 1
        if resurrected:
            self.consecutive_clean_passes = 0
            self.resurrected_count += resurrected
        else:
            self.consecutive_clean_passes += 1


@dataclass(slots=True)
class RunSummary:
    """Totals accumulated over a list or purge run.

    Attributes:
        matched_count: Keys whose value matched.
        total_bytes: Sum of matched value sizes.
        deleted_count: Matched keys deleted successfully.
        deleted_bytes: Sum of deleted value sizes.
        failed_delete_count: Matched keys whose delete failed.
        reconciliation: Final reconciliation state, if reconciliation ran.
    """

    matched_count: int = 0
    total_bytes: int = 0
    deleted_count: int = 0
    deleted_bytes: int = 0
    failed_delete_count: int = 0
    reconciliation: ReconciliationState | None = field(default=None)

    @property
    def average_size(self) -> float:
        """Average matched value size in bytes."""
        return _average(self.total_bytes, self.matched_count)

    @property
    def average_deleted_size(self) -> float:
        """Average deleted value size in bytes."""
        return _average(self.deleted_bytes, self.deleted_count)

    def record_match(self, matched: MatchedKey) -> None:
        """Count a matching key."""
        self.matched_count += 1
        self.total_bytes += matched.size

    def record_delete(self, matched: MatchedKey, result: DeleteResult) -> None:
        """Count the outcome of deleting a matching key."""
        if result.success:
            self.deleted_count += 1
            self.deleted_bytes += matched.size
        else:
            self.failed_delete_count += 1


def _average(total: int, count: int) -> float:
    if count == 0:
        return 0.0
    return total / count
