"""Cursor-based keyspace enumeration.

Walks the whole keyspace once in store-sized batches. Keys added or
removed while the walk is in progress may or may not be seen; that is a
property of cursor-based scanning, not something this module corrects.
"""

import logging
from collections.abc import Iterator

from keypurge.core.errors import StoreError, StoreUnavailableError
from keypurge.store.base import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50


class KeyspaceEnumerator:
    """Enumerates every key in a store exactly once per traversal.

    Example:
        >>> enumerator = KeyspaceEnumerator(store)
        >>> total = enumerator.estimate_total()
        >>> for batch in enumerator.batches(batch_size=100):
        ...     for key in batch:
        ...         print(key)
    """

    def __init__(self, store: KeyValueStore) -> None:
        """Initialize the enumerator.

        Args:
            store: Store to enumerate.
        """
        self._store = store

    def estimate_total(self) -> int:
        """Return the store's key count, for progress reporting only.

        Raises:
            StoreUnavailableError: If the count cannot be obtained.
        """
        try:
            return self._store.count_keys()
        except StoreError as e:
            raise StoreUnavailableError(e.operation, f"couldn't count keys: {e.cause}") from e

    def batches(self, batch_size: int = DEFAULT_BATCH_SIZE) -> Iterator[list[str]]:
        """Yield batches of keys until the traversal completes.

        The traversal starts when iteration starts and cannot be restarted;
        call again for a new traversal. Empty batches returned by the store
        are passed through so callers see every round trip.

        Args:
            batch_size: Keys requested per store call.

        Yields:
            Lists of keys.

        Raises:
            ValueError: If batch_size is not positive.
            StoreUnavailableError: If a store call fails. Enumeration does
                not retry.
        """
        if batch_size < 1:
            msg = f"Batch size must be positive, got {batch_size}"
            raise ValueError(msg)

        cursor = 0
        while True:
            try:
                cursor, keys = self._store.scan(cursor, batch_size)
            except StoreError as e:
                raise StoreUnavailableError(e.operation, e.cause) from e

            logger.debug("scan cursor: %d, key count: %d", cursor, len(keys))
            yield keys

            if cursor == 0:
                break
