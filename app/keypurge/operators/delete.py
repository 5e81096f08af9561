"""Key deletion operator.

Deletes single keys and checks whether deleted keys have come back.
Deleting a key that is already gone is not an error.
"""

import logging

from keypurge.core.errors import DeleteError, ExistsError, StoreError
from keypurge.models.results import DeleteResult
from keypurge.store.base import KeyValueStore

logger = logging.getLogger(__name__)


class KeyDeleter:
    """Deletes keys from a store.

    :meth:`delete` reports failures as results so a purge can carry on;
    :meth:`delete_or_raise` and :meth:`exists` raise, for callers that
    cannot continue without a definite answer.

    Example:
        >>> deleter = KeyDeleter(store)
        >>> result = deleter.delete("session:42")
        >>> result.success
        True
    """

    def __init__(self, store: KeyValueStore) -> None:
        """Initialize the deleter.

        Args:
            store: Store to delete from.
        """
        self._store = store

    def delete(self, key: str) -> DeleteResult:
        """Delete a key, capturing failure in the result.

        Args:
            key: Key to delete.

        Returns:
            DeleteResult with ``success=False`` and an error message if the
            store call failed.
        """
        try:
            return self.delete_or_raise(key)
        except DeleteError as e:
            logger.warning("Failed to delete %r: %s", key, e.cause)
            return DeleteResult(key=key, success=False, error=e.cause)

    def delete_or_raise(self, key: str) -> DeleteResult:
        """Delete a key.

        Args:
            key: Key to delete.

        Returns:
            Successful DeleteResult; ``existed`` is False if the key was
            already absent.

        Raises:
            DeleteError: If the store call failed.
        """
        try:
            removed = self._store.delete(key)
        except StoreError as e:
            raise DeleteError("DEL", e.cause, key=key) from e

        if not removed:
            logger.debug("Key %r was already absent", key)
        return DeleteResult(key=key, success=True, existed=removed > 0)

    def exists(self, key: str) -> bool:
        """Check whether a key exists.

        Raises:
            ExistsError: If the store call failed.
        """
        try:
            return self._store.exists(key)
        except StoreError as e:
            raise ExistsError("EXISTS", e.cause, key=key) from e
