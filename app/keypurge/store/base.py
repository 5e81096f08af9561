"""Abstract base class for key-value stores.

This module defines the KeyValueStore interface: the minimal set of
calls keypurge needs from a store to enumerate, read and delete keys.
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract base class for all key-value stores.

    Implementations translate their client library's failures into
    :class:`~keypurge.core.errors.StoreError`.

    Example:
        >>> store = RedisStore.from_config(StoreConfig(addr="cache:6379"))
        >>> cursor, keys = store.scan(0, count=50)
        >>> while cursor != 0:
        ...     cursor, keys = store.scan(cursor, count=50)
    """

    @abstractmethod
    def scan(self, cursor: int, count: int) -> tuple[int, list[str]]:
        """Fetch one page of keys.

        Args:
            cursor: Position returned by the previous call, 0 to start.
            count: Batch size hint.

        Returns:
            Tuple of (next_cursor, keys). A next cursor of 0 means the
            traversal is complete.

        Raises:
            StoreError: If the call fails.
        """

    @abstractmethod
    def count_keys(self) -> int:
        """Return the approximate number of keys in the store.

        Raises:
            StoreError: If the call fails.
        """

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Read a flat value.

        Returns:
            The value, or None if the key does not exist.

        Raises:
            StoreError: If the call fails or the key holds another type.
        """

    @abstractmethod
    def get_field_map(self, key: str) -> dict[bytes, bytes]:
        """Read a field/value mapping in the order the store presents it.

        Returns:
            Mapping of field to value; empty if the key does not exist.

        Raises:
            StoreError: If the call fails or the key holds another type.
        """

    @abstractmethod
    def delete(self, key: str) -> int:
        """Delete a key.

        Returns:
            Number of keys removed (0 if the key was already absent).

        Raises:
            StoreError: If the call fails.
        """

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check whether a key exists.

        Raises:
            StoreError: If the call fails.
        """

    def describe(self) -> str:
        """Return a short description of the store for diagnostics."""
        return type(self).__name__
