"""Abstract base class for value accessors.

This module defines the ValueAccessor interface that turns a stored
value into the byte string a MatchCondition is evaluated against.
"""

from abc import ABC, abstractmethod

from keypurge.core.errors import FetchError, StoreError
from keypurge.models.condition import AccessMode
from keypurge.store.base import KeyValueStore


class ValueAccessor(ABC):
    """Abstract base class for all value accessors.

    Accessors are responsible for reading one key's value from a store
    and collapsing it to bytes.

    Example:
        >>> accessor = get_accessor(AccessMode.FLAT)
        >>> body = accessor.fetch(store, "session:42")
    """

    @property
    @abstractmethod
    def mode(self) -> AccessMode:
        """Return the access mode this accessor implements."""

    @abstractmethod
    def _read(self, store: KeyValueStore, key: str) -> bytes:
        """Read and collapse the value of a key.

        Raises:
            StoreError: If the store call fails.
            FetchError: If the value is missing or unusable.
        """

    def fetch(self, store: KeyValueStore, key: str) -> bytes:
        """Fetch the byte content of a key's value.

        Args:
            store: Store to read from.
            key: Key to read.

        Returns:
            The value as bytes.

        Raises:
            FetchError: If the value cannot be read. The caller is expected
                to skip the key and continue.
        """
        try:
            return self._read(store, key)
        except StoreError as e:
            raise FetchError(e.operation, e.cause, key=key) from e
