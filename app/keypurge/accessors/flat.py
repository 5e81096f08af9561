"""Flat value accessor.

Reads values stored as plain byte strings.
"""

from keypurge.accessors.base import ValueAccessor
from keypurge.core.errors import FetchError
from keypurge.models.condition import AccessMode
from keypurge.store.base import KeyValueStore


class FlatAccessor(ValueAccessor):
    """Accessor for plain string values."""

    @property
    def mode(self) -> AccessMode:
        """Return FLAT as the access mode."""
        return AccessMode.FLAT

    def _read(self, store: KeyValueStore, key: str) -> bytes:
        value = store.get(key)
        if value is None:
            # Key vanished between SCAN and GET
            raise FetchError("GET", "key not found", key=key)
        return value
