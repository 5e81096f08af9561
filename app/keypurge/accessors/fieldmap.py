"""Field-map value accessor.

Reads values stored as field/value mappings (Redis hashes) and collapses
them into a single byte string.
"""

from collections.abc import Mapping

from keypurge.accessors.base import ValueAccessor
from keypurge.models.condition import AccessMode
from keypurge.store.base import KeyValueStore


def collapse_field_map(fields: Mapping[bytes, bytes]) -> bytes:
    """Concatenate each field name and value, in mapping order.

    The order is whatever the store presented; it is not sorted, so a
    multi-field value may collapse differently between reads.

    Args:
        fields: Field/value mapping.

    Returns:
        Concatenated bytes.
    """
    return b"".join(name + value for name, value in fields.items())


class FieldMapAccessor(ValueAccessor):
    """Accessor for field/value mapping values.

    A missing key reads as an empty mapping and collapses to ``b""``.
    """

    @property
    def mode(self) -> AccessMode:
        """Return FIELDMAP as the access mode."""
        return AccessMode.FIELDMAP

    def _read(self, store: KeyValueStore, key: str) -> bytes:
        return collapse_field_map(store.get_field_map(key))
