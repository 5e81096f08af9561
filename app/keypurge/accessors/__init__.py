"""Value accessors for different value representations.

This module exports the accessor classes and a factory that picks one
for an access mode.
"""

from keypurge.accessors.base import ValueAccessor
from keypurge.accessors.fieldmap import FieldMapAccessor, collapse_field_map
from keypurge.accessors.flat import FlatAccessor
from keypurge.models.condition import AccessMode


def get_accessor(mode: AccessMode) -> ValueAccessor:
    """Get the accessor for an access mode.

    Args:
        mode: How values should be read.

    Returns:
        ValueAccessor instance for the mode.
    """
    if mode == AccessMode.FLAT:
        return FlatAccessor()
    return FieldMapAccessor()


__all__ = [
    "FieldMapAccessor",
    "FlatAccessor",
    "ValueAccessor",
    "collapse_field_map",
    "get_accessor",
]
