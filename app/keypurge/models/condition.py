"""Match condition models.

This module defines how a key's value is read from the store and the
predicate that decides whether that value is of interest.
"""

from dataclasses import dataclass, field
from enum import Enum


class AccessMode(str, Enum):
    """How a key's value is read from the store.

    Attributes:
        FLAT: The value is a plain byte string.
        FIELDMAP: The value is a field/value mapping, collapsed to bytes by
            concatenating each field name and value in store order.
    """

    FLAT = "flat"
    FIELDMAP = "fieldmap"

    @classmethod
    def parse(cls, value: str) -> "AccessMode":
        """Parse an access mode name, accepting the store's type names.

        ``string`` is accepted for FLAT and ``hash`` for FIELDMAP.

        Args:
            value: Mode name (case-insensitive).

        Returns:
            Matching AccessMode.

        Raises:
            ValueError: If the name is not recognised.
        """
        aliases = {
            "flat": cls.FLAT,
            "string": cls.FLAT,
            "fieldmap": cls.FIELDMAP,
            "hash": cls.FIELDMAP,
        }
        try:
            return aliases[value.strip().lower()]
        except KeyError:
            msg = f"Unknown access mode: {value!r} (expected flat or fieldmap)"
            raise ValueError(msg) from None


@dataclass(frozen=True, slots=True)
class MatchCondition:
    """Predicate over a key's fetched value.

    Evaluation short-circuits in a fixed order: values smaller than
    ``size_threshold`` never match; an empty pattern matches everything
    else; with ``min_occurrences == 0`` the value must equal the pattern
    byte-for-byte; otherwise it must contain at least ``min_occurrences``
    non-overlapping copies of the pattern.

    Attributes:
        pattern: Byte pattern to look for (may be empty).
        access_mode: How values are read from the store.
        size_threshold: Minimum value size in bytes.
        min_occurrences: Minimum substring occurrences, 0 for exact match.
    """

    pattern: bytes
    access_mode: AccessMode = AccessMode.FIELDMAP
    size_threshold: int = field(default=0)
    min_occurrences: int = field(default=0)

    def __post_init__(self) -> None:
        """Validate and normalise condition data after initialization."""
        if isinstance(self.pattern, str):
            object.__setattr__(self, "pattern", self.pattern.encode("utf-8"))
        if self.size_threshold < 0:
            msg = f"Size threshold must be non-negative, got {self.size_threshold}"
            raise ValueError(msg)
        if self.min_occurrences < 0:
            msg = f"Minimum occurrences must be non-negative, got {self.min_occurrences}"
            raise ValueError(msg)

    @property
    def is_exact(self) -> bool:
        """Check if a non-empty pattern must equal the whole value."""
        return bool(self.pattern) and self.min_occurrences == 0

    def matches(self, value: bytes) -> bool:
        """Check whether a value satisfies this condition.

        Args:
            value: Byte content of a key's value.

        Returns:
            True if the value matches.
        """
        if len(value) < self.size_threshold:
            return False

        if not self.pattern:
            return True

        if self.min_occurrences <= 0:
            return value == self.pattern

        # bytes.count() counts non-overlapping occurrences
        return value.count(self.pattern) >= self.min_occurrences

    def describe(self) -> str:
        """Render a one-line description of the condition."""
        search = "(any)" if not self.pattern else _quote(self.pattern)
        parts = [f"(access-mode={self.access_mode.value}) Search={search}"]

        if self.size_threshold > 0:
            parts.append(f"(size >= {self.size_threshold} bytes)")

        if self.pattern:
            if self.min_occurrences <= 0:
                parts.append("(exact match)")
            else:
                parts.append(f"(match >= {self.min_occurrences} occurrences)")

        return " ".join(parts)

    def __str__(self) -> str:
        return self.describe()


def _quote(pattern: bytes) -> str:
    text = pattern.decode("utf-8", errors="backslashreplace")
    return '"' + text.replace('"', '\\"') + '"'
