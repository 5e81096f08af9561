"""Exception hierarchy for keypurge.

Store-level failures are raised as StoreError by the store adapter and
re-classified by the component that made the call: enumeration and
existence-check failures are fatal, value reads and initial-pass deletes
are recovered per key.
"""


class KeypurgeError(Exception):
    """Base exception for all keypurge errors."""


class OperationError(KeypurgeError):
    """An error tied to a store operation and, optionally, a key.

    Attributes:
        operation: Store operation that failed (e.g. ``SCAN``, ``DEL``).
        key: Key involved, if any.
        cause: Underlying error message.
    """

    def __init__(self, operation: str, cause: str, key: str | None = None) -> None:
        self.operation = operation
        self.key = key
        self.cause = cause
        super().__init__(self._format())

    def _format(self) -> str:
        if self.key is None:
            return f"{self.operation} failed: {self.cause}"
        return f"{self.operation} failed for {self.key!r}: {self.cause}"


class StoreError(OperationError):
    """Raised when a raw store call fails."""


class StoreUnavailableError(OperationError):
    """Raised when keyspace enumeration cannot proceed."""


class FetchError(OperationError):
    """Raised when a single key's value cannot be read."""


class DeleteError(OperationError):
    """Raised when a key cannot be deleted."""


class ExistsError(OperationError):
    """Raised when a key's existence cannot be checked."""


class ConfigError(KeypurgeError):
    """Raised when the configuration is invalid or unreadable."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file is not valid TOML."""
