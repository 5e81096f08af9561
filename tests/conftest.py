"""Pytest configuration and shared fixtures.

This module contains the in-memory store double and fixtures used
across all test modules.
"""

from collections.abc import Iterable

import pytest
from keypurge.core.errors import StoreError
from keypurge.store.base import KeyValueStore

WRONGTYPE = "WRONGTYPE Operation against a key holding the wrong kind of value"


class FakeStore(KeyValueStore):
    """In-memory KeyValueStore with cursor paging and injectable failures.

    Flat values are stored as bytes, field maps as dicts. SCAN pages over
    the sorted key list; the cursor is the index of the next key.
    """

    def __init__(
        self,
        values: dict[str, bytes | str] | None = None,
        hashes: dict[str, dict[bytes, bytes]] | None = None,
    ) -> None:
        self.data: dict[str, bytes | dict[bytes, bytes]] = {}
        for key, value in (values or {}).items():
            self.data[key] = value.encode() if isinstance(value, str) else value
        for key, fields in (hashes or {}).items():
            self.data[key] = dict(fields)
        self.calls: list[tuple[str, str | None]] = []
        self.failures: dict[tuple[str, str | None], str] = {}
        self.count_estimate: int | None = None

    def fail_on(self, operation: str, key: str | None = None, message: str = "boom") -> None:
        """Make an operation fail, for one key or (key=None) for all keys."""
        self.failures[(operation, key)] = message

    def put(self, key: str, value: bytes | str) -> None:
        """Write a flat value, as a concurrent writer would."""
        self.data[key] = value.encode() if isinstance(value, str) else value

    def _call(self, operation: str, key: str | None = None) -> None:
        self.calls.append((operation, key))
        for candidate in ((operation, key), (operation, None)):
            if candidate in self.failures:
                raise StoreError(operation, self.failures[candidate], key=key)

    def calls_for(self, operation: str) -> list[str | None]:
        """Keys passed to an operation, in call order."""
        return [key for op, key in self.calls if op == operation]

    def scan(self, cursor: int, count: int) -> tuple[int, list[str]]:
        self._call("SCAN")
        keys = sorted(self.data)
        page = keys[cursor : cursor + count]
        next_cursor = cursor + count
        if next_cursor >= len(keys):
            next_cursor = 0
        return next_cursor, page

    def count_keys(self) -> int:
        self._call("DBSIZE")
        if self.count_estimate is not None:
            return self.count_estimate
        return len(self.data)

    def get(self, key: str) -> bytes | None:
        self._call("GET", key)
        value = self.data.get(key)
        if isinstance(value, dict):
            raise StoreError("GET", WRONGTYPE, key=key)
        return value

    def get_field_map(self, key: str) -> dict[bytes, bytes]:
        self._call("HGETALL", key)
        value = self.data.get(key, {})
        if isinstance(value, bytes):
            raise StoreError("HGETALL", WRONGTYPE, key=key)
        return dict(value)

    def delete(self, key: str) -> int:
        self._call("DEL", key)
        return 1 if self.data.pop(key, None) is not None else 0

    def exists(self, key: str) -> bool:
        self._call("EXISTS", key)
        return key in self.data

    def describe(self) -> str:
        return "fake[memory]"


class ResurrectingSleep:
    """Fake sleep that re-writes keys before chosen reconciliation passes.

    The reconciliation loop sleeps once before each pass, so call ``n``
    (1-based) precedes pass ``n``.
    """

    def __init__(self, store: FakeStore, schedule: dict[int, Iterable[str]] | None = None) -> None:
        self.store = store
        self.schedule = {n: list(keys) for n, keys in (schedule or {}).items()}
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        for key in self.schedule.get(len(self.calls), []):
            self.store.put(key, "null")


@pytest.fixture
def null_store() -> FakeStore:
    """Flat store with two exact "null" values and one containing "null"."""
    return FakeStore(values={"a": "null", "b": "nullish", "c": "null"})


@pytest.fixture
def hash_store() -> FakeStore:
    """Store holding field-map values."""
    return FakeStore(
        hashes={
            "session:1": {b"state": b"null"},
            "session:2": {b"state": b"active", b"user": b"42"},
            "session:3": {b"null": b"null"},
        }
    )


@pytest.fixture
def make_store() -> type[FakeStore]:
    """Factory for FakeStore instances."""
    return FakeStore


@pytest.fixture
def make_sleep() -> type[ResurrectingSleep]:
    """Factory for ResurrectingSleep instances."""
    return ResurrectingSleep
