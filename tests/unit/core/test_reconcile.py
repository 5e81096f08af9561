"""Unit tests for ReconciliationLoop.

Time is faked with ResurrectingSleep, which also plays the part of a
concurrent writer re-creating keys between passes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from keypurge.core.errors import DeleteError, ExistsError
from keypurge.core.reconcile import ReconciliationLoop
from keypurge.models.results import ReconciliationState
from keypurge.operators.delete import KeyDeleter

if TYPE_CHECKING:
    from conftest import FakeStore, ResurrectingSleep


@pytest.fixture
def emptied_store(make_store: type[FakeStore]) -> FakeStore:
    """Store from which keys a and c have already been purged."""
    return make_store(values={"b": "nullish"})


class TestReconciliationLoopValidation:
    """Tests for constructor validation."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"min_clean_passes": 0},
            {"pass_interval_ms": -1},
            {"max_passes": 0},
        ],
    )
    def test_out_of_range_settings(self, emptied_store: FakeStore, kwargs: dict[str, int]) -> None:
        """Out-of-range settings are rejected."""
        with pytest.raises(ValueError):
            ReconciliationLoop(KeyDeleter(emptied_store), **kwargs)


class TestReconciliationLoopRun:
    """Tests for ReconciliationLoop.run."""

    def test_quiet_store_converges_after_min_passes(
        self,
        emptied_store: FakeStore,
        make_sleep: type[ResurrectingSleep],
    ) -> None:
        """With no writers the loop ends after exactly min_clean_passes passes."""
        sleep = make_sleep(emptied_store)
        loop = ReconciliationLoop(KeyDeleter(emptied_store), min_clean_passes=3, sleep=sleep)

        state = loop.run(["a", "c"])

        assert state.converged is True
        assert state.pass_number == 3
        assert state.consecutive_clean_passes == 3
        assert state.resurrected_count == 0
        assert emptied_store.calls_for("EXISTS") == ["a", "c"] * 3

    def test_sleeps_before_every_pass(
        self,
        emptied_store: FakeStore,
        make_sleep: type[ResurrectingSleep],
    ) -> None:
        """The pass interval is slept, in seconds, before each pass."""
        sleep = make_sleep(emptied_store)
        loop = ReconciliationLoop(KeyDeleter(emptied_store), min_clean_passes=2, sleep=sleep)

        loop.run(["a"])

        assert sleep.calls == [0.15, 0.15]

    def test_resurrection_resets_clean_counter(
        self,
        emptied_store: FakeStore,
        make_sleep: type[ResurrectingSleep],
    ) -> None:
        """A resurrected key is deleted again and the clean count restarts."""
        sleep = make_sleep(emptied_store, {2: ["a"]})
        loop = ReconciliationLoop(KeyDeleter(emptied_store), min_clean_passes=3, sleep=sleep)

        state = loop.run(["a", "c"])

        # clean, dirty, then three clean
        assert state.converged is True
        assert state.pass_number == 5
        assert state.resurrected_count == 1
        assert "a" not in emptied_store.data
        assert emptied_store.calls_for("DEL") == ["a"]

    def test_resurrections_in_consecutive_passes(
        self,
        emptied_store: FakeStore,
        make_sleep: type[ResurrectingSleep],
    ) -> None:
        """Every resurrection is counted and deleted."""
        sleep = make_sleep(emptied_store, {1: ["a", "c"], 2: ["c"]})
        loop = ReconciliationLoop(KeyDeleter(emptied_store), min_clean_passes=1, sleep=sleep)

        state = loop.run(["a", "c"])

        assert state.pass_number == 3
        assert state.resurrected_count == 3
        assert emptied_store.calls_for("DEL") == ["a", "c", "c"]

    def test_unrelated_keys_are_not_touched(
        self,
        emptied_store: FakeStore,
        make_sleep: type[ResurrectingSleep],
    ) -> None:
        """Keys outside the deleted set are never checked or deleted."""
        loop = ReconciliationLoop(
            KeyDeleter(emptied_store),
            min_clean_passes=2,
            sleep=make_sleep(emptied_store),
        )

        loop.run(["a"])

        assert "b" not in emptied_store.calls_for("EXISTS")
        assert emptied_store.data == {"b": b"nullish"}

    def test_max_passes_stops_unconverged(
        self,
        emptied_store: FakeStore,
        make_sleep: type[ResurrectingSleep],
    ) -> None:
        """A persistent writer exhausts max_passes and the run reports non-convergence."""
        sleep = make_sleep(emptied_store, {n: ["a"] for n in range(1, 10)})
        loop = ReconciliationLoop(
            KeyDeleter(emptied_store),
            min_clean_passes=3,
            max_passes=4,
            sleep=sleep,
        )

        state = loop.run(["a"])

        assert state.converged is False
        assert state.pass_number == 4
        assert state.resurrected_count == 4
        assert len(sleep.calls) == 4

    def test_callbacks(
        self,
        emptied_store: FakeStore,
        make_sleep: type[ResurrectingSleep],
    ) -> None:
        """on_pass runs before each pass and on_resurrected for each re-deleted key."""
        passes: list[tuple[int, int]] = []
        resurrected: list[str] = []

        def on_pass(state: ReconciliationState, key_count: int) -> None:
            passes.append((state.pass_number, key_count))

        loop = ReconciliationLoop(
            KeyDeleter(emptied_store),
            min_clean_passes=2,
            sleep=make_sleep(emptied_store, {1: ["c"]}),
            on_pass=on_pass,
            on_resurrected=resurrected.append,
        )

        loop.run(["a", "c"])

        assert passes == [(0, 2), (1, 2), (2, 2)]
        assert resurrected == ["c"]


class TestReconciliationLoopErrors:
    """Tests for fatal errors during reconciliation."""

    def test_exists_failure_is_fatal(
        self,
        emptied_store: FakeStore,
        make_sleep: type[ResurrectingSleep],
    ) -> None:
        """A failed existence check aborts the loop."""
        emptied_store.fail_on("EXISTS", "c", "connection reset")
        loop = ReconciliationLoop(KeyDeleter(emptied_store), sleep=make_sleep(emptied_store))

        with pytest.raises(ExistsError, match="connection reset"):
            loop.run(["a", "c"])

    def test_redelete_failure_is_fatal(
        self,
        emptied_store: FakeStore,
        make_sleep: type[ResurrectingSleep],
    ) -> None:
        """A failed re-delete aborts the loop."""
        emptied_store.fail_on("DEL", "a", "READONLY")
        loop = ReconciliationLoop(
            KeyDeleter(emptied_store),
            sleep=make_sleep(emptied_store, {1: ["a"]}),
        )

        with pytest.raises(DeleteError, match="READONLY"):
            loop.run(["a"])
