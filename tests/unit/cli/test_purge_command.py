"""Unit tests for the purge command."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
from keypurge.cli.main import app
from typer.testing import CliRunner, Result

if TYPE_CHECKING:
    from conftest import FakeStore

runner = CliRunner()

FAST_RECONCILE = ["--reconcile", "--min-clean-passes", "2", "--pass-interval-ms", "0"]


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Config file selecting flat values."""
    path = tmp_path / "config.toml"
    path.write_text('[purge]\naccess_mode = "flat"\n')
    return path


def invoke_purge(
    store: FakeStore, config_path: Path, *args: str, env: dict[str, str] | None = None
) -> Result:
    """Run ``keypurge purge`` against a fake store."""
    with patch("keypurge.cli.commands.purge.open_store", return_value=store):
        return runner.invoke(app, ["--config", str(config_path), "purge", *args], env=env)


class TestPurgeCommand:
    """Tests for keypurge purge without reconciliation."""

    def test_deletes_matches(self, null_store: FakeStore, config_path: Path) -> None:
        """Matching keys are deleted and reported."""
        result = invoke_purge(null_store, config_path, "null")

        assert result.exit_code == 0
        assert "DELETE a (size = 4)" in result.output
        assert "DELETE c (size = 4)" in result.output
        assert (
            "deleted 2 keys (8 total size, average size: 4.0) matching "
            '(access-mode=flat) Search="null" (exact match), 0 keys failed delete'
        ) in result.output
        assert null_store.data == {"b": b"nullish"}

    def test_header(self, null_store: FakeStore, config_path: Path) -> None:
        """A header names the store and the condition."""
        result = invoke_purge(null_store, config_path, "null")

        assert "> deleting keys from fake[memory] with value matching" in result.output

    def test_delete_failure_continues(self, null_store: FakeStore, config_path: Path) -> None:
        """A failed delete is reported and counted without failing the run."""
        null_store.fail_on("DEL", "a", "READONLY")

        result = invoke_purge(null_store, config_path, "null")

        assert result.exit_code == 0
        assert "failed to delete key 'a'" in result.output
        assert "deleted 1 keys (4 total size" in result.output
        assert "1 keys failed delete" in result.output
        assert "c" not in null_store.data

    def test_no_matches(self, null_store: FakeStore, config_path: Path) -> None:
        """A purge with nothing to delete succeeds."""
        result = invoke_purge(null_store, config_path, "missing")

        assert result.exit_code == 0
        assert "deleted 0 keys (0 total size, average size: 0.0)" in result.output

    def test_store_unavailable(self, null_store: FakeStore, config_path: Path) -> None:
        """A failing key count exits 1."""
        null_store.fail_on("DBSIZE", message="NOAUTH Authentication required")

        result = invoke_purge(null_store, config_path, "null")

        assert result.exit_code == 1
        assert "error deleting keys matching" in result.output
        assert "NOAUTH" in result.output
        assert len(null_store.data) == 3


class TestPurgeReconcile:
    """Tests for keypurge purge --reconcile."""

    def test_reconcile_converges(self, null_store: FakeStore, config_path: Path) -> None:
        """With no writers the run converges and exits 0."""
        result = invoke_purge(null_store, config_path, "null", *FAST_RECONCILE)

        assert result.exit_code == 0
        assert "stayed deleted" in result.output
        assert null_store.calls_for("EXISTS") == ["a", "c", "a", "c"]

    def test_reconcile_from_environment(self, null_store: FakeStore, config_path: Path) -> None:
        """WAIT_AND_REDELETE and CLEAN_DELETE_* enable and tune reconciliation."""
        env = {
            "WAIT_AND_REDELETE": "true",
            "CLEAN_DELETE_MIN": "3",
            "CLEAN_DELETE_WAIT_MS": "0",
        }

        result = invoke_purge(null_store, config_path, "null", env=env)

        assert result.exit_code == 0
        assert null_store.calls_for("EXISTS") == ["a", "c"] * 3

    def test_reconcile_not_converged(self, null_store: FakeStore, config_path: Path) -> None:
        """Hitting --max-passes exits 1 with a warning."""
        with patch.object(null_store, "exists", return_value=True):
            result = invoke_purge(
                null_store, config_path, "null", *FAST_RECONCILE, "--max-passes", "3"
            )

        assert result.exit_code == 1
        assert "did not converge" in result.output
        assert result.output.count("DELETE a") == 4

    def test_reconcile_error(self, null_store: FakeStore, config_path: Path) -> None:
        """A failed existence check aborts the run with exit 1."""
        null_store.fail_on("EXISTS", message="connection reset")

        result = invoke_purge(null_store, config_path, "null", *FAST_RECONCILE)

        assert result.exit_code == 1
        assert "deleted 2 keys" in result.output
        assert "connection reset" in result.output

    def test_invalid_min_clean_passes(self, null_store: FakeStore, config_path: Path) -> None:
        """Out-of-range reconciliation settings are rejected."""
        result = invoke_purge(null_store, config_path, "null", "--min-clean-passes", "0")

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert null_store.calls == []
