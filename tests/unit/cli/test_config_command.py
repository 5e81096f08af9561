"""Unit tests for the config command."""

from pathlib import Path

from keypurge.cli.main import app
from keypurge.core.config import load_config
from typer.testing import CliRunner

runner = CliRunner()


class TestConfigInit:
    """Tests for keypurge config init."""

    def test_writes_defaults(self, tmp_path: Path) -> None:
        """init writes a config file with default settings."""
        path = tmp_path / "keypurge" / "config.toml"

        result = runner.invoke(app, ["--config", str(path), "config", "init"])

        assert result.exit_code == 0
        assert "Wrote default configuration" in result.output
        assert load_config(path).purge.min_clean_passes == 500

    def test_refuses_to_overwrite(self, tmp_path: Path) -> None:
        """init does not overwrite an existing file without --force."""
        path = tmp_path / "config.toml"
        path.write_text('[store]\naddr = "cache:6380"\n')

        result = runner.invoke(app, ["--config", str(path), "config", "init"])

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert load_config(path).store.addr == "cache:6380"

    def test_force_overwrites(self, tmp_path: Path) -> None:
        """init --force replaces an existing file."""
        path = tmp_path / "config.toml"
        path.write_text('[store]\naddr = "cache:6380"\n')

        result = runner.invoke(app, ["--config", str(path), "config", "init", "--force"])

        assert result.exit_code == 0
        assert load_config(path).store.addr == ":6379"

    def test_uses_xdg_config_home(self, tmp_path: Path) -> None:
        """Without --config the file goes under XDG_CONFIG_HOME."""
        result = runner.invoke(app, ["config", "init"], env={"XDG_CONFIG_HOME": str(tmp_path)})

        assert result.exit_code == 0
        assert (tmp_path / "keypurge" / "config.toml").exists()


class TestConfigShow:
    """Tests for keypurge config show."""

    def test_shows_merged_settings(self, tmp_path: Path) -> None:
        """show prints file values merged with defaults."""
        path = tmp_path / "config.toml"
        path.write_text('[purge]\naccess_mode = "string"\n')

        result = runner.invoke(app, ["--config", str(path), "config", "show"])

        assert result.exit_code == 0
        assert 'access_mode = "flat"' in result.output
        assert "min_clean_passes = 500" in result.output
        assert 'addr = ":6379"' in result.output

    def test_invalid_file(self, tmp_path: Path) -> None:
        """show reports an unreadable file."""
        path = tmp_path / "config.toml"
        path.write_text("[store]\nport = 1\n")

        result = runner.invoke(app, ["--config", str(path), "config", "show"])

        assert result.exit_code == 1
        assert "Invalid config content" in result.output
