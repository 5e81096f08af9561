"""Configuration models and persistence.

Settings are grouped into a ``[store]`` section (how to reach the store)
and a ``[purge]`` section (what to match and how to delete). They are
stored in ~/.config/keypurge/config.toml; command-line flags and
environment variables override file values.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from keypurge.core.errors import ConfigError, ConfigParseError
from keypurge.core.paths import get_config_path
from keypurge.models.condition import AccessMode, MatchCondition

logger = logging.getLogger(__name__)

DEFAULT_PORT = 6379


class StoreConfig(BaseModel):
    """Connection settings for the key-value store.

    Attributes:
        addr: ``host:port`` address. An empty host means localhost.
        tls: Connect over TLS (certificates are not verified).
        password: Optional password for AUTH.
        db: Logical database number.
        read_timeout: Per-call socket timeout in seconds.
    """

    model_config = ConfigDict(extra="forbid")

    addr: Annotated[str, Field(description="host:port address")] = ":6379"
    tls: Annotated[bool, Field(description="Connect over TLS")] = True
    password: Annotated[str | None, Field(description="AUTH password")] = None
    db: Annotated[int, Field(ge=0, description="Database number")] = 0
    read_timeout: Annotated[
        float,
        Field(ge=1, description="Per-call socket timeout in seconds"),
    ] = 180

    @property
    def host(self) -> str:
        """Host part of the address, defaulting to localhost."""
        host = self.addr.rpartition(":")[0] if ":" in self.addr else self.addr
        return host or "localhost"

    @property
    def port(self) -> int:
        """Port part of the address, defaulting to 6379."""
        if ":" not in self.addr:
            return DEFAULT_PORT
        _, _, port = self.addr.rpartition(":")
        return int(port) if port else DEFAULT_PORT

    @field_validator("addr")
    @classmethod
    def validate_addr(cls, v: str) -> str:
        """Validate that the port, if given, is numeric."""
        if ":" in v:
            port = v.rpartition(":")[2]
            if port and not port.isdigit():
                msg = f"invalid port in address {v!r}"
                raise ValueError(msg)
        return v


class PurgeConfig(BaseModel):
    """Matching and deletion settings.

    Attributes:
        access_mode: How values are read (flat or fieldmap).
        size_threshold: Minimum value size in bytes to consider.
        min_occurrences: Minimum pattern occurrences, 0 for exact match.
        reconcile: Re-check deleted keys until they stay deleted.
        min_clean_passes: Consecutive clean passes required to finish.
        pass_interval_ms: Wait before each reconciliation pass.
        scan_batch_size: Keys requested per SCAN call.
        max_passes: Optional ceiling on reconciliation passes.
        progress: Show a progress display on interactive terminals.
    """

    model_config = ConfigDict(extra="forbid")

    access_mode: AccessMode = AccessMode.FIELDMAP
    size_threshold: Annotated[int, Field(ge=0)] = 0
    min_occurrences: Annotated[int, Field(ge=0)] = 0
    reconcile: bool = False
    min_clean_passes: Annotated[int, Field(ge=1)] = 500
    pass_interval_ms: Annotated[int, Field(ge=0)] = 150
    scan_batch_size: Annotated[int, Field(ge=1)] = 50
    max_passes: Annotated[int | None, Field(ge=1)] = None
    progress: bool = True

    @field_validator("access_mode", mode="before")
    @classmethod
    def parse_access_mode(cls, v: object) -> object:
        """Accept store type names (``string``, ``hash``) as access modes."""
        if isinstance(v, str):
            return AccessMode.parse(v)
        return v

    def condition(self, pattern: str | bytes) -> MatchCondition:
        """Build the match condition for a search pattern.

        Args:
            pattern: Value or substring to search for.

        Returns:
            MatchCondition using this configuration's thresholds.
        """
        if isinstance(pattern, str):
            pattern = pattern.encode("utf-8")
        return MatchCondition(
            pattern=pattern,
            access_mode=self.access_mode,
            size_threshold=self.size_threshold,
            min_occurrences=self.min_occurrences,
        )


class KeypurgeConfig(BaseModel):
    """Top-level configuration file model."""

    model_config = ConfigDict(extra="forbid")

    store: StoreConfig = Field(default_factory=StoreConfig)
    purge: PurgeConfig = Field(default_factory=PurgeConfig)

    def with_overrides(
        self,
        store: dict[str, Any] | None = None,
        purge: dict[str, Any] | None = None,
    ) -> "KeypurgeConfig":
        """Return a copy with explicitly given values replacing file values.

        ``None`` values are treated as "not given" and leave the file
        value in place.

        Raises:
            ConfigError: If an override fails validation.
        """
        store_data = self.store.model_dump()
        store_data.update({k: v for k, v in (store or {}).items() if v is not None})
        purge_data = self.purge.model_dump()
        purge_data.update({k: v for k, v in (purge or {}).items() if v is not None})

        try:
            return KeypurgeConfig(
                store=StoreConfig.model_validate(store_data),
                purge=PurgeConfig.model_validate(purge_data),
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(path: Path | None = None) -> KeypurgeConfig:
    """Load configuration from a TOML file.

    A missing file yields the defaults.

    Args:
        path: Path to the config file. If None, uses the default path.

    Returns:
        Validated KeypurgeConfig object.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or the content doesn't
            match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return KeypurgeConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return KeypurgeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e


def save_config(config: KeypurgeConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written to a temporary file first and moved into place
    with os.replace().

    Args:
        config: The configuration to save.
        path: Destination path. If None, uses the default path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    data = config_to_dict(config)

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config {config_path}: {e}") from e

    return config_path


def config_to_dict(config: KeypurgeConfig) -> dict[str, Any]:
    """Convert configuration to a TOML-serialisable dictionary.

    None values are dropped since TOML has no null.
    """
    data = config.model_dump(mode="json")
    return {
        section: {k: v for k, v in values.items() if v is not None}
        for section, values in data.items()
    }


def dump_config(config: KeypurgeConfig) -> str:
    """Render configuration as a TOML document."""
    return tomli_w.dumps(config_to_dict(config))
