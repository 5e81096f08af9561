"""XDG-compliant path management for keypurge.

keypurge keeps no state between runs, so only the configuration
directory is needed:
- Config: ~/.config/keypurge/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "keypurge"


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/keypurge/ (or XDG_CONFIG_HOME/keypurge/).
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/keypurge/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_user_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/keypurge/theme.toml.
    """
    return get_config_dir() / "theme.toml"
