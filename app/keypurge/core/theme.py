"""Console colours for keypurge output.

Colours come from the bundled ``data/theme.toml``; any subset can be
overridden in ~/.config/keypurge/theme.toml. A broken override is logged
and ignored rather than stopping a purge.
"""

import logging
import re
import tomllib
from importlib import resources
from pathlib import Path
from typing import cast

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator
from rich.theme import Theme

from keypurge.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


class ThemeColors(BaseModel):
    """Hex colours (#RGB or #RRGGBB) for each output role."""

    model_config = ConfigDict(extra="forbid")

    # Diagnostics and messages
    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"
    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Per-key result lines
    key: str = "#c1ff62"
    deleted: str = "#f53263"
    resurrected: str = "#d44ebc"
    size: str = "#0e8ac8"

    @field_validator("*", mode="before")
    @classmethod
    def check_hex(cls, v: object, info: ValidationInfo) -> str:
        """Reject anything that is not a #RGB or #RRGGBB string."""
        name = info.field_name or "color"
        if not isinstance(v, str):
            msg = f"{name}: color must be a string"
            raise ValueError(msg)
        color = v.strip()
        if not color.startswith("#"):
            msg = f"{name}: color must start with '#'"
            raise ValueError(msg)
        digits = color[1:]
        if len(digits) not in (3, 6):
            msg = f"{name}: color must be #RGB or #RRGGBB format"
            raise ValueError(msg)
        if not _HEX_DIGITS.fullmatch(digits):
            msg = f"{name}: invalid hex color '{color}'"
            raise ValueError(msg)
        return color


def get_bundled_theme_path() -> Path:
    """Path of the theme file shipped with the package."""
    return Path(str(resources.files("keypurge.data").joinpath("theme.toml")))


def _load_toml_colors(path: Path) -> dict[str, str] | None:
    """Read the string entries of a file's ``[colors]`` table.

    Returns None if the file is missing or unusable.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return None
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return None

    table = data.get("colors", {})
    if not isinstance(table, dict):
        logger.warning("Ignoring theme file %s: [colors] is not a table", path)
        return None
    return {k: v for k, v in cast(dict[str, object], table).items() if isinstance(v, str)}


def load_theme() -> ThemeColors:
    """Merge the user's overrides over the bundled colours."""
    colors = _load_toml_colors(get_bundled_theme_path())
    if colors is None:
        logger.error("Bundled theme is missing; using built-in colours")
        colors = {}

    overrides = _load_toml_colors(get_user_theme_path())
    if overrides:
        logger.debug("Applying %d user colour override(s)", len(overrides))
        colors = {**colors, **overrides}

    try:
        return ThemeColors(**colors)
    except ValidationError as e:
        logger.warning("Invalid theme colours, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme used by the shared consoles."""
    c = colors or load_theme()
    return Theme(
        {
            "text": c.text,
            "muted": c.muted,
            "header": c.header,
            "border": c.border,
            "success": c.success,
            "warning": c.warning,
            "error": f"bold {c.error}",
            "info": c.info,
            "key": f"bold {c.key}",
            "deleted": f"bold {c.deleted}",
            "resurrected": f"bold {c.resurrected}",
            "size": c.size,
        }
    )


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Return the Rich theme, building it on first use."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme
