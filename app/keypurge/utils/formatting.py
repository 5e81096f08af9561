"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich. Per-key result
lines go to stdout so they can be piped; headers, diagnostics and
summaries go to stderr.
"""

import sys

from rich.console import Console
from rich.markup import escape

from keypurge.core.theme import get_theme


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system(), highlight=False)
err_console = Console(
    theme=get_theme(),
    stderr=True,
    color_system=_detect_color_system(),
    highlight=False,
)


def format_key(key: str, style: str = "key") -> str:
    """Format a store key with markup, escaping any markup in the key."""
    return f"[{style}]{escape(key)}[/]"


def format_size(size: int) -> str:
    """Format a byte size as ``(size = N)``."""
    return f"[size](size = {size})[/]"


def print_key_line(message: str) -> None:
    """Print a per-key result line to stdout without wrapping."""
    console.print(message, soft_wrap=True)


def print_diagnostic(message: str) -> None:
    """Print a ``>``-prefixed diagnostic line to stderr."""
    err_console.print(f"[muted]>[/] {message}", soft_wrap=True)


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}", soft_wrap=True)


def print_success(message: str) -> None:
    """Print a success message."""
    err_console.print(f"[success]{message}[/]")
