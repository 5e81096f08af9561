"""Utility modules for keypurge.

This module exports commonly used utility functions.
"""

from keypurge.utils.formatting import (
    console,
    err_console,
    format_key,
    format_size,
    print_diagnostic,
    print_error,
    print_key_line,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "err_console",
    "format_key",
    "format_size",
    "print_diagnostic",
    "print_error",
    "print_key_line",
    "print_success",
    "print_warning",
]
