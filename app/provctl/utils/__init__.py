"""Utility modules for provctl.

This module exports commonly used utility functions.
"""

from provctl.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from provctl.utils.shell import CommandResult, command_exists, is_admin, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "is_admin",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
]
