"""
CLI helpers for gate_cli.py.
"""

from .utils import (
    console,
    BackCommand,
    BACK,
    is_exit_command,
    print_error_below_menu,
    get_input,
    get_int_input,
    get_choice,
    print_result,
    build_steps_table,
)

__all__ = [
    "console",
    "BackCommand",
    "BACK",
    "is_exit_command",
    "print_error_below_menu",
    "get_input",
    "get_int_input",
    "get_choice",
    "print_result",
    "build_steps_table",
]
