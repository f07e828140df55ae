# wish — Minimal Parallel Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Shell builtins: cd, path, exit.

Builtins run in the calling thread against the given ShellState and are
never handed to the executor.
"""

from __future__ import annotations

from collections.abc import Callable

from .errors import BuiltinUsageError, ShellExit
from .state import ShellState


def _handle_cd(args: list[str], state: ShellState) -> None:
    if len(args) != 1:
        raise BuiltinUsageError("cd takes exactly one argument")
    try:
        state.change_directory(args[0])
    except OSError as e:
        raise BuiltinUsageError(f"cd: {e}") from e


def _handle_path(args: list[str], state: ShellState) -> None:
    # No validation: an empty list disables external commands
    state.set_search_path(args)


def _handle_exit(args: list[str], state: ShellState) -> None:
    if args:
        raise BuiltinUsageError("exit takes no arguments")
    raise ShellExit(0)


BUILTINS: dict[str, Callable[[list[str], ShellState], None]] = {
    "cd": _handle_cd,
    "path": _handle_path,
    "exit": _handle_exit,
}


def is_builtin(name: str) -> bool:
    return name in BUILTINS


def dispatch_builtin(argv: list[str], state: ShellState) -> bool:
    """Run argv as a builtin if its first token names one.

    Returns:
        True if a builtin handled the command, False if the caller should
        fall through to external execution.

    Raises:
        BuiltinUsageError: bad arguments or failed directory change
        ShellExit: 'exit' with no arguments
    """
    if not argv:
        return False
    handler = BUILTINS.get(argv[0])
    if handler is None:
        return False
    handler(argv[1:], state)
    return True
