# wish — Minimal Parallel Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Exception taxonomy for wish.

Every ShellError is reported to the user with the same generic message;
the subclasses only exist so callers, logs and tests can tell them apart.
"""

from __future__ import annotations


class ShellError(Exception):
    """Base class for every error the shell reports to the user."""


class RedirectionSyntaxError(ShellError):
    """Malformed '>' usage in a command."""


class BuiltinUsageError(ShellError):
    """Wrong argument count for a builtin, or a failed directory change."""


class CommandNotFoundError(ShellError):
    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Command not found in search path: {command}")


class RedirectionTargetError(ShellError):
    def __init__(self, path: str, reason: str = ""):
        self.path = path
        detail = f": {reason}" if reason else ""
        super().__init__(f"Cannot open output file {path}{detail}")


class LaunchError(ShellError):
    """A resolved program could not be started or waited on."""


class InvocationError(ShellError):
    """Bad program arguments or an unreadable batch file."""


class ShellExit(SystemExit):
    """Raised by the 'exit' builtin to end the shell loop."""

    def __init__(self, code: int = 0):
        super().__init__(code)
        self.exit_code = code
