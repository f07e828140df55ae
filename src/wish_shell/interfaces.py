# wish — Minimal Parallel Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Protocol definitions for dependency injection.

These interfaces keep the kernel's orchestration logic separate from
process launching and configuration loading.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .executor import RunResult  # pragma: no cover
    from .state import ShellState  # pragma: no cover


class Executor(Protocol):
    """Protocol for external command execution."""

    def run(
        self,
        argv: list[str],
        state: ShellState,
        output_file: str | None = None,
    ) -> RunResult:
        """Run an external command to completion."""
        ...


class ConfigModel(Protocol):
    """Protocol for configuration access."""

    @property
    def prompt(self) -> str:
        """Interactive prompt text."""
        ...

    @property
    def error_message(self) -> str:
        """The one message printed for every error."""
        ...

    @property
    def default_path(self) -> list[str]:
        """Initial search path."""
        ...

    def get_path(self, path: str, default: Any = None) -> Any:
        """Dot-separated nested lookup."""
        ...
