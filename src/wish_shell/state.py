# wish — Minimal Parallel Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Mutable shell state: search path and working directory.

The top-level state is owned by the Kernel and follows the real process
working directory. Parallel branches get a private copy from branch(), so
'cd' and 'path' inside a branch never reach the parent or its siblings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace

DEFAULT_SEARCH_PATH = ["/bin"]


@dataclass
class ShellState:
    search_path: list[str] = field(
        default_factory=lambda: list(DEFAULT_SEARCH_PATH)
    )
    cwd: str = field(default_factory=os.getcwd)

    # Private copies never touch the process working directory
    isolated: bool = False

    def branch(self) -> ShellState:
        """Return a private copy for one member of a parallel group."""
        return replace(
            self, search_path=list(self.search_path), isolated=True
        )

    def resolve_path(self, path: str) -> str:
        """Resolve a possibly relative path against this state's cwd."""
        if not os.path.isabs(path):
            path = os.path.join(self.cwd, path)
        return os.path.normpath(path)

    def change_directory(self, target: str) -> None:
        """Switch to target.

        Raises:
            NotADirectoryError: target does not exist or is not a directory
            OSError: the process could not chdir into it
        """
        resolved = self.resolve_path(target)
        if not os.path.isdir(resolved):
            raise NotADirectoryError(resolved)
        if not self.isolated:
            os.chdir(resolved)
            resolved = os.getcwd()
        self.cwd = resolved

    def set_search_path(self, directories: list[str]) -> None:
        self.search_path = list(directories)
