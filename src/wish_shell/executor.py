# wish — Minimal Parallel Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Subprocess-backed executor implementation for wish.

This module provides:
- executables() / resolve(): search-path lookup of an external program
- run(): spawn-and-wait with optional merged stdout/stderr redirection

Programs inherit the shell's stdin/stdout/stderr unless redirected.
There is no timeout: a hung program blocks its caller.
"""

from __future__ import annotations

import os
import subprocess
import sys
import time
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import IO

from .config import ERROR_MESSAGE
from .errors import CommandNotFoundError, LaunchError, RedirectionTargetError
from .state import ShellState

# New output files are rwx for the owner only
OUTPUT_FILE_MODE = 0o700


@dataclass(frozen=True)
class RunResult:
    """Result from one external command (no output capture)."""

    exit_code: int
    executable: str | None
    started_at: str
    duration_ms: int


class SubprocessExecutor:
    """Subprocess implementation of Executor protocol."""

    def __init__(self, error_message: str = ERROR_MESSAGE):
        """Initialize executor.

        Args:
            error_message: Written into the redirect file when a redirected
                command cannot be resolved
        """
        self.error_message = error_message

    def candidates(self, name: str, state: ShellState) -> Iterator[str]:
        """Yield '<dir>/<name>' for each search path entry, in order."""
        for directory in state.search_path:
            yield state.resolve_path(f"{directory}/{name}")

    def executables(self, name: str, state: ShellState) -> Iterator[str]:
        """Yield the candidates that are regular, executable files."""
        for candidate in self.candidates(name, state):
            if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
                yield candidate

    def resolve(self, name: str, state: ShellState) -> str | None:
        """Return the first executable match for name, or None."""
        return next(self.executables(name, state), None)

    def _open_output(self, output_file: str, state: ShellState) -> IO[bytes]:
        target = state.resolve_path(output_file)
        try:
            fd = os.open(
                target, os.O_CREAT | os.O_WRONLY | os.O_TRUNC,
                OUTPUT_FILE_MODE,
            )
        except OSError as e:
            raise RedirectionTargetError(
                output_file, e.strerror or str(e)
            ) from e
        return os.fdopen(fd, "wb")

    def _launch(
        self, argv: list[str], state: ShellState, out: IO[bytes] | None
    ) -> tuple[subprocess.Popen, str] | None:
        # Flush our own buffers so output ordering survives the spawn
        sys.stdout.flush()
        sys.stderr.flush()

        for candidate in self.executables(argv[0], state):
            try:
                proc = subprocess.Popen(
                    argv,
                    executable=candidate,
                    cwd=state.cwd,
                    stdout=out,
                    stderr=subprocess.STDOUT if out is not None else None,
                )
            except OSError:
                # Not launchable (bad format, permissions): keep searching
                continue
            except ValueError as e:
                raise LaunchError(f"Error executing command: {e}") from e
            return proc, candidate
        return None

    def run(
        self,
        argv: list[str],
        state: ShellState,
        output_file: str | None = None,
    ) -> RunResult:
        """Resolve argv[0] against the search path and run it to completion.

        Args:
            argv: Command name followed by its arguments (non-empty)
            state: Search path and working directory to launch with
            output_file: Optional redirect target receiving both stdout
                and stderr (created or truncated before launch)

        Returns:
            RunResult

        Raises:
            RedirectionTargetError: output file could not be opened
            CommandNotFoundError: no search path entry yields a program
                (only raised when not redirected)
            LaunchError: arguments the OS cannot accept
        """
        started_at = datetime.now().isoformat()
        start_ts = time.time()

        out = (
            self._open_output(output_file, state)
            if output_file is not None
            else None
        )
        try:
            launched = self._launch(argv, state, out)
            if launched is None:
                if out is None:
                    raise CommandNotFoundError(argv[0])
                # A redirected command reports into its own stderr,
                # which is the output file
                out.write(self.error_message.encode("utf-8"))
                out.flush()
                return RunResult(
                    exit_code=1,
                    executable=None,
                    started_at=started_at,
                    duration_ms=int((time.time() - start_ts) * 1000),
                )

            proc, executable = launched
            exit_code = proc.wait()
        finally:
            if out is not None:
                out.close()

        return RunResult(
            exit_code=exit_code,
            executable=executable,
            started_at=started_at,
            duration_ms=int((time.time() - start_ts) * 1000),
        )
