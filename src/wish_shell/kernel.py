# wish — Minimal Parallel Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
wish kernel.

Command-line orchestration:
- split a line into its '&' command group
- one member: tokenize, parse, dispatch builtin or run external, in the
  calling thread against the shared ShellState
- several members: one worker thread per member, each on a private copy
  of the state, all joined before the line is considered done

Important boundary:
- Kernel does not load YAML or read input; it consumes the injected
  ConfigModel and Executor and is fed one line at a time by the CLI.
- Every ShellError is reported with the same configured message.
"""

from __future__ import annotations

import sys
import threading
import traceback
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime

from . import config as cfg_module
from .builtins import dispatch_builtin
from .errors import ShellError, ShellExit
from .interfaces import ConfigModel, Executor
from .parser import parse, split_command_group, trim
from .state import ShellState

_log_lock = threading.Lock()


def _append_log(filename: str, lines: list[str]) -> None:
    """Append lines to <data_root>/wish/logs/<filename>.

    Only creates the log directory when actually needed.
    """
    try:
        log_dir = cfg_module.logs_dir(cfg_module.get_data_root())
        log_dir.mkdir(parents=True, exist_ok=True)
        with _log_lock, (log_dir / filename).open(
            "a", encoding="utf-8", errors="backslashreplace"
        ) as f:
            f.write("\n".join(lines) + "\n")
    except OSError:
        # Logging must never turn into a user-visible error
        pass


def write_crash_log(
    error: BaseException,
    raw_command: str = "",
    cwd: str = "",
) -> None:
    """Write an entry to the crash log.

    Logs unhandled exceptions. Appends to crash.log (never overwrites).
    """
    lines = [f"{datetime.now().isoformat()}"]
    if raw_command:
        lines.append(f"raw={raw_command}")
    if cwd:
        lines.append(f"cwd={cwd}")
    lines.append(f"error={type(error).__name__}: {error}")
    lines.append("traceback:")
    lines.append(
        "".join(
            traceback.format_exception(
                type(error), error, error.__traceback__
            )
        )
    )
    lines.append("----")
    _append_log("crash.log", lines)


def write_error_log(error: BaseException, raw_command: str = "") -> None:
    """One line per reported error, for diagnosing the generic message."""
    _append_log(
        "error.log",
        [
            f"{datetime.now().isoformat()}\t{type(error).__name__}\t"
            f"{raw_command}\t{error}"
        ],
    )


@dataclass
class Kernel:
    """wish session engine."""

    executor: Executor
    config: ConfigModel
    state: ShellState = field(default_factory=ShellState)

    running: bool = False

    # If set, errors are written through this instead of sys.stderr
    error_fn: Callable[[str], None] | None = None

    def __post_init__(self) -> None:
        self.error_message = self.config.error_message
        self.error_log = bool(
            self.config.get_path("logging.error_log", False)
        )

    # -----------------------
    # Session
    # -----------------------

    def start(self) -> None:
        self.running = True

    def prompt(self) -> str:
        return self.config.prompt

    # -----------------------
    # Error reporting
    # -----------------------

    def report_error(
        self, error: BaseException | None = None, raw_command: str = ""
    ) -> None:
        """Print the generic error message; details only go to the log."""
        if self.error_fn is not None:
            self.error_fn(self.error_message)
        else:
            sys.stderr.write(self.error_message)
            sys.stderr.flush()
        if self.error_log and error is not None:
            write_error_log(error, raw_command)

    # -----------------------
    # Command handling
    # -----------------------

    def handle_line(self, line: str) -> list[int]:
        """Handle one input line.

        Returns:
            Exit statuses of the commands that ran, in member order
            (collected, never surfaced).

        Raises:
            ShellExit: 'exit' from a single (non-parallel) command
        """
        members = split_command_group(trim(line))
        if not members:
            return []

        if len(members) == 1:
            return [self.run_command(members[0], self.state)]
        return self.run_parallel(members)

    def run_command(self, command: str, state: ShellState) -> int:
        """Run one command string against state.

        Returns:
            0 for a builtin, the program's status for an external command,
            1 after a reported error.
        """
        try:
            parsed = parse(command)
            if not parsed.argv:
                return 0
            if dispatch_builtin(parsed.argv, state):
                return 0
            result = self.executor.run(
                parsed.argv, state, parsed.output_file
            )
            return result.exit_code
        except ShellError as e:
            self.report_error(e, command)
            return 1

    def _run_branch(self, command: str, state: ShellState) -> int:
        try:
            return self.run_command(command, state)
        except ShellExit as e:
            # 'exit' only ends its own branch
            return e.exit_code
        except Exception as e:
            write_crash_log(e, raw_command=command, cwd=state.cwd)
            self.report_error(e, command)
            return 1

    def run_parallel(self, members: list[str]) -> list[int]:
        """Run every member concurrently and wait for all of them."""
        with ThreadPoolExecutor(
            max_workers=len(members), thread_name_prefix="wish-branch"
        ) as pool:
            futures = [
                pool.submit(self._run_branch, member, self.state.branch())
                for member in members
            ]
            wait(futures)

        return [f.result() for f in futures]
