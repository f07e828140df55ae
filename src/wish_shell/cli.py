# wish — Minimal Parallel Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
wish CLI entry point and shell loop.

Design:
- CLI owns process startup, argument checking and input sources.
- Kernel is the session engine (config + executor injected).
- Interactive mode uses PromptToolkitUI on a real terminal and plain
  input() otherwise; batch mode reads a file with no prompt and no echo.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterable
from pathlib import Path

from . import config
from .errors import InvocationError, ShellExit
from .executor import SubprocessExecutor
from .kernel import Kernel, write_crash_log
from .state import ShellState
from .ui import PromptToolkitUI

USAGE = "usage: wish [batch-file]"


def _dispatch_line(kernel: Kernel, line: str) -> int | None:
    """Feed one line to the kernel.

    Returns:
        The shell's exit status if the line ended the session, else None.
    """
    try:
        kernel.handle_line(line)
    except ShellExit as e:
        kernel.running = False
        return e.exit_code
    except Exception as e:
        # Unhandled exception - write crash log, keep the session alive
        write_crash_log(
            e,
            raw_command=line,
            cwd=kernel.state.cwd,
        )
        kernel.report_error(e, line)
    return None


def run_repl(
    kernel: Kernel,
    ui: PromptToolkitUI | None = None,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> int:
    """Run the interactive shell loop until end of input or 'exit'."""
    kernel.start()
    while kernel.running:
        try:
            prompt = kernel.prompt()
            if ui is not None:
                line = ui.read(prompt)
            else:
                line = input_fn(prompt)
        except EOFError:
            break
        except KeyboardInterrupt:
            # Drop the half-typed line and prompt again
            if ui is None:
                output_fn("")
            continue

        status = _dispatch_line(kernel, line or "")
        if status is not None:
            return status

    kernel.running = False
    return 0


def run_batch(kernel: Kernel, lines: Iterable[str]) -> int:
    """Run every line of a batch source; no prompt, no echo."""
    kernel.start()
    for line in lines:
        status = _dispatch_line(kernel, line)
        if status is not None:
            return status
    kernel.running = False
    return 0


def _wants_prompt_toolkit() -> bool:
    if os.environ.get(config.LEGACY_UI_ENV) == "1":
        return False
    return sys.stdin.isatty() and sys.stdout.isatty()


def main(argv: list[str] | None = None) -> int:
    """Main entry point for wish."""
    args = sys.argv[1:] if argv is None else list(argv)

    # Explicit wiring: config, executor and initial state injected into kernel
    cfg = config.load_system_config()
    executor = SubprocessExecutor(error_message=cfg.error_message)
    state = ShellState(search_path=list(cfg.default_path))
    kernel = Kernel(executor=executor, config=cfg, state=state)

    if len(args) > 1:
        kernel.report_error(InvocationError(USAGE), " ".join(args))
        return 1

    if len(args) == 1:
        batch_path = Path(args[0])
        try:
            # Bytes that are not UTF-8 pass through to argv and file names
            # unchanged; only "\n" ends a line
            batch_file = batch_path.open(
                "r", encoding="utf-8", errors="surrogateescape", newline="\n"
            )
        except OSError as e:
            kernel.report_error(
                InvocationError(f"cannot open batch file: {e}"), args[0]
            )
            return 1
        with batch_file:
            return run_batch(kernel, batch_file)

    if not _wants_prompt_toolkit():
        return run_repl(kernel)

    # Default on a terminal: PromptToolkitUI (completion, scrollback)
    return run_repl(kernel, ui=PromptToolkitUI(kernel))
