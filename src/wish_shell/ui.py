# wish — Minimal Parallel Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

from __future__ import annotations

import os
from collections.abc import Iterable
from typing import TYPE_CHECKING

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.key_binding import KeyBindings

from .builtins import BUILTINS
from .parser import PARALLEL_SEPARATOR, REDIRECT

if TYPE_CHECKING:
    from .kernel import Kernel  # pragma: no cover


# ----------------------------
# Config helpers (read through kernel.config.get_path)
# ----------------------------


def _cfg_bool(kernel: Kernel | None, path: str, default: bool) -> bool:
    if kernel is None:
        return default
    cfg = getattr(kernel, "config", None)
    if cfg is None or not hasattr(cfg, "get_path"):
        return default
    return bool(cfg.get_path(path, default))


def current_member(text: str) -> str:
    """Text of the parallel member the cursor is in (after the last '&')."""
    return text.rsplit(PARALLEL_SEPARATOR, 1)[-1].lstrip()


# ----------------------------
# Completers
# ----------------------------


class ExecutableCompleter(Completer):
    """Completes builtins and programs found on the shell's search path.

    Only the first token of the current parallel member is completed.
    """

    def __init__(self, kernel: Kernel | None = None) -> None:
        self.kernel = kernel
        self._cache: set[str] | None = None
        self._cache_key: tuple[str, ...] | None = None

    def _search_dirs(self) -> list[str]:
        if self.kernel is None:
            return []
        state = self.kernel.state
        return [state.resolve_path(d) for d in state.search_path]

    def _load(self) -> set[str]:
        dirs = tuple(self._search_dirs())
        if self._cache is not None and self._cache_key == dirs:
            return self._cache

        exes: set[str] = set()
        for d in dirs:
            try:
                names = os.listdir(d)
            except OSError:
                continue
            for name in names:
                full = os.path.join(d, name)
                if os.path.isfile(full) and os.access(full, os.X_OK):
                    exes.add(name)

        self._cache = exes
        self._cache_key = dirs
        return exes

    def get_completions(
        self, document, complete_event
    ) -> Iterable[Completion]:
        token = current_member(document.text_before_cursor or "")
        if not token or any(c.isspace() for c in token) or REDIRECT in token:
            return

        for name in sorted(BUILTINS):
            if name.startswith(token):
                yield Completion(
                    name, start_position=-len(token), display_meta="builtin"
                )
        for exe in sorted(self._load() - set(BUILTINS)):
            if exe.startswith(token):
                yield Completion(
                    exe, start_position=-len(token), display_meta="exe"
                )


class PathCompleter(Completer):
    """Filesystem path completion for arguments and redirect targets.

    Paths are relative to the shell's working directory.
    """

    def __init__(self, kernel: Kernel | None = None) -> None:
        self.kernel = kernel

    def _cwd(self) -> str:
        if self.kernel is None:
            return os.getcwd()
        return self.kernel.state.cwd

    def _current_arg_token(self, text: str) -> str | None:
        """Extract the path fragment under the cursor, or None."""
        member = current_member(text)
        # Need at least the command token first
        if not member or not any(c.isspace() for c in member):
            if REDIRECT not in member:
                return None
        if member and member[-1].isspace():
            return ""
        token = member.split()[-1]
        # 'cmd>out' style: complete what follows the '>'
        return token.rsplit(REDIRECT, 1)[-1]

    def _list_dir(self, directory: str) -> list[str]:
        try:
            return sorted(os.listdir(directory))
        except OSError:
            return []

    def get_completions(
        self, document, complete_event
    ) -> Iterable[Completion]:
        token = self._current_arg_token(document.text_before_cursor or "")
        if token is None:
            return

        cwd = self._cwd()
        if token.endswith("/"):
            base_dir = token
            prefix = ""
            insert_prefix = token
        else:
            base_dir = os.path.dirname(token)
            prefix = os.path.basename(token)
            insert_prefix = base_dir + "/" if base_dir else ""

        listing_dir = os.path.join(cwd, base_dir) if base_dir else cwd
        for name in self._list_dir(listing_dir):
            if not name.startswith(prefix):
                continue
            is_dir = os.path.isdir(os.path.join(listing_dir, name))
            ins = f"{insert_prefix}{name}" + ("/" if is_dir else "")
            yield Completion(
                ins,
                start_position=-len(token),
                display_meta="dir" if is_dir else "file",
            )


class WishCompleter(Completer):
    def __init__(self, kernel: Kernel | None) -> None:
        self.kernel = kernel
        self._exe = ExecutableCompleter(kernel)
        self._path = PathCompleter(kernel)

    def get_completions(
        self, document, complete_event
    ) -> Iterable[Completion]:
        if _cfg_bool(self.kernel, "ui.complete_executables", True):
            yield from self._exe.get_completions(document, complete_event)
        if _cfg_bool(self.kernel, "ui.complete_paths", True):
            yield from self._path.get_completions(document, complete_event)


# ----------------------------
# PromptSession UI
# ----------------------------


class PromptToolkitUI:
    """
    Interactive terminal UI:
      - Plain 'wish> ' prompt, normal scrollback.
      - Tab completion of builtins, search-path programs and file paths.
      - Ctrl+L clears the screen without discarding the current line.
    """

    def __init__(self, kernel: Kernel | None = None) -> None:
        self.kernel = kernel
        self.session: PromptSession[str] | None = None
        self._completer: WishCompleter | None = None

    def _ensure_session(self) -> None:
        if self.session is not None:
            return

        self._completer = WishCompleter(self.kernel)
        self.session = PromptSession(
            key_bindings=self.build_key_bindings(),
            completer=self._completer,
            complete_while_typing=False,
        )

    # ---------- public API ----------

    def read(self, prompt: str) -> str:
        """Read one line; raises EOFError on Ctrl-D."""
        self._ensure_session()
        assert self.session is not None
        return self.session.prompt(prompt)

    # ---------- keybindings ----------

    def build_key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add("c-l")
        def _(event):
            event.app.renderer.clear()

        return kb
