# wish — Minimal Parallel Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Configuration and filesystem discovery for wish.

Handles:
- Packaged YAML defaults loading (wish_shell/defaults/system.yaml)
- Data root resolution for log files (WISH_DATA_HOME, ~/.local/share)
- Shell-wide constants (prompt, generic error message)
"""

from __future__ import annotations

import os
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

import yaml

# -----------------------
# Shell constants
# -----------------------

PROMPT = "wish> "
ERROR_MESSAGE = "An error has occurred\n"

# Set to "1" to skip prompt_toolkit and read with input()
LEGACY_UI_ENV = "WISH_LEGACY_UI"


# -----------------------
# Config model wrapper
# -----------------------


class YAMLConfig:
    """Simple config wrapper that implements ConfigModel protocol."""

    def __init__(self, config_dict: dict[str, Any]):
        self._config = config_dict

    @property
    def shell(self) -> dict[str, Any]:
        shell_cfg = self._config.get("shell", {})
        return shell_cfg if isinstance(shell_cfg, dict) else {}

    @property
    def ui(self) -> dict[str, Any]:
        ui_cfg = self._config.get("ui", {})
        return ui_cfg if isinstance(ui_cfg, dict) else {}

    @property
    def logging(self) -> dict[str, Any]:
        log_cfg = self._config.get("logging", {})
        return log_cfg if isinstance(log_cfg, dict) else {}

    @property
    def prompt(self) -> str:
        value = self.shell.get("prompt", PROMPT)
        return value if isinstance(value, str) else PROMPT

    @property
    def error_message(self) -> str:
        value = self.shell.get("error_message", ERROR_MESSAGE)
        return value if isinstance(value, str) else ERROR_MESSAGE

    @property
    def default_path(self) -> list[str]:
        value = self.shell.get("default_path", ["/bin"])
        if not isinstance(value, list):
            return ["/bin"]
        return [str(v) for v in value]

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def get_path(self, path: str, default: Any = None) -> Any:
        """
        Nested lookup using dot-separated path.
        Example: get_path("ui.complete_paths", True)
        """
        if not path:
            return default

        cur: Any = self._config
        for part in path.split("."):
            if not isinstance(cur, dict):
                return default
            if part not in cur:
                return default
            cur = cur[part]
        return cur


# -----------------------
# Data root
# -----------------------


def get_data_root() -> Path:
    """Get the data root directory for wish.

    Resolution order:
    1. WISH_DATA_HOME environment variable (if set)
    2. ~/.local/share (default, XDG_DATA_HOME is ignored)

    The directory is not created here; log writers create what they need.
    """
    wish_data_home = os.getenv("WISH_DATA_HOME")
    if wish_data_home:
        return Path(wish_data_home)
    return Path.home() / ".local" / "share"


def logs_dir(data_root: Path) -> Path:
    """<data_root>/wish/logs"""
    return data_root / "wish" / "logs"


# -----------------------
# Packaged defaults loading
# -----------------------


def _defaults_dir() -> Path:
    """Return the installed path to packaged defaults directory."""
    return Path(
        importlib_resources.files("wish_shell.defaults")
    )  # type: ignore[arg-type]


def load_defaults_yaml(filename: str) -> dict[str, Any]:
    """
    Load a YAML file from wish_shell/defaults/.
    """
    defaults_dir = _defaults_dir()
    path = defaults_dir / filename
    if not path.exists():
        raise FileNotFoundError(
            f"Missing defaults YAML: {filename} "
            f"(looked in {defaults_dir})"
        )

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(
            f"Defaults YAML {filename} must load to a mapping/dict."
        )
    return data


def load_system_config() -> YAMLConfig:
    """
    Load system.yaml from packaged defaults and return a YAMLConfig wrapper.
    """
    return YAMLConfig(load_defaults_yaml("system.yaml"))
