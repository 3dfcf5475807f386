# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Configuration and filesystem discovery for folio-term.

Handles:
- Data root resolution (FOLIO_TERM_DATA_HOME, ~/.local/share)
- Crash log location
- Packaged YAML defaults loading (folio_term/defaults/*.yaml)
- Portfolio document resolution (FOLIO_TERM_PORTFOLIO)
- ANSI palette + UI_CLEAR semantic sentinel
"""

from __future__ import annotations

import os
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

import yaml

# -----------------------
# UI + branding constants
# -----------------------

ANSI_COLORS: dict[str, str] = {
    "cyan": "\033[38;5;69;1m",
    "pink": "\033[38;5;169;1m",
    "magenta": "\033[38;5;126;1m",
    "yellow": "\033[38;5;226;1m",
    "reset": "\033[0m",
    "dim": "\033[2m",
    "green": "\033[32m",
    "red": "\033[31m",
}

# Block kind -> palette entry for the plain line REPL
KIND_COLORS: dict[str, str] = {
    "echo": "cyan",
    "result": "reset",
    "error": "red",
    "info": "dim",
}


class _UIClear:
    """Semantic UI intent for clear screen operations.

    Matched by identity only; handler text is never treated as the intent.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "UI_CLEAR"


UI_CLEAR = _UIClear()

DEFAULT_BUFFER_CAPACITY = 500
DEFAULT_INTERRUPT_GRACE_SECONDS = 3.0


# -----------------------
# Config model wrapper
# -----------------------


class YAMLConfig:
    """Simple config wrapper that implements ConfigModel protocol."""

    def __init__(self, config_dict: dict[str, Any]):
        self._config = config_dict

    def _section(self, name: str) -> dict[str, Any]:
        val = self._config.get(name, {})
        return val if isinstance(val, dict) else {}

    @property
    def terminal(self) -> dict[str, Any]:
        return self._section("terminal")

    @property
    def prompt(self) -> dict[str, Any]:
        return self._section("prompt")

    @property
    def commands(self) -> dict[str, Any]:
        return self._section("commands")

    @property
    def execution(self) -> dict[str, Any]:
        return self._section("execution")

    @property
    def ui(self) -> dict[str, Any]:
        return self._section("ui")

    @property
    def themes(self) -> list[str]:
        themes = self._config.get("themes", [])
        if not isinstance(themes, list):
            return []
        return [str(t) for t in themes]

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def get_path(self, path: str, default: Any = None) -> Any:
        """
        Nested lookup using dot-separated path.
        Example: get_path("ui.theme.style", {}) -> dict style mapping
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
# Data root + crash log
# -----------------------


def get_data_root() -> Path:
    """Get the data root directory for folio-term.

    Resolution order:
    1. FOLIO_TERM_DATA_HOME environment variable (if set)
    2. ~/.local/share (default, XDG_DATA_HOME is ignored)
    """
    data_home = os.getenv("FOLIO_TERM_DATA_HOME")
    if data_home:
        root = Path(data_home)
    else:
        root = Path.home() / ".local" / "share"

    root.mkdir(parents=True, exist_ok=True)
    return root


def crash_log_path(data_root: Path) -> Path:
    """<data_root>/folio-term/logs/crash.log"""
    return data_root / "folio-term" / "logs" / "crash.log"


# -----------------------
# Packaged defaults loading
# -----------------------


def _defaults_dir() -> Path:
    """Return the installed path to packaged defaults directory."""
    return Path(
        importlib_resources.files("folio_term.defaults")
    )  # type: ignore[arg-type]


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML document that must be a mapping."""
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"YAML file {path.name} must load to a mapping/dict.")
    return data


def load_defaults_yaml(filename: str) -> dict[str, Any]:
    """
    Load a YAML file from folio_term/defaults/.
    """
    defaults_dir = _defaults_dir()
    path = defaults_dir / filename
    if not path.exists():
        raise FileNotFoundError(
            f"Missing defaults YAML: {filename} "
            f"(looked in {defaults_dir})"
        )
    return load_yaml_file(path)


def load_system_config() -> YAMLConfig:
    """
    Load terminal.yaml from packaged defaults and return a YAMLConfig wrapper.
    """
    return YAMLConfig(load_defaults_yaml("terminal.yaml"))


def portfolio_document_path() -> Path:
    """Resolve the portfolio document served to portfolio commands.

    FOLIO_TERM_PORTFOLIO wins when set; otherwise the packaged sample.
    """
    override = os.getenv("FOLIO_TERM_PORTFOLIO")
    if override:
        return Path(override).expanduser()
    return _defaults_dir() / "portfolio.yaml"
