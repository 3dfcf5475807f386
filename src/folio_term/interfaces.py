# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Protocol definitions for dependency injection.

These interfaces keep the terminal core apart from the collaborators it
talks to: the portfolio data API, the settings store and the config.
"""

from __future__ import annotations

from typing import Any, Protocol


class PortfolioSource(Protocol):
    """Protocol for the portfolio data API (opaque async collaborator)."""

    async def get_visitor_portfolio(self) -> dict[str, Any]:
        """Return the public portfolio document, or raise on failure."""
        ...

    def invalidate(self) -> None:
        """Drop any cached document so the next fetch hits the source."""
        ...


class SettingsStore(Protocol):
    """Protocol for small key/value view settings (theme, ...)."""

    def get_setting(self, key: str, default: str) -> str:
        """Get a setting, or default when unset."""
        ...

    def set_setting(self, key: str, value: str) -> None:
        """Set a setting."""
        ...


class ConfigModel(Protocol):
    """Protocol for configuration access."""

    @property
    def terminal(self) -> dict[str, Any]:
        """Buffer capacity, history limit, welcome banner."""
        ...

    @property
    def prompt(self) -> dict[str, Any]:
        """user / host / cwd shown in the prompt echo."""
        ...

    @property
    def commands(self) -> dict[str, Any]:
        """Command configuration (static text commands)."""
        ...

    @property
    def execution(self) -> dict[str, Any]:
        """Execution tuning (interrupt grace)."""
        ...

    @property
    def themes(self) -> list[str]:
        """Ordered theme names."""
        ...

    def get_path(self, path: str, default: Any = None) -> Any:
        """Dotted nested lookup."""
        ...
