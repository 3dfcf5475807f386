# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Collaborator implementations for folio-term.

- YAMLPortfolioSource: serves the visitor portfolio document from a YAML
  file, off the event loop, with a cache that `reload` can drop.
- MemorySettingsStore: in-memory key/value settings for one session.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from .config import load_yaml_file

# Sections every consumer may rely on (missing ones become empty)
PORTFOLIO_SECTIONS: dict[str, Any] = {
    "personal_info": dict,
    "skills": list,
    "projects": list,
    "experience": list,
    "education": list,
    "social_links": list,
    "resume": dict,
}


def normalize_portfolio(doc: dict[str, Any]) -> dict[str, Any]:
    """Coerce the top-level sections to the expected container types.

    Sections absent from the document are left absent so commands can
    tell "not loaded" apart from "empty".
    """
    out: dict[str, Any] = dict(doc)
    for key, kind in PORTFOLIO_SECTIONS.items():
        if key in out and not isinstance(out[key], kind):
            out[key] = kind()
    return out


class YAMLPortfolioSource:
    """PortfolioSource backed by a YAML document on disk."""

    def __init__(self, path: Path, delay: float = 0.0) -> None:
        """
        Args:
            path: YAML document with the portfolio sections
            delay: artificial latency per fetch, in seconds
        """
        self.path = path
        self.delay = delay
        self._cache: dict[str, Any] | None = None
        self.fetches = 0

    async def get_visitor_portfolio(self) -> dict[str, Any]:
        if self._cache is not None:
            return self._cache

        if self.delay > 0:
            await asyncio.sleep(self.delay)

        if not self.path.exists():
            raise FileNotFoundError(f"portfolio document not found: {self.path}")

        doc = await asyncio.to_thread(load_yaml_file, self.path)
        self.fetches += 1
        self._cache = normalize_portfolio(doc)
        return self._cache

    def invalidate(self) -> None:
        self._cache = None

    @property
    def loaded(self) -> bool:
        return self._cache is not None


class MemorySettingsStore:
    """SettingsStore kept in memory for the lifetime of a session."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._settings: dict[str, str] = dict(initial or {})

    def get_setting(self, key: str, default: str) -> str:
        return self._settings.get(key, default)

    def set_setting(self, key: str, value: str) -> None:
        self._settings[key] = value
