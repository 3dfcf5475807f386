# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Submitted-line history with Up/Down recall.

Entries are oldest -> newest. While browsing, the line the user was
composing before the first recall sits in a side slot and comes back
untouched once recall walks past the newest entry.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CommandLine:
    raw: str


class HistoryStore:
    def __init__(self, limit: int | None = None) -> None:
        self._entries: list[CommandLine] = []
        self._cursor: int | None = None  # None = not browsing
        self._draft: str = ""
        self._limit = limit if limit and limit > 0 else None

    # ---------- read ----------

    @property
    def entries(self) -> tuple[CommandLine, ...]:
        return tuple(self._entries)

    @property
    def cursor(self) -> int | None:
        return self._cursor

    @property
    def browsing(self) -> bool:
        return self._cursor is not None

    def __len__(self) -> int:
        return len(self._entries)

    # ---------- write ----------

    def append(self, line: CommandLine) -> None:
        """Record a submitted line; blank submissions are not recorded.

        Consecutive duplicates are kept, as in a plain shell history.
        """
        self.reset_browsing()
        if not line.raw.strip():
            return
        self._entries.append(line)
        if self._limit is not None and len(self._entries) > self._limit:
            del self._entries[: len(self._entries) - self._limit]

    def reset_browsing(self) -> None:
        self._cursor = None
        self._draft = ""

    # ---------- recall ----------

    def recall_previous(self, current_draft: str) -> str:
        if not self._entries:
            return current_draft

        if self._cursor is None:
            self._draft = current_draft
            self._cursor = len(self._entries) - 1
        else:
            self._cursor = max(0, self._cursor - 1)

        return self._entries[self._cursor].raw

    def recall_next(self) -> str | None:
        """Step toward the newest entry.

        Returns None when not browsing (nothing to change).
        """
        if self._cursor is None:
            return None

        if self._cursor < len(self._entries) - 1:
            self._cursor += 1
            return self._entries[self._cursor].raw

        draft = self._draft
        self.reset_browsing()
        return draft
