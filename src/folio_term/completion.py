# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Command-token autocomplete.

Ranking, highest first:
- exact match of the whole token (name or alias)
- command names
- aliases
Ties inside a rank are broken lexicographically (case-insensitive).
"""

from __future__ import annotations

from dataclasses import dataclass

from .registry import CommandRegistry

SCORE_EXACT = 3.0
SCORE_NAME = 2.0
SCORE_ALIAS = 1.0


@dataclass(frozen=True)
class AutocompleteCandidate:
    text: str
    score: float
    is_alias: bool = False
    target: str = ""  # command name an alias points at


def command_fragment(partial: str) -> str | None:
    """Return the command token being typed, or None once past it.

    Mirrors the first-token rule of shell completion: as soon as the user
    has typed whitespace after the command, we're in arguments.
    """
    s = partial.lstrip()
    if not s or any(ch.isspace() for ch in s):
        return None
    return s


class AutocompleteEngine:
    """Stateless; recomputed on every call."""

    def suggest(
        self, partial: str, registry: CommandRegistry
    ) -> list[AutocompleteCandidate]:
        fragment = command_fragment(partial)
        if fragment is None:
            return []

        low = fragment.lower()
        out: list[AutocompleteCandidate] = []
        for entry in registry.list_for_autocomplete():
            if entry.name.lower().startswith(low):
                score = SCORE_EXACT if entry.name.lower() == low else SCORE_NAME
                out.append(
                    AutocompleteCandidate(
                        text=entry.name, score=score, target=entry.name
                    )
                )
            for alias in entry.aliases:
                if alias.lower().startswith(low):
                    score = SCORE_EXACT if alias.lower() == low else SCORE_ALIAS
                    out.append(
                        AutocompleteCandidate(
                            text=alias,
                            score=score,
                            is_alias=True,
                            target=entry.name,
                        )
                    )

        out.sort(key=lambda c: (-c.score, c.text.lower(), c.text))
        return out
