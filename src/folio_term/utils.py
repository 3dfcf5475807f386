# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Utility functions for folio-term.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


def format_table(
    headers: list[str],
    rows: list[list[Any]],
    title: str = ""
) -> list[str]:
    """
    Format data as a simple text table without external dependencies.

    Args:
        headers: List of column header names
        rows: List of rows, where each row is a list of values
        title: Optional title to display above the table

    Returns:
        Table lines (empty list when there are no rows)
    """
    if not rows:
        return []

    str_headers = [str(h) for h in headers]
    str_rows = [[str(val) for val in row] for row in rows]

    # Column width = max of header and all row values
    col_widths = []
    for i, header in enumerate(str_headers):
        max_width = len(header)
        for row in str_rows:
            if i < len(row):
                max_width = max(max_width, len(row[i]))
        col_widths.append(max_width)

    lines = []
    if title:
        lines.append(title)

    lines.append(
        "  ".join(h.ljust(col_widths[i]) for i, h in enumerate(str_headers))
        .rstrip()
    )
    for row in str_rows:
        lines.append(
            "  ".join(val.ljust(col_widths[i]) for i, val in enumerate(row))
            .rstrip()
        )

    return lines


def skill_bar(level: Any, width: int = 20) -> str:
    """Render a proficiency percentage as a fixed-width bar.

    One filled cell per 5% at the default width. Out-of-range or
    non-numeric levels are clamped to 0..100.
    """
    try:
        pct = float(level)
    except (TypeError, ValueError):
        pct = 0.0
    pct = max(0.0, min(100.0, pct))
    filled = int(pct * width // 100)
    return "█" * filled + "░" * (width - filled)


class LexerState(Enum):
    """States for the quote-aware command-line lexer."""
    NORMAL = auto()
    DOUBLE_QUOTE = auto()


@dataclass(frozen=True)
class Tokenized:
    """Result of splitting a command line."""
    tokens: list[str]
    unterminated: bool = False

    @property
    def command(self) -> str:
        return self.tokens[0] if self.tokens else ""

    @property
    def args(self) -> list[str]:
        return self.tokens[1:]


def tokenize_command_line(text: str) -> Tokenized:
    """Split a command line on whitespace, keeping "quoted segments" whole.

    Only double quotes group. A quoted segment glued to surrounding text
    joins the same token (he"llo world" -> hello world), and an empty pair
    of quotes yields an empty token. Single quotes and backslashes are
    literal characters.

    Returns:
        Tokenized with unterminated=True when a double quote was left open;
        the open segment still becomes the last token.
    """
    tokens: list[str] = []
    current: list[str] = []
    in_token = False
    state = LexerState.NORMAL

    for ch in text:
        if state == LexerState.DOUBLE_QUOTE:
            if ch == '"':
                state = LexerState.NORMAL
            else:
                current.append(ch)
            continue

        if ch == '"':
            state = LexerState.DOUBLE_QUOTE
            in_token = True
        elif ch.isspace():
            if in_token:
                tokens.append("".join(current))
                current = []
                in_token = False
        else:
            current.append(ch)
            in_token = True

    if in_token:
        tokens.append("".join(current))

    return Tokenized(
        tokens=tokens, unterminated=state == LexerState.DOUBLE_QUOTE
    )


def split_command_token(text: str) -> tuple[str, str, str]:
    """Split raw input into (leading whitespace, first token, rest).

    Used by Tab completion, which swaps only the command token and keeps
    everything after it byte-for-byte.
    """
    stripped = text.lstrip()
    lead = text[: len(text) - len(stripped)]
    for i, ch in enumerate(stripped):
        if ch.isspace():
            return lead, stripped[:i], stripped[i:]
    return lead, stripped, ""
