# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Error taxonomy for the terminal core.

Only DuplicateCommandError is allowed to escape to the bootstrap caller.
Every other error is recovered by the executor and rendered as a single
Error block in scrollback.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class TerminalError(Exception):
    message: str
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} ({self.hint})"
        return self.message

    @property
    def tag(self) -> str:
        return type(self).__name__


class UnknownCommand(TerminalError):
    """Command token does not resolve against the registry."""


class InvalidArguments(TerminalError):
    """Arguments do not match the command's ArgSpec."""


class HandlerFailure(TerminalError):
    """A handler raised or its awaitable rejected."""


class Interrupted(TerminalError):
    """Cooperative cancellation was requested and honored."""

    def __init__(self, message: str = "interrupted", hint: str = "") -> None:
        super().__init__(message, hint)


class DuplicateCommandError(TerminalError):
    """A name or alias collides at registration time."""


def user_facing_error(message: str, *, hint: str = "") -> str:
    """Single line shown in scrollback; never carries a traceback."""
    message = " ".join(str(message).split())
    if hint:
        return f"Error: {message}. {hint}"
    return f"Error: {message}"
