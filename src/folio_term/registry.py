# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Static command registry.

Commands are registered once by an explicit bootstrap step and looked up
by name or alias, case-insensitively. Names and aliases share a single
namespace: nothing may shadow anything else.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from .errors import DuplicateCommandError


@dataclass(frozen=True)
class ArgSpec:
    """Expected positional argument count and accepted --flags."""

    min_args: int = 0
    max_args: int | None = 0  # None = unbounded
    flags: frozenset[str] = frozenset()
    usage: str = ""
    # Every token is text; "--x" is passed through, not parsed as an option
    free_text: bool = False

    def validate(self, args: list[str]) -> str | None:
        """Return a problem description, or None when args fit."""
        positional: list[str] = []
        for arg in args:
            if self.free_text:
                positional.append(arg)
            elif arg.startswith("--") and len(arg) > 2:
                if arg not in self.flags:
                    return f"unknown option {arg}"
            else:
                positional.append(arg)

        n = len(positional)
        if n < self.min_args:
            return "missing argument"
        if self.max_args is not None and n > self.max_args:
            if self.max_args == 0:
                return "takes no arguments"
            return "too many arguments"
        return None


def split_flags(args: list[str]) -> tuple[set[str], list[str]]:
    """Separate --flags from positional arguments."""
    flags: set[str] = set()
    positional: list[str] = []
    for arg in args:
        if arg.startswith("--") and len(arg) > 2:
            flags.add(arg)
        else:
            positional.append(arg)
    return flags, positional


Handler = Callable[[list[str], Any], Any]


@dataclass(frozen=True)
class CommandDescriptor:
    name: str
    execute: Handler
    help: str = ""
    aliases: frozenset[str] = frozenset()
    arg_spec: ArgSpec = field(default_factory=ArgSpec)
    group: str = "System"

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.execute)

    @property
    def usage(self) -> str:
        return self.arg_spec.usage or self.name


@dataclass(frozen=True)
class CompletionEntry:
    """Read-only projection handed to the autocomplete engine."""

    name: str
    aliases: tuple[str, ...]


class CommandRegistry:
    def __init__(self) -> None:
        self._commands: list[CommandDescriptor] = []
        self._names: dict[str, CommandDescriptor] = {}
        self._aliases: dict[str, CommandDescriptor] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """End the registration phase; the registry is read-only after."""
        self._closed = True

    def register(self, descriptor: CommandDescriptor) -> None:
        if self._closed:
            raise RuntimeError(
                f"cannot register {descriptor.name!r}: registry is closed"
            )

        keys = [descriptor.name, *sorted(descriptor.aliases)]
        seen: set[str] = set()
        for key in keys:
            if not key or any(ch.isspace() for ch in key):
                raise ValueError(f"invalid command key: {key!r}")
            low = key.lower()
            if low in seen or low in self._names or low in self._aliases:
                raise DuplicateCommandError(
                    f"command key {key!r} is already registered",
                    hint=f"while registering {descriptor.name!r}",
                )
            seen.add(low)

        self._commands.append(descriptor)
        self._names[descriptor.name.lower()] = descriptor
        for alias in descriptor.aliases:
            self._aliases[alias.lower()] = descriptor

    def resolve(self, token: str) -> CommandDescriptor | None:
        """Case-insensitive exact match: names first, then aliases."""
        low = token.lower()
        found = self._names.get(low)
        if found is not None:
            return found
        return self._aliases.get(low)

    def list_for_autocomplete(self) -> list[CompletionEntry]:
        return [
            CompletionEntry(name=d.name, aliases=tuple(sorted(d.aliases)))
            for d in self._commands
        ]

    def keys(self) -> list[str]:
        """Every name and alias, as registered."""
        out: list[str] = []
        for d in self._commands:
            out.append(d.name)
            out.extend(sorted(d.aliases))
        return out

    def __iter__(self) -> Iterator[CommandDescriptor]:
        return iter(list(self._commands))

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and self.resolve(token) is not None
