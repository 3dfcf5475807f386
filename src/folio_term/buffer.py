# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Scrollback: an ordered, bounded sequence of immutable output blocks.
"""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from .config import DEFAULT_BUFFER_CAPACITY


class BlockKind(Enum):
    ECHO = "echo"
    RESULT = "result"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class OutputBlock:
    kind: BlockKind
    lines: tuple[str, ...]
    timestamp: float = field(default_factory=time.time)
    tag: str = ""  # error taxonomy name on ERROR blocks

    @classmethod
    def make(
        cls, kind: BlockKind, lines: str | Iterable[str], tag: str = ""
    ) -> OutputBlock:
        if isinstance(lines, str):
            lines = lines.split("\n")
        return cls(kind=kind, lines=tuple(str(s) for s in lines), tag=tag)

    def text(self) -> str:
        return "\n".join(self.lines)


def echo(line: str) -> OutputBlock:
    return OutputBlock.make(BlockKind.ECHO, [line])


def result(lines: str | Iterable[str]) -> OutputBlock:
    return OutputBlock.make(BlockKind.RESULT, lines)


def info(lines: str | Iterable[str]) -> OutputBlock:
    return OutputBlock.make(BlockKind.INFO, lines)


def error(lines: str | Iterable[str], tag: str) -> OutputBlock:
    return OutputBlock.make(BlockKind.ERROR, lines, tag=tag)


class ScreenBuffer:
    def __init__(self, capacity: int = DEFAULT_BUFFER_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("buffer capacity must be at least 1")
        self.capacity = capacity
        self._blocks: deque[OutputBlock] = deque()
        self.evicted = 0
        self.appended = 0  # total ever appended
        self.generation = 0  # bumped by clear()

    def append(self, block: OutputBlock) -> None:
        self._blocks.append(block)
        self.appended += 1
        self.evict_oldest_if_over_capacity()

    def extend(self, blocks: Iterable[OutputBlock]) -> None:
        for block in blocks:
            self.append(block)

    def evict_oldest_if_over_capacity(self) -> None:
        while len(self._blocks) > self.capacity:
            self._blocks.popleft()
            self.evicted += 1

    def clear(self) -> None:
        self._blocks.clear()
        self.generation += 1

    def snapshot(self) -> tuple[OutputBlock, ...]:
        return tuple(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)
