# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Command execution for folio-term.

A submitted line walks

    IDLE -> PARSING -> RESOLVING -> VALIDATING -> EXECUTING -> SETTLING -> IDLE

and any early failure drops straight back to IDLE. Either way exactly one
Outcome (a group of output blocks) comes back; per-command errors never
escape as exceptions.

prepare() covers the synchronous front half (parse / resolve / validate)
and invoke() the handler call, so the controller can flip its pending flag
around the only part that can suspend.
"""

from __future__ import annotations

import asyncio
import difflib
import inspect
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any

from .buffer import BlockKind, OutputBlock, error, info, result
from .config import DEFAULT_INTERRUPT_GRACE_SECONDS, UI_CLEAR
from .errors import (
    HandlerFailure,
    Interrupted,
    InvalidArguments,
    TerminalError,
    UnknownCommand,
    user_facing_error,
)
from .history import CommandLine
from .interfaces import ConfigModel, PortfolioSource, SettingsStore
from .registry import CommandDescriptor, CommandRegistry
from .utils import tokenize_command_line


class ExecState(Enum):
    IDLE = auto()
    PARSING = auto()
    RESOLVING = auto()
    VALIDATING = auto()
    EXECUTING = auto()
    SETTLING = auto()


class CancelToken:
    """Cooperative cancellation flag handed to a running handler."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def requested(self) -> bool:
        return self._event.is_set()

    def request(self) -> None:
        self._event.set()

    def raise_if_requested(self) -> None:
        if self._event.is_set():
            raise Interrupted()

    async def wait(self) -> None:
        await self._event.wait()


@dataclass(frozen=True)
class SessionInfo:
    """Read-only facts about the session, as of dispatch time."""

    user: str = "guest"
    host: str = "portfolio-terminal"
    cwd: str = "~"
    started_at: datetime = field(default_factory=datetime.now)
    commands_executed: int = 0
    buffered_blocks: int = 0


@dataclass
class ExecutionContext:
    """What a handler gets to see besides its arguments.

    Everything here is a snapshot or a collaborator; handlers never touch
    the session itself.
    """

    registry: CommandRegistry
    config: ConfigModel | None = None
    cancel: CancelToken = field(default_factory=CancelToken)
    history: tuple[str, ...] = ()
    session: SessionInfo = field(default_factory=SessionInfo)
    portfolio: PortfolioSource | None = None
    settings: SettingsStore | None = None
    navigate: Callable[[str], None] | None = None


@dataclass(frozen=True)
class Invocation:
    line: CommandLine
    descriptor: CommandDescriptor
    args: tuple[str, ...]


@dataclass(frozen=True)
class Outcome:
    blocks: tuple[OutputBlock, ...] = ()
    clear: bool = False

    @property
    def failed(self) -> bool:
        return any(b.kind == BlockKind.ERROR for b in self.blocks)


def error_outcome(err: TerminalError, extra: Iterable[str] = ()) -> Outcome:
    lines = [user_facing_error(err.message, hint=err.hint), *extra]
    return Outcome(blocks=(error(lines, tag=err.tag),))


def coerce_output(value: Any) -> Outcome:
    """Turn whatever a handler returned into an Outcome.

    Accepts None, UI_CLEAR, a string, an OutputBlock, or an iterable of
    strings and/or OutputBlocks. Consecutive strings share one Result block.
    """
    if value is None:
        return Outcome()
    if value is UI_CLEAR:
        return Outcome(clear=True)
    if isinstance(value, str):
        return Outcome(blocks=(result(value),))
    if isinstance(value, OutputBlock):
        return Outcome(blocks=(value,))

    if isinstance(value, Iterable):
        blocks: list[OutputBlock] = []
        pending_lines: list[str] = []
        clear = False
        for item in value:
            if isinstance(item, OutputBlock):
                if pending_lines:
                    blocks.append(result(pending_lines))
                    pending_lines = []
                blocks.append(item)
            elif item is UI_CLEAR:
                clear = True
            else:
                pending_lines.append(str(item))
        if pending_lines:
            blocks.append(result(pending_lines))
        return Outcome(blocks=tuple(blocks), clear=clear)

    return Outcome(blocks=(result(str(value)),))


FailureHook = Callable[[BaseException, Invocation], None]


class CommandExecutor:
    """Parses, resolves, validates and runs one line at a time."""

    def __init__(
        self,
        interrupt_grace: float = DEFAULT_INTERRUPT_GRACE_SECONDS,
        on_failure: FailureHook | None = None,
    ) -> None:
        self.interrupt_grace = interrupt_grace
        self.on_failure = on_failure
        self.state = ExecState.IDLE

    # -----------------------
    # Front half (sync)
    # -----------------------

    def prepare(
        self, line: CommandLine, registry: CommandRegistry
    ) -> Invocation | Outcome:
        """Parse + resolve + validate. Outcome means: stop here."""
        self.state = ExecState.PARSING
        tokenized = tokenize_command_line(line.raw)
        if tokenized.unterminated:
            self.state = ExecState.IDLE
            return error_outcome(
                InvalidArguments("unterminated quote in command line")
            )
        if not tokenized.tokens:
            self.state = ExecState.IDLE
            return Outcome()

        self.state = ExecState.RESOLVING
        token = tokenized.command
        descriptor = registry.resolve(token)
        if descriptor is None:
            self.state = ExecState.IDLE
            return error_outcome(
                UnknownCommand(
                    f"command not found: {token}",
                    hint=self._did_you_mean(token, registry),
                )
            )

        self.state = ExecState.VALIDATING
        problem = descriptor.arg_spec.validate(tokenized.args)
        if problem is not None:
            self.state = ExecState.IDLE
            return self._usage_error(descriptor, problem)

        return Invocation(
            line=line, descriptor=descriptor, args=tuple(tokenized.args)
        )

    def _did_you_mean(self, token: str, registry: CommandRegistry) -> str:
        keys = registry.keys()
        by_low = {k.lower(): k for k in keys}
        close = difflib.get_close_matches(
            token.lower(), list(by_low), n=3, cutoff=0.6
        )
        if close:
            return f"Did you mean: {', '.join(by_low[c] for c in close)}?"
        return "Type 'help' for available commands."

    def _usage_error(
        self, descriptor: CommandDescriptor, problem: str
    ) -> Outcome:
        return error_outcome(
            InvalidArguments(
                f"{descriptor.name}: {problem}",
                hint=f"usage: {descriptor.usage}",
            ),
            extra=[descriptor.help] if descriptor.help else [],
        )

    # -----------------------
    # Back half (may suspend)
    # -----------------------

    async def invoke(
        self,
        invocation: Invocation,
        ctx: ExecutionContext,
        on_pending: Callable[[bool], None] | None = None,
    ) -> Outcome:
        self.state = ExecState.EXECUTING
        suspended = False
        try:
            try:
                value = invocation.descriptor.execute(
                    list(invocation.args), ctx
                )
                if inspect.isawaitable(value):
                    suspended = True
                    if on_pending is not None:
                        on_pending(True)
                    value = await self._await_cooperatively(value, ctx.cancel)
            except Interrupted as e:
                self.state = ExecState.SETTLING
                return error_outcome(e)
            except InvalidArguments as e:
                self.state = ExecState.SETTLING
                extra = [invocation.descriptor.help]
                if not e.hint:
                    e.hint = f"usage: {invocation.descriptor.usage}"
                return error_outcome(e, extra=[s for s in extra if s])
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.state = ExecState.SETTLING
                if self.on_failure is not None:
                    self.on_failure(e, invocation)
                return error_outcome(
                    HandlerFailure(
                        f"{invocation.descriptor.name} failed: "
                        f"{_short_reason(e)}"
                    )
                )

            self.state = ExecState.SETTLING
            outcome = coerce_output(value)
            if ctx.cancel.requested:
                notice = info(
                    f"^C ignored: {invocation.descriptor.name} "
                    f"ran to completion"
                )
                outcome = Outcome(
                    blocks=outcome.blocks + (notice,), clear=outcome.clear
                )
            return outcome
        finally:
            if suspended and on_pending is not None:
                on_pending(False)
            self.state = ExecState.IDLE

    async def _await_cooperatively(
        self, awaitable: Any, cancel: CancelToken
    ) -> Any:
        """Await the handler; after ^C, give it a grace period to stop.

        A handler that neither honors the flag nor finishes within the
        grace period is abandoned (cancelled at its next await point) and
        the slot settles as interrupted, so the queue keeps moving.
        """
        task = asyncio.ensure_future(awaitable)
        watcher = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait(
                {task, watcher}, return_when=asyncio.FIRST_COMPLETED
            )
            if task not in done:
                done, _ = await asyncio.wait(
                    {task}, timeout=self.interrupt_grace
                )
            if task in done:
                return task.result()

            task.cancel()
            task.add_done_callback(_consume_result)
            raise Interrupted(
                "interrupted", hint="command did not stop in time"
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            watcher.cancel()

    async def execute(
        self,
        line: CommandLine,
        registry: CommandRegistry,
        ctx: ExecutionContext,
    ) -> Outcome:
        """Whole pipeline for a single line."""
        prepared = self.prepare(line, registry)
        if isinstance(prepared, Outcome):
            return prepared
        return await self.invoke(prepared, ctx)


def _short_reason(e: BaseException) -> str:
    text = str(e).strip().splitlines()
    reason = text[0] if text else ""
    if not reason:
        return type(e).__name__
    if len(reason) > 120:
        reason = reason[:117] + "..."
    return reason


def _consume_result(task: asyncio.Future) -> None:
    # avoid "exception was never retrieved" noise from abandoned handlers
    if not task.cancelled():
        task.exception()
