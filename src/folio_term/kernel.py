# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
folio-term kernel.

TerminalController owns exactly one TerminalSession and is the only
writer to it. It routes KeyEvents to line editing, history recall,
autocomplete or submission, and drains submitted lines through a single
FIFO worker so output lands in submission order no matter how long each
handler takes.

Important boundary:
- Kernel does not load YAML or discover defaults.
- Kernel consumes the injected ConfigModel.
- Kernel never renders; views read get_snapshot() and feed raw events.
"""

from __future__ import annotations

import asyncio
import traceback
from collections import deque
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from . import config as cfg_module
from .buffer import OutputBlock, ScreenBuffer, echo, error, info
from .completion import AutocompleteCandidate, AutocompleteEngine
from .config import DEFAULT_BUFFER_CAPACITY, DEFAULT_INTERRUPT_GRACE_SECONDS
from .errors import user_facing_error
from .executor import (
    CancelToken,
    CommandExecutor,
    ExecutionContext,
    Invocation,
    Outcome,
    SessionInfo,
)
from .history import CommandLine, HistoryStore
from .interfaces import ConfigModel, PortfolioSource, SettingsStore
from .keys import InputNormalizer, KeyEvent, KeyKind
from .registry import CommandRegistry
from .utils import split_command_token


def write_crash_log(
    error: BaseException,
    raw_command: str = "",
    command_name: str = "",
    log_path: Path | None = None,
) -> None:
    """Write an entry to the crash log.

    Logs handler failures and unhandled view exceptions with their
    traceback, which the user never sees. Only creates the log directory
    when actually needed. Appends to crash.log (never overwrites).
    """
    try:
        if log_path is None:
            log_path = cfg_module.crash_log_path(cfg_module.get_data_root())

        log_path.parent.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().isoformat()
        lines = [f"{timestamp}"]

        if raw_command:
            lines.append(f"raw={raw_command}")
        if command_name:
            lines.append(f"command={command_name}")

        lines.append(f"error={type(error).__name__}: {error}")
        lines.append("traceback:")
        lines.append(
            "".join(
                traceback.format_exception(
                    type(error), error, error.__traceback__
                )
            ).rstrip()
        )
        lines.append("----")

        with log_path.open("a", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")

    except Exception:
        # If we can't write the crash log, fail silently
        # (we're already in an error state)
        pass


@dataclass
class TerminalSession:
    """Aggregate root for one terminal view instance."""

    history: HistoryStore
    buffer: ScreenBuffer
    current_line: str = ""
    cursor_position: int = 0
    pending_execution: bool = False
    suggestions_open: bool = False
    started_at: datetime = field(default_factory=datetime.now)
    commands_executed: int = 0
    initialized: bool = False
    disposed: bool = False


@dataclass(frozen=True)
class TerminalSnapshot:
    current_line: str
    cursor_position: int
    buffer_view: tuple[OutputBlock, ...]
    suggestions: tuple[AutocompleteCandidate, ...]
    suggestions_open: bool
    pending_execution: bool
    prompt: str


class TerminalController:
    """Public surface consumed by the view layer."""

    def __init__(
        self,
        registry: CommandRegistry,
        config: ConfigModel | None = None,
        portfolio: PortfolioSource | None = None,
        settings: SettingsStore | None = None,
        navigate: Callable[[str], None] | None = None,
        normalizer: InputNormalizer | None = None,
        autocomplete: AutocompleteEngine | None = None,
        executor: CommandExecutor | None = None,
    ) -> None:
        self.registry = registry
        self.config = config
        self.portfolio = portfolio
        self.settings = settings
        self.navigate = navigate
        self.normalizer = normalizer or InputNormalizer()
        self.autocomplete = autocomplete or AutocompleteEngine()
        self.executor = executor or CommandExecutor(
            interrupt_grace=self._cfg_float(
                "execution.interrupt_grace_seconds",
                DEFAULT_INTERRUPT_GRACE_SECONDS,
            ),
            on_failure=self._record_failure,
        )

        history_limit = self._cfg_get("terminal.history_limit", None)
        self.session = TerminalSession(
            history=HistoryStore(
                limit=history_limit if isinstance(history_limit, int) else None
            ),
            buffer=ScreenBuffer(
                capacity=self._cfg_int(
                    "terminal.buffer_capacity", DEFAULT_BUFFER_CAPACITY
                )
            ),
        )

        # Redraw hook (wired by the view)
        self.on_change: Callable[[], None] | None = None

        self._queue: deque[CommandLine] = deque()
        self._worker: asyncio.Task | None = None
        self._active_cancel: CancelToken | None = None

    # -----------------------
    # Config helpers
    # -----------------------

    def _cfg_get(self, path: str, default: Any) -> Any:
        if self.config is None or not hasattr(self.config, "get_path"):
            return default
        return self.config.get_path(path, default)

    def _cfg_int(self, path: str, default: int) -> int:
        val = self._cfg_get(path, default)
        return val if isinstance(val, int) and val > 0 else default

    def _cfg_float(self, path: str, default: float) -> float:
        val = self._cfg_get(path, default)
        if isinstance(val, (int, float)) and not isinstance(val, bool):
            return float(val) if val >= 0 else default
        return default

    # -----------------------
    # Lifecycle
    # -----------------------

    def init(self) -> None:
        """Mount: close registration and show the welcome banner."""
        if self.session.initialized:
            return
        self.session.initialized = True
        self.registry.close()

        welcome = self._cfg_get("terminal.welcome", [])
        if isinstance(welcome, list) and welcome:
            self.session.buffer.append(info([str(s) for s in welcome]))
        self._changed()

    def dispose(self) -> None:
        """Unmount: stop the worker and drop anything still queued."""
        self.session.disposed = True
        self._queue.clear()
        if self._active_cancel is not None:
            self._active_cancel.request()
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
        self._worker = None

    # -----------------------
    # Prompt
    # -----------------------

    @property
    def user(self) -> str:
        return str(self._cfg_get("prompt.user", "guest"))

    @property
    def host(self) -> str:
        return str(self._cfg_get("prompt.host", "portfolio-terminal"))

    @property
    def cwd(self) -> str:
        return str(self._cfg_get("prompt.cwd", "~"))

    def prompt(self) -> str:
        return f"{self.user}@{self.host}:{self.cwd}$ "

    # -----------------------
    # Input
    # -----------------------

    def feed(self, raw: Mapping[str, Any]) -> None:
        """Normalize one raw view event and route it."""
        evt = self.normalizer.normalize(raw)
        if evt is not None:
            self.on_key_event(evt)

    def on_key_event(self, evt: KeyEvent) -> None:
        if self.session.disposed:
            return

        kind = evt.kind
        if kind == KeyKind.PRINTABLE or kind == KeyKind.PASTE:
            self._insert(evt.text)
        elif kind == KeyKind.BACKSPACE:
            self._backspace()
        elif kind == KeyKind.ARROW_LEFT:
            self.session.cursor_position = max(
                0, self.session.cursor_position - 1
            )
        elif kind == KeyKind.ARROW_RIGHT:
            self.session.cursor_position = min(
                len(self.session.current_line),
                self.session.cursor_position + 1,
            )
        elif kind == KeyKind.ARROW_UP and len(self.session.history):
            recalled = self.session.history.recall_previous(
                self.session.current_line
            )
            self._set_line(recalled)
        elif kind == KeyKind.ARROW_DOWN:
            recalled = self.session.history.recall_next()
            if recalled is not None:
                self._set_line(recalled)
        elif kind == KeyKind.TAB:
            self._complete()
        elif kind == KeyKind.ENTER:
            self._submit()
        elif kind == KeyKind.CTRL_C:
            self._interrupt()
        elif kind == KeyKind.CTRL_L:
            self.session.buffer.clear()

        self._changed()

    def _set_line(self, text: str) -> None:
        self.session.current_line = text
        self.session.cursor_position = len(text)
        self.session.suggestions_open = False

    def _edited(self) -> None:
        # Editing a recalled line makes it the new draft
        self.session.history.reset_browsing()
        self.session.suggestions_open = False

    def _insert(self, text: str) -> None:
        if not text:
            return
        s = self.session
        pos = s.cursor_position
        s.current_line = s.current_line[:pos] + text + s.current_line[pos:]
        s.cursor_position = pos + len(text)
        self._edited()

    def _backspace(self) -> None:
        s = self.session
        pos = s.cursor_position
        if pos == 0:
            return
        s.current_line = s.current_line[: pos - 1] + s.current_line[pos:]
        s.cursor_position = pos - 1
        self._edited()

    def _complete(self) -> None:
        s = self.session
        candidates = self.autocomplete.suggest(
            s.current_line[: s.cursor_position], self.registry
        )
        if not candidates:
            return
        if len(candidates) > 1:
            self.session.suggestions_open = True
            return

        lead, _token, rest = split_command_token(self.session.current_line)
        replaced = f"{lead}{candidates[0].text}"
        self.session.current_line = replaced + rest
        self.session.cursor_position = len(replaced)
        self._edited()

    def _interrupt(self) -> None:
        if self._active_cancel is not None:
            self._active_cancel.request()
            return

        s = self.session
        s.buffer.append(echo(f"{self.prompt()}{s.current_line}^C"))
        s.history.reset_browsing()
        self._set_line("")

    # -----------------------
    # Submission + FIFO worker
    # -----------------------

    def _submit(self) -> None:
        s = self.session
        line = CommandLine(raw=s.current_line)
        self._set_line("")

        if not line.raw.strip():
            s.history.reset_browsing()
            s.buffer.append(echo(self.prompt().rstrip()))
            return

        s.history.append(line)
        s.buffer.append(echo(f"{self.prompt()}{line.raw}"))
        self._queue.append(line)
        self._kick()

    def _kick(self) -> None:
        if self._worker is not None or not self._queue:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # no loop yet: lines wait until wait_idle() is awaited
            return
        self._worker = loop.create_task(self._drain())

    async def _drain(self) -> None:
        try:
            while self._queue and not self.session.disposed:
                line = self._queue.popleft()
                await self._run_one(line)
        finally:
            self._worker = None

    async def _run_one(self, line: CommandLine) -> None:
        try:
            prepared = self.executor.prepare(line, self.registry)
            if isinstance(prepared, Invocation):
                cancel = CancelToken()
                self._active_cancel = cancel
                try:
                    outcome = await self.executor.invoke(
                        prepared,
                        self._context(cancel),
                        on_pending=self._set_pending,
                    )
                finally:
                    self._active_cancel = None
                    self._set_pending(False)
            else:
                outcome = prepared
        except asyncio.CancelledError:
            raise
        except Exception as e:
            write_crash_log(e, raw_command=line.raw)
            outcome = Outcome(
                blocks=(
                    error(
                        user_facing_error("internal error while running command"),
                        tag="HandlerFailure",
                    ),
                )
            )

        if self.session.disposed:
            return
        self._apply(outcome)
        self.session.commands_executed += 1
        self._changed()

    def _apply(self, outcome: Outcome) -> None:
        if outcome.clear:
            self.session.buffer.clear()
        self.session.buffer.extend(outcome.blocks)

    def _set_pending(self, pending: bool) -> None:
        if self.session.pending_execution != pending:
            self.session.pending_execution = pending
            self._changed()

    def _context(self, cancel: CancelToken) -> ExecutionContext:
        s = self.session
        return ExecutionContext(
            registry=self.registry,
            config=self.config,
            cancel=cancel,
            history=tuple(e.raw for e in s.history.entries),
            session=SessionInfo(
                user=self.user,
                host=self.host,
                cwd=self.cwd,
                started_at=s.started_at,
                commands_executed=s.commands_executed,
                buffered_blocks=len(s.buffer),
            ),
            portfolio=self.portfolio,
            settings=self.settings,
            navigate=self.navigate,
        )

    def _record_failure(self, e: BaseException, inv: Invocation) -> None:
        write_crash_log(e, raw_command=inv.line.raw, command_name=inv.descriptor.name)

    async def wait_idle(self) -> None:
        """Resolve once every submitted line has settled."""
        self._kick()
        while self._worker is not None:
            await asyncio.wait({self._worker})
            self._kick()

    @property
    def queued(self) -> int:
        return len(self._queue)

    # -----------------------
    # Read side
    # -----------------------

    def get_snapshot(self) -> TerminalSnapshot:
        s = self.session
        suggestions = self.autocomplete.suggest(
            s.current_line[: s.cursor_position], self.registry
        )
        return TerminalSnapshot(
            current_line=s.current_line,
            cursor_position=s.cursor_position,
            buffer_view=s.buffer.snapshot(),
            suggestions=tuple(suggestions),
            suggestions_open=s.suggestions_open,
            pending_execution=s.pending_execution,
            prompt=self.prompt(),
        )

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()
