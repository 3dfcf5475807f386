# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
folio-term CLI entry point and line REPL loop.

Design:
- CLI owns process startup and collaborator wiring.
- Controller is the session engine (config+portfolio+settings injected).
- Default view is the full-screen PromptToolkitUI; FOLIO_TERM_LEGACY_UI=1
  falls back to the plain line REPL (keeps scrollback + copy/select).
"""

from __future__ import annotations

import asyncio
import inspect
import os
from collections.abc import Callable
from typing import Any

from . import config
from .buffer import BlockKind, OutputBlock
from .commands import register_builtin_commands
from .kernel import TerminalController, write_crash_log
from .registry import CommandRegistry
from .store import MemorySettingsStore, YAMLPortfolioSource
from .ui import LineUI, PromptToolkitUI


def format_block(block: OutputBlock) -> str:
    """Render one block as ANSI-colored text for the line REPL."""
    color = config.ANSI_COLORS[config.KIND_COLORS.get(block.kind.value, "reset")]
    reset = config.ANSI_COLORS["reset"]
    return "\n".join(f"{color}{line}{reset}" for line in block.lines)


class _BufferCursor:
    """Tracks which scrollback blocks the line REPL has already printed."""

    def __init__(self, controller: TerminalController) -> None:
        self.controller = controller
        buf = controller.session.buffer
        self.seen = 0
        self.generation = buf.generation

    def pending(self) -> tuple[bool, list[OutputBlock]]:
        """Return (cleared, new_blocks) since the last call."""
        buf = self.controller.session.buffer
        snapshot = buf.snapshot()

        cleared = buf.generation != self.generation
        if cleared:
            blocks = list(snapshot)
        else:
            fresh = min(buf.appended - self.seen, len(snapshot))
            blocks = list(snapshot[len(snapshot) - fresh:]) if fresh > 0 else []

        self.seen = buf.appended
        self.generation = buf.generation
        return cleared, blocks


async def run_repl(
    controller: TerminalController,
    ui: LineUI | None = None,
    input_fn: Callable[[str], Any] = input,
    output_fn: Callable[[str], None] = print,
) -> None:
    """Run the plain folio-term REPL loop.

    Each line read is fed to the controller as a paste followed by Enter,
    so the line REPL exercises exactly the same path as the full-screen
    view. Echo blocks are not printed (the terminal already shows what
    was typed).
    """

    def emit(text: str) -> None:
        if ui is not None:
            ui.write(text + "\n")
        else:
            output_fn(text)

    def flush(cursor: _BufferCursor) -> None:
        cleared, blocks = cursor.pending()
        if cleared:
            if ui is not None:
                ui.clear()
            else:
                output_fn("\033[2J\033[H")
        for block in blocks:
            if block.kind == BlockKind.ECHO:
                continue
            emit(format_block(block))

    cursor = _BufferCursor(controller)
    controller.init()
    flush(cursor)

    while not controller.session.disposed:
        try:
            prompt = controller.prompt()

            if ui is not None:
                line = await ui.read(prompt)
            else:
                line = input_fn(prompt)
                if inspect.isawaitable(line):
                    line = await line

            line = (line or "").strip()
            if not line:
                continue

            try:
                controller.feed({"type": "paste", "text": line})
                controller.feed({"type": "keydown", "key": "Enter"})
                await controller.wait_idle()
                flush(cursor)

            except Exception as e:
                # Unhandled exception - write crash log
                write_crash_log(e, raw_command=line)
                # Show error to user
                emit(f"[ERROR] Unhandled exception: {type(e).__name__}: {e}")
                # Continue session

        except (KeyboardInterrupt, EOFError):
            msg = "\nBye!\n"
            if ui is not None:
                ui.write(msg)
            else:
                output_fn(msg)
            break

    controller.dispose()


def build_controller(cfg: config.YAMLConfig | None = None) -> TerminalController:
    """Explicit wiring: config + portfolio + settings injected into the controller."""
    if cfg is None:
        cfg = config.load_system_config()

    registry = register_builtin_commands(CommandRegistry(), cfg)
    return TerminalController(
        registry=registry,
        config=cfg,
        portfolio=YAMLPortfolioSource(config.portfolio_document_path()),
        settings=MemorySettingsStore(),
    )


def main() -> None:
    """Main entry point for folio-term."""
    cfg = config.load_system_config()
    controller = build_controller(cfg)

    # If user explicitly disables the full-screen UI:
    if os.environ.get("FOLIO_TERM_LEGACY_UI") == "1":
        asyncio.run(run_repl(controller, ui=LineUI(controller, cfg)))
        return

    # Default: full-screen PromptToolkitUI
    ui = PromptToolkitUI(controller, cfg)
    try:
        asyncio.run(ui.run_async())
    except Exception as e:
        write_crash_log(e)
        raise
