# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from prompt_toolkit import PromptSession
from prompt_toolkit.application import Application
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.data_structures import Point
from prompt_toolkit.filters import Condition
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import (
    ConditionalContainer,
    HSplit,
    Layout,
    Window,
)
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.dimension import Dimension
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.shortcuts import clear as pt_clear
from prompt_toolkit.shortcuts import print_formatted_text
from prompt_toolkit.styles import DynamicStyle, Style

from .buffer import BlockKind
from .completion import command_fragment

if TYPE_CHECKING:
    from .kernel import TerminalController, TerminalSnapshot  # pragma: no cover


# ----------------------------
# Config helpers (config object injected by cli.main)
# ----------------------------


def _cfg_get_path(config: Any, path: str, default):
    if config is None or not hasattr(config, "get_path"):
        return default
    try:
        return config.get_path(path, default)
    except Exception:
        return default


def _cfg_bool(config: Any, path: str, default: bool) -> bool:
    return bool(_cfg_get_path(config, path, default))


def _cfg_dict(config: Any, path: str, default: dict) -> dict:
    val = _cfg_get_path(config, path, default)
    return val if isinstance(val, dict) else default


# ----------------------------
# Theme / Style
# ----------------------------

# theme name -> (text, accent, background)
THEME_COLORS: dict[str, tuple[str, str, str]] = {
    "matrix": ("#4ade80", "#86efac", "#000000"),
    "cyberpunk": ("#22d3ee", "#f472b6", "#1a0b2e"),
    "retro": ("#fcd34d", "#fb923c", "#2d1b00"),
    "minimal": ("#d1d5db", "#60a5fa", "#1f2937"),
}


def _default_style_dict(theme: str = "matrix") -> dict[str, str]:
    text, accent, bg = THEME_COLORS.get(theme, THEME_COLORS["matrix"])
    return {
        "": f"bg:{bg} {text}",
        "term.echo": f"{accent} bold",
        "term.result": text,
        "term.error": "#f87171",
        "term.info": f"{text} italic",
        "term.prompt": f"{accent} bold",
        "term.cursor": "reverse",
        "term.pending": "#a0a0a0 italic",
        "term.suggestbar": f"bg:#0b0b0b {text}",
        "term.suggestbar.label": "bg:#0b0b0b #808080",
        "term.suggestbar.item": f"bg:#0b0b0b {text}",
        "term.suggestbar.alias": "bg:#0b0b0b #808080 italic",
        # completion menu (line mode)
        "completion-menu": "bg:#111111 #d0d0d0",
        "completion-menu.completion.current": "bg:#303030 #ffffff bold",
        "completion-menu.meta.completion": "bg:#111111 #808080",
    }


def _build_style(config: Any, theme: str = "matrix") -> Style:
    base = _default_style_dict(theme)
    overrides = _cfg_dict(config, "ui.theme.style", {})
    # only keep string->string
    for k, v in list(overrides.items()):
        if isinstance(k, str) and isinstance(v, str):
            base[k] = v
    return Style.from_dict(base)


_KIND_STYLE: dict[BlockKind, str] = {
    BlockKind.ECHO: "class:term.echo",
    BlockKind.RESULT: "class:term.result",
    BlockKind.ERROR: "class:term.error",
    BlockKind.INFO: "class:term.info",
}


# ----------------------------
# Completion (line mode)
# ----------------------------


class TerminalCompleter(Completer):
    """Feeds AutocompleteEngine candidates into prompt_toolkit menus."""

    def __init__(self, controller: TerminalController | None) -> None:
        self.controller = controller

    def get_completions(self, document, complete_event) -> Iterable[Completion]:
        c = self.controller
        if c is None:
            return
        before = document.text_before_cursor or ""
        fragment = command_fragment(before)
        if fragment is None:
            return
        for cand in c.autocomplete.suggest(before, c.registry):
            yield Completion(
                cand.text,
                start_position=-len(fragment),
                display_meta=(f"→ {cand.target}" if cand.is_alias else ""),
            )


# ----------------------------
# Full-screen view
# ----------------------------


def raw_keydown(key: str, ctrl: bool = False) -> dict[str, Any]:
    return {"type": "keydown", "key": key, "ctrlKey": ctrl}


class PromptToolkitUI:
    """
    Full-screen terminal view:
      - scrollback window rendering the buffer snapshot by block kind
      - prompt line with cursor (and a pending indicator while a
        command is running)
      - bottom suggestion bar fed by the live autocomplete candidates
      - key bindings that only build raw events and hand them to the
        controller (the view never edits terminal state itself)
      - Ctrl+D exits
    """

    def __init__(
        self, controller: TerminalController, config: Any = None
    ) -> None:
        self.controller = controller
        self.config = config
        self.app: Application | None = None
        self._snap: TerminalSnapshot | None = None
        self._snap_frame = -1
        self._styles: dict[str, Style] = {}

    # ---------- snapshot (one per rendered frame) ----------

    def _frame(self) -> int:
        if self.app is None:
            return -1
        return int(getattr(self.app, "render_counter", -1))

    def snapshot(self) -> TerminalSnapshot:
        frame = self._frame()
        if self._snap is None or frame != self._snap_frame or frame < 0:
            self._snap = self.controller.get_snapshot()
            self._snap_frame = frame
        return self._snap

    # ---------- theme ----------

    def _theme(self) -> str:
        settings = getattr(self.controller, "settings", None)
        if settings is None:
            return "matrix"
        return settings.get_setting("theme", "matrix")

    def _style(self) -> Style:
        theme = self._theme()
        if theme not in self._styles:
            self._styles[theme] = _build_style(self.config, theme)
        return self._styles[theme]

    # ---------- rendering ----------

    def render_scrollback(self) -> list[tuple[str, str]]:
        out: list[tuple[str, str]] = []
        for block in self.snapshot().buffer_view:
            style = _KIND_STYLE.get(block.kind, "")
            for line in block.lines:
                out.append((style, line + "\n"))
        return out

    def _scrollback_cursor(self) -> Point:
        lines = sum(len(b.lines) for b in self.snapshot().buffer_view)
        return Point(x=0, y=max(0, lines - 1))

    def render_prompt_line(self) -> list[tuple[str, str]]:
        snap = self.snapshot()
        line = snap.current_line
        pos = snap.cursor_position
        at = line[pos] if pos < len(line) else " "
        tokens = [
            ("class:term.prompt", snap.prompt),
            ("", line[:pos]),
            ("class:term.cursor", at),
            ("", line[pos + 1:]),
        ]
        if snap.pending_execution:
            tokens.append(
                ("class:term.pending", "  ⏳ running... (Ctrl+C to interrupt)")
            )
        return tokens

    def _wrap_tokens(
        self, tokens: list[tuple[str, str]], width: int, max_lines: int = 3
    ) -> list[list[tuple[str, str]]]:
        """
        Wrap at token boundaries only. Each token is (style, text).
        Returns list-of-lines; each line is list of tokens.
        """
        lines: list[list[tuple[str, str]]] = [[]]
        used = 0

        for style, text in tokens:
            if len(text) > width:
                text = text[:width]
            if used + len(text) > width:
                if len(lines) >= max_lines:
                    break
                lines.append([])
                used = 0
            lines[-1].append((style, text))
            used += len(text)

        return lines

    def _toolbar_width(self) -> int:
        try:
            if self.app and self.app.output:
                return int(self.app.output.get_size().columns)
        except Exception:
            pass
        return 120

    def render_suggestions(self) -> list[tuple[str, str]]:
        snap = self.snapshot()
        if not snap.suggestions:
            return []

        label = "  tab: " if len(snap.suggestions) > 1 else "  tab → "
        tokens: list[tuple[str, str]] = [("class:term.suggestbar.label", label)]
        limit = len(snap.suggestions) if snap.suggestions_open else 8
        for cand in snap.suggestions[:limit]:
            style = (
                "class:term.suggestbar.alias"
                if cand.is_alias
                else "class:term.suggestbar.item"
            )
            tokens.append((style, f"{cand.text} "))

        out: list[tuple[str, str]] = []
        max_lines = 3 if snap.suggestions_open else 1
        wrapped = self._wrap_tokens(
            tokens, width=self._toolbar_width(), max_lines=max_lines
        )
        for li, line in enumerate(wrapped):
            out.extend(line)
            if li != len(wrapped) - 1:
                out.append(("class:term.suggestbar", "\n"))
        return out

    def _suggestions_visible(self) -> bool:
        if not _cfg_bool(self.config, "ui.suggestions.enabled", True):
            return False
        return bool(self.snapshot().suggestions)

    def build_layout(self) -> Layout:
        scrollback = Window(
            content=FormattedTextControl(
                self.render_scrollback,
                get_cursor_position=self._scrollback_cursor,
                show_cursor=False,
            ),
            wrap_lines=True,
        )
        prompt_line = Window(
            content=FormattedTextControl(self.render_prompt_line, focusable=True),
            height=Dimension(min=1, max=3),
            wrap_lines=True,
        )
        suggestions = ConditionalContainer(
            Window(
                content=FormattedTextControl(self.render_suggestions),
                height=Dimension(min=1, max=3),
                style="class:term.suggestbar",
            ),
            filter=Condition(self._suggestions_visible),
        )
        return Layout(
            HSplit([scrollback, prompt_line, suggestions]),
            focused_element=prompt_line,
        )

    # ---------- keybindings ----------

    def build_key_bindings(self) -> KeyBindings:
        kb = KeyBindings()
        feed = self.controller.feed

        named = {
            "enter": "Enter",
            "backspace": "Backspace",
            "up": "ArrowUp",
            "down": "ArrowDown",
            "left": "ArrowLeft",
            "right": "ArrowRight",
            "tab": "Tab",
        }
        for ptk_key, dom_key in named.items():

            @kb.add(ptk_key)
            def _(event, dom_key=dom_key):
                feed(raw_keydown(dom_key))

        @kb.add("c-c")
        def _(event):
            feed(raw_keydown("c", ctrl=True))

        @kb.add("c-l")
        def _(event):
            feed(raw_keydown("l", ctrl=True))

        @kb.add("c-d")
        def _(event):
            event.app.exit()

        @kb.add(Keys.BracketedPaste)
        def _(event):
            feed({"type": "paste", "text": event.data})

        @kb.add(Keys.Any)
        def _(event):
            data = event.data or ""
            if len(data) == 1:
                feed(raw_keydown(data))

        return kb

    # ---------- run ----------

    def build_application(self) -> Application:
        self.app = Application(
            layout=self.build_layout(),
            key_bindings=self.build_key_bindings(),
            style=DynamicStyle(self._style),
            full_screen=True,
        )
        return self.app

    def _invalidate(self) -> None:
        if self.app is not None:
            self.app.invalidate()

    async def run_async(self) -> None:
        app = self.build_application()
        self.controller.on_change = self._invalidate
        self.controller.init()
        try:
            await app.run_async()
        finally:
            self.controller.on_change = None
            self.controller.dispose()


# ----------------------------
# Line mode (PromptSession)
# ----------------------------


class LineUI:
    """
    Terminal-friendly line UI for the plain REPL:
      - keeps normal terminal scrollback + drag-select copy
      - Tab completion menu fed by the same autocomplete engine
    """

    def __init__(
        self, controller: TerminalController | None = None, config: Any = None
    ) -> None:
        self.controller = controller
        self.config = config
        self.session: PromptSession[str] | None = None
        self._style = _build_style(config)
        self._needs_newline_before_prompt = False

    def _ensure_session(self) -> None:
        if self.session is not None:
            return
        self.session = PromptSession(
            completer=TerminalCompleter(self.controller),
            complete_while_typing=True,
            style=self._style,
        )

    async def read(self, prompt: str) -> str:
        self._ensure_session()
        assert self.session is not None

        if self._needs_newline_before_prompt:
            print_formatted_text(ANSI("\n"), style=self._style, end="")
            self._needs_newline_before_prompt = False

        with patch_stdout():
            return await self.session.prompt_async(ANSI(prompt))

    def write(self, text: str) -> None:
        """Write EXACTLY what we receive (no extra newline)."""
        if not text:
            return
        print_formatted_text(ANSI(text), style=self._style, end="")
        self._needs_newline_before_prompt = not text.endswith("\n")

    def clear(self) -> None:
        pt_clear()
