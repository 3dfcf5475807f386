# tests/test_ui.py
from __future__ import annotations

import asyncio
import importlib
from types import SimpleNamespace

import pytest

prompt_toolkit = pytest.importorskip("prompt_toolkit")

from prompt_toolkit.document import Document  # noqa: E402
from prompt_toolkit.keys import Keys  # noqa: E402

from folio_term.config import YAMLConfig  # noqa: E402
from folio_term.kernel import TerminalController  # noqa: E402
from folio_term.registry import CommandDescriptor, CommandRegistry  # noqa: E402
from folio_term.store import MemorySettingsStore  # noqa: E402


def _noop(args, ctx):
    return None


def make_controller() -> TerminalController:
    reg = CommandRegistry()
    reg.register(CommandDescriptor("help", _noop, aliases=frozenset({"?"})))
    reg.register(CommandDescriptor("hello", _noop))
    reg.register(CommandDescriptor("clear", _noop, aliases=frozenset({"cls"})))
    return TerminalController(
        registry=reg, config=YAMLConfig({}), settings=MemorySettingsStore()
    )


def find_handler(kb, key_value: str):
    for binding in kb.bindings:
        keys = [getattr(key, "value", key) for key in binding.keys]
        if keys == [key_value]:
            return binding.handler
    return None


def test_ui_module_exposes_views() -> None:
    ui = importlib.import_module("folio_term.ui")
    assert hasattr(ui, "PromptToolkitUI")
    assert hasattr(ui, "LineUI")
    assert hasattr(ui, "TerminalCompleter")


# -------------------------------------------------------------------
# Style
# -------------------------------------------------------------------


def test_theme_palettes_differ() -> None:
    ui = importlib.import_module("folio_term.ui")
    assert ui._default_style_dict("retro")[""] != ui._default_style_dict("matrix")[""]
    # unknown theme falls back to matrix
    assert ui._default_style_dict("neon") == ui._default_style_dict("matrix")


def test_style_overrides_from_config() -> None:
    ui = importlib.import_module("folio_term.ui")
    cfg = YAMLConfig({"ui": {"theme": {"style": {"term.error": "#ff0000", "bad": 3}}}})
    style = ui._build_style(cfg)
    rules = dict(style.style_rules)
    assert rules["term.error"] == "#ff0000"
    assert "bad" not in rules


# -------------------------------------------------------------------
# Completer (line mode)
# -------------------------------------------------------------------


def test_completer_offers_ranked_command_names() -> None:
    ui = importlib.import_module("folio_term.ui")
    completer = ui.TerminalCompleter(make_controller())

    completions = list(completer.get_completions(Document("he"), None))
    assert [c.text for c in completions] == ["hello", "help"]
    assert all(c.start_position == -2 for c in completions)


def test_completer_marks_aliases() -> None:
    ui = importlib.import_module("folio_term.ui")
    completer = ui.TerminalCompleter(make_controller())

    completions = list(completer.get_completions(Document("cl"), None))
    by_text = {c.text: c for c in completions}
    assert by_text["cls"].display_meta_text == "→ clear"
    assert by_text["clear"].display_meta_text == ""


def test_completer_stops_after_command_token_and_without_controller() -> None:
    ui = importlib.import_module("folio_term.ui")
    assert list(ui.TerminalCompleter(make_controller()).get_completions(Document("help x"), None)) == []
    assert list(ui.TerminalCompleter(None).get_completions(Document("he"), None)) == []


# -------------------------------------------------------------------
# Full-screen view rendering
# -------------------------------------------------------------------


def test_prompt_line_shows_cursor_inside_line() -> None:
    ui = importlib.import_module("folio_term.ui")
    c = make_controller()
    for ch in "help":
        c.feed({"type": "keydown", "key": ch})
    c.feed({"type": "keydown", "key": "ArrowLeft"})

    view = ui.PromptToolkitUI(c)
    frags = view.render_prompt_line()
    assert frags[0] == ("class:term.prompt", c.prompt())
    assert ("", "hel") in frags
    assert ("class:term.cursor", "p") in frags


def test_prompt_line_shows_pending_indicator() -> None:
    ui = importlib.import_module("folio_term.ui")
    c = make_controller()
    for ch in "he":
        c.feed({"type": "keydown", "key": ch})
    c.session.pending_execution = True

    frags = ui.PromptToolkitUI(c).render_prompt_line()
    assert frags[0] == ("class:term.prompt", c.prompt())
    assert ("", "he") in frags
    assert "⏳" in "".join(text for _, text in frags)


def test_scrollback_styles_blocks_by_kind() -> None:
    ui = importlib.import_module("folio_term.ui")
    c = make_controller()
    for ch in "nope":
        c.feed({"type": "keydown", "key": ch})
    c.feed({"type": "keydown", "key": "Enter"})

    asyncio.run(c.wait_idle())
    frags = ui.PromptToolkitUI(c).render_scrollback()
    styles = [style for style, _ in frags]
    assert styles[0] == "class:term.echo"
    assert "class:term.error" in styles


def test_suggestions_bar_lists_candidates() -> None:
    ui = importlib.import_module("folio_term.ui")
    c = make_controller()
    view = ui.PromptToolkitUI(c)
    assert view.render_suggestions() == []
    assert not view._suggestions_visible()

    c.feed({"type": "keydown", "key": "h"})
    text = "".join(t for _, t in view.render_suggestions())
    assert "hello" in text and "help" in text
    assert view._suggestions_visible()


def test_suggestions_can_be_disabled() -> None:
    ui = importlib.import_module("folio_term.ui")
    c = make_controller()
    c.feed({"type": "keydown", "key": "h"})
    cfg = YAMLConfig({"ui": {"suggestions": {"enabled": False}}})
    assert not ui.PromptToolkitUI(c, cfg)._suggestions_visible()


def test_wrap_tokens_breaks_at_token_boundaries() -> None:
    ui = importlib.import_module("folio_term.ui")
    view = ui.PromptToolkitUI(make_controller())
    tokens = [("", "aaaa "), ("", "bbbb "), ("", "cccc ")]
    lines = view._wrap_tokens(tokens, width=10, max_lines=2)
    assert lines == [[("", "aaaa "), ("", "bbbb ")], [("", "cccc ")]]
    assert len(view._wrap_tokens(tokens * 3, width=10, max_lines=2)) == 2


def test_build_layout_constructs() -> None:
    ui = importlib.import_module("folio_term.ui")
    layout = ui.PromptToolkitUI(make_controller()).build_layout()
    assert layout is not None


# -------------------------------------------------------------------
# Key bindings feed raw events into the controller
# -------------------------------------------------------------------


def test_printable_and_paste_bindings_edit_line() -> None:
    ui = importlib.import_module("folio_term.ui")
    c = make_controller()
    kb = ui.PromptToolkitUI(c).build_key_bindings()

    find_handler(kb, Keys.Any.value)(SimpleNamespace(data="e"))
    find_handler(kb, Keys.BracketedPaste.value)(SimpleNamespace(data="cho\r\nhi"))
    assert c.get_snapshot().current_line == "echo hi"


def test_ctrl_c_binding_abandons_line() -> None:
    ui = importlib.import_module("folio_term.ui")
    c = make_controller()
    c.feed({"type": "paste", "text": "abc"})
    kb = ui.PromptToolkitUI(c).build_key_bindings()

    find_handler(kb, "c-c")(SimpleNamespace())
    assert c.get_snapshot().current_line == ""
    assert c.get_snapshot().buffer_view[-1].text().endswith("abc^C")


def test_ctrl_l_binding_clears_scrollback() -> None:
    ui = importlib.import_module("folio_term.ui")
    c = make_controller()
    c.feed({"type": "keydown", "key": "c", "ctrlKey": True})
    assert len(c.get_snapshot().buffer_view) == 1

    kb = ui.PromptToolkitUI(c).build_key_bindings()
    find_handler(kb, "c-l")(SimpleNamespace())
    assert c.get_snapshot().buffer_view == ()


def test_arrow_and_tab_bindings() -> None:
    ui = importlib.import_module("folio_term.ui")
    c = make_controller()
    kb = ui.PromptToolkitUI(c).build_key_bindings()

    c.feed({"type": "paste", "text": "hell"})
    find_handler(kb, Keys.Tab.value)(SimpleNamespace())
    assert c.get_snapshot().current_line == "hello"

    find_handler(kb, Keys.Left.value)(SimpleNamespace())
    assert c.get_snapshot().cursor_position == 4
    find_handler(kb, Keys.Backspace.value)(SimpleNamespace())
    assert c.get_snapshot().current_line == "helo"


def test_ctrl_d_exits_app() -> None:
    ui = importlib.import_module("folio_term.ui")
    kb = ui.PromptToolkitUI(make_controller()).build_key_bindings()
    calls = []
    event = SimpleNamespace(app=SimpleNamespace(exit=lambda: calls.append(1)))
    find_handler(kb, "c-d")(event)
    assert calls == [1]


# -------------------------------------------------------------------
# Line mode UI
# -------------------------------------------------------------------


def test_line_ui_clear_uses_prompt_toolkit(monkeypatch: pytest.MonkeyPatch) -> None:
    ui = importlib.import_module("folio_term.ui")
    called = {"clear": 0}
    monkeypatch.setattr(ui, "pt_clear", lambda: called.__setitem__("clear", 1), raising=True)

    ui.LineUI().clear()
    assert called["clear"] == 1


def test_line_ui_write_noops_on_empty(monkeypatch: pytest.MonkeyPatch) -> None:
    ui = importlib.import_module("folio_term.ui")
    called = {"print": 0}

    def fake_print_formatted_text(*args, **kwargs):
        called["print"] += 1

    monkeypatch.setattr(ui, "print_formatted_text", fake_print_formatted_text, raising=True)

    inst = ui.LineUI()
    inst.write("")
    inst.write(None)  # type: ignore[arg-type]
    assert called["print"] == 0


def test_line_ui_write_wraps_ansi(monkeypatch: pytest.MonkeyPatch) -> None:
    ui = importlib.import_module("folio_term.ui")
    seen = {"arg": None}

    def fake_print_formatted_text(arg, **kwargs):
        seen["arg"] = arg

    monkeypatch.setattr(ui, "print_formatted_text", fake_print_formatted_text, raising=True)

    ui.LineUI().write("\033[31mRED\033[0m\n")
    assert seen["arg"].__class__.__name__ == "ANSI"
