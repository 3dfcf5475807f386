from __future__ import annotations

import pytest

from folio_term.keys import InputNormalizer, KeyEvent, KeyKind, clean_paste_text


@pytest.fixture
def norm() -> InputNormalizer:
    return InputNormalizer(clock=lambda: 42.0)


@pytest.mark.parametrize(
    "key, kind",
    [
        ("Enter", KeyKind.ENTER),
        ("Backspace", KeyKind.BACKSPACE),
        ("ArrowUp", KeyKind.ARROW_UP),
        ("ArrowDown", KeyKind.ARROW_DOWN),
        ("ArrowLeft", KeyKind.ARROW_LEFT),
        ("ArrowRight", KeyKind.ARROW_RIGHT),
        ("Tab", KeyKind.TAB),
    ],
)
def test_named_keydowns(norm: InputNormalizer, key: str, kind: KeyKind) -> None:
    evt = norm.normalize({"type": "keydown", "key": key})
    assert evt == KeyEvent(kind, 42.0)


def test_printable_keydown_carries_char(norm: InputNormalizer) -> None:
    evt = norm.normalize({"type": "keydown", "key": "h"})
    assert evt is not None
    assert evt.kind == KeyKind.PRINTABLE
    assert evt.text == "h"


def test_ctrl_combinations(norm: InputNormalizer) -> None:
    c = norm.normalize({"type": "keydown", "key": "c", "ctrlKey": True})
    l = norm.normalize({"type": "keydown", "key": "L", "ctrlKey": True})
    assert c is not None and c.kind == KeyKind.CTRL_C
    assert l is not None and l.kind == KeyKind.CTRL_L
    # other ctrl/meta chords are not ours
    assert norm.normalize({"type": "keydown", "key": "a", "ctrlKey": True}) is None
    assert norm.normalize({"type": "keydown", "key": "c", "metaKey": True}) is None


def test_modifier_and_function_keys_are_dropped(norm: InputNormalizer) -> None:
    for key in ("Shift", "Control", "F5", "Escape"):
        assert norm.normalize({"type": "keydown", "key": key}) is None
    assert norm.normalize({"type": "keydown", "key": "x", "altKey": True}) is None


def test_ctrl_labels_only_count_as_taps(norm: InputNormalizer) -> None:
    assert norm.normalize({"type": "keydown", "key": "ctrl+c"}) is None
    tap = norm.normalize({"type": "tap", "key": "Ctrl+C"})
    assert tap is not None and tap.kind == KeyKind.CTRL_C
    tap = norm.normalize({"type": "tap", "key": "^l"})
    assert tap is not None and tap.kind == KeyKind.CTRL_L


def test_keyup_and_unknown_types_are_ignored(norm: InputNormalizer) -> None:
    assert norm.normalize({"type": "keyup", "key": "Enter"}) is None
    assert norm.normalize({"type": "wheel"}) is None


@pytest.mark.parametrize("raw", [None, 3, "Enter", ["keydown"], {"type": "keydown"},
                                 {"type": "keydown", "key": 7}])
def test_malformed_events_never_raise(norm: InputNormalizer, raw) -> None:
    assert norm.normalize(raw) is None


def test_paste_cleans_line_breaks(norm: InputNormalizer) -> None:
    evt = norm.normalize({"type": "paste", "text": "echo a\r\nb\tc\n"})
    assert evt is not None
    assert evt.kind == KeyKind.PASTE
    assert evt.text == "echo a b c"


def test_empty_paste_is_dropped(norm: InputNormalizer) -> None:
    assert norm.normalize({"type": "paste", "text": "\n\n"}) is None
    assert norm.normalize({"type": "paste", "text": None}) is None


def test_tap_virtual_keys(norm: InputNormalizer) -> None:
    assert norm.normalize({"type": "tap", "key": "↑"}).kind == KeyKind.ARROW_UP
    assert norm.normalize({"type": "tap", "key": "⏎"}).kind == KeyKind.ENTER
    char = norm.normalize({"type": "tap", "key": "a"})
    assert char.kind == KeyKind.PRINTABLE and char.text == "a"


def test_tap_shortcut_label_types_itself(norm: InputNormalizer) -> None:
    evt = norm.normalize({"type": "tap", "key": "projects"})
    assert evt.kind == KeyKind.PASTE
    assert evt.text == "projects"

    evt = norm.normalize({"type": "tap", "text": "help"})
    assert evt.kind == KeyKind.PASTE
    assert evt.text == "help"


def test_swipes(norm: InputNormalizer) -> None:
    assert norm.normalize({"type": "swipe", "direction": "up"}).kind == KeyKind.ARROW_UP
    assert norm.normalize({"type": "swipe", "direction": "DOWN"}).kind == KeyKind.ARROW_DOWN
    assert norm.normalize({"type": "swipe", "direction": "left"}) is None
    assert norm.normalize({"type": "swipe"}) is None


def test_event_timestamp_wins_over_clock(norm: InputNormalizer) -> None:
    evt = norm.normalize({"type": "keydown", "key": "Enter", "timeStamp": 7})
    assert evt.timestamp == 7.0
    evt = norm.normalize({"type": "keydown", "key": "Enter", "timeStamp": True})
    assert evt.timestamp == 42.0


def test_clean_paste_text_drops_control_chars() -> None:
    assert clean_paste_text("a\x00b\x1bc") == "abc"
