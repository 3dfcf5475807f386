# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Input normalization.

Physical keyboard keydowns, virtual keyboard / shortcut-toolbar taps,
clipboard pastes and swipe gestures all arrive as loosely-shaped mappings
(the view forwards whatever its platform gives it). InputNormalizer turns
each one into at most one KeyEvent so the controller never has to know
which input method produced it.

Raw event shapes:
- {"type": "keydown", "key": "Enter" | "a" | ..., "ctrlKey": bool, ...}
- {"type": "keyup", ...}                      -> ignored
- {"type": "paste", "text": "..."}
- {"type": "tap", "key": "↑"} / {"type": "tap", "text": "help"}
- {"type": "swipe", "direction": "up" | "down" | "left" | "right"}
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class KeyKind(Enum):
    ENTER = "Enter"
    BACKSPACE = "Backspace"
    ARROW_UP = "ArrowUp"
    ARROW_DOWN = "ArrowDown"
    ARROW_LEFT = "ArrowLeft"
    ARROW_RIGHT = "ArrowRight"
    TAB = "Tab"
    PRINTABLE = "Printable"
    PASTE = "Paste"
    CTRL_C = "CtrlC"
    CTRL_L = "CtrlL"


@dataclass(frozen=True)
class KeyEvent:
    kind: KeyKind
    timestamp: float
    text: str = ""  # the char for PRINTABLE, the payload for PASTE


# DOM key names (and common virtual keyboard labels) -> kind
_NAMED_KEYS: dict[str, KeyKind] = {
    "enter": KeyKind.ENTER,
    "return": KeyKind.ENTER,
    "⏎": KeyKind.ENTER,
    "backspace": KeyKind.BACKSPACE,
    "⌫": KeyKind.BACKSPACE,
    "arrowup": KeyKind.ARROW_UP,
    "up": KeyKind.ARROW_UP,
    "↑": KeyKind.ARROW_UP,
    "arrowdown": KeyKind.ARROW_DOWN,
    "down": KeyKind.ARROW_DOWN,
    "↓": KeyKind.ARROW_DOWN,
    "arrowleft": KeyKind.ARROW_LEFT,
    "left": KeyKind.ARROW_LEFT,
    "←": KeyKind.ARROW_LEFT,
    "arrowright": KeyKind.ARROW_RIGHT,
    "right": KeyKind.ARROW_RIGHT,
    "→": KeyKind.ARROW_RIGHT,
    "tab": KeyKind.TAB,
    "⇥": KeyKind.TAB,
    "ctrl+c": KeyKind.CTRL_C,
    "^c": KeyKind.CTRL_C,
    "ctrl+l": KeyKind.CTRL_L,
    "^l": KeyKind.CTRL_L,
}

_CTRL_KEYS: dict[str, KeyKind] = {
    "c": KeyKind.CTRL_C,
    "l": KeyKind.CTRL_L,
}

# Vertical swipes mirror history recall; horizontal ones belong to the UI
_SWIPES: dict[str, KeyKind | None] = {
    "up": KeyKind.ARROW_UP,
    "down": KeyKind.ARROW_DOWN,
    "left": None,
    "right": None,
}


def clean_paste_text(text: str) -> str:
    """Collapse line breaks to spaces and drop other control characters."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = text.strip("\n").replace("\n", " ").replace("\t", " ")
    return "".join(ch for ch in text if ch.isprintable())


class InputNormalizer:
    """Maps raw input events onto the KeyEvent stream. Never raises."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock

    def normalize(self, raw: Any) -> KeyEvent | None:
        try:
            return self._normalize(raw)
        except Exception:
            # malformed events are dropped, whatever their shape
            return None

    # ---------- dispatch ----------

    def _normalize(self, raw: Any) -> KeyEvent | None:
        if not isinstance(raw, Mapping):
            return None

        etype = str(raw.get("type") or "").lower()
        if etype == "keydown":
            return self._from_keydown(raw)
        if etype == "paste":
            return self._from_paste(raw.get("text"), raw)
        if etype == "tap":
            return self._from_tap(raw)
        if etype == "swipe":
            return self._from_swipe(raw)
        return None

    def _stamp(self, raw: Mapping) -> float:
        ts = raw.get("timeStamp")
        if isinstance(ts, (int, float)) and not isinstance(ts, bool):
            return float(ts)
        return self._clock()

    def _from_keydown(self, raw: Mapping) -> KeyEvent | None:
        key = raw.get("key")
        if not isinstance(key, str) or not key:
            return None

        if raw.get("ctrlKey") or raw.get("metaKey"):
            kind = _CTRL_KEYS.get(key.lower()) if raw.get("ctrlKey") else None
            return KeyEvent(kind, self._stamp(raw)) if kind else None

        if len(key) == 1:
            if raw.get("altKey") or not key.isprintable():
                return None
            return KeyEvent(KeyKind.PRINTABLE, self._stamp(raw), key)

        kind = _NAMED_KEYS.get(key.lower())
        if kind is None or kind in (KeyKind.CTRL_C, KeyKind.CTRL_L):
            # modifier-only keys, F-keys, "Shift", ...
            return None
        return KeyEvent(kind, self._stamp(raw))

    def _from_paste(self, text: Any, raw: Mapping) -> KeyEvent | None:
        if not isinstance(text, str):
            return None
        cleaned = clean_paste_text(text)
        if not cleaned:
            return None
        return KeyEvent(KeyKind.PASTE, self._stamp(raw), cleaned)

    def _from_tap(self, raw: Mapping) -> KeyEvent | None:
        label = raw.get("key")
        if isinstance(label, str) and label:
            kind = _NAMED_KEYS.get(label.lower())
            if kind is not None:
                return KeyEvent(kind, self._stamp(raw))
            if len(label) == 1:
                if not label.isprintable():
                    return None
                return KeyEvent(KeyKind.PRINTABLE, self._stamp(raw), label)
            # multi-char shortcut label ("help", "projects") types itself
            return self._from_paste(label, raw)
        return self._from_paste(raw.get("text"), raw)

    def _from_swipe(self, raw: Mapping) -> KeyEvent | None:
        direction = raw.get("direction")
        if not isinstance(direction, str):
            return None
        kind = _SWIPES.get(direction.lower())
        if kind is None:
            return None
        return KeyEvent(kind, self._stamp(raw))
