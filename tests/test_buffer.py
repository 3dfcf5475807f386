from __future__ import annotations

import pytest

from folio_term.buffer import BlockKind, OutputBlock, ScreenBuffer, echo, error, info, result


def test_make_splits_strings_on_newlines() -> None:
    block = OutputBlock.make(BlockKind.RESULT, "a\nb")
    assert block.lines == ("a", "b")
    assert block.text() == "a\nb"


def test_helpers_set_kind_and_tag() -> None:
    assert echo("$ help").kind == BlockKind.ECHO
    assert result(["x"]).kind == BlockKind.RESULT
    assert info("i").kind == BlockKind.INFO
    err = error("Error: x", tag="UnknownCommand")
    assert err.kind == BlockKind.ERROR
    assert err.tag == "UnknownCommand"


def test_blocks_are_immutable() -> None:
    block = result("x")
    with pytest.raises(AttributeError):
        block.lines = ("y",)  # type: ignore[misc]


def test_eviction_drops_oldest_by_identity() -> None:
    buf = ScreenBuffer(capacity=3)
    blocks = [result(str(i)) for i in range(5)]
    buf.extend(blocks)

    snap = buf.snapshot()
    assert len(snap) == 3
    assert all(a is b for a, b in zip(snap, blocks[2:]))
    assert buf.evicted == 2
    assert buf.appended == 5


def test_clear_empties_and_bumps_generation() -> None:
    buf = ScreenBuffer()
    buf.append(result("x"))
    buf.clear()
    assert len(buf) == 0
    assert buf.generation == 1
    assert buf.appended == 1


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ScreenBuffer(capacity=0)


def test_snapshot_is_detached_from_later_appends() -> None:
    buf = ScreenBuffer()
    buf.append(result("a"))
    snap = buf.snapshot()
    buf.append(result("b"))
    assert len(snap) == 1
