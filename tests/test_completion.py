from __future__ import annotations

from folio_term.completion import (
    SCORE_ALIAS,
    SCORE_EXACT,
    SCORE_NAME,
    AutocompleteEngine,
    command_fragment,
)
from folio_term.registry import CommandDescriptor, CommandRegistry


def _noop(args, ctx):
    return None


def _registry(*specs: tuple[str, tuple[str, ...]]) -> CommandRegistry:
    reg = CommandRegistry()
    for name, aliases in specs:
        reg.register(CommandDescriptor(name, _noop, aliases=frozenset(aliases)))
    return reg


def test_prefix_matches_sorted_lexicographically() -> None:
    reg = _registry(("help", ()), ("hello", ()), ("about", ()))
    out = AutocompleteEngine().suggest("he", reg)
    assert [c.text for c in out] == ["hello", "help"]


def test_exact_match_ranks_first() -> None:
    reg = _registry(("help", ()), ("helpdesk", ()))
    out = AutocompleteEngine().suggest("help", reg)
    assert [c.text for c in out] == ["help", "helpdesk"]
    assert out[0].score == SCORE_EXACT
    assert out[1].score == SCORE_NAME


def test_names_rank_above_aliases() -> None:
    reg = _registry(("clear", ("cls",)), ("cowsay", ()))
    out = AutocompleteEngine().suggest("c", reg)
    assert [c.text for c in out] == ["clear", "cowsay", "cls"]
    alias = out[-1]
    assert alias.is_alias
    assert alias.score == SCORE_ALIAS
    assert alias.target == "clear"


def test_case_insensitive_prefix() -> None:
    reg = _registry(("projects", ()))
    assert [c.text for c in AutocompleteEngine().suggest("PRO", reg)] == ["projects"]


def test_no_suggestions_once_past_command_token() -> None:
    reg = _registry(("projects", ()))
    engine = AutocompleteEngine()
    assert engine.suggest("", reg) == []
    assert engine.suggest("projects ", reg) == []
    assert engine.suggest("projects --a", reg) == []
    assert engine.suggest("zzz", reg) == []


def test_command_fragment() -> None:
    assert command_fragment("  he") == "he"
    assert command_fragment("he llo") is None
    assert command_fragment("   ") is None
