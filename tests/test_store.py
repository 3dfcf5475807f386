from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from folio_term import config
from folio_term.store import (
    PORTFOLIO_SECTIONS,
    MemorySettingsStore,
    YAMLPortfolioSource,
    normalize_portfolio,
)


@pytest.fixture
def portfolio_file(tmp_path: Path) -> Path:
    p = tmp_path / "portfolio.yaml"
    p.write_text(
        "personal_info:\n"
        "  name: Ada\n"
        "skills:\n"
        "  - {name: Python, level: 90}\n"
        "projects: not-a-list\n",
        encoding="utf-8",
    )
    return p


def test_fetch_caches_until_invalidated(portfolio_file: Path) -> None:
    src = YAMLPortfolioSource(portfolio_file)
    assert not src.loaded

    async def go():
        first = await src.get_visitor_portfolio()
        second = await src.get_visitor_portfolio()
        return first, second

    first, second = asyncio.run(go())
    assert first is second
    assert src.fetches == 1
    assert src.loaded

    src.invalidate()
    assert not src.loaded
    asyncio.run(src.get_visitor_portfolio())
    assert src.fetches == 2


def test_fetch_normalizes_section_types(portfolio_file: Path) -> None:
    doc = asyncio.run(YAMLPortfolioSource(portfolio_file).get_visitor_portfolio())
    assert doc["personal_info"]["name"] == "Ada"
    assert doc["projects"] == []
    assert "experience" not in doc


def test_missing_document_raises(tmp_path: Path) -> None:
    src = YAMLPortfolioSource(tmp_path / "nope.yaml")
    with pytest.raises(FileNotFoundError):
        asyncio.run(src.get_visitor_portfolio())
    assert not src.loaded


def test_packaged_sample_has_every_section() -> None:
    doc = asyncio.run(
        YAMLPortfolioSource(config.portfolio_document_path()).get_visitor_portfolio()
    )
    for key, kind in PORTFOLIO_SECTIONS.items():
        assert isinstance(doc[key], kind), key
        assert doc[key], key


def test_normalize_leaves_unknown_keys_alone() -> None:
    out = normalize_portfolio({"extra": 1, "skills": {"bad": True}})
    assert out == {"extra": 1, "skills": []}


def test_memory_settings_store() -> None:
    store = MemorySettingsStore({"theme": "retro"})
    assert store.get_setting("theme", "matrix") == "retro"
    assert store.get_setting("missing", "d") == "d"
    store.set_setting("theme", "minimal")
    assert store.get_setting("theme", "matrix") == "minimal"
