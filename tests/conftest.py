from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_data_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep crash logs out of the real ~/.local/share."""
    data = tmp_path / "folio_data_home"
    data.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("FOLIO_TERM_DATA_HOME", str(data))
    monkeypatch.delenv("FOLIO_TERM_PORTFOLIO", raising=False)
    monkeypatch.delenv("FOLIO_TERM_LEGACY_UI", raising=False)
    return data
