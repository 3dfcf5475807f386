"""
Tests that verify Protocol definitions are valid and implementations comply.
These tests don't test behavior - just that contracts exist.
"""

from __future__ import annotations

from pathlib import Path

from folio_term import interfaces


def test_portfolio_source_protocol_exists():
    """PortfolioSource Protocol must define required methods."""
    protocol = interfaces.PortfolioSource

    for method in ("get_visitor_portfolio", "invalidate"):
        assert hasattr(protocol, method), f"PortfolioSource missing {method}"


def test_settings_store_protocol_exists():
    protocol = interfaces.SettingsStore
    assert hasattr(protocol, "get_setting")
    assert hasattr(protocol, "set_setting")


def test_config_model_protocol_exists():
    """ConfigModel Protocol must define required attributes."""
    protocol = interfaces.ConfigModel

    # Required attributes (read-only properties)
    required_attrs = ["terminal", "prompt", "commands", "execution", "themes", "get_path"]

    for attr in required_attrs:
        assert hasattr(protocol, attr), f"ConfigModel missing {attr}"


def test_yaml_portfolio_source_conforms_to_protocol(tmp_path: Path):
    """YAMLPortfolioSource must implement all PortfolioSource protocol methods."""
    from folio_term.store import YAMLPortfolioSource

    src = YAMLPortfolioSource(tmp_path / "portfolio.yaml")
    for method in ("get_visitor_portfolio", "invalidate"):
        assert callable(getattr(src, method, None)), f"YAMLPortfolioSource missing {method}"


def test_memory_settings_store_conforms_to_protocol():
    from folio_term.store import MemorySettingsStore

    store = MemorySettingsStore()
    for method in ("get_setting", "set_setting"):
        assert callable(getattr(store, method, None))


def test_yaml_config_conforms_to_config_model_protocol():
    """YAMLConfig must implement all ConfigModel protocol attributes."""
    from folio_term.config import YAMLConfig

    cfg = YAMLConfig({})
    for attr in ("terminal", "prompt", "commands", "execution", "themes"):
        assert hasattr(cfg, attr), f"YAMLConfig missing {attr}"
    assert callable(cfg.get_path)
