"""Tests for JSON config loading and its fallbacks."""

import json
from pathlib import Path

import pytest

from macro_bias.config import (
    DEFAULT_INSTITUTIONAL_PAIRS,
    DEFAULT_UNIVERSE,
    DEFAULT_WEIGHTS,
    EngineConfig,
    load_config,
)
from macro_bias.types import AssetClass, RiskSensitivity

SHIPPED = Path(__file__).parent.parent.parent / "config"


def _write(directory, name, data):
    path = directory / name
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path


class TestLoadConfig:
    def test_missing_directory_gives_defaults(self, tmp_path):
        cfg = load_config(tmp_path / "nope")
        assert cfg.regime.threshold == 0.3
        assert dict(cfg.weights) == DEFAULT_WEIGHTS
        assert cfg.universe == DEFAULT_UNIVERSE
        assert cfg.static_correlations == {}

    def test_valid_weights(self, tmp_path):
        _write(tmp_path, "weights.json", {"threshold": 0.4, "weights": {"cpi_yoy": 0.2, "UNRATE": 0.1}})
        cfg = load_config(tmp_path)
        assert cfg.regime.threshold == pytest.approx(0.4)
        assert cfg.weight_for("CPIAUCSL") == pytest.approx(0.2)
        assert cfg.weight_for("PAYEMS") == 0.0

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            [1, 2, 3],
            {"threshold": 1.5, "weights": {"UNRATE": 0.1}},
            {"threshold": 0.3, "weights": {"UNRATE": -0.1}},
            {"threshold": True, "weights": {}},
        ],
    )
    def test_malformed_weights_fall_back(self, tmp_path, content):
        _write(tmp_path, "weights.json", content)
        cfg = load_config(tmp_path)
        assert cfg.regime.threshold == 0.3
        assert dict(cfg.weights) == DEFAULT_WEIGHTS

    def test_universe(self, tmp_path):
        _write(
            tmp_path,
            "universe.json",
            [{"symbol": "sol/usdt", "asset_class": "crypto", "base": "SOL", "quote": "USDT",
              "risk_sensitivity": "risk_on"}],
        )
        cfg = load_config(tmp_path)
        assert len(cfg.universe) == 1
        inst = cfg.universe[0]
        assert inst.symbol == "SOLUSDT"
        assert inst.asset_class == AssetClass.CRYPTO
        assert inst.risk_sensitivity == RiskSensitivity.RISK_ON

    def test_bad_universe_falls_back(self, tmp_path):
        _write(tmp_path, "universe.json", [{"symbol": "SPX", "asset_class": "bond"}])
        assert load_config(tmp_path).universe == DEFAULT_UNIVERSE

    def test_institutional_and_priority(self, tmp_path):
        _write(tmp_path, "institutional_pairs.json", ["eur/usd"])
        _write(tmp_path, "pair_priority.json", {"EUR/USD": ["cpi_yoy"]})
        cfg = load_config(tmp_path)
        assert cfg.institutional_pairs == ("EURUSD",)
        assert cfg.priority_for("EURUSD") == ("cpi_yoy",)

    def test_bad_institutional_falls_back(self, tmp_path):
        _write(tmp_path, "institutional_pairs.json", {"EURUSD": True})
        assert load_config(tmp_path).institutional_pairs == DEFAULT_INSTITUTIONAL_PAIRS

    def test_static_correlations(self, tmp_path):
        _write(
            tmp_path,
            "correlations.json",
            {"XAU/USD": {"corr12m": -0.4, "corr6m": 2.0, "corr3m": -0.5}, "BAD": 3},
        )
        snap = load_config(tmp_path).static_correlations["XAUUSD"]
        assert snap.corr12m == pytest.approx(-0.4)
        assert snap.corr6m is None
        assert snap.ref == "DXY"
        assert snap.mapped is True

    def test_currency_indicators_skip_bad_entries(self, tmp_path):
        _write(
            tmp_path,
            "currency_indicators.json",
            {"indicators": {
                "cpi_yoy": {"currency": "usd", "group": "inflation"},
                "EU_GDP_YOY": {"currency": "EUR", "group": "vibes"},
            }},
        )
        indicators = load_config(tmp_path).currency_indicators
        assert indicators == {"CPIAUCSL": ("USD", "inflation")}

    def test_env_dir(self, tmp_path, monkeypatch):
        _write(tmp_path, "weights.json", {"threshold": 0.25, "weights": {"UNRATE": 1.0}})
        monkeypatch.setenv("MACRO_BIAS_CONFIG_DIR", str(tmp_path))
        assert load_config().regime.threshold == pytest.approx(0.25)

    def test_shipped_config_matches_defaults(self):
        cfg = load_config(SHIPPED)
        defaults = EngineConfig()
        assert dict(cfg.weights) == dict(defaults.weights)
        assert cfg.regime.threshold == defaults.regime.threshold
        assert [i.symbol for i in cfg.universe] == [i.symbol for i in defaults.universe]
        assert cfg.institutional_pairs == defaults.institutional_pairs
