"""Tests for institutional setups and snapshot diffs."""

from macro_bias.config import EngineConfig
from macro_bias.scenarios.institutional import (
    asset_class_for,
    detect_scenario_changes,
    institutional_scenarios,
)
from macro_bias.types import (
    Action,
    AssetClass,
    Confidence,
    PairBiasRow,
    Regime,
    Severity,
    Tactical,
    UsdStrength,
)


def _row(pair, action, confidence, rationale=""):
    tactical = {Action.BUY: Tactical.BULLISH, Action.SELL: Tactical.BEARISH}.get(
        action, Tactical.NEUTRAL
    )
    return PairBiasRow(pair, pair, action, rationale, tactical, confidence)


ROWS = [
    _row("EURUSD", Action.SELL, Confidence.ALTA, "USD Fuerte => Sell"),
    _row("GBPUSD", Action.SELL, Confidence.MEDIA),
    _row("USDJPY", Action.BUY, Confidence.ALTA),
    _row("XAUUSD", Action.BUY, Confidence.MEDIA),
    _row("AUDUSD", Action.SELL, Confidence.ALTA),
    _row("EURGBP", Action.RANGE, Confidence.ALTA),
    _row("SPX", Action.SELL, Confidence.BAJA),
]


def _symbols(setups):
    return [s.pair for s in setups]


class TestInstitutionalScenarios:
    def test_strong_usd_keeps_sells(self):
        result = institutional_scenarios(ROWS, UsdStrength.STRONG, Regime.RISK_OFF)
        assert _symbols(result.active) == ["EURUSD", "AUDUSD"]
        assert _symbols(result.watchlist) == ["GBPUSD"]
        assert all(s.direction == Action.SELL for s in result.active + result.watchlist)

    def test_weak_usd_keeps_buys(self):
        result = institutional_scenarios(ROWS, UsdStrength.WEAK, Regime.RISK_ON)
        assert _symbols(result.active) == ["USDJPY"]
        assert _symbols(result.watchlist) == ["XAUUSD"]

    def test_neutral_prefers_alta(self):
        result = institutional_scenarios(ROWS, UsdStrength.NEUTRAL, Regime.NEUTRAL)
        assert _symbols(result.active) == ["EURUSD", "USDJPY", "AUDUSD"]
        assert result.watchlist == []

    def test_neutral_falls_back_to_media(self):
        rows = [r for r in ROWS if r.confidence is not Confidence.ALTA]
        result = institutional_scenarios(rows, UsdStrength.NEUTRAL, Regime.NEUTRAL)
        assert result.active == []
        assert _symbols(result.watchlist) == ["GBPUSD", "XAUUSD"]

    def test_allowlist_sorted_first(self):
        config = EngineConfig(institutional_pairs=("USDCAD",))
        rows = [
            _row("AUDUSD", Action.SELL, Confidence.ALTA),
            _row("USDCAD", Action.SELL, Confidence.MEDIA),
            _row("EURUSD", Action.SELL, Confidence.ALTA),
        ]
        result = institutional_scenarios(rows, UsdStrength.STRONG, Regime.NEUTRAL, config)
        assert _symbols(result.active) == ["AUDUSD", "EURUSD"]
        assert _symbols(result.watchlist) == ["USDCAD"]

    def test_setup_rendering(self):
        result = institutional_scenarios(ROWS, UsdStrength.STRONG, Regime.RISK_OFF)
        setup = result.active[0]
        assert setup.id == "setup_EURUSD_sell"
        assert setup.title == "EURUSD short setup"
        assert setup.severity == Severity.ALTA
        assert setup.confidence == Confidence.ALTA
        assert setup.macro_reasons == ("Regime RISK OFF", "USD Fuerte", "USD Fuerte => Sell")
        assert "EURUSD" in setup.setup_text
        assert "shorts" in setup.setup_text

    def test_mapping_rows_accepted(self):
        rows = [
            {"symbol": "btc/usdt", "action": "Buy", "confidence": "Alta"},
            {"pair": "NDX", "action": "Buy", "confidence": "Media", "rationale": "risk on"},
            {"pair": "ETHUSDT", "action": "Hold", "confidence": "Alta"},
            {"pair": "SPX", "action": "Buy", "confidence": None},
        ]
        result = institutional_scenarios(rows, UsdStrength.WEAK, Regime.RISK_ON)
        assert _symbols(result.active) == ["BTCUSDT"]
        assert result.active[0].setup_text.startswith("Long BTCUSDT")
        assert _symbols(result.watchlist) == ["NDX"]
        assert result.watchlist[0].macro_reasons[-1] == "risk on"

    def test_empty(self):
        result = institutional_scenarios([], UsdStrength.NEUTRAL, Regime.NEUTRAL)
        assert result.active == [] and result.watchlist == []


class TestAssetClassFor:
    def test_configured(self, config):
        assert asset_class_for("XAU/USD", config) == AssetClass.METAL

    def test_heuristic(self):
        assert asset_class_for("XAGUSD") == AssetClass.METAL
        assert asset_class_for("ETHUSD") == AssetClass.CRYPTO
        assert asset_class_for("NAS100") == AssetClass.INDEX
        assert asset_class_for("NZDUSD") == AssetClass.FX


class TestDetectScenarioChanges:
    def _snapshot(self, rows, usd=UsdStrength.STRONG):
        return institutional_scenarios(rows, usd, Regime.RISK_OFF)

    def test_new(self):
        cur = self._snapshot([_row("EURUSD", Action.SELL, Confidence.ALTA)])
        changes = detect_scenario_changes(cur.active, cur.watchlist, [], [])
        assert [(c.kind, c.scenario.pair) for c in changes] == [("new", "EURUSD")]

    def test_unchanged_is_quiet(self):
        cur = self._snapshot([_row("EURUSD", Action.SELL, Confidence.ALTA)])
        assert detect_scenario_changes(cur.active, cur.watchlist, cur.active, cur.watchlist) == []

    def test_promoted(self):
        prev = self._snapshot([_row("EURUSD", Action.SELL, Confidence.MEDIA)])
        cur = self._snapshot([_row("EURUSD", Action.SELL, Confidence.ALTA)])
        changes = detect_scenario_changes(cur.active, cur.watchlist, prev.active, prev.watchlist)
        assert len(changes) == 1
        assert changes[0].kind == "changed"
        assert changes[0].old_confidence == Confidence.MEDIA

    def test_demoted(self):
        prev = self._snapshot([_row("EURUSD", Action.SELL, Confidence.ALTA)])
        cur = self._snapshot([_row("EURUSD", Action.SELL, Confidence.MEDIA)])
        changes = detect_scenario_changes(cur.active, cur.watchlist, prev.active, prev.watchlist)
        assert [(c.kind, c.old_confidence) for c in changes] == [("changed", Confidence.ALTA)]

    def test_removed(self):
        prev = self._snapshot(
            [_row("EURUSD", Action.SELL, Confidence.ALTA), _row("GBPUSD", Action.SELL, Confidence.MEDIA)]
        )
        changes = detect_scenario_changes([], [], prev.active, prev.watchlist)
        assert [(c.kind, c.scenario.pair) for c in changes] == [
            ("removed", "EURUSD"),
            ("removed", "GBPUSD"),
        ]

    def test_direction_flip_is_new_and_removed(self):
        prev = self._snapshot([_row("USDJPY", Action.SELL, Confidence.ALTA)])
        cur = self._snapshot([_row("USDJPY", Action.BUY, Confidence.ALTA)], UsdStrength.WEAK)
        kinds = sorted(c.kind for c in detect_scenario_changes(
            cur.active, cur.watchlist, prev.active, prev.watchlist
        ))
        assert kinds == ["new", "removed"]
