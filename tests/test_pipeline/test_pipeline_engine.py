"""Integration tests for the MACRO BIAS pipeline."""

import asyncio
from datetime import date

import pytest

from macro_bias.aliases import SeriesId
from macro_bias.catalog import CATEGORY_ORDER
from macro_bias.pipeline.engine import MacroBiasPipeline
from macro_bias.stores.base import StoreError
from macro_bias.stores.frame import FrameCorrelationStore, FrameObservationStore
from macro_bias.types import Action, MacroRegime, Observation, Quadrant, Regime, UsdStrength


def _by_pair(rows):
    return {r.pair: r for r in rows}


class TestProcess:
    """Test the synchronous processing path."""

    def test_stagflation_snapshot(self, config, stagflation_observations):
        diag = MacroBiasPipeline(config).process(stagflation_observations)

        assert diag.score == pytest.approx((0.11 - 0.54) / 0.65)
        assert diag.regime == Regime.RISK_OFF
        assert diag.usd_strength == UsdStrength.STRONG
        assert diag.quadrant == Quadrant.STAGFLATION
        assert diag.improving == 4
        assert diag.deteriorating == 6
        assert diag.counts == {"total": 12, "with_value": 12, "nulls": 0}
        assert diag.last_updated == date(2026, 1, 15)
        assert set(diag.currency_scores) == {"USD"}
        assert diag.currency_scores["USD"].total == pytest.approx(-0.24 / 0.46)
        usd = diag.currency_regimes["USD"]
        assert usd.regime == MacroRegime.STAGFLATION
        assert usd.probability == pytest.approx(1.0)
        assert diag.to_dict()["currency_regimes"]["USD"]["regime"] == "stagflation"

    def test_goldilocks_snapshot(self, config, goldilocks_observations):
        pipeline = MacroBiasPipeline(config)
        diag = pipeline.process(goldilocks_observations)

        assert diag.score == pytest.approx(1.0)
        assert diag.regime == Regime.RISK_ON
        assert diag.usd_strength == UsdStrength.WEAK
        assert diag.quadrant == Quadrant.SLOWDOWN
        assert [s.id for s in pipeline.detect_scenarios(diag)] == [
            "cooling_employment",
            "tight_financial_conditions",
        ]

    def test_stagflation_scenarios(self, config, stagflation_observations):
        pipeline = MacroBiasPipeline(config)
        diag = pipeline.process(stagflation_observations)
        assert [s.id for s in pipeline.detect_scenarios(diag)] == ["stagflation", "risk_off"]

    def test_stagflation_bias_table(self, config, stagflation_observations):
        pipeline = MacroBiasPipeline(config)
        rows = _by_pair(pipeline.bias_table(pipeline.process(stagflation_observations)))
        assert rows["EURUSD"].action == Action.SELL
        assert rows["USDJPY"].action == Action.BUY
        assert rows["EURGBP"].action == Action.RANGE
        assert rows["XAUUSD"].action == Action.BUY
        for sym in ("BTCUSDT", "ETHUSDT", "SPX", "NDX"):
            assert rows[sym].action == Action.SELL

    def test_idempotent(self, config, stagflation_observations):
        pipeline = MacroBiasPipeline(config)
        assert pipeline.process(stagflation_observations) == pipeline.process(
            stagflation_observations
        )

    def test_duplicates_keep_first(self, config):
        d = date(2026, 1, 15)
        diag = MacroBiasPipeline(config).process(
            [
                Observation("cpi_yoy", "CPIAUCSL", 3.8, d),
                Observation("cpi", "CPIAUCSL", 2.0, d),
            ]
        )
        assert len(diag.items) == 1
        assert diag.items[0].value == 3.8

    def test_items_sorted_by_category_then_weight(self, config, stagflation_observations):
        items = MacroBiasPipeline(config).process(stagflation_observations).items
        ranks = [CATEGORY_ORDER.index(i.category) for i in items]
        assert ranks == sorted(ranks)
        for a, b in zip(items, items[1:]):
            if a.category == b.category:
                assert a.weight >= b.weight

    def test_history_gives_z_scores(self, config):
        d = date(2026, 1, 15)
        diag = MacroBiasPipeline(config).process(
            [Observation("cpi_yoy", "CPIAUCSL", 2.0, d)],
            {"cpi_yoy": [0.0] * 10 + [2.0] * 10},
        )
        assert diag.items[0].z_score == pytest.approx(1.0)

    def test_empty_snapshot(self, config):
        diag = MacroBiasPipeline(config).process([])
        assert diag.score == 0.0
        assert diag.regime == Regime.NEUTRAL
        assert diag.last_updated is None
        assert diag.currency_scores == {}
        assert diag.currency_regimes == {}

    def test_all_missing_snapshot_is_range(self, config):
        pipeline = MacroBiasPipeline(config)
        diag = pipeline.process(
            [
                Observation("cpi_yoy", "CPIAUCSL", None),
                Observation("gdp_yoy", "GDPC1", None),
            ]
        )
        assert diag.usd_strength == UsdStrength.NEUTRAL
        assert diag.quadrant == Quadrant.UNKNOWN

        rows = _by_pair(pipeline.bias_table(diag))
        for sym in ("EURUSD", "GBPUSD", "AUDUSD", "USDJPY", "USDCAD", "EURGBP", "XAUUSD"):
            assert rows[sym].action == Action.RANGE


class FlakyStore:
    """Delegates to a frame store but fails for one series."""

    def __init__(self, inner, broken):
        self.inner = inner
        self.broken = broken

    async def latest(self, series_id):
        if series_id == self.broken:
            raise StoreError("backend down")
        return await self.inner.latest(series_id)

    async def history(self, series_id):
        if series_id == self.broken:
            raise StoreError("backend down")
        return await self.inner.history(series_id)


class TestRun:
    """Test the async store-reading path."""

    def test_run_from_frame(self, config, observation_frame):
        pipeline = MacroBiasPipeline(config, FrameObservationStore(observation_frame))
        diag = asyncio.run(pipeline.run())

        assert diag.counts["total"] == len(SeriesId)
        assert diag.counts["with_value"] == 12
        assert diag.regime == Regime.RISK_OFF
        assert diag.usd_strength == UsdStrength.STRONG

        cpi = next(i for i in diag.items if i.series_id == "CPIAUCSL")
        assert cpi.key == "cpi_yoy"
        assert cpi.value == pytest.approx(3.8)
        assert cpi.previous_value == pytest.approx(3.79)
        assert cpi.previous_date == date(2025, 12, 16)
        assert cpi.z_score == pytest.approx(1.661, abs=1e-3)

    def test_run_subset(self, config, observation_frame):
        pipeline = MacroBiasPipeline(config, FrameObservationStore(observation_frame))
        diag = asyncio.run(pipeline.run([SeriesId.UNRATE, SeriesId.USPMI]))
        assert diag.counts == {"total": 2, "with_value": 1, "nulls": 1}

    def test_failing_series_is_missing(self, config, observation_frame):
        store = FlakyStore(FrameObservationStore(observation_frame), "CPIAUCSL")
        diag = asyncio.run(MacroBiasPipeline(config, store).run())
        cpi = next(i for i in diag.items if i.series_id == "CPIAUCSL")
        assert cpi.value is None
        assert diag.counts["with_value"] == 11

    def test_run_without_store(self, config):
        with pytest.raises(ValueError):
            asyncio.run(MacroBiasPipeline(config).run())

    def test_report(self, config, observation_frame, correlation_frame):
        pipeline = MacroBiasPipeline(
            config,
            FrameObservationStore(observation_frame),
            FrameCorrelationStore(correlation_frame),
        )
        report = asyncio.run(pipeline.report())

        assert set(report) == {"diagnosis", "tactical", "scenarios", "setups"}
        assert report["diagnosis"]["regime"] == "RISK OFF"
        assert len(report["tactical"]) == len(config.universe)
        eur = next(r for r in report["tactical"] if r["pair"] == "EURUSD")
        assert eur["corr12m"] == pytest.approx(-0.92)
        assert eur["corr_shift"] == "Stable"
        assert report["diagnosis"]["currency_regimes"]["USD"]["regime"] == "stagflation"
        assert "risk_off" in [s["id"] for s in report["scenarios"]]
        setups = report["setups"]["active"] + report["setups"]["watchlist"]
        assert all(s["id"].endswith("_sell") for s in setups)
