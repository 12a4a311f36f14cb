"""Shared fixtures for MACRO BIAS tests."""

import sys
from datetime import date, timedelta
from pathlib import Path

import pandas as pd
import pytest

# Ensure macro_bias is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from macro_bias.classifier.posture import classify_posture
from macro_bias.config import EngineConfig
from macro_bias.types import Indicator, Observation


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def make_indicator():
    """Factory: Indicator classified from (series_id, value)."""

    def _make(series_id, value, weight=0.0, posture=None, z_score=None, key=None):
        return Indicator(
            key=key or series_id.lower(),
            series_id=series_id,
            label=series_id,
            value=value,
            posture=posture if posture is not None else classify_posture(series_id, value),
            weight=weight,
            z_score=z_score,
        )

    return _make


@pytest.fixture
def stagflation_observations() -> list[Observation]:
    """Hot inflation, contracting growth, tight curve: a hawkish, risk-off snapshot."""
    d = date(2026, 1, 15)
    return [
        Observation("corepce_yoy", "PCEPILFE", 3.6, d, 3.4, date(2025, 12, 15)),
        Observation("pce_yoy", "PCEPI", 3.4, d, 3.3, date(2025, 12, 15)),
        Observation("cpi_yoy", "CPIAUCSL", 3.8, d, 3.5, date(2025, 12, 15)),
        Observation("corecpi_yoy", "CPILFESL", 3.5, d, 3.5, date(2025, 12, 15)),
        Observation("gdp_yoy", "GDPC1", 0.4, d, 1.2, date(2025, 10, 15)),
        Observation("indpro_yoy", "INDPRO", -1.2, d, -0.5, date(2025, 12, 15)),
        Observation("payems_delta", "PAYEMS", 300.0, d, 280.0, date(2025, 12, 15)),
        Observation("unrate", "UNRATE", 3.8, d, 3.9, date(2025, 12, 15)),
        Observation("t10y2y", "T10Y2Y", 1.4, d, 1.2, date(2026, 1, 14)),
        Observation("t10y3m", "T10Y3M", 1.3, d, 1.1, date(2026, 1, 14)),
        Observation("fedfunds", "FEDFUNDS", 5.3, d, 5.3, date(2025, 12, 15)),
        Observation("nfci", "NFCI", -0.5, d, -0.4, date(2026, 1, 8)),
    ]


@pytest.fixture
def goldilocks_observations() -> list[Observation]:
    """Cool inflation, soft labor, easy policy: a dovish, risk-on snapshot."""
    d = date(2026, 1, 15)
    return [
        Observation("corepce_yoy", "PCEPILFE", 2.0, d),
        Observation("pce_yoy", "PCEPI", 1.9, d),
        Observation("cpi_yoy", "CPIAUCSL", 2.1, d),
        Observation("corecpi_yoy", "CPILFESL", 2.2, d),
        Observation("gdp_yoy", "GDPC1", 0.8, d),
        Observation("payems_delta", "PAYEMS", 60.0, d),
        Observation("unrate", "UNRATE", 4.8, d),
        Observation("t10y2y", "T10Y2Y", -0.2, d),
        Observation("t10y3m", "T10Y3M", -0.4, d),
        Observation("fedfunds", "FEDFUNDS", 3.5, d),
        Observation("nfci", "NFCI", 0.5, d),
    ]


@pytest.fixture
def observation_frame(stagflation_observations) -> pd.DataFrame:
    """Long-format frame: 24 monthly points per series ending at the snapshot value."""
    rows = []
    for obs in stagflation_observations:
        for i in range(24):
            rows.append(
                {
                    "series_id": obs.key,
                    "date": obs.date - timedelta(days=30 * (23 - i)),
                    "value": obs.value if i == 23 else obs.value - 0.01 * (23 - i),
                }
            )
    return pd.DataFrame(rows)


@pytest.fixture
def correlation_frame() -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"symbol": "EURUSD", "benchmark": "DXY", "window": "12m", "value": -0.92,
             "sample_size": 250, "as_of": "2026-01-10"},
            {"symbol": "EURUSD", "benchmark": "DXY", "window": "3m", "value": -0.88,
             "sample_size": 62, "as_of": "2026-01-10"},
            {"symbol": "BTCUSD", "benchmark": "DXY", "window": "12m", "value": -0.35,
             "sample_size": 240, "as_of": "2026-01-10"},
            {"symbol": "BTCUSD", "benchmark": "DXY", "window": "3m", "value": -0.10,
             "sample_size": 60, "as_of": "2026-01-10"},
            {"symbol": "XAUUSD", "benchmark": "DXY", "window": "12m", "value": None,
             "sample_size": 12, "as_of": "2026-01-10"},
        ]
    )

