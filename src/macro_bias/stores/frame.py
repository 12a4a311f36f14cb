"""
MACRO BIAS - DataFrame Stores

pandas-backed observation and correlation stores. Both take long-format
frames, so a Parquet or CSV export of the ingestion database can be read
as is.

Observations:  series_id, date, value
Correlations:  symbol, benchmark, window, value, sample_size, as_of
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Optional

import pandas as pd

from macro_bias.aliases import DEFAULT_RESOLVER, AliasResolver
from macro_bias.stores.base import StoreError
from macro_bias.symbols import normalize_symbol
from macro_bias.types import CorrelationLookup, CorrelationRecord, ObservationPoint

logger = logging.getLogger(__name__)

OBSERVATION_COLUMNS = ("series_id", "date", "value")
CORRELATION_COLUMNS = ("symbol", "benchmark", "window", "value", "sample_size", "as_of")


def read_frame(path: Path) -> pd.DataFrame:
    """Read a Parquet or CSV file into a DataFrame."""
    path = Path(path)
    try:
        if path.suffix.lower() in (".parquet", ".pq"):
            return pd.read_parquet(path)
        return pd.read_csv(path)
    except (OSError, ValueError) as exc:
        raise StoreError(f"Cannot read {path}: {exc}") from exc


def _require_columns(df: pd.DataFrame, columns: tuple[str, ...], name: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise StoreError(f"{name} frame missing columns: {', '.join(missing)}")


def _clean_value(value) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


class FrameObservationStore:
    """
    Observation store over a long-format DataFrame.

    Series ids are canonicalized through the alias resolver, so a frame
    keyed by internal keys ("cpi_yoy") and one keyed by canonical ids
    ("CPIAUCSL") answer the same lookups.
    """

    def __init__(self, df: pd.DataFrame, resolver: AliasResolver = DEFAULT_RESOLVER) -> None:
        _require_columns(df, OBSERVATION_COLUMNS, "Observation")
        self.resolver = resolver
        frame = df.loc[:, list(OBSERVATION_COLUMNS)].copy()
        frame["series_id"] = frame["series_id"].astype(str).map(resolver.canonical)
        frame["date"] = pd.to_datetime(frame["date"]).dt.date
        frame["value"] = pd.to_numeric(frame["value"], errors="coerce")
        frame = frame.sort_values(["series_id", "date"])
        frame = frame.drop_duplicates(subset=["series_id", "date"], keep="last")
        self._series: dict[str, list[ObservationPoint]] = {
            sid: [
                ObservationPoint(date=d, value=_clean_value(v))
                for d, v in zip(group["date"], group["value"])
            ]
            for sid, group in frame.groupby("series_id", sort=False)
        }
        logger.debug(f"FrameObservationStore loaded {len(self._series)} series")

    @classmethod
    def from_file(cls, path: Path, resolver: AliasResolver = DEFAULT_RESOLVER) -> FrameObservationStore:
        return cls(read_frame(path), resolver)

    @property
    def series_ids(self) -> list[str]:
        return list(self._series)

    async def latest(self, series_id: str) -> Optional[ObservationPoint]:
        for point in reversed(self._series.get(self.resolver.canonical(series_id), [])):
            if point.value is not None:
                return point
        return None

    async def history(self, series_id: str) -> list[ObservationPoint]:
        return list(self._series.get(self.resolver.canonical(series_id), []))


WINDOW_ALIASES = {
    "3m": "3m",
    "90d": "3m",
    "6m": "6m",
    "180d": "6m",
    "12m": "12m",
    "1y": "12m",
    "24m": "24m",
    "2y": "24m",
}


class FrameCorrelationStore:
    """
    Correlation store over a long-format DataFrame.

    Keeps the most recent row (by as_of) per symbol, benchmark and window.
    Window labels are normalized ("90d" -> "3m", "1y" -> "12m"); rows with
    an unrecognized window are dropped. Values outside [-1, 1] are treated
    as missing.
    """

    def __init__(self, df: pd.DataFrame) -> None:
        _require_columns(df, CORRELATION_COLUMNS, "Correlation")
        frame = df.loc[:, list(CORRELATION_COLUMNS)].copy()
        frame["symbol"] = frame["symbol"].astype(str).map(normalize_symbol)
        frame["benchmark"] = frame["benchmark"].astype(str).map(normalize_symbol)
        frame["window"] = frame["window"].astype(str).str.strip().str.lower().map(WINDOW_ALIASES)
        frame["value"] = pd.to_numeric(frame["value"], errors="coerce")
        frame["sample_size"] = (
            pd.to_numeric(frame["sample_size"], errors="coerce").fillna(0).astype(int)
        )
        frame["as_of"] = pd.to_datetime(frame["as_of"], errors="coerce")

        unknown = frame["window"].isna()
        if unknown.any():
            logger.warning(f"Dropping {int(unknown.sum())} correlation rows with unknown window")
            frame = frame.loc[~unknown].copy()

        out_of_range = frame["value"].notna() & ~frame["value"].between(-1.0, 1.0)
        if out_of_range.any():
            logger.warning(f"Discarding {int(out_of_range.sum())} out-of-range correlation values")
            frame.loc[out_of_range, "value"] = float("nan")

        frame = frame.sort_values("as_of", na_position="first")
        frame = frame.drop_duplicates(subset=["symbol", "benchmark", "window"], keep="last")
        self._records: dict[tuple[str, str, str], CorrelationRecord] = {
            (s, b, w): CorrelationRecord(
                symbol=s,
                benchmark=b,
                window=w,
                value=_clean_value(v),
                sample_size=int(n),
                as_of=None if pd.isna(t) else t.date(),
            )
            for s, b, w, v, n, t in zip(
                frame["symbol"], frame["benchmark"], frame["window"],
                frame["value"], frame["sample_size"], frame["as_of"],
            )
        }

    @classmethod
    def from_file(cls, path: Path) -> FrameCorrelationStore:
        return cls(read_frame(path))

    @property
    def records(self) -> list[CorrelationRecord]:
        return list(self._records.values())

    async def correlation(self, symbol: str, benchmark: str) -> Optional[CorrelationLookup]:
        sym = normalize_symbol(symbol)
        bench = normalize_symbol(benchmark)
        rec12 = self._records.get((sym, bench, "12m"))
        rec3 = self._records.get((sym, bench, "3m"))
        if rec12 is None and rec3 is None:
            return None
        return CorrelationLookup(
            corr12m=rec12.value if rec12 else None,
            corr3m=rec3.value if rec3 else None,
            sample_size_12m=rec12.sample_size if rec12 else 0,
            sample_size_3m=rec3.sample_size if rec3 else 0,
        )
