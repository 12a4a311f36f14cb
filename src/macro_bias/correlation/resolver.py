"""
MACRO BIAS - Correlation Resolver

Resolves asset-vs-benchmark correlation through a layered fallback:

    1. Correlation store, per symbol variant; accepted when the sample
       size clears the minimum or any value is present
    2. Static symbol -> correlation configuration, per symbol variant
    3. Correlation store again, accepting low-sample answers

Only the 12m and 3m windows are store-backed; 6m comes from the static
configuration alone. Store failures are logged and count as misses.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from macro_bias.config import CorrelationThresholds
from macro_bias.stores.base import CorrelationStore
from macro_bias.symbols import normalize_symbol, symbol_variants
from macro_bias.types import CorrelationLookup, CorrelationShift, CorrelationSnapshot

logger = logging.getLogger(__name__)

BREAK_DELTA = 0.4
STABLE_DELTA = 0.1
WEAK_CORRELATION = 0.3


class CorrelationResolver:
    """Layered correlation lookup for pair bias rows."""

    def __init__(
        self,
        store: CorrelationStore | None = None,
        static: Mapping[str, CorrelationSnapshot] | None = None,
        thresholds: CorrelationThresholds | None = None,
    ) -> None:
        self.store = store
        self.static = {normalize_symbol(k): v for k, v in (static or {}).items()}
        self.thresholds = thresholds or CorrelationThresholds()

    async def resolve(
        self,
        symbol: str,
        benchmark: str | None = None,
        static: Mapping[str, CorrelationSnapshot] | None = None,
    ) -> CorrelationSnapshot:
        """
        Resolve the correlation snapshot of one symbol.

        Args:
            symbol: Instrument symbol, any separator ("BTC/USDT").
            benchmark: Benchmark symbol (default from thresholds, "DXY").
            static: Per-call static map overriding the configured one.

        Returns:
            CorrelationSnapshot; unmapped when nothing is found.
        """
        benchmark = benchmark or self.thresholds.benchmark
        variants = symbol_variants(symbol)
        lookups: dict[str, Optional[CorrelationLookup]] = {}

        for sym in variants:
            lookup = await self._query(sym, benchmark)
            lookups[sym] = lookup
            if lookup is not None and (self._sample_ok(lookup) or lookup.has_values):
                return _from_lookup(lookup, benchmark)

        static_map = (
            {normalize_symbol(k): v for k, v in static.items()}
            if static is not None
            else self.static
        )
        for sym in variants:
            snap = static_map.get(sym)
            if snap is not None:
                return CorrelationSnapshot(
                    corr12m=snap.corr12m,
                    corr6m=snap.corr6m,
                    corr3m=snap.corr3m,
                    ref=snap.ref or benchmark,
                    mapped=True,
                )

        # Unreachable while step 1 accepts any valued lookup; the low-sample last resort
        for sym in variants:
            lookup = lookups.get(sym)
            if lookup is not None and lookup.has_values:
                return _from_lookup(lookup, benchmark)

        return CorrelationSnapshot()

    def _sample_ok(self, lookup: CorrelationLookup) -> bool:
        return (
            lookup.sample_size_12m >= self.thresholds.min_sample_12m
            or lookup.sample_size_3m >= self.thresholds.min_sample_3m
        )

    async def _query(self, symbol: str, benchmark: str) -> Optional[CorrelationLookup]:
        if self.store is None:
            return None
        try:
            return await self.store.correlation(symbol, benchmark)
        except Exception as exc:
            logger.warning(f"Correlation lookup {symbol}/{benchmark} failed: {exc}")
            return None


def _from_lookup(lookup: CorrelationLookup, benchmark: str) -> CorrelationSnapshot:
    return CorrelationSnapshot(
        corr12m=lookup.corr12m,
        corr6m=None,
        corr3m=lookup.corr3m,
        ref=benchmark,
        mapped=True,
    )


def classify_shift(corr12m: Optional[float], corr3m: Optional[float]) -> CorrelationShift:
    """
    Label the 3m window against the 12m window.

    Args:
        corr12m: 12-month correlation.
        corr3m: 3-month correlation.

    Returns:
        CorrelationShift.
    """
    if corr12m is None or corr3m is None:
        return CorrelationShift.WEAK

    delta = corr3m - corr12m
    if corr12m * corr3m < 0 or abs(delta) > BREAK_DELTA:
        return CorrelationShift.BREAK
    if abs(corr12m) < WEAK_CORRELATION and abs(corr3m) < WEAK_CORRELATION:
        return CorrelationShift.WEAK
    if abs(delta) <= STABLE_DELTA:
        return CorrelationShift.STABLE
    if delta > 0:
        return CorrelationShift.REINFORCING
    return CorrelationShift.STABLE
