"""
MACRO BIAS - Posture Classifier

Maps one indicator reading to a policy-stance posture.

Each family is a band [low, high] that is Neutral inclusive on both ends.
Below the band the reading takes `below`, above the band `above`.
Missing or NaN readings are always Neutral.

Sign convention: Dovish -> +1, Hawkish -> -1. Regime and scenario
thresholds are calibrated against it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Union

from macro_bias.aliases import DEFAULT_RESOLVER, AliasResolver, SeriesId
from macro_bias.types import POSTURE_NUMERIC, Posture

H = Posture.HAWKISH
D = Posture.DOVISH


@dataclass(frozen=True)
class PostureBand:
    low: float
    high: float
    below: Posture
    above: Posture

    def classify(self, value: float) -> Posture:
        if value < self.low:
            return self.below
        if value <= self.high:
            return Posture.NEUTRAL
        return self.above


CURVE = PostureBand(0.0, 1.0, below=D, above=H)
BREAKEVEN = PostureBand(2.0, 3.0, below=D, above=H)
FINANCIAL_CONDITIONS = PostureBand(-0.3, 0.3, below=H, above=D)
GDP_GROWTH = PostureBand(1.0, 2.5, below=D, above=H)
GROWTH_YOY = PostureBand(0.0, 3.0, below=D, above=H)
CAPACITY = PostureBand(77.0, 80.0, below=D, above=H)
PAYROLLS = PostureBand(100.0, 250.0, below=D, above=H)
UNEMPLOYMENT = PostureBand(4.0, 4.5, below=H, above=D)
CLAIMS = PostureBand(200_000.0, 300_000.0, below=H, above=D)
LEADING_INDEX = PostureBand(0.0, 2.0, below=D, above=H)
ISM_PMI = PostureBand(50.0, 52.0, below=D, above=H)
UNDEREMPLOYMENT = PostureBand(7.0, 8.5, below=H, above=D)
PRICES = PostureBand(2.5, 3.0, below=D, above=H)
PPI = PostureBand(1.0, 3.0, below=D, above=H)
POLICY_RATE = PostureBand(4.0, 5.0, below=D, above=H)
# High VIX is risk = dovish for risk assets; calm is hawkish
VIX = PostureBand(15.0, 25.0, below=H, above=D)

FAMILIES: dict[SeriesId, PostureBand] = {
    SeriesId.T10Y2Y: CURVE,
    SeriesId.T10Y3M: CURVE,
    SeriesId.T5YIE: BREAKEVEN,
    SeriesId.NFCI: FINANCIAL_CONDITIONS,
    SeriesId.GDPC1: GDP_GROWTH,
    SeriesId.RSAFS: GROWTH_YOY,
    SeriesId.INDPRO: GROWTH_YOY,
    SeriesId.DGEXFI: GROWTH_YOY,
    SeriesId.TTLCONS: GROWTH_YOY,
    SeriesId.TCU: CAPACITY,
    SeriesId.PAYEMS: PAYROLLS,
    SeriesId.UNRATE: UNEMPLOYMENT,
    SeriesId.ICSA: CLAIMS,
    SeriesId.USSLIND: LEADING_INDEX,
    SeriesId.USPMI: ISM_PMI,
    SeriesId.U6RATE: UNDEREMPLOYMENT,
    SeriesId.PCEPI: PRICES,
    SeriesId.PCEPILFE: PRICES,
    SeriesId.CPIAUCSL: PRICES,
    SeriesId.CPILFESL: PRICES,
    SeriesId.PPIACO: PPI,
    SeriesId.FEDFUNDS: POLICY_RATE,
    SeriesId.VIXCLS: VIX,
}


def family_for(
    series_id: Union[str, SeriesId],
    resolver: AliasResolver = DEFAULT_RESOLVER,
) -> Optional[PostureBand]:
    """Band for an id; unknown ids ending in _yoy use the generic growth band."""
    sid = resolver.resolve(series_id)
    if sid is not None and sid in FAMILIES:
        return FAMILIES[sid]
    if sid is None and str(series_id).strip().lower().endswith("_yoy"):
        return GROWTH_YOY
    return None


def classify_posture(
    series_id: Union[str, SeriesId],
    value: Optional[float],
    resolver: AliasResolver = DEFAULT_RESOLVER,
) -> Posture:
    """
    Classify an indicator reading.

    Args:
        series_id: Canonical id or internal key.
        value: Latest reading (None/NaN allowed).
        resolver: Alias resolver.

    Returns:
        Posture.HAWKISH, Posture.NEUTRAL or Posture.DOVISH.
    """
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return Posture.NEUTRAL
    band = family_for(series_id, resolver)
    if band is None:
        return Posture.NEUTRAL
    return band.classify(value)


def posture_numeric(posture: Posture) -> int:
    return POSTURE_NUMERIC[posture]
