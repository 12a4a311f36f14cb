"""
MACRO BIAS - Trend Classifier

Compares the latest reading with the previous one.
Changes under 1% (relative, or absolute when previous is 0) are Stable.
A missing or NaN reading on either side is Unknown.
"""

from __future__ import annotations

import math
from typing import Optional, Union

from macro_bias.aliases import DEFAULT_RESOLVER, AliasResolver, SeriesId
from macro_bias.types import Trend

STABLE_CHANGE = 0.01

LOWER_IS_BETTER: frozenset[SeriesId] = frozenset(
    {
        SeriesId.CPIAUCSL,
        SeriesId.CPILFESL,
        SeriesId.PCEPI,
        SeriesId.PCEPILFE,
        SeriesId.PPIACO,
        SeriesId.UNRATE,
        SeriesId.ICSA,
    }
)

HIGHER_IS_BETTER: frozenset[SeriesId] = frozenset(
    {
        SeriesId.GDPC1,
        SeriesId.INDPRO,
        SeriesId.RSAFS,
        SeriesId.PAYEMS,
        SeriesId.USPMI,
        SeriesId.PMI_SVCS,
    }
)


def classify_trend(
    series_id: Union[str, SeriesId],
    current: Optional[float],
    previous: Optional[float],
    resolver: AliasResolver = DEFAULT_RESOLVER,
) -> Trend:
    """
    Classify the direction of the latest change.

    Indicators in neither polarity set are treated as higher-is-better.
    """
    if _missing(current) or _missing(previous):
        return Trend.UNKNOWN

    change = current - previous
    relative = abs(change / previous) if previous != 0 else abs(change)
    if relative < STABLE_CHANGE:
        return Trend.STABLE

    if resolver.resolve(series_id) in LOWER_IS_BETTER:
        return Trend.IMPROVING if change < 0 else Trend.WORSENING
    return Trend.IMPROVING if change > 0 else Trend.WORSENING


def _missing(value: Optional[float]) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))
