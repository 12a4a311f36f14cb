"""
MACRO BIAS - Macro Context

Secondary readings derived from the classified indicators:
USD strength label, growth x inflation quadrant, per-currency scores
and regimes, and release z-scores.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Iterable, Mapping, Optional, Sequence

from macro_bias.aliases import DEFAULT_RESOLVER, AliasResolver, SeriesId
from macro_bias.config import CURRENCY_GROUPS
from macro_bias.types import (
    CurrencyRegime,
    CurrencyScore,
    Indicator,
    MacroRegime,
    Quadrant,
    UsdStrength,
)

# (series, level above which it counts as a USD-supportive point)
USD_STRENGTH_RULES: tuple[tuple[SeriesId, float], ...] = (
    (SeriesId.DTWEXBGS, 110.0),
    (SeriesId.T10Y2Y, 0.5),
    (SeriesId.T10Y3M, 0.5),
    (SeriesId.PCEPI, 3.0),
    (SeriesId.PCEPILFE, 3.0),
    (SeriesId.GDPC1, 2.5),
)
USD_STRONG_POINTS = 3
USD_WEAK_POINTS = 1

INFLATION_SERIES = (SeriesId.PCEPI, SeriesId.PCEPILFE)
GROWTH_SERIES = (SeriesId.GDPC1, SeriesId.INDPRO)

REGIME_CLEAR = 0.1
REGIME_SIGNAL = 0.05
REGIME_LEAN = 0.03
REGIME_CONTEXT = 0.15

REGIME_TEXT = {
    MacroRegime.REFLATION: "Reflation (strong growth with high inflation)",
    MacroRegime.STAGFLATION: "Stagflation (weak growth with high inflation)",
    MacroRegime.RECESSION: "Recession (weak growth with low inflation)",
    MacroRegime.GOLDILOCKS: "Goldilocks (solid growth with disinflation)",
}
LEAN_TEXT = {
    MacroRegime.REFLATION: "Positive growth with moderate inflation",
    MacroRegime.RECESSION: "Weak growth with moderate inflation",
    MacroRegime.STAGFLATION: "Elevated inflation with moderate growth",
    MacroRegime.GOLDILOCKS: "Disinflation with moderate growth",
}


def values_by_series(
    indicators: Iterable[Indicator],
    resolver: AliasResolver = DEFAULT_RESOLVER,
) -> dict[SeriesId, float]:
    """Latest non-null value per resolved series. First occurrence wins."""
    out: dict[SeriesId, float] = {}
    for ind in indicators:
        if ind.value is None:
            continue
        sid = resolver.resolve(ind.series_id)
        if sid is not None and sid not in out:
            out[sid] = ind.value
    return out


def usd_strength(
    indicators: Iterable[Indicator],
    resolver: AliasResolver = DEFAULT_RESOLVER,
) -> UsdStrength:
    """
    Score USD strength from rates, inflation and growth.

    One point per rule satisfied; >= 3 points is Fuerte, <= 1 is Débil.
    Neutral when none of the rule series has a value.
    """
    values = values_by_series(indicators, resolver)
    if not any(sid in values for sid, _ in USD_STRENGTH_RULES):
        return UsdStrength.NEUTRAL
    points = sum(
        1 for sid, level in USD_STRENGTH_RULES if sid in values and values[sid] > level
    )
    if points >= USD_STRONG_POINTS:
        return UsdStrength.STRONG
    if points <= USD_WEAK_POINTS:
        return UsdStrength.WEAK
    return UsdStrength.NEUTRAL


def macro_quadrant(
    indicators: Iterable[Indicator],
    resolver: AliasResolver = DEFAULT_RESOLVER,
) -> Quadrant:
    """
    Growth x inflation quadrant.

    Each average covers the components present; an empty average is 0.
    Unknown when no inflation or growth component has a value.
    """
    values = values_by_series(indicators, resolver)
    infl_values = [values[s] for s in INFLATION_SERIES if s in values]
    growth_values = [values[s] for s in GROWTH_SERIES if s in values]
    if not infl_values and not growth_values:
        return Quadrant.UNKNOWN
    infl = _mean(infl_values)
    growth = _mean(growth_values)

    if infl > 3 and growth > 2:
        return Quadrant.OVERHEATING
    if infl > 3 and growth < 1:
        return Quadrant.STAGFLATION
    if infl < 2.5 and growth < 1:
        return Quadrant.SLOWDOWN
    return Quadrant.EXPANSION


def compute_currency_scores(
    indicators: Iterable[Indicator],
    currency_indicators: Mapping[str, tuple[str, str]],
    resolver: AliasResolver = DEFAULT_RESOLVER,
) -> dict[str, CurrencyScore]:
    """
    Per-currency macro scores.

    Each indicator mapped to (currency, group) contributes
    numeric(posture) * weight. Totals and group scores are normalized by
    the weight they used and clamped to [-1, 1]. Indicators without a
    weight are skipped; currencies with no contribution are omitted.

    Args:
        indicators: Classified indicators.
        currency_indicators: canonical id -> (currency, group).
        resolver: Alias resolver.

    Returns:
        Dict of currency -> CurrencyScore.
    """
    sums: dict[str, dict[str, float]] = {}
    used: dict[str, dict[str, float]] = {}

    for ind in indicators:
        if ind.value is None or not ind.weight:
            continue
        meta = currency_indicators.get(resolver.canonical(ind.series_id))
        if meta is None:
            continue
        currency, group = meta
        contrib = ind.numeric * ind.weight
        s = sums.setdefault(currency, {})
        u = used.setdefault(currency, {})
        for bucket in ("total", group):
            s[bucket] = s.get(bucket, 0.0) + contrib
            u[bucket] = u.get(bucket, 0.0) + ind.weight

    def _norm(currency: str, bucket: str) -> float:
        weight = used[currency].get(bucket, 0.0)
        if weight == 0:
            return 0.0
        return max(-1.0, min(1.0, sums[currency][bucket] / weight))

    return {
        ccy: CurrencyScore(
            currency=ccy,
            total=_norm(ccy, "total"),
            **{g: _norm(ccy, g) for g in CURRENCY_GROUPS},
        )
        for ccy in sums
    }


def classify_macro_regime(growth: float, inflation: float) -> CurrencyRegime:
    """
    Regime from growth strength and inflation pressure, both in [-1, 1].

    Clear quadrants need |x| > 0.1 on both axes. Otherwise the dominant
    axis decides when either magnitude exceeds 0.05 and it leans past
    0.03. Probability is the distance from the centre over 0.5, kept
    in [0.3, 1].
    """
    strong_growth = growth > REGIME_CLEAR
    weak_growth = growth < -REGIME_CLEAR
    high_inflation = inflation > REGIME_CLEAR
    low_inflation = inflation < -REGIME_CLEAR

    regime = MacroRegime.MIXED
    description = "Mixed signals"
    if strong_growth and high_inflation:
        regime = MacroRegime.REFLATION
    elif weak_growth and high_inflation:
        regime = MacroRegime.STAGFLATION
    elif weak_growth and low_inflation:
        regime = MacroRegime.RECESSION
    elif strong_growth and low_inflation:
        regime = MacroRegime.GOLDILOCKS
    if regime is not MacroRegime.MIXED:
        description = REGIME_TEXT[regime]
    elif abs(growth) > REGIME_SIGNAL or abs(inflation) > REGIME_SIGNAL:
        if abs(growth) > abs(inflation):
            if growth > REGIME_LEAN:
                regime = MacroRegime.REFLATION
            elif growth < -REGIME_LEAN:
                regime = MacroRegime.RECESSION
        elif inflation > REGIME_LEAN:
            regime = MacroRegime.STAGFLATION
        elif inflation < -REGIME_LEAN:
            regime = MacroRegime.GOLDILOCKS
        if regime is not MacroRegime.MIXED:
            description = LEAN_TEXT[regime]

    magnitude = max(abs(growth), abs(inflation))
    return CurrencyRegime(
        regime=regime,
        probability=min(1.0, max(0.3, magnitude / 0.5)),
        description=description,
    )


def currency_regime(score: CurrencyScore) -> CurrencyRegime:
    """
    Regime of one currency from its group scores.

    Scores are posture-signed (Dovish positive), so growth strength is
    -growth and inflation pressure is -inflation. When both are within
    0.05 of zero the total score is projected 60/40 onto the two axes;
    if that is flat too, labor and sentiment feed growth and monetary
    feeds inflation.
    """
    growth = -score.growth
    inflation = -score.inflation
    labor = -score.labor
    monetary = -score.monetary

    if abs(growth) < REGIME_SIGNAL and abs(inflation) < REGIME_SIGNAL:
        total = -score.total
        if abs(total) > REGIME_SIGNAL:
            if total > 0:
                growth = max(REGIME_SIGNAL, total * 0.6)
            else:
                growth = min(-REGIME_SIGNAL, total * 0.6)
            inflation = total * 0.4
        else:
            growth = _clamp(growth + 0.4 * labor - 0.2 * score.sentiment)
            inflation = _clamp(inflation + 0.3 * monetary)

    result = classify_macro_regime(growth, inflation)

    context = []
    if abs(labor) > REGIME_CONTEXT:
        context.append(f"labor {'strong' if labor > 0 else 'weak'}")
    if abs(monetary) > REGIME_CONTEXT:
        context.append(f"policy {'hawkish' if monetary > 0 else 'dovish'}")
    if context:
        return replace(result, description=f"{result.description} ({', '.join(context)})")
    return result


def compute_currency_regimes(
    scores: Mapping[str, CurrencyScore],
) -> dict[str, CurrencyRegime]:
    return {ccy: currency_regime(cs) for ccy, cs in scores.items()}


def compute_z_score(values: Sequence[float], min_history: int = 20) -> Optional[float]:
    """
    Population z-score of the last value against the whole series.

    Returns None with fewer than min_history values, zero variance or a
    non-finite latest value.
    """
    if len(values) < min_history:
        return None
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    std = math.sqrt(variance)
    if std == 0 or not math.isfinite(std):
        return None
    latest = values[-1]
    if not math.isfinite(latest):
        return None
    return (latest - mean) / std


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _clamp(value: float) -> float:
    return max(-1.0, min(1.0, value))
