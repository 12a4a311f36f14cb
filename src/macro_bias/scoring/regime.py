"""
MACRO BIAS - Regime Scorer

Aggregates indicator postures into a weighted score and a discretized regime.

    score = sum(numeric(posture) * weight) / sum(weight)

Only indicators with a value AND a nonzero weight take part.
The score is 0 when no weight is used, so it always lies in [-1, 1].
"""

from __future__ import annotations

from typing import Iterable

from macro_bias.types import Indicator, Regime, WeightedScore


def weighted_score(indicators: Iterable[Indicator]) -> WeightedScore:
    """
    Weighted posture score.

    Args:
        indicators: Classified indicators carrying their configured weight.

    Returns:
        WeightedScore(score, count, used_weights).
    """
    total = 0.0
    used = 0.0
    count = 0
    for ind in indicators:
        if ind.value is None or not ind.weight:
            continue
        total += ind.numeric * ind.weight
        used += ind.weight
        count += 1

    if used == 0:
        return WeightedScore(score=0.0, count=count, used_weights=0.0)
    return WeightedScore(score=total / used, count=count, used_weights=used)


def diagnose(score: float, threshold: float = 0.3) -> Regime:
    """
    Discretize a score. Both boundaries belong to the extreme label.

    Args:
        score: Weighted score in [-1, 1].
        threshold: Regime threshold.

    Returns:
        Regime.
    """
    if score >= threshold:
        return Regime.RISK_ON
    if score <= -threshold:
        return Regime.RISK_OFF
    return Regime.NEUTRAL
