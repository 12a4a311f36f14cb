"""
MACRO BIAS - Confidence Grader

Grades a pair bias as Alta / Media / Baja.

Base band from the regime score distance:
    |score| >= 0.50                    -> Alta
    0.30 <= |score| < 0.50             -> Alta if USD bias is strong, else Media
    otherwise                          -> Baja

Points ladder on top of the base band:
    base {Alta: 2, Media: 1, Baja: 0}
    +1 if |corr12m| >= 0.5
    +2 if aligned big surprises >= 2, +1 if exactly 1
    >= 3 -> Alta, >= 1 -> Media, else Baja
"""

from __future__ import annotations

from typing import Iterable, Optional

from macro_bias.aliases import DEFAULT_RESOLVER, AliasResolver, SeriesId
from macro_bias.config import ConfidenceThresholds
from macro_bias.types import Confidence, Indicator, Posture, UsdStrength

BASE_POINTS = {Confidence.ALTA: 2, Confidence.MEDIA: 1, Confidence.BAJA: 0}

# High-impact releases eligible as aligned surprises
BIG_INDICATORS: frozenset[SeriesId] = frozenset(
    {
        SeriesId.CPIAUCSL,
        SeriesId.CPILFESL,
        SeriesId.PCEPILFE,
        SeriesId.PAYEMS,
        SeriesId.USPMI,
    }
)

EXPECTED_POSTURE = {
    UsdStrength.STRONG: Posture.HAWKISH,
    UsdStrength.WEAK: Posture.DOVISH,
}


def usd_is_strong(usd_label: UsdStrength) -> bool:
    """True for a directional USD bias (Fuerte or Débil)."""
    return usd_label in (UsdStrength.STRONG, UsdStrength.WEAK)


def base_confidence(
    distance: float,
    usd_is_strong: bool,
    threshold: float = 0.3,
    strong: float = 0.5,
) -> Confidence:
    """
    Base confidence band shared by every grading entry point.

    Args:
        distance: |score|.
        usd_is_strong: Whether the USD bias is directional.
        threshold: Regime threshold.
        strong: Distance above which the band is Alta outright.

    Returns:
        Confidence.
    """
    if distance >= strong:
        return Confidence.ALTA
    if distance >= threshold:
        return Confidence.ALTA if usd_is_strong else Confidence.MEDIA
    return Confidence.BAJA


def confidence_from(
    score: float,
    threshold: float = 0.3,
    usd_label: UsdStrength = UsdStrength.NEUTRAL,
    strong: float = 0.5,
) -> Confidence:
    return base_confidence(abs(score), usd_is_strong(usd_label), threshold, strong)


def confidence_advanced(
    base: Confidence,
    corr12m: Optional[float],
    aligned_big_surprises: int,
    strong_correlation: float = 0.5,
) -> Confidence:
    """
    Apply the points ladder to a base band.

    Args:
        base: Base band.
        corr12m: 12-month correlation against the benchmark (None = 0).
        aligned_big_surprises: Count from count_aligned_big_surprises.
        strong_correlation: |corr12m| that adds one point.

    Returns:
        Confidence.
    """
    points = BASE_POINTS[base]
    if corr12m is not None and abs(corr12m) >= strong_correlation:
        points += 1
    if aligned_big_surprises >= 2:
        points += 2
    elif aligned_big_surprises == 1:
        points += 1

    if points >= 3:
        return Confidence.ALTA
    if points >= 1:
        return Confidence.MEDIA
    return Confidence.BAJA


def confidence_from_score(
    score: float,
    usd_is_strong: bool,
    corr12m: Optional[float],
    aligned_big_surprises: int,
    threshold: float = 0.3,
    thresholds: ConfidenceThresholds | None = None,
) -> Confidence:
    """Single-call grading: base band from the score, then the points ladder."""
    t = thresholds or ConfidenceThresholds()
    base = base_confidence(abs(score), usd_is_strong, threshold, t.strong_score)
    return confidence_advanced(base, corr12m, aligned_big_surprises, t.strong_correlation)


def count_aligned_big_surprises(
    indicators: Iterable[Indicator],
    priority_keys: Iterable[str],
    usd_label: UsdStrength,
    thresholds: ConfidenceThresholds | None = None,
    resolver: AliasResolver = DEFAULT_RESOLVER,
) -> int:
    """
    Count high-impact releases agreeing with the USD bias.

    Fuerte expects Hawkish readings, Débil expects Dovish ones; a Neutral
    bias always yields 0. Only priority keys that resolve to a big
    indicator are scanned. The raw count is lifted by the |z| sum of
    relevant surprises (|z| >= 1): >= 3 reports at least 2, >= 1 at least 1.

    Args:
        indicators: Classified indicators.
        priority_keys: Pair-specific keys, internal or canonical.
        usd_label: USD strength label.
        thresholds: Confidence thresholds.
        resolver: Alias resolver.

    Returns:
        Number of aligned big surprises.
    """
    expected = EXPECTED_POSTURE.get(usd_label)
    if expected is None:
        return 0
    t = thresholds or ConfidenceThresholds()

    by_series: dict[SeriesId, Indicator] = {}
    for ind in indicators:
        sid = resolver.resolve(ind.series_id) or resolver.resolve(ind.key)
        if sid is not None and sid not in by_series:
            by_series[sid] = ind

    count = 0
    z_sum = 0.0
    seen: set[SeriesId] = set()
    for key in priority_keys:
        sid = resolver.resolve(key)
        if sid is None or sid in seen or sid not in BIG_INDICATORS:
            continue
        seen.add(sid)
        ind = by_series.get(sid)
        if ind is None or ind.posture is not expected:
            continue
        count += 1
        if ind.z_score is not None and abs(ind.z_score) >= t.relevant_z:
            z_sum += abs(ind.z_score)

    if z_sum >= t.z_sum_double:
        return max(2, count)
    if z_sum >= t.z_sum_single:
        return max(1, count)
    return count
