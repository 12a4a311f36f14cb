"""
MACRO BIAS - Core Type Definitions

All dataclasses and enums used across the system.
No logic beyond serialization and trivial accessors.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class Posture(Enum):
    """Policy-stance signal of a single indicator reading."""

    HAWKISH = "Hawkish"
    NEUTRAL = "Neutral"
    DOVISH = "Dovish"


# Sign convention shared by the regime score and currency scores
POSTURE_NUMERIC: dict[Posture, int] = {
    Posture.DOVISH: 1,
    Posture.NEUTRAL: 0,
    Posture.HAWKISH: -1,
}


class Trend(Enum):
    """Direction of the latest change, judged by the indicator's polarity."""

    IMPROVING = "Improving"
    WORSENING = "Worsening"
    STABLE = "Stable"
    UNKNOWN = "Unknown"


class Regime(Enum):
    """Discretized aggregate stance."""

    RISK_ON = "RISK ON"
    RISK_OFF = "RISK OFF"
    NEUTRAL = "Neutral"


class UsdStrength(Enum):
    """USD strength label."""

    STRONG = "Fuerte"
    WEAK = "Débil"
    NEUTRAL = "Neutral"


class Quadrant(Enum):
    """Growth x inflation classification."""

    OVERHEATING = "overheating"
    STAGFLATION = "stagflation"
    SLOWDOWN = "slowdown"
    EXPANSION = "expansion"
    UNKNOWN = "unknown"


class Action(Enum):
    BUY = "Buy"
    SELL = "Sell"
    RANGE = "Range"


class Tactical(Enum):
    BULLISH = "Bullish"
    BEARISH = "Bearish"
    NEUTRAL = "Neutral"


class Confidence(Enum):
    """Confidence grade of a pair bias."""

    ALTA = "Alta"
    MEDIA = "Media"
    BAJA = "Baja"


class Severity(Enum):
    ALTA = "alta"
    MEDIA = "media"
    BAJA = "baja"


class AssetClass(Enum):
    FX = "fx"
    METAL = "metal"
    CRYPTO = "crypto"
    INDEX = "index"


class RiskSensitivity(Enum):
    RISK_ON = "risk_on"
    RISK_OFF = "risk_off"
    NEUTRAL = "neutral"


class CorrelationShift(Enum):
    """Relationship between the 3m and 12m correlation windows."""

    BREAK = "Break"
    REINFORCING = "Reinforcing"
    STABLE = "Stable"
    WEAK = "Weak"


class MacroRegime(Enum):
    """Growth x inflation regime of a single currency."""

    REFLATION = "reflation"
    STAGFLATION = "stagflation"
    RECESSION = "recession"
    GOLDILOCKS = "goldilocks"
    MIXED = "mixed"


@dataclass(frozen=True)
class ObservationPoint:
    """Single dated value as returned by an observation store."""

    date: date
    value: Optional[float] = None


@dataclass(frozen=True)
class Observation:
    """Latest known reading of one indicator. Immutable per run."""

    key: str
    series_id: str
    value: Optional[float] = None
    date: Optional[date] = None
    previous_value: Optional[float] = None
    previous_date: Optional[date] = None
    label: Optional[str] = None


@dataclass(frozen=True)
class Indicator:
    """Classified indicator shared by every component downstream of the store."""

    key: str
    series_id: str
    label: str
    value: Optional[float]
    posture: Posture
    trend: Trend = Trend.UNKNOWN
    weight: float = 0.0
    category: str = "Other"
    date: Optional[date] = None
    previous_value: Optional[float] = None
    previous_date: Optional[date] = None
    z_score: Optional[float] = None

    @property
    def numeric(self) -> int:
        """Posture numeric; 0 when the value is missing."""
        if self.value is None:
            return 0
        return POSTURE_NUMERIC[self.posture]

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "series_id": self.series_id,
            "label": self.label,
            "value": self.value,
            "value_previous": self.previous_value,
            "date": self.date.isoformat() if self.date else None,
            "date_previous": self.previous_date.isoformat() if self.previous_date else None,
            "posture": self.posture.value,
            "numeric": self.numeric,
            "trend": self.trend.value,
            "weight": self.weight,
            "category": self.category,
            "z_score": self.z_score,
        }


@dataclass(frozen=True)
class WeightedScore:
    score: float = 0.0
    count: int = 0
    used_weights: float = 0.0


@dataclass(frozen=True)
class CurrencyScore:
    """Per-currency macro score, each component in [-1, 1]."""

    currency: str
    total: float = 0.0
    growth: float = 0.0
    inflation: float = 0.0
    labor: float = 0.0
    monetary: float = 0.0
    sentiment: float = 0.0


@dataclass(frozen=True)
class CurrencyRegime:
    """Per-currency regime with a 0.3-1 distance-from-centre probability."""

    regime: MacroRegime = MacroRegime.MIXED
    probability: float = 0.3
    description: str = "Mixed signals"

    def to_dict(self) -> dict:
        return {
            "regime": self.regime.value,
            "probability": self.probability,
            "description": self.description,
        }


@dataclass(frozen=True)
class Instrument:
    """Tradable instrument of the bias universe."""

    symbol: str
    asset_class: AssetClass
    base: Optional[str] = None
    quote: Optional[str] = None
    risk_sensitivity: RiskSensitivity = RiskSensitivity.NEUTRAL


@dataclass(frozen=True)
class CorrelationRecord:
    """One stored asset-vs-benchmark correlation for a single window."""

    symbol: str
    benchmark: str
    window: str  # "3m" | "6m" | "12m" | "24m"
    value: Optional[float] = None
    sample_size: int = 0
    as_of: Optional[date] = None


@dataclass(frozen=True)
class CorrelationLookup:
    """Correlation store answer for one (symbol, benchmark)."""

    corr12m: Optional[float] = None
    corr3m: Optional[float] = None
    sample_size_12m: int = 0
    sample_size_3m: int = 0

    @property
    def has_values(self) -> bool:
        return self.corr12m is not None or self.corr3m is not None


@dataclass(frozen=True)
class CorrelationSnapshot:
    """Resolved correlation attached to a pair bias row."""

    corr12m: Optional[float] = None
    corr6m: Optional[float] = None
    corr3m: Optional[float] = None
    ref: Optional[str] = None
    mapped: bool = False


@dataclass(frozen=True)
class PairBiasRow:
    """Per-instrument bias. confidence is None only before enrichment."""

    pair: str
    macro_label: str
    action: Action
    rationale: str
    tactical: Tactical
    confidence: Optional[Confidence] = None
    corr12m: Optional[float] = None
    corr6m: Optional[float] = None
    corr3m: Optional[float] = None
    corr_ref: Optional[str] = None
    corr_mapped: bool = False
    corr_shift: Optional[CorrelationShift] = None
    aligned_surprises: int = 0

    def to_dict(self) -> dict:
        return {
            "pair": self.pair,
            "macro_label": self.macro_label,
            "action": self.action.value,
            "rationale": self.rationale,
            "tactical": self.tactical.value,
            "confidence": self.confidence.value if self.confidence else None,
            "corr12m": self.corr12m,
            "corr6m": self.corr6m,
            "corr3m": self.corr3m,
            "corr_ref": self.corr_ref,
            "corr_mapped": self.corr_mapped,
            "corr_shift": self.corr_shift.value if self.corr_shift else None,
            "aligned_surprises": self.aligned_surprises,
        }


@dataclass(frozen=True)
class Scenario:
    """Qualitative scenario or institutional setup."""

    id: str
    title: str
    severity: Severity
    rationale: str
    action_hint: str
    pair: Optional[str] = None
    direction: Optional[Action] = None
    confidence: Optional[Confidence] = None
    macro_reasons: tuple[str, ...] = ()
    setup_text: Optional[str] = None

    def to_dict(self) -> dict:
        out = {
            "id": self.id,
            "title": self.title,
            "severity": self.severity.value,
            "rationale": self.rationale,
            "action_hint": self.action_hint,
        }
        if self.pair is not None:
            out["pair"] = self.pair
        if self.direction is not None:
            out["direction"] = self.direction.value
        if self.confidence is not None:
            out["confidence"] = self.confidence.value
        if self.macro_reasons:
            out["macro_reasons"] = list(self.macro_reasons)
        if self.setup_text is not None:
            out["setup_text"] = self.setup_text
        return out


@dataclass(frozen=True)
class InstitutionalScenarios:
    active: list[Scenario] = field(default_factory=list)
    watchlist: list[Scenario] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "active": [s.to_dict() for s in self.active],
            "watchlist": [s.to_dict() for s in self.watchlist],
        }


@dataclass(frozen=True)
class ScenarioChange:
    kind: str  # "new" | "changed" | "removed"
    scenario: Scenario
    old_confidence: Optional[Confidence] = None


@dataclass(frozen=True)
class Diagnosis:
    """Final diagnosis output."""

    items: list[Indicator]
    score: float
    regime: Regime
    threshold: float
    last_updated: Optional[date]
    counts: dict[str, int]
    category_counts: dict[str, dict[str, int]]
    improving: int
    deteriorating: int
    usd_strength: UsdStrength = UsdStrength.NEUTRAL
    quadrant: Quadrant = Quadrant.EXPANSION
    currency_scores: dict[str, CurrencyScore] = field(default_factory=dict)
    currency_regimes: dict[str, CurrencyRegime] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Serialize to output JSON format."""
        return {
            "items": [i.to_dict() for i in self.items],
            "score": self.score,
            "regime": self.regime.value,
            "threshold": self.threshold,
            "last_updated": self.last_updated.isoformat() if self.last_updated else "",
            "counts": dict(self.counts),
            "category_counts": {k: dict(v) for k, v in self.category_counts.items()},
            "improving": self.improving,
            "deteriorating": self.deteriorating,
            "usd_strength": self.usd_strength.value,
            "quadrant": self.quadrant.value,
            "currency_scores": {
                ccy: {
                    "total": cs.total,
                    "growth": cs.growth,
                    "inflation": cs.inflation,
                    "labor": cs.labor,
                    "monetary": cs.monetary,
                    "sentiment": cs.sentiment,
                }
                for ccy, cs in self.currency_scores.items()
            },
            "currency_regimes": {ccy: r.to_dict() for ccy, r in self.currency_regimes.items()},
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
