"""
MACRO BIAS - Configuration & Thresholds

Single source of truth for all numerical thresholds and static tables.

The EngineConfig is built once at process start (load_config) and passed
by reference into every component. A missing or malformed config file
falls back to the built-in default of that section.
"""

from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from macro_bias.aliases import DEFAULT_RESOLVER
from macro_bias.symbols import normalize_symbol
from macro_bias.types import AssetClass, CorrelationSnapshot, Instrument, RiskSensitivity

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "MACRO_BIAS_CONFIG_DIR"


@dataclass(frozen=True)
class RegimeThresholds:
    """Weighted-score regime threshold."""

    threshold: float = 0.3  # |score| >= threshold -> RISK ON / RISK OFF


@dataclass(frozen=True)
class ConfidenceThresholds:
    """Confidence ladder thresholds."""

    strong_score: float = 0.50  # |score| >= 0.50 is Alta regardless of USD bias
    strong_correlation: float = 0.5  # |corr12m| >= 0.5 adds one point
    relevant_z: float = 1.0  # |z| >= 1 counts toward the surprise z-sum
    z_sum_double: float = 3.0  # z-sum >= 3 -> at least 2 aligned surprises
    z_sum_single: float = 1.0  # z-sum >= 1 -> at least 1 aligned surprise


@dataclass(frozen=True)
class CorrelationThresholds:
    """Correlation store acceptance rules."""

    benchmark: str = "DXY"
    min_sample_12m: int = 150  # ~ trading days in 12 months, with gaps
    min_sample_3m: int = 40


@dataclass(frozen=True)
class BiasThresholds:
    """Currency-relative bias thresholds."""

    pair_score: float = 0.3  # base - quote beyond +/-0.3 is directional


@dataclass(frozen=True)
class ScoringConfig:
    """Context scoring parameters."""

    zscore_min_history: int = 20


DEFAULT_WEIGHTS: dict[str, float] = {
    "T10Y2Y": 0.08,
    "T10Y3M": 0.07,
    "T5YIE": 0.05,
    "NFCI": 0.06,
    "GDPC1": 0.08,
    "RSAFS": 0.04,
    "INDPRO": 0.03,
    "DGEXFI": 0.03,
    "TTLCONS": 0.03,
    "PAYEMS": 0.08,
    "UNRATE": 0.06,
    "ICSA": 0.03,
    "PCEPI": 0.06,
    "PCEPILFE": 0.06,
    "CPIAUCSL": 0.04,
    "CPILFESL": 0.03,
    "PPIACO": 0.03,
    "UMCSENT": 0.04,
    "NFIB": 0.02,
    "HOUST": 0.03,
    "NAHB": 0.03,
    "TCU": 0.02,
    "USPMI": 0.04,
    "JTSJOL": 0.04,
}

DEFAULT_UNIVERSE: tuple[Instrument, ...] = (
    Instrument("EURUSD", AssetClass.FX, "EUR", "USD"),
    Instrument("GBPUSD", AssetClass.FX, "GBP", "USD"),
    Instrument("AUDUSD", AssetClass.FX, "AUD", "USD"),
    Instrument("USDJPY", AssetClass.FX, "USD", "JPY"),
    Instrument("USDCAD", AssetClass.FX, "USD", "CAD"),
    Instrument("EURGBP", AssetClass.FX, "EUR", "GBP"),
    Instrument("XAUUSD", AssetClass.METAL, "XAU", "USD"),
    Instrument("BTCUSDT", AssetClass.CRYPTO, "BTC", "USDT", RiskSensitivity.RISK_ON),
    Instrument("ETHUSDT", AssetClass.CRYPTO, "ETH", "USDT", RiskSensitivity.RISK_ON),
    Instrument("SPX", AssetClass.INDEX, risk_sensitivity=RiskSensitivity.RISK_ON),
    Instrument("NDX", AssetClass.INDEX, risk_sensitivity=RiskSensitivity.RISK_ON),
)

_USD_CORE = ("cpi_yoy", "corecpi_yoy", "corepce_yoy", "payems_delta", "pmi_mfg")

DEFAULT_PAIR_PRIORITY: dict[str, tuple[str, ...]] = {
    "EURUSD": _USD_CORE + ("eu_cpi_yoy", "eu_pmi_manufacturing"),
    "GBPUSD": _USD_CORE + ("uk_cpi_yoy", "uk_manufacturing_pmi"),
    "AUDUSD": _USD_CORE,
    "USDJPY": _USD_CORE + ("jp_cpi_yoy",),
    "USDCAD": _USD_CORE,
    "XAUUSD": ("cpi_yoy", "corecpi_yoy", "corepce_yoy", "payems_delta"),
    "BTCUSDT": ("cpi_yoy", "payems_delta"),
    "ETHUSDT": ("cpi_yoy", "payems_delta"),
    "SPX": ("cpi_yoy", "payems_delta", "pmi_mfg"),
    "NDX": ("cpi_yoy", "payems_delta", "pmi_mfg"),
}

DEFAULT_INSTITUTIONAL_PAIRS: tuple[str, ...] = (
    "EURUSD",
    "GBPUSD",
    "USDJPY",
    "XAUUSD",
    "SPX",
    "NDX",
)

# canonical id -> (currency, group)
DEFAULT_CURRENCY_INDICATORS: dict[str, tuple[str, str]] = {
    "GDPC1": ("USD", "growth"),
    "INDPRO": ("USD", "growth"),
    "RSAFS": ("USD", "growth"),
    "USPMI": ("USD", "growth"),
    "CPIAUCSL": ("USD", "inflation"),
    "CPILFESL": ("USD", "inflation"),
    "PCEPILFE": ("USD", "inflation"),
    "PPIACO": ("USD", "inflation"),
    "PAYEMS": ("USD", "labor"),
    "UNRATE": ("USD", "labor"),
    "ICSA": ("USD", "labor"),
    "JTSJOL": ("USD", "labor"),
    "FEDFUNDS": ("USD", "monetary"),
    "T10Y2Y": ("USD", "monetary"),
    "UMCSENT": ("USD", "sentiment"),
    "EU_GDP_YOY": ("EUR", "growth"),
    "EU_CPI_YOY": ("EUR", "inflation"),
    "EU_UNEMPLOYMENT": ("EUR", "labor"),
    "EU_ECB_RATE": ("EUR", "monetary"),
    "UK_GDP_YOY": ("GBP", "growth"),
    "UK_CPI_YOY": ("GBP", "inflation"),
    "UK_UNEMPLOYMENT_RATE": ("GBP", "labor"),
    "UK_BOE_RATE": ("GBP", "monetary"),
    "JP_GDP_YOY": ("JPY", "growth"),
    "JP_CPI_YOY": ("JPY", "inflation"),
    "JP_UNEMPLOYMENT_RATE": ("JPY", "labor"),
    "JP_BOJ_RATE": ("JPY", "monetary"),
}

CURRENCY_GROUPS = ("growth", "inflation", "labor", "monetary", "sentiment")


@dataclass(frozen=True)
class EngineConfig:
    """Master configuration for MACRO BIAS."""

    regime: RegimeThresholds = RegimeThresholds()
    confidence: ConfidenceThresholds = ConfidenceThresholds()
    correlation: CorrelationThresholds = CorrelationThresholds()
    bias: BiasThresholds = BiasThresholds()
    scoring: ScoringConfig = ScoringConfig()
    weights: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    universe: tuple[Instrument, ...] = DEFAULT_UNIVERSE
    pair_priority: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_PAIR_PRIORITY)
    )
    institutional_pairs: tuple[str, ...] = DEFAULT_INSTITUTIONAL_PAIRS
    static_correlations: Mapping[str, CorrelationSnapshot] = field(default_factory=dict)
    currency_indicators: Mapping[str, tuple[str, str]] = field(
        default_factory=lambda: dict(DEFAULT_CURRENCY_INDICATORS)
    )

    def weight_for(self, series_id: str) -> float:
        return self.weights.get(DEFAULT_RESOLVER.canonical(series_id), 0.0)

    def priority_for(self, pair: str) -> tuple[str, ...]:
        return tuple(self.pair_priority.get(normalize_symbol(pair), ()))

    def instrument_for(self, symbol: str) -> Optional[Instrument]:
        norm = normalize_symbol(symbol)
        for inst in self.universe:
            if inst.symbol == norm:
                return inst
        return None


def load_config(config_dir: Optional[Path] = None) -> EngineConfig:
    """
    Build the engine configuration from JSON files.

    Each file is optional. A file that is missing or fails validation is
    replaced by the built-in default for its section; loading never raises.

    Args:
        config_dir: Directory holding the JSON files. Defaults to
            $MACRO_BIAS_CONFIG_DIR, then ./config.

    Returns:
        EngineConfig.
    """
    if config_dir is None:
        env_dir = os.environ.get(CONFIG_DIR_ENV)
        config_dir = Path(env_dir) if env_dir else Path.cwd() / "config"

    regime = RegimeThresholds()
    weights: Mapping[str, float] = dict(DEFAULT_WEIGHTS)
    parsed_weights = _parse_weights(_read_json(config_dir / "weights.json"))
    if parsed_weights is not None:
        threshold, weights = parsed_weights
        regime = RegimeThresholds(threshold=threshold)

    universe = _parse_universe(_read_json(config_dir / "universe.json"))
    priority = _parse_pair_priority(_read_json(config_dir / "pair_priority.json"))
    institutional = _parse_symbol_list(_read_json(config_dir / "institutional_pairs.json"))
    correlations = _parse_correlations(_read_json(config_dir / "correlations.json"))
    currency = _parse_currency_indicators(_read_json(config_dir / "currency_indicators.json"))

    config = EngineConfig(
        regime=regime,
        weights=weights,
        universe=universe if universe is not None else DEFAULT_UNIVERSE,
        pair_priority=priority if priority is not None else dict(DEFAULT_PAIR_PRIORITY),
        institutional_pairs=(
            institutional if institutional is not None else DEFAULT_INSTITUTIONAL_PAIRS
        ),
        static_correlations=correlations if correlations is not None else {},
        currency_indicators=(
            currency if currency is not None else dict(DEFAULT_CURRENCY_INDICATORS)
        ),
    )
    logger.info(
        f"Config loaded from {config_dir}: {len(config.weights)} weights, "
        f"threshold={config.regime.threshold}, {len(config.universe)} instruments"
    )
    return config


def _read_json(path: Path) -> Any:
    """Parsed JSON, or None if the file is absent or unreadable."""
    if not path.is_file():
        logger.debug(f"Config file {path} not found, using defaults")
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning(f"Config file {path} unreadable ({exc}), using defaults")
        return None


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _parse_weights(data: Any) -> Optional[tuple[float, dict[str, float]]]:
    """{"threshold": 0..1, "weights": {id: >=0}}"""
    if data is None:
        return None
    if not isinstance(data, dict):
        logger.warning("weights.json is not an object, using defaults")
        return None
    threshold = data.get("threshold")
    raw = data.get("weights")
    if not _is_number(threshold) or not 0 <= threshold <= 1:
        logger.warning(f"weights.json threshold invalid ({threshold!r}), using defaults")
        return None
    if not isinstance(raw, dict) or not all(_is_number(w) and w >= 0 for w in raw.values()):
        logger.warning("weights.json weights invalid, using defaults")
        return None
    weights = {DEFAULT_RESOLVER.canonical(k): float(w) for k, w in raw.items()}
    return float(threshold), weights


def _parse_universe(data: Any) -> Optional[tuple[Instrument, ...]]:
    """[{"symbol", "asset_class", "base"?, "quote"?, "risk_sensitivity"?}]"""
    if data is None:
        return None
    if not isinstance(data, list) or not data:
        logger.warning("universe.json must be a non-empty list, using defaults")
        return None
    out = []
    try:
        for entry in data:
            out.append(
                Instrument(
                    symbol=normalize_symbol(entry["symbol"]),
                    asset_class=AssetClass(entry["asset_class"]),
                    base=(entry.get("base") or None),
                    quote=(entry.get("quote") or None),
                    risk_sensitivity=RiskSensitivity(
                        entry.get("risk_sensitivity", RiskSensitivity.NEUTRAL.value)
                    ),
                )
            )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        logger.warning(f"universe.json malformed ({exc!r}), using defaults")
        return None
    return tuple(out)


def _parse_pair_priority(data: Any) -> Optional[dict[str, tuple[str, ...]]]:
    """{pair: [indicator keys]}"""
    if data is None:
        return None
    if not isinstance(data, dict) or not all(
        isinstance(v, list) and all(isinstance(k, str) for k in v) for v in data.values()
    ):
        logger.warning("pair_priority.json malformed, using defaults")
        return None
    return {normalize_symbol(pair): tuple(keys) for pair, keys in data.items()}


def _parse_symbol_list(data: Any) -> Optional[tuple[str, ...]]:
    if data is None:
        return None
    if not isinstance(data, list) or not all(isinstance(s, str) for s in data):
        logger.warning("institutional_pairs.json malformed, using defaults")
        return None
    return tuple(normalize_symbol(s) for s in data)


def _parse_correlations(data: Any) -> Optional[dict[str, CorrelationSnapshot]]:
    """{symbol: {"corr12m", "corr6m", "corr3m", "ref"}}"""
    if data is None:
        return None
    if not isinstance(data, dict):
        logger.warning("correlations.json malformed, ignoring static correlations")
        return None

    def _corr(value: Any) -> Optional[float]:
        if _is_number(value) and -1.0 <= value <= 1.0:
            return float(value)
        return None

    out: dict[str, CorrelationSnapshot] = {}
    for symbol, entry in data.items():
        if not isinstance(entry, dict):
            logger.warning(f"correlations.json entry for {symbol} malformed, skipped")
            continue
        out[normalize_symbol(symbol)] = CorrelationSnapshot(
            corr12m=_corr(entry.get("corr12m")),
            corr6m=_corr(entry.get("corr6m")),
            corr3m=_corr(entry.get("corr3m")),
            ref=str(entry.get("ref") or "DXY"),
            mapped=True,
        )
    return out


def _parse_currency_indicators(data: Any) -> Optional[dict[str, tuple[str, str]]]:
    """{"indicators": {id: {"currency", "group"}}}"""
    if data is None:
        return None
    indicators = data.get("indicators") if isinstance(data, dict) else None
    if not isinstance(indicators, dict):
        logger.warning("currency_indicators.json malformed, using defaults")
        return None
    out: dict[str, tuple[str, str]] = {}
    for key, meta in indicators.items():
        if (
            not isinstance(meta, dict)
            or not isinstance(meta.get("currency"), str)
            or meta.get("group") not in CURRENCY_GROUPS
        ):
            logger.warning(f"currency_indicators.json entry for {key} malformed, skipped")
            continue
        out[DEFAULT_RESOLVER.canonical(key)] = (meta["currency"].upper(), meta["group"])
    return out
