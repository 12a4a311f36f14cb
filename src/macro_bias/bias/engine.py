"""
MACRO BIAS - Currency-Relative Bias Engine

Turns the regime, the USD strength label and the growth x inflation
quadrant into a Buy / Sell / Range action per instrument.

Rules by asset class:
    fx      currency scores (base - quote beyond +/-0.3) when both sides
            are scored, else the USD-centric fallback; crosses are Range
    metal   Buy in slowdown/stagflation or when USD is Débil,
            Sell when USD is Fuerte, else Range
    crypto  Buy iff risk_on instrument and RISK ON, else Sell
    index   Buy under RISK ON, else Sell

Tactical direction follows the action (Buy -> Bullish, Sell -> Bearish,
Range -> Neutral).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Optional, Union

from macro_bias.aliases import DEFAULT_RESOLVER, AliasResolver
from macro_bias.bias.confidence import (
    confidence_advanced,
    confidence_from,
    count_aligned_big_surprises,
)
from macro_bias.config import EngineConfig
from macro_bias.correlation.resolver import CorrelationResolver, classify_shift
from macro_bias.scoring.context import macro_quadrant
from macro_bias.types import (
    Action,
    AssetClass,
    Confidence,
    CorrelationSnapshot,
    CurrencyScore,
    Indicator,
    Instrument,
    PairBiasRow,
    Quadrant,
    Regime,
    RiskSensitivity,
    Tactical,
    UsdStrength,
)

logger = logging.getLogger(__name__)

CurrencyScores = Mapping[str, Union[float, CurrencyScore]]

TACTICAL = {
    Action.BUY: Tactical.BULLISH,
    Action.SELL: Tactical.BEARISH,
    Action.RANGE: Tactical.NEUTRAL,
}

METAL_BID_QUADRANTS = (Quadrant.SLOWDOWN, Quadrant.STAGFLATION)


def tactical_from_action(action: Action) -> Tactical:
    return TACTICAL[action]


def pair_score(
    base: Optional[str],
    quote: Optional[str],
    currency_scores: CurrencyScores | None,
) -> Optional[float]:
    """score(base) - score(quote), or None unless both sides are scored."""
    if not currency_scores or not base or not quote:
        return None
    b = currency_scores.get(base.upper())
    q = currency_scores.get(quote.upper())
    if b is None or q is None:
        return None
    return _total(b) - _total(q)


def _total(score: Union[float, CurrencyScore]) -> float:
    return score.total if isinstance(score, CurrencyScore) else float(score)


class BiasEngine:
    """
    Per-instrument bias over the configured universe.

    bias_table() is synchronous and pure. tactical_bias_table() adds
    correlation, aligned surprises and confidence per row, fanned out
    concurrently.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        correlations: CorrelationResolver | None = None,
        resolver: AliasResolver = DEFAULT_RESOLVER,
    ) -> None:
        self.config = config or EngineConfig()
        self.correlations = correlations or CorrelationResolver(
            static=self.config.static_correlations,
            thresholds=self.config.correlation,
        )
        self.resolver = resolver

    # --- Plain bias table -------------------------------------------------

    def bias_table(
        self,
        risk: Regime,
        usd_label: UsdStrength,
        quadrant: Quadrant,
        currency_scores: CurrencyScores | None = None,
    ) -> list[PairBiasRow]:
        """
        Bias row per universe instrument, in universe order.

        Args:
            risk: Overall regime.
            usd_label: USD strength label.
            quadrant: Growth x inflation quadrant.
            currency_scores: Optional currency -> score in [-1, 1].

        Returns:
            PairBiasRow list with confidence None.
        """
        return [
            self.instrument_bias(inst, risk, usd_label, quadrant, currency_scores)
            for inst in self.config.universe
        ]

    def instrument_bias(
        self,
        inst: Instrument,
        risk: Regime,
        usd_label: UsdStrength,
        quadrant: Quadrant,
        currency_scores: CurrencyScores | None = None,
    ) -> PairBiasRow:
        if inst.asset_class is AssetClass.FX:
            label, action, why = self._fx(inst, usd_label, currency_scores)
        elif inst.asset_class is AssetClass.METAL:
            label, action, why = self._metal(usd_label, quadrant)
        elif inst.asset_class is AssetClass.CRYPTO:
            label, action, why = self._crypto(inst, risk)
        else:
            label, action, why = self._index(risk)
        return PairBiasRow(
            pair=inst.symbol,
            macro_label=label,
            action=action,
            rationale=why,
            tactical=tactical_from_action(action),
        )

    def _fx(
        self,
        inst: Instrument,
        usd_label: UsdStrength,
        currency_scores: CurrencyScores | None,
    ) -> tuple[str, Action, str]:
        score = pair_score(inst.base, inst.quote, currency_scores)
        if score is not None:
            limit = self.config.bias.pair_score
            if score > limit:
                action = Action.BUY
            elif score < -limit:
                action = Action.SELL
            else:
                action = Action.RANGE
            return (
                f"{inst.base} vs {inst.quote} {score:+.2f}",
                action,
                f"Relative macro score {inst.base}-{inst.quote} = {score:+.2f} => {action.value}",
            )

        base = (inst.base or "").upper()
        quote = (inst.quote or "").upper()
        if "USD" not in (base, quote):
            return ("Cross", Action.RANGE, "Cross pair without currency scores => Range")

        if usd_label is UsdStrength.NEUTRAL:
            return ("USD Neutral", Action.RANGE, "USD Neutral => Range")

        usd_up = usd_label is UsdStrength.STRONG
        usd_base = base == "USD"
        action = Action.BUY if usd_up == usd_base else Action.SELL
        suffix = " (USD is the base currency)" if usd_base else ""
        return (f"USD {usd_label.value}", action, f"USD {usd_label.value} => {action.value}{suffix}")

    @staticmethod
    def _metal(usd_label: UsdStrength, quadrant: Quadrant) -> tuple[str, Action, str]:
        if quadrant in METAL_BID_QUADRANTS:
            return (
                quadrant.value,
                Action.BUY,
                f"{quadrant.value} and USD {usd_label.value} => Buy",
            )
        if usd_label is UsdStrength.WEAK:
            return (f"USD {usd_label.value}", Action.BUY, f"USD {usd_label.value} => Buy")
        if usd_label is UsdStrength.STRONG:
            return (f"USD {usd_label.value}", Action.SELL, f"USD {usd_label.value} => Sell")
        return ("Neutral", Action.RANGE, f"USD {usd_label.value} => Range")

    @staticmethod
    def _crypto(inst: Instrument, risk: Regime) -> tuple[str, Action, str]:
        buy = inst.risk_sensitivity is RiskSensitivity.RISK_ON and risk is Regime.RISK_ON
        action = Action.BUY if buy else Action.SELL
        return (risk.value, action, f"{risk.value} ({inst.risk_sensitivity.value}) => {action.value}")

    @staticmethod
    def _index(risk: Regime) -> tuple[str, Action, str]:
        action = Action.BUY if risk is Regime.RISK_ON else Action.SELL
        return (risk.value, action, f"{risk.value} => {action.value}")

    # --- Tactical table ---------------------------------------------------

    async def tactical_bias_table(
        self,
        items: list[Indicator],
        risk: Regime,
        usd_label: UsdStrength,
        score: float,
        corr_map: Mapping[str, CorrelationSnapshot] | None = None,
        currency_scores: CurrencyScores | None = None,
    ) -> list[PairBiasRow]:
        """
        Bias table enriched with correlation, aligned surprises and confidence.

        Rows are enriched concurrently. A failing enrichment keeps the row
        with no correlation, zero surprises and the base confidence.

        Args:
            items: Classified indicators.
            risk: Overall regime.
            usd_label: USD strength label.
            score: Weighted regime score.
            corr_map: Optional static correlations overriding the configured ones.
            currency_scores: Optional currency -> score in [-1, 1].

        Returns:
            PairBiasRow list in universe order, every row graded.
        """
        quadrant = macro_quadrant(items, self.resolver)
        rows = self.bias_table(risk, usd_label, quadrant, currency_scores)
        base = confidence_from(
            score,
            self.config.regime.threshold,
            usd_label,
            self.config.confidence.strong_score,
        )

        results = await asyncio.gather(
            *(self._enrich(row, items, usd_label, base, corr_map) for row in rows),
            return_exceptions=True,
        )

        out = []
        for row, result in zip(rows, results):
            if isinstance(result, Exception):
                logger.warning(f"Enrichment failed for {row.pair}: {result}")
                out.append(_graded(row, base, CorrelationSnapshot(), 0))
            else:
                out.append(result)
        return out

    async def _enrich(
        self,
        row: PairBiasRow,
        items: list[Indicator],
        usd_label: UsdStrength,
        base: Confidence,
        corr_map: Mapping[str, CorrelationSnapshot] | None,
    ) -> PairBiasRow:
        corr = await self.correlations.resolve(row.pair, static=corr_map)
        aligned = count_aligned_big_surprises(
            items,
            self.config.priority_for(row.pair),
            usd_label,
            self.config.confidence,
            self.resolver,
        )
        confidence = confidence_advanced(
            base, corr.corr12m, aligned, self.config.confidence.strong_correlation
        )
        return _graded(row, confidence, corr, aligned)


def _graded(
    row: PairBiasRow,
    confidence: Confidence,
    corr: CorrelationSnapshot,
    aligned: int,
) -> PairBiasRow:
    return PairBiasRow(
        pair=row.pair,
        macro_label=row.macro_label,
        action=row.action,
        rationale=row.rationale,
        tactical=row.tactical,
        confidence=confidence,
        corr12m=corr.corr12m,
        corr6m=corr.corr6m,
        corr3m=corr.corr3m,
        corr_ref=corr.ref,
        corr_mapped=corr.mapped,
        corr_shift=classify_shift(corr.corr12m, corr.corr3m) if corr.mapped else None,
        aligned_surprises=aligned,
    )


def get_bias_table_from_universe(
    risk: Regime,
    usd_label: UsdStrength,
    quadrant: Quadrant,
    currency_scores: CurrencyScores | None = None,
    config: EngineConfig | None = None,
) -> list[PairBiasRow]:
    """Functional form of BiasEngine.bias_table."""
    return BiasEngine(config).bias_table(risk, usd_label, quadrant, currency_scores)

