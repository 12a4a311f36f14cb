"""
MACRO BIAS - Pipeline Orchestration

Flow: store -> aliases -> posture/trend -> regime -> bias -> confidence -> scenarios

The pipeline.run() method is the async entry point for store reads.
All processing after the reads is synchronous, except the per-pair
correlation enrichment which fans out concurrently.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Mapping, Optional, Sequence

from macro_bias.aliases import DEFAULT_RESOLVER, AliasResolver, SeriesId
from macro_bias.bias.engine import BiasEngine
from macro_bias.catalog import CATEGORY_ORDER, category_for, label_for
from macro_bias.classifier.posture import classify_posture
from macro_bias.classifier.trend import classify_trend
from macro_bias.config import EngineConfig
from macro_bias.correlation.resolver import CorrelationResolver
from macro_bias.scenarios.institutional import institutional_scenarios
from macro_bias.scenarios.patterns import detect_scenarios
from macro_bias.scoring.context import (
    compute_currency_regimes,
    compute_currency_scores,
    compute_z_score,
    macro_quadrant,
    usd_strength,
)
from macro_bias.scoring.regime import diagnose, weighted_score
from macro_bias.stores.base import CorrelationStore, ObservationStore, previous_point
from macro_bias.types import (
    Diagnosis,
    Indicator,
    InstitutionalScenarios,
    Observation,
    ObservationPoint,
    PairBiasRow,
    Regime,
    Scenario,
    Trend,
    UsdStrength,
)

logger = logging.getLogger(__name__)


class MacroBiasPipeline:
    """
    MACRO BIAS pipeline.

    Orchestrates: read -> classify -> score -> bias -> grade -> scenarios
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        observations: ObservationStore | None = None,
        correlations: CorrelationStore | None = None,
        resolver: AliasResolver = DEFAULT_RESOLVER,
    ) -> None:
        self.config = config or EngineConfig()
        self.observations = observations
        self.resolver = resolver
        self.correlations = CorrelationResolver(
            store=correlations,
            static=self.config.static_correlations,
            thresholds=self.config.correlation,
        )
        self.bias = BiasEngine(self.config, self.correlations, resolver)

    async def run(self, series: Iterable[SeriesId] | None = None) -> Diagnosis:
        """
        Read every series from the observation store, then process.

        Reads are concurrent. A failing read is logged and the series is
        processed as missing.

        Args:
            series: Series to read (default: every known series).

        Returns:
            Diagnosis.
        """
        if self.observations is None:
            raise ValueError("MacroBiasPipeline.run() needs an observation store")

        series = list(series) if series is not None else list(SeriesId)
        logger.info(f"MACRO BIAS pipeline reading {len(series)} series")

        latest_results, history_results = await asyncio.gather(
            asyncio.gather(
                *(self.observations.latest(s.value) for s in series),
                return_exceptions=True,
            ),
            asyncio.gather(
                *(self.observations.history(s.value) for s in series),
                return_exceptions=True,
            ),
        )

        observations: list[Observation] = []
        histories: dict[str, list[float]] = {}
        for sid, latest_res, history_res in zip(series, latest_results, history_results):
            if isinstance(latest_res, Exception):
                logger.error(f"Latest read failed for {sid.value}: {latest_res}")
            if isinstance(history_res, Exception):
                logger.warning(f"History read failed for {sid.value}: {history_res}")
            latest: Optional[ObservationPoint] = _safe(latest_res, None)
            history: list[ObservationPoint] = _safe(history_res, [])

            prev = previous_point(history, latest)
            observations.append(
                Observation(
                    key=self.resolver.primary_key(sid),
                    series_id=sid.value,
                    value=latest.value if latest else None,
                    date=latest.date if latest else None,
                    previous_value=prev.value if prev else None,
                    previous_date=prev.date if prev else None,
                )
            )
            histories[sid.value] = [
                p.value
                for p in history
                if p.value is not None and (latest is None or p.date <= latest.date)
            ]
        logger.info("Store reads complete")

        diagnosis = self.process(observations, histories)
        logger.info(
            f"MACRO BIAS: {diagnosis.regime.value} score={diagnosis.score:+.3f} "
            f"usd={diagnosis.usd_strength.value} quadrant={diagnosis.quadrant.value}"
        )
        return diagnosis

    def process(
        self,
        observations: Iterable[Observation],
        histories: Mapping[str, Sequence[float]] | None = None,
    ) -> Diagnosis:
        """
        Synchronous processing: classify -> score -> context.

        Can be called independently for testing without async/store calls.
        Pure: the same snapshot always yields the same Diagnosis.

        Args:
            observations: Observation snapshot. Duplicates of one series
                keep the first occurrence.
            histories: Optional value history per series (any alias),
                oldest first, used for z-scores.

        Returns:
            Diagnosis.
        """
        hist = {
            self.resolver.canonical(k): list(v) for k, v in (histories or {}).items()
        }

        seen: set[str] = set()
        items: list[Indicator] = []
        for obs in observations:
            canonical = self.resolver.canonical(obs.series_id or obs.key)
            if canonical in seen:
                continue
            seen.add(canonical)
            items.append(self._classify(obs, canonical, hist.get(canonical)))

        order = {c: i for i, c in enumerate(CATEGORY_ORDER)}
        items.sort(key=lambda i: (order.get(i.category, len(order)), -i.weight, i.label))

        ws = weighted_score(items)
        threshold = self.config.regime.threshold
        dates = [i.date for i in items if i.date is not None]

        category_counts: dict[str, dict[str, int]] = {}
        for ind in items:
            cc = category_counts.setdefault(ind.category, {"total": 0, "with_value": 0})
            cc["total"] += 1
            if ind.value is not None:
                cc["with_value"] += 1

        with_value = sum(1 for i in items if i.value is not None)
        currency_scores = compute_currency_scores(
            items, self.config.currency_indicators, self.resolver
        )
        return Diagnosis(
            items=items,
            score=ws.score,
            regime=diagnose(ws.score, threshold),
            threshold=threshold,
            last_updated=max(dates) if dates else None,
            counts={"total": len(items), "with_value": with_value, "nulls": len(items) - with_value},
            category_counts=category_counts,
            improving=sum(1 for i in items if i.trend is Trend.IMPROVING),
            deteriorating=sum(1 for i in items if i.trend is Trend.WORSENING),
            usd_strength=usd_strength(items, self.resolver),
            quadrant=macro_quadrant(items, self.resolver),
            currency_scores=currency_scores,
            currency_regimes=compute_currency_regimes(currency_scores),
        )

    def _classify(
        self,
        obs: Observation,
        canonical: str,
        history: Optional[list[float]],
    ) -> Indicator:
        ident = obs.series_id or obs.key
        z_score = None
        if history:
            z_score = compute_z_score(history, self.config.scoring.zscore_min_history)
        return Indicator(
            key=obs.key,
            series_id=canonical,
            label=obs.label or label_for(canonical),
            value=obs.value,
            posture=classify_posture(ident, obs.value, self.resolver),
            trend=classify_trend(ident, obs.value, obs.previous_value, self.resolver),
            weight=self.config.weight_for(canonical),
            category=category_for(canonical),
            date=obs.date,
            previous_value=obs.previous_value,
            previous_date=obs.previous_date,
            z_score=z_score,
        )

    def bias_table(self, diagnosis: Diagnosis) -> list[PairBiasRow]:
        return self.bias.bias_table(
            diagnosis.regime,
            diagnosis.usd_strength,
            diagnosis.quadrant,
            diagnosis.currency_scores or None,
        )

    async def tactical_bias_table(self, diagnosis: Diagnosis) -> list[PairBiasRow]:
        return await self.bias.tactical_bias_table(
            diagnosis.items,
            diagnosis.regime,
            diagnosis.usd_strength,
            diagnosis.score,
            currency_scores=diagnosis.currency_scores or None,
        )

    def scenarios(
        self,
        rows: Iterable[PairBiasRow],
        usd_label: UsdStrength,
        regime: Regime,
    ) -> InstitutionalScenarios:
        return institutional_scenarios(rows, usd_label, regime, self.config)

    def detect_scenarios(self, diagnosis: Diagnosis) -> list[Scenario]:
        return detect_scenarios(diagnosis.items, diagnosis.regime, self.resolver)

    async def report(self) -> dict[str, Any]:
        """
        Full run: diagnosis, tactical table, scenarios and setups.

        Returns:
            Dict ready for JSON serialization.
        """
        diagnosis = await self.run()
        tactical = await self.tactical_bias_table(diagnosis)
        setups = self.scenarios(tactical, diagnosis.usd_strength, diagnosis.regime)
        return {
            "diagnosis": diagnosis.to_dict(),
            "tactical": [r.to_dict() for r in tactical],
            "scenarios": [s.to_dict() for s in self.detect_scenarios(diagnosis)],
            "setups": setups.to_dict(),
        }


def _safe(val: Any, default: Any) -> Any:
    """Return default if val is an exception."""
    return default if isinstance(val, Exception) else val

