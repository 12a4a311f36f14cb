"""
MACRO BIAS - Scenario Patterns

Pattern rules over the classified indicators and the regime label.
Each rule yields one fixed-text Scenario at most once.
"""

from __future__ import annotations

from typing import Iterable, Optional

from macro_bias.aliases import DEFAULT_RESOLVER, AliasResolver, SeriesId
from macro_bias.types import Indicator, Posture, Regime, Scenario, Severity

INFLATION = (SeriesId.PCEPI, SeriesId.PCEPILFE, SeriesId.CPIAUCSL, SeriesId.CPILFESL)
GROWTH = (SeriesId.GDPC1, SeriesId.INDPRO, SeriesId.RSAFS, SeriesId.USSLIND)

PAYROLLS_WEAK = 100.0
CLAIMS_HIGH = 300_000.0
UNEMPLOYMENT_HIGH = 4.5
NFCI_TIGHT = 0.3

STAGFLATION = Scenario(
    id="stagflation",
    title="Stagflation risk",
    severity=Severity.ALTA,
    rationale="High inflation coinciding with weakening growth",
    action_hint="Avoid cyclicals; favor USD and defensives, selective gold",
)
CLEAN_EXPANSION = Scenario(
    id="clean_expansion",
    title="Expansion with contained inflation",
    severity=Severity.MEDIA,
    rationale="Solid growth with disinflation",
    action_hint="Favor risk (SPX/NDX), EUR/GBP/AUD, crypto",
)
COOLING_EMPLOYMENT = Scenario(
    id="cooling_employment",
    title="Employment cooling",
    severity=Severity.MEDIA,
    rationale="Weak payrolls / high claims / high unemployment",
    action_hint="USD tends to weaken over the medium term; watch for rate cuts",
)
USD_BROAD_STRENGTH = Scenario(
    id="usd_broad_strength",
    title="Broad USD strength",
    severity=Severity.MEDIA,
    rationale="Broad dollar and curves point to high rates",
    action_hint="Sell EUR/GBP/AUD; prefer USDJPY/USDCAD",
)
TIGHT_FINANCIAL_CONDITIONS = Scenario(
    id="tight_financial_conditions",
    title="Tight financial conditions",
    severity=Severity.ALTA,
    rationale="Elevated NFCI signals liquidity constraints",
    action_hint="Cut beta exposure; favor quality and USDJPY",
)
RISK_OFF = Scenario(
    id="risk_off",
    title="Risk-off environment",
    severity=Severity.ALTA,
    rationale="Weighted score below the negative threshold",
    action_hint="Hedges, long USDJPY, avoid cyclicals",
)


class _Lookup:
    """First indicator per resolved series."""

    def __init__(self, indicators: Iterable[Indicator], resolver: AliasResolver) -> None:
        self._by_series: dict[SeriesId, Indicator] = {}
        for ind in indicators:
            sid = resolver.resolve(ind.series_id) or resolver.resolve(ind.key)
            if sid is not None and sid not in self._by_series:
                self._by_series[sid] = ind

    def posture(self, sid: SeriesId) -> Optional[Posture]:
        ind = self._by_series.get(sid)
        return ind.posture if ind is not None else None

    def value(self, sid: SeriesId) -> Optional[float]:
        ind = self._by_series.get(sid)
        return ind.value if ind is not None else None

    def any_posture(self, sids: Iterable[SeriesId], posture: Posture) -> bool:
        return any(self.posture(s) is posture for s in sids)


def detect_scenarios(
    indicators: Iterable[Indicator],
    regime: Regime,
    resolver: AliasResolver = DEFAULT_RESOLVER,
) -> list[Scenario]:
    """
    Match the scenario rules.

    Args:
        indicators: Classified indicators.
        regime: Overall regime label.
        resolver: Alias resolver.

    Returns:
        Matched scenarios in rule order.
    """
    look = _Lookup(indicators, resolver)
    out: list[Scenario] = []

    if look.any_posture(INFLATION, Posture.HAWKISH) and look.any_posture(GROWTH, Posture.DOVISH):
        out.append(STAGFLATION)

    if look.any_posture(INFLATION, Posture.DOVISH) and look.any_posture(GROWTH, Posture.HAWKISH):
        out.append(CLEAN_EXPANSION)

    payrolls = look.value(SeriesId.PAYEMS)
    claims = look.value(SeriesId.ICSA)
    unemployment = look.value(SeriesId.UNRATE)
    if (
        (payrolls is not None and payrolls < PAYROLLS_WEAK)
        or (claims is not None and claims > CLAIMS_HIGH)
        or (unemployment is not None and unemployment > UNEMPLOYMENT_HIGH)
    ):
        out.append(COOLING_EMPLOYMENT)

    if (
        look.posture(SeriesId.DTWEXBGS) is Posture.HAWKISH
        and look.posture(SeriesId.T10Y2Y) is Posture.HAWKISH
        and look.posture(SeriesId.T10Y3M) is Posture.HAWKISH
    ):
        out.append(USD_BROAD_STRENGTH)

    nfci = look.value(SeriesId.NFCI)
    if nfci is not None and nfci > NFCI_TIGHT:
        out.append(TIGHT_FINANCIAL_CONDITIONS)

    if regime is Regime.RISK_OFF:
        out.append(RISK_OFF)

    return out
