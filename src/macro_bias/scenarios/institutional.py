"""
MACRO BIAS - Institutional Setups

Turns graded tactical rows into actionable setups:

    1. Normalize rows to (symbol, action, confidence)
    2. Keep Buy/Sell rows graded Alta or Media
    3. Sort: institutional allowlist first, Alta before Media, alphabetical
    4. Filter by USD bias: Fuerte -> Sell only, Débil -> Buy only,
       Neutral -> Alta only if any exist, else Media
    5. Split into active (Alta) and watchlist (Media)

Also diffs two setup snapshots into new / changed / removed events.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

from macro_bias.config import EngineConfig
from macro_bias.symbols import normalize_symbol
from macro_bias.types import (
    Action,
    AssetClass,
    Confidence,
    InstitutionalScenarios,
    PairBiasRow,
    Regime,
    Scenario,
    ScenarioChange,
    Severity,
    UsdStrength,
)

SETUP_TEMPLATES: dict[tuple[AssetClass, Action], str] = {
    (AssetClass.FX, Action.BUY): (
        "Look for longs in {symbol} on pullbacks to intraday support; "
        "invalidate below the prior session low"
    ),
    (AssetClass.FX, Action.SELL): (
        "Look for shorts in {symbol} on rallies into intraday resistance; "
        "invalidate above the prior session high"
    ),
    (AssetClass.METAL, Action.BUY): (
        "Accumulate {symbol} on dips while real yields and USD stay contained; "
        "scale in, no chasing"
    ),
    (AssetClass.METAL, Action.SELL): (
        "Fade {symbol} strength while USD and yields stay firm; "
        "tight stop above the last swing high"
    ),
    (AssetClass.CRYPTO, Action.BUY): (
        "Long {symbol} with reduced size; risk appetite supportive, volatility high"
    ),
    (AssetClass.CRYPTO, Action.SELL): (
        "Avoid longs in {symbol}; sell bounces with reduced size while risk appetite is weak"
    ),
    (AssetClass.INDEX, Action.BUY): (
        "Buy {symbol} dips toward the prior breakout zone; macro backdrop supports risk"
    ),
    (AssetClass.INDEX, Action.SELL): (
        "Sell {symbol} rallies or hedge long books; macro backdrop penalizes risk"
    ),
}

CONFIDENCE_SEVERITY = {Confidence.ALTA: Severity.ALTA, Confidence.MEDIA: Severity.MEDIA}


@dataclass(frozen=True)
class _Candidate:
    symbol: str
    action: Action
    confidence: Confidence
    rationale: str = ""


def asset_class_for(symbol: str, config: EngineConfig | None = None) -> AssetClass:
    """Configured asset class, else a guess from the symbol."""
    if config is not None:
        inst = config.instrument_for(symbol)
        if inst is not None:
            return inst.asset_class
    norm = normalize_symbol(symbol)
    if norm.startswith(("XAU", "XAG")):
        return AssetClass.METAL
    if norm.startswith(("BTC", "ETH")):
        return AssetClass.CRYPTO
    if norm in ("SPX", "NDX", "SPY", "QQQ", "DJI", "US500", "NAS100"):
        return AssetClass.INDEX
    return AssetClass.FX


def _enum_or_none(enum_cls, value: Any):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _normalize_row(row: Union[PairBiasRow, Mapping[str, Any]]) -> Optional[_Candidate]:
    if isinstance(row, PairBiasRow):
        symbol, action, confidence, why = row.pair, row.action, row.confidence, row.rationale
    else:
        symbol = row.get("pair") or row.get("symbol") or ""
        action = _enum_or_none(Action, row.get("action"))
        confidence = _enum_or_none(Confidence, row.get("confidence"))
        why = str(row.get("rationale") or "")
    symbol = normalize_symbol(str(symbol))
    if not symbol or action not in (Action.BUY, Action.SELL):
        return None
    if confidence not in (Confidence.ALTA, Confidence.MEDIA):
        return None
    return _Candidate(symbol, action, confidence, why)


def institutional_scenarios(
    rows: Iterable[Union[PairBiasRow, Mapping[str, Any]]],
    usd_label: UsdStrength,
    regime: Regime,
    config: EngineConfig | None = None,
) -> InstitutionalScenarios:
    """
    Build active and watchlist setups from tactical rows.

    Args:
        rows: Graded tactical rows (PairBiasRow or plain mappings).
        usd_label: Overall USD bias.
        regime: Overall regime.
        config: Engine config (institutional allowlist, universe).

    Returns:
        InstitutionalScenarios(active, watchlist).
    """
    config = config or EngineConfig()
    allow = set(config.institutional_pairs)

    candidates = [c for c in (_normalize_row(r) for r in rows) if c is not None]
    candidates.sort(
        key=lambda c: (
            0 if c.symbol in allow else 1,
            0 if c.confidence is Confidence.ALTA else 1,
            c.symbol,
        )
    )

    if usd_label is UsdStrength.STRONG:
        candidates = [c for c in candidates if c.action is Action.SELL]
    elif usd_label is UsdStrength.WEAK:
        candidates = [c for c in candidates if c.action is Action.BUY]
    else:
        alta = [c for c in candidates if c.confidence is Confidence.ALTA]
        candidates = alta or [c for c in candidates if c.confidence is Confidence.MEDIA]

    setups = [_render(c, usd_label, regime, config) for c in candidates]
    return InstitutionalScenarios(
        active=[s for s in setups if s.confidence is Confidence.ALTA],
        watchlist=[s for s in setups if s.confidence is Confidence.MEDIA],
    )


def _render(
    c: _Candidate,
    usd_label: UsdStrength,
    regime: Regime,
    config: EngineConfig,
) -> Scenario:
    asset_class = asset_class_for(c.symbol, config)
    side = "long" if c.action is Action.BUY else "short"
    reasons = [f"Regime {regime.value}", f"USD {usd_label.value}"]
    if c.rationale:
        reasons.append(c.rationale)
    return Scenario(
        id=f"setup_{c.symbol}_{c.action.value.lower()}",
        title=f"{c.symbol} {side} setup",
        severity=CONFIDENCE_SEVERITY[c.confidence],
        rationale=f"{c.action.value} bias graded {c.confidence.value}",
        action_hint=f"{c.action.value} {c.symbol}",
        pair=c.symbol,
        direction=c.action,
        confidence=c.confidence,
        macro_reasons=tuple(reasons),
        setup_text=SETUP_TEMPLATES[(asset_class, c.action)].format(symbol=c.symbol),
    )


def detect_scenario_changes(
    current_active: list[Scenario],
    current_watchlist: list[Scenario],
    previous_active: list[Scenario],
    previous_watchlist: list[Scenario],
) -> list[ScenarioChange]:
    """
    Diff two setup snapshots.

    new      active now, absent before
    changed  active now with a different confidence, or demoted from
             active to watchlist
    removed  present before, absent now
    """
    prev_active = {s.id: s for s in previous_active}
    prev_watch = {s.id: s for s in previous_watchlist}
    current_ids = {s.id for s in current_active} | {s.id for s in current_watchlist}
    changes: list[ScenarioChange] = []

    for cur in current_active:
        prev = prev_active.get(cur.id) or prev_watch.get(cur.id)
        if prev is None:
            changes.append(ScenarioChange("new", cur))
        elif prev.confidence is not cur.confidence:
            changes.append(ScenarioChange("changed", cur, old_confidence=prev.confidence))

    for cur in current_watchlist:
        if cur.id in prev_active:
            changes.append(
                ScenarioChange("changed", cur, old_confidence=prev_active[cur.id].confidence)
            )

    for prev in list(previous_active) + list(previous_watchlist):
        if prev.id not in current_ids:
            changes.append(ScenarioChange("removed", prev))

    return changes
