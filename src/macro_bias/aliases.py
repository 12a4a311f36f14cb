"""
MACRO BIAS - Canonical Series Ids & Alias Resolver

Every indicator the engine knows has exactly one canonical id (FRED-style,
upper case) and one or more internal keys used by the store and the
configuration files. The resolver is built once and validated at
construction: an inconsistent alias table raises AliasError immediately.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Mapping, Optional, Union


class SeriesId(str, Enum):
    """Canonical indicator ids. Member name always equals its value."""

    # Curve / markets
    T10Y2Y = "T10Y2Y"
    T10Y3M = "T10Y3M"
    T5YIE = "T5YIE"
    NFCI = "NFCI"
    DTWEXBGS = "DTWEXBGS"
    VIXCLS = "VIXCLS"
    # Growth
    GDPC1 = "GDPC1"
    RSAFS = "RSAFS"
    INDPRO = "INDPRO"
    DGEXFI = "DGEXFI"
    TTLCONS = "TTLCONS"
    TCU = "TCU"
    USSLIND = "USSLIND"
    # Labor
    PAYEMS = "PAYEMS"
    UNRATE = "UNRATE"
    U6RATE = "U6RATE"
    ICSA = "ICSA"
    JTSJOL = "JTSJOL"
    # Prices
    PCEPI = "PCEPI"
    PCEPILFE = "PCEPILFE"
    CPIAUCSL = "CPIAUCSL"
    CPILFESL = "CPILFESL"
    PPIACO = "PPIACO"
    # Monetary policy
    FEDFUNDS = "FEDFUNDS"
    # Surveys / sentiment / housing
    USPMI = "USPMI"
    PMI_SVCS = "PMI_SVCS"
    UMCSENT = "UMCSENT"
    NFIB = "NFIB"
    HOUST = "HOUST"
    PERMIT = "PERMIT"
    NAHB = "NAHB"
    CONCCONF = "CONCCONF"


KeyLike = Union[str, SeriesId]


class AliasError(ValueError):
    """Raised when the alias table is inconsistent."""


# Internal key -> canonical id. The first key listed for an id is its primary key.
DEFAULT_ALIASES: dict[str, SeriesId] = {
    "t10y2y": SeriesId.T10Y2Y,
    "yield_curve_10y_2y": SeriesId.T10Y2Y,
    "t10y3m": SeriesId.T10Y3M,
    "breakeven5y": SeriesId.T5YIE,
    "nfci": SeriesId.NFCI,
    "twex": SeriesId.DTWEXBGS,
    "dxy_broad": SeriesId.DTWEXBGS,
    "vix": SeriesId.VIXCLS,
    "gdp_yoy": SeriesId.GDPC1,
    "gdp_qoq": SeriesId.GDPC1,
    "gdp_qoq_annualized": SeriesId.GDPC1,
    "retail_yoy": SeriesId.RSAFS,
    "rsxfs": SeriesId.RSAFS,
    "indpro_yoy": SeriesId.INDPRO,
    "durables_yoy": SeriesId.DGEXFI,
    "construction_yoy": SeriesId.TTLCONS,
    "caputil": SeriesId.TCU,
    "lei_yoy": SeriesId.USSLIND,
    "payems_delta": SeriesId.PAYEMS,
    "nfp_change": SeriesId.PAYEMS,
    "unrate": SeriesId.UNRATE,
    "unemployment_rate_u3": SeriesId.UNRATE,
    "u6rate": SeriesId.U6RATE,
    "claims_4w": SeriesId.ICSA,
    "initial_claims_4w": SeriesId.ICSA,
    "jolts_openings": SeriesId.JTSJOL,
    "pce_yoy": SeriesId.PCEPI,
    "corepce_yoy": SeriesId.PCEPILFE,
    "cpi_yoy": SeriesId.CPIAUCSL,
    "corecpi_yoy": SeriesId.CPILFESL,
    "ppi_yoy": SeriesId.PPIACO,
    "fedfunds": SeriesId.FEDFUNDS,
    "fed_funds_effective": SeriesId.FEDFUNDS,
    "pmi_mfg": SeriesId.USPMI,
    "ism_manufacturing_pmi": SeriesId.USPMI,
    "pmi_svcs": SeriesId.PMI_SVCS,
    "ism_services_pmi": SeriesId.PMI_SVCS,
    "pmi_serv": SeriesId.PMI_SVCS,
    "umich": SeriesId.UMCSENT,
    "michigan_consumer_sentiment": SeriesId.UMCSENT,
    "nfib": SeriesId.NFIB,
    "nfibsl": SeriesId.NFIB,
    "nfib_small_business_optimism": SeriesId.NFIB,
    "housing_starts": SeriesId.HOUST,
    "housing_yoy": SeriesId.HOUST,
    "building_permits": SeriesId.PERMIT,
    "nahb": SeriesId.NAHB,
    "consumer_confidence": SeriesId.CONCCONF,
}


class AliasResolver:
    """Bidirectional internal-key <-> canonical-id resolver."""

    def __init__(self, aliases: Optional[Mapping[str, SeriesId]] = None) -> None:
        source = DEFAULT_ALIASES if aliases is None else aliases
        self._forward: dict[str, SeriesId] = {}
        self._reverse: dict[SeriesId, list[str]] = {sid: [] for sid in SeriesId}

        for key, target in source.items():
            norm = key.strip().lower()
            if not isinstance(target, SeriesId):
                raise AliasError(f"Alias '{key}' targets unknown series '{target}'")
            existing = self._forward.get(norm)
            if existing is not None and existing is not target:
                raise AliasError(
                    f"Alias '{key}' maps to both {existing.value} and {target.value}"
                )
            if existing is None:
                self._forward[norm] = target
                self._reverse[target].append(norm)

        missing = [sid.value for sid, keys in self._reverse.items() if not keys]
        if missing:
            raise AliasError(f"Series without internal key: {', '.join(missing)}")

    def resolve(self, key: Optional[KeyLike]) -> Optional[SeriesId]:
        """Resolve an internal key or canonical id (any case) to a SeriesId."""
        if key is None:
            return None
        if isinstance(key, SeriesId):
            return key
        raw = key.strip()
        try:
            return SeriesId(raw.upper())
        except ValueError:
            return self._forward.get(raw.lower())

    def canonical(self, key: KeyLike) -> str:
        """Canonical id string; unknown keys are returned upper-cased."""
        sid = self.resolve(key)
        if sid is not None:
            return sid.value
        return key.strip().upper()

    def keys_for(self, sid: SeriesId) -> tuple[str, ...]:
        return tuple(self._reverse[sid])

    def primary_key(self, sid: SeriesId) -> str:
        return self._reverse[sid][0]

    def matches(self, key: KeyLike, candidate: KeyLike) -> bool:
        """True if both keys resolve to the same indicator."""
        return self.canonical(key) == self.canonical(candidate)

    def resolve_all(self, keys: Iterable[KeyLike]) -> set[SeriesId]:
        out: set[SeriesId] = set()
        for k in keys:
            sid = self.resolve(k)
            if sid is not None:
                out.add(sid)
        return out


# Built at import so a broken table fails at startup.
DEFAULT_RESOLVER = AliasResolver()
