"""
MACRO BIAS - FRED Observation Store

Async adapter over the FRED series/observations endpoint.
Only module in macro_bias that performs network I/O.

Each canonical series is requested in the units the posture table
expects (pc1 = % change from a year ago, chg = change, lin = level).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from typing import Optional

import aiohttp

from macro_bias.aliases import DEFAULT_RESOLVER, AliasResolver, SeriesId
from macro_bias.stores.base import StoreError
from macro_bias.types import ObservationPoint

logger = logging.getLogger(__name__)

FRED_BASE_URL = "https://api.stlouisfed.org/fred/series/observations"

# canonical id -> (FRED series id, units)
FRED_SERIES: dict[SeriesId, tuple[str, str]] = {
    SeriesId.T10Y2Y: ("T10Y2Y", "lin"),
    SeriesId.T10Y3M: ("T10Y3M", "lin"),
    SeriesId.T5YIE: ("T5YIE", "lin"),
    SeriesId.NFCI: ("NFCI", "lin"),
    SeriesId.DTWEXBGS: ("DTWEXBGS", "lin"),
    SeriesId.VIXCLS: ("VIXCLS", "lin"),
    SeriesId.GDPC1: ("GDPC1", "pc1"),
    SeriesId.RSAFS: ("RSAFS", "pc1"),
    SeriesId.INDPRO: ("INDPRO", "pc1"),
    SeriesId.DGEXFI: ("ADXTNO", "pc1"),
    SeriesId.TTLCONS: ("TTLCONS", "pc1"),
    SeriesId.TCU: ("TCU", "lin"),
    SeriesId.USSLIND: ("USSLIND", "lin"),
    SeriesId.PAYEMS: ("PAYEMS", "chg"),
    SeriesId.UNRATE: ("UNRATE", "lin"),
    SeriesId.U6RATE: ("U6RATE", "lin"),
    SeriesId.ICSA: ("IC4WSA", "lin"),
    SeriesId.JTSJOL: ("JTSJOL", "lin"),
    SeriesId.PCEPI: ("PCEPI", "pc1"),
    SeriesId.PCEPILFE: ("PCEPILFE", "pc1"),
    SeriesId.CPIAUCSL: ("CPIAUCSL", "pc1"),
    SeriesId.CPILFESL: ("CPILFESL", "pc1"),
    SeriesId.PPIACO: ("PPIACO", "pc1"),
    SeriesId.FEDFUNDS: ("FEDFUNDS", "lin"),
    SeriesId.UMCSENT: ("UMCSENT", "lin"),
    SeriesId.HOUST: ("HOUST", "lin"),
    SeriesId.PERMIT: ("PERMIT", "lin"),
}


class FredObservationStore:
    """
    Observation store reading FRED.

    Each series is downloaded at most once per store instance; latest()
    and history() share the download. Series FRED does not publish (ISM,
    NFIB, NAHB) answer None / [].

    Usage:
        async with FredObservationStore(api_key) as store:
            point = await store.latest("CPIAUCSL")
    """

    def __init__(
        self,
        api_key: str,
        observation_start: date | None = None,
        session: aiohttp.ClientSession | None = None,
        base_url: str = FRED_BASE_URL,
        timeout_seconds: float = 30.0,
        resolver: AliasResolver = DEFAULT_RESOLVER,
    ) -> None:
        if not api_key:
            raise StoreError("FRED api key is required")
        self.api_key = api_key
        self.observation_start = observation_start or date(date.today().year - 6, 1, 1)
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.resolver = resolver
        self._session = session
        self._owns_session = session is None
        self._downloads: dict[SeriesId, asyncio.Task] = {}

    async def __aenter__(self) -> FredObservationStore:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def latest(self, series_id: str) -> Optional[ObservationPoint]:
        for point in reversed(await self.history(series_id)):
            if point.value is not None:
                return point
        return None

    async def history(self, series_id: str) -> list[ObservationPoint]:
        sid = self.resolver.resolve(series_id)
        if sid is None or sid not in FRED_SERIES:
            return []
        task = self._downloads.get(sid)
        if task is None:
            task = asyncio.ensure_future(self._download(sid))
            self._downloads[sid] = task
        return list(await task)

    async def _download(self, sid: SeriesId) -> list[ObservationPoint]:
        if self._session is None:
            raise StoreError("FredObservationStore used outside 'async with'")
        fred_id, units = FRED_SERIES[sid]
        params = {
            "series_id": fred_id,
            "api_key": self.api_key,
            "file_type": "json",
            "units": units,
            "observation_start": self.observation_start.isoformat(),
            "sort_order": "asc",
        }
        try:
            async with self._session.get(self.base_url, params=params) as resp:
                if resp.status != 200:
                    raise StoreError(f"FRED {fred_id} returned HTTP {resp.status}")
                data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise StoreError(f"FRED {fred_id} request failed: {exc}") from exc

        points = parse_fred_observations(data)
        logger.debug(f"FRED {fred_id} ({units}): {len(points)} observations")
        return points


def parse_fred_observations(data: dict) -> list[ObservationPoint]:
    """Parse FRED observations; '.' marks a missing value."""
    points = []
    for o in data.get("observations", []):
        try:
            obs_date = datetime.strptime(o["date"], "%Y-%m-%d").date()
        except (KeyError, TypeError, ValueError):
            continue
        raw = o.get("value", ".")
        value: Optional[float] = None
        if raw != ".":
            try:
                value = float(raw)
            except (ValueError, TypeError):
                value = None
        points.append(ObservationPoint(date=obs_date, value=value))
    return points
