"""
MACRO BIAS - Store Interfaces

Read-only collaborators the engine consumes. Ingestion and persistence
live outside the engine; adapters only answer point lookups.
"""

from __future__ import annotations

from typing import Optional, Protocol

from macro_bias.types import CorrelationLookup, ObservationPoint


class StoreError(RuntimeError):
    """Raised by an adapter when its backend cannot be read."""


class ObservationStore(Protocol):
    async def latest(self, series_id: str) -> Optional[ObservationPoint]:
        """Most recent observation with a value, or None."""
        ...

    async def history(self, series_id: str) -> list[ObservationPoint]:
        """All observations ordered by date ascending."""
        ...


class CorrelationStore(Protocol):
    async def correlation(self, symbol: str, benchmark: str) -> Optional[CorrelationLookup]:
        """12m/3m correlation of symbol against benchmark, or None."""
        ...


def previous_point(
    history: list[ObservationPoint], latest: Optional[ObservationPoint]
) -> Optional[ObservationPoint]:
    """Last valued point dated strictly before latest."""
    if latest is None:
        return None
    for point in reversed(history):
        if point.value is not None and point.date < latest.date:
            return point
    return None
