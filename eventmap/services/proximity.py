"""
Proximity guard: decides whether a candidate coordinate is already occupied
by an event of the same collection.
Distance is great-circle (haversine) on latitude/longitude in degrees.
"""
import math
import logging
from typing import Iterable, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventmap.models import Event

logger = logging.getLogger(__name__)

# Mean Earth radius (IUGG)
EARTH_RADIUS_M = 6371008.8

Coordinate = Tuple[float, float]


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in meters."""
    lat1, lon1, lat2, lon2 = map(math.radians, (lat1, lon1, lat2, lon2))
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.asin(math.sqrt(min(1.0, a)))
    return EARTH_RADIUS_M * c


def find_neighbor(
    existing: Iterable[Coordinate],
    candidate: Coordinate,
    tolerance_m: float = 0.0,
) -> Optional[Coordinate]:
    """Return the first existing coordinate within tolerance of candidate, or None."""
    lat, lon = candidate
    for other_lat, other_lon in existing:
        if haversine_m(lat, lon, other_lat, other_lon) <= tolerance_m:
            return other_lat, other_lon
    return None


async def collection_coordinates(db: AsyncSession, collection_id: int) -> list[Coordinate]:
    """Load the coordinates of every event in a collection."""
    result = await db.execute(
        select(Event.latitude, Event.longitude).where(Event.collection_id == collection_id)
    )
    return [(row.latitude, row.longitude) for row in result]
