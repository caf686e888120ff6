"""
Route projector: asks an OSRM-compatible routing service for the path
through an ordered list of coordinates. Stateless, read-only, no retries.
"""
import aiohttp
import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from eventmap.config import Settings, get_settings
from eventmap.errors import InsufficientPoints, UpstreamError, ValidationError
from eventmap.services.geocoder import Coordinate
from eventmap.utils.metrics import record_route

logger = logging.getLogger(__name__)

TRAVEL_MODES = ("driving", "foot")


@dataclass
class Route:
    """Route summary as returned by the routing service."""
    distance: float  # meters
    duration: float  # seconds
    geometry: Dict[str, Any] = field(default_factory=dict)  # GeoJSON LineString


class OSRMRouter:
    """
    HTTP client for the OSRM route service.

    GET {base_url}/route/v1/{mode}/{lon},{lat};{lon},{lat}...?overview=full&geometries=geojson
    Response: {"code": "Ok", "routes": [{"distance": ..., "duration": ..., "geometry": {...}}]}
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._session = session

    @classmethod
    def from_settings(cls, settings: Settings = None) -> "OSRMRouter":
        settings = settings or get_settings()
        return cls(base_url=settings.router_url, timeout=settings.router_timeout)

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    def build_url(self, coordinates: Sequence[Coordinate], mode: str) -> str:
        # OSRM expects lon,lat pairs
        points = ";".join(f"{c.longitude},{c.latitude}" for c in coordinates)
        return f"{self.base_url}/route/v1/{mode}/{points}"

    async def route(self, coordinates: Sequence[Coordinate], mode: str = "driving") -> Route:
        """
        Request the route through coordinates, in order.

        Raises:
            ValidationError: unknown travel mode
            InsufficientPoints: fewer than two coordinates
            UpstreamError: service unreachable, non-200 answer, or no route
        """
        if mode not in TRAVEL_MODES:
            raise ValidationError(
                f"mode must be one of {', '.join(TRAVEL_MODES)}", fields=["mode"]
            )
        if len(coordinates) < 2:
            raise InsufficientPoints("At least 2 points required")

        session = await self._get_session()
        url = self.build_url(coordinates, mode)
        params = {"overview": "full", "geometries": "geojson"}
        start = time.time()

        try:
            async with session.get(url, params=params) as response:
                if response.status != 200:
                    text = await response.text()
                    record_route(mode, "error", time.time() - start)
                    logger.error(f"Routing service returned {response.status}: {text[:200]}")
                    raise UpstreamError(f"Routing service answered HTTP {response.status}")
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            record_route(mode, "error", time.time() - start)
            logger.error(f"Routing error: {type(e).__name__}: {e}")
            raise UpstreamError(f"Routing service unavailable: {type(e).__name__}") from e

        routes = data.get("routes") if isinstance(data, dict) else None
        if not routes:
            record_route(mode, "no_route", time.time() - start)
            code = data.get("code") if isinstance(data, dict) else None
            logger.warning(f"Routing service found no route ({code}) through {len(coordinates)} points")
            raise UpstreamError(f"No route found ({code or 'empty response'})")

        best = routes[0]
        record_route(mode, "ok", time.time() - start)
        return Route(
            distance=float(best.get("distance", 0.0)),
            duration=float(best.get("duration", 0.0)),
            geometry=best.get("geometry") or {},
        )

    async def close(self):
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
