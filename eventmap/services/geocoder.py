"""
Geocoding client for Nominatim-compatible search APIs.
Resolves a free-text address to a coordinate. No retries and no caching:
a failure is reported to the caller as GeocodeError.
"""
import aiohttp
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from eventmap.config import Settings, get_settings
from eventmap.errors import GeocodeError
from eventmap.utils.metrics import record_geocode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Coordinate:
    """Latitude/longitude in decimal degrees."""
    latitude: float
    longitude: float


class NominatimGeocoder:
    """
    HTTP client for a Nominatim search endpoint.

    GET {base_url}/search?format=json&q=<address>&limit=1
    Response: [{"lat": "48.8566", "lon": "2.3522", ...}] or [] when unknown.
    """

    def __init__(
        self,
        base_url: str,
        user_agent: str,
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.user_agent = user_agent
        self.timeout = timeout
        self._session = session

    @classmethod
    def from_settings(cls, settings: Settings = None) -> "NominatimGeocoder":
        settings = settings or get_settings()
        return cls(
            base_url=settings.geocoder_url,
            user_agent=settings.geocoder_user_agent,
            timeout=settings.geocoder_timeout,
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"User-Agent": self.user_agent},
            )
        return self._session

    async def resolve(self, address: str) -> Coordinate:
        """
        Resolve an address to a coordinate.

        Raises:
            GeocodeError: unknown address, service unreachable, or unusable answer
        """
        session = await self._get_session()
        url = f"{self.base_url}/search"
        params = {"format": "json", "q": address, "limit": "1"}
        start = time.time()

        try:
            async with session.get(url, params=params) as response:
                if response.status != 200:
                    text = await response.text()
                    record_geocode("error", time.time() - start)
                    logger.error(f"Geocoder returned {response.status} for '{address}': {text[:200]}")
                    raise GeocodeError(
                        f"Geocoding service answered HTTP {response.status}", address=address
                    )
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            record_geocode("error", time.time() - start)
            logger.error(f"Geocoding error for '{address}': {type(e).__name__}: {e}")
            raise GeocodeError(f"Geocoding service unavailable: {type(e).__name__}", address=address) from e

        if not data:
            record_geocode("not_found", time.time() - start)
            logger.warning(f"No geocoding result for '{address}'")
            raise GeocodeError("Cannot geocode address", address=address)

        try:
            coordinate = Coordinate(
                latitude=float(data[0]["lat"]),
                longitude=float(data[0]["lon"]),
            )
        except (KeyError, TypeError, ValueError, IndexError) as e:
            record_geocode("error", time.time() - start)
            logger.error(f"Unexpected geocoder payload for '{address}': {data!r:.200}")
            raise GeocodeError("Geocoding service returned an unusable result", address=address) from e

        record_geocode("resolved", time.time() - start)
        logger.debug(f"Geocoded '{address}' -> ({coordinate.latitude}, {coordinate.longitude})")
        return coordinate

    async def close(self):
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
