"""
Elevation lookup client.

Maps coordinates to meters above sea level using an Open-Elevation
compatible API. Lookups are batched, cached on a ~11 m grid and retried;
a failed lookup yields elevation_m=None for the affected points instead
of an exception, so a flaky network never fails a session.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Tuple

import httpx

from runtrack.config import settings

from .schemas import ElevationPoint, ElevationResult

logger = logging.getLogger(__name__)

CacheKey = Tuple[float, float]


# =============================================================================
# Exceptions
# =============================================================================

class ElevationError(Exception):
    """Base elevation error."""
    pass


class ElevationLookupError(ElevationError):
    """The elevation API failed or returned an unusable payload."""
    pass


# =============================================================================
# Client
# =============================================================================

class ElevationClient:
    """
    Async Open-Elevation client with a coordinate cache.

    Usage:
        client = ElevationClient()
        results = await client.get_elevations([ElevationPoint(lat=43.2, lon=76.9)])
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        batch_size: Optional[int] = None,
        cache_precision: Optional[int] = None,
        cache_max_size: Optional[int] = None,
        max_retries: Optional[int] = None,
        retry_delay_seconds: Optional[float] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_url = api_url or settings.elevation_api_url
        self.batch_size = batch_size or settings.elevation_batch_size
        self.cache_precision = (
            cache_precision if cache_precision is not None
            else settings.elevation_cache_precision
        )
        self.cache_max_size = cache_max_size or settings.elevation_cache_max_size
        self.max_retries = max_retries or settings.elevation_max_retries
        self.retry_delay_seconds = (
            retry_delay_seconds if retry_delay_seconds is not None
            else settings.elevation_retry_delay_seconds
        )
        self.timeout_seconds = timeout_seconds or settings.elevation_timeout_seconds
        self._transport = transport
        self._cache: Dict[CacheKey, float] = {}
        self.api_calls = 0

    # =========================================================================
    # Cache
    # =========================================================================

    def cache_key(self, lat: float, lon: float) -> CacheKey:
        """Round coordinates so nearby points share a cache entry."""
        return (round(lat, self.cache_precision), round(lon, self.cache_precision))

    def _store(self, key: CacheKey, elevation_m: float) -> None:
        self._cache[key] = elevation_m
        if len(self._cache) > self.cache_max_size:
            # Drop the older half (dicts keep insertion order)
            keep = list(self._cache.items())[len(self._cache) // 2:]
            self._cache = dict(keep)
            logger.info(f"Trimmed elevation cache to {len(self._cache)} entries")

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_stats(self) -> dict:
        return {"size": len(self._cache), "max_size": self.cache_max_size}

    # =========================================================================
    # Lookup
    # =========================================================================

    async def get_elevation(self, lat: float, lon: float) -> Optional[float]:
        """Elevation for one coordinate, None if unavailable."""
        results = await self.get_elevations([ElevationPoint(lat=lat, lon=lon)])
        return results[0].elevation_m

    async def get_elevations(
        self,
        points: Sequence[ElevationPoint]
    ) -> List[ElevationResult]:
        """
        Look up elevations for many coordinates.

        Args:
            points: Coordinates to resolve

        Returns:
            One result per input point, in input order
        """
        resolved: Dict[CacheKey, Optional[float]] = {}

        missing: Dict[CacheKey, ElevationPoint] = {}
        for point in points:
            key = self.cache_key(point.lat, point.lon)
            if key in self._cache:
                resolved[key] = self._cache[key]
            elif key not in missing:
                missing[key] = point

        keys = list(missing)
        for start in range(0, len(keys), self.batch_size):
            batch_keys = keys[start:start + self.batch_size]
            batch_points = [missing[k] for k in batch_keys]
            try:
                elevations = await self._fetch(batch_points)
            except ElevationLookupError as e:
                logger.error(f"Failed to fetch elevation data for {len(batch_points)} points: {e}")
                for key in batch_keys:
                    resolved[key] = None
                continue

            for key, elevation_m in zip(batch_keys, elevations):
                self._store(key, elevation_m)
                resolved[key] = elevation_m

        return [
            ElevationResult(
                lat=point.lat,
                lon=point.lon,
                elevation_m=resolved.get(self.cache_key(point.lat, point.lon)),
            )
            for point in points
        ]

    async def _fetch(self, points: List[ElevationPoint]) -> List[float]:
        """Call the API with retries and linear back-off."""
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                return await self._call_api(points)
            except (httpx.HTTPError, ElevationLookupError) as e:
                last_error = e
                logger.warning(f"Elevation API attempt {attempt}/{self.max_retries} failed: {e}")
                if attempt < self.max_retries:
                    await asyncio.sleep(self.retry_delay_seconds * attempt)

        raise ElevationLookupError(f"All elevation API attempts failed: {last_error}")

    async def _call_api(self, points: List[ElevationPoint]) -> List[float]:
        self.api_calls += 1
        payload = {
            "locations": [
                {"latitude": p.lat, "longitude": p.lon} for p in points
            ]
        }

        async with httpx.AsyncClient(
            timeout=self.timeout_seconds,
            transport=self._transport
        ) as client:
            response = await client.post(self.api_url, json=payload)
            response.raise_for_status()

        try:
            results = response.json()["results"]
            elevations = [float(round(r["elevation"])) for r in results]
        except (ValueError, KeyError, TypeError) as e:
            raise ElevationLookupError(f"Malformed elevation response: {e}")

        if len(elevations) != len(points):
            raise ElevationLookupError(
                f"Expected {len(points)} elevations, got {len(elevations)}"
            )
        return elevations


# Global instance (lazy initialization)
_client: Optional[ElevationClient] = None


def get_elevation_client() -> ElevationClient:
    """Get or create global ElevationClient instance."""
    global _client
    if _client is None:
        _client = ElevationClient()
    return _client
