import logging
import math
import time
from datetime import datetime, timezone
from typing import Optional

from cafe_finder.core.logger import logs
from cafe_finder.models.cafe_model import (
    CafeSearchResponse,
    CafeSearchResult,
    MetricsSnapshot,
    SearchMeta,
    SearchParams,
    SyntheticResult,
)
from cafe_finder.repos.cache_repo import MemoryCache, build_cache_key
from cafe_finder.services.Places_service import PlacesService
from cafe_finder.services.metrics import PerformanceTracker

COORDINATES_REQUIRED = "Latitude and longitude are required"


class CafeSearchValidationError(ValueError):
    """Bad search input. Reported to the client as a 400."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def _parse_coordinate(value: Optional[str]) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_search_params(
    lat: Optional[str],
    lng: Optional[str],
    radius: Optional[str] = None,
    query: Optional[str] = None,
    page_token: Optional[str] = None,
    default_radius: int = 5000,
    max_radius: int = 50000,
) -> SearchParams:
    """
    Turns raw query-string values into SearchParams.
    A zero coordinate counts as missing, same as the web client sends
    when it has no fix yet.
    """
    latitude = _parse_coordinate(lat)
    longitude = _parse_coordinate(lng)

    if not latitude or not longitude:
        raise CafeSearchValidationError(COORDINATES_REQUIRED)
    if not -90 <= latitude <= 90:
        raise CafeSearchValidationError("Latitude must be between -90 and 90")
    if not -180 <= longitude <= 180:
        raise CafeSearchValidationError("Longitude must be between -180 and 180")

    if radius is None or radius == "":
        radius_m = default_radius
    else:
        try:
            radius_m = int(radius)
        except ValueError:
            raise CafeSearchValidationError("Radius must be a positive integer")
        if radius_m <= 0:
            raise CafeSearchValidationError("Radius must be a positive integer")

    return SearchParams(
        latitude=latitude,
        longitude=longitude,
        radius=min(radius_m, max_radius),
        query=(query or "").strip(),
        page_token=page_token or None,
    )


class CafeSearchService:
    def __init__(
        self,
        provider: PlacesService,
        cache: MemoryCache,
        metrics: Optional[PerformanceTracker] = None,
    ):
        self.provider = provider
        self.cache = cache
        self.metrics = metrics or PerformanceTracker()

    async def search(self, params: SearchParams) -> CafeSearchResponse:
        start = time.perf_counter()
        cache_key = build_cache_key(params)
        cache_hit = False
        result = None

        # 1. Check Cache (first pages only)
        if params.page_token:
            logs.log(logging.INFO, f"Paginated request, skipping cache: {cache_key}")
        else:
            result = self.cache.get(cache_key)

        if result is not None:
            cache_hit = True
            logs.log(logging.INFO, f"✓ Cache HIT (Memory): {cache_key}")
        else:
            # 2. Ask the provider
            logs.log(logging.INFO, f"✗ Cache MISS: {cache_key}. Fetching cafés...")
            provider_result = await self.provider.fetch_cafes(params)
            if isinstance(provider_result, SyntheticResult):
                logs.log(logging.WARNING, f"Using mock cafés for {cache_key} (reason: {provider_result.reason})")

            # 3. Write through
            result = self._store(cache_key, params, provider_result)

        response_time = int(round((time.perf_counter() - start) * 1000))
        self.metrics.record_request(response_time, cache_hit)

        return CafeSearchResponse(
            data=result.cafes,
            next_page_token=result.next_page_token,
            meta=SearchMeta(
                count=len(result.cafes),
                cache_hit=cache_hit,
                cache_source="memory" if cache_hit else "none",
                response_time=response_time,
                timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
                has_more=bool(result.next_page_token),
            ),
        )

    def _store(self, cache_key: str, params: SearchParams, provider_result: CafeSearchResult) -> CafeSearchResult:
        """Caches non-empty first pages; returns what the client should see."""
        if params.page_token or not provider_result.cafes:
            return provider_result

        payload = CafeSearchResult(
            cafes=[cafe.model_copy(update={"cached": True}) for cafe in provider_result.cafes],
            next_page_token=provider_result.next_page_token,
        )
        self.cache.set(cache_key, payload)
        logs.log(logging.INFO, f"Cached {len(payload.cafes)} cafés under {cache_key}")
        return payload

    def record_error(self) -> None:
        self.metrics.record_error()

    def metrics_snapshot(self) -> MetricsSnapshot:
        return self.metrics.snapshot(cache_size=self.cache.size())

    def cache_size(self) -> int:
        return self.cache.size()

    def clear_cache(self) -> int:
        cleared = self.cache.clear()
        logs.log(logging.INFO, f"Cleared {cleared} cached searches")
        return cleared
