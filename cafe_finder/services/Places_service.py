import asyncio
import httpx
import logging
import math
import random
import zlib
from typing import Optional

from cafe_finder.core.config import settings
from cafe_finder.core.geo import destination_point, distance_meters, format_distance
from cafe_finder.core.logger import logs
from cafe_finder.models.cafe_model import (
    AuthoritativeResult,
    Cafe,
    SearchParams,
    SyntheticResult,
)

IDENTITY_TAG = "Coffee"
MAX_TAGS = 3

# Google place types worth showing as a tag
TYPE_TAGS = {
    "bakery": "Bakery",
    "restaurant": "Food",
    "meal_takeaway": "Takeaway",
    "meal_delivery": "Delivery",
    "bar": "Bar",
    "book_store": "Books",
    "library": "Quiet",
    "store": "Shop",
}

CROWD_LABELS = ["Very Quiet", "Quiet", "Moderate", "Busy", "Very Busy"]

MOCK_CAFE_NAMES = [
    "Blue Bottle Coffee",
    "Sightglass Coffee",
    "Ritual Coffee Roasters",
    "Philz Coffee",
    "Four Barrel Coffee",
    "Verve Coffee",
    "Equator Coffees",
    "Saint Frank Coffee",
    "Réveille Coffee Co.",
    "Andytown Coffee Roasters",
]

MOCK_TAG_POOL = [
    "WiFi",
    "Outlets",
    "Quiet",
    "Spacious",
    "Trendy",
    "Outdoor Seating",
    "Custom Blends",
    "Artisanal",
    "Local Roaster",
]


class PlacesUpstreamError(Exception):
    """Google answered, but not with something we can use."""
    def __init__(self, status: str, message: str | None = None):
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}")


def crowd_label(level: int) -> str:
    if 1 <= level <= len(CROWD_LABELS):
        return CROWD_LABELS[level - 1]
    return "Closed"


def stable_place_id(external_id: str) -> int:
    """Non-negative integer id that stays the same across processes."""
    return zlib.crc32(external_id.encode("utf-8"))


class PlacesService:
    def __init__(
        self,
        api_key: str = settings.GOOGLE_PLACES_API_KEY,
        base_url: str = settings.GOOGLE_NEARBY_URL,
        timeout: float = settings.PROVIDER_TIMEOUT_SECONDS,
        mock_batch_size: int = settings.MOCK_BATCH_SIZE,
        rng: Optional[random.Random] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.mock_batch_size = mock_batch_size
        # crowd / wait / AI score are synthetic, tests pass a seeded Random
        self.rng = rng or random.Random()
        self.transport = transport

    async def fetch_cafes(self, params: SearchParams) -> AuthoritativeResult | SyntheticResult:
        """
        Nearby cafés for the given search, sorted by distance.
        Never raises: any provider problem turns into a SyntheticResult.
        """
        if not self.api_key:
            logs.log(logging.WARNING, "No GOOGLE_PLACES_API_KEY configured, serving mock cafés")
            return self._fallback(params, "missing_api_key")

        try:
            # httpx timeouts are per phase, wait_for bounds the whole call
            data = await asyncio.wait_for(self._fetch_from_google(params), self.timeout)
            status = data.get("status")

            if status == "ZERO_RESULTS":
                logs.log(logging.INFO, f"Google Places returned no cafés near {params.latitude}, {params.longitude}")
                return AuthoritativeResult(cafes=[])

            if status != "OK":
                raise PlacesUpstreamError(status or "UNKNOWN_ERROR", data.get("error_message"))

            cafes = self._transform(data.get("results") or [], params)
            logs.log(logging.INFO, f"Google Places returned {len(cafes)} cafés")
            return AuthoritativeResult(
                cafes=cafes,
                next_page_token=data.get("next_page_token"),
            )

        except PlacesUpstreamError as e:
            logs.log(logging.ERROR, f"Google Places rejected the request: {str(e)}")
            return self._fallback(params, e.status)
        except (httpx.TimeoutException, asyncio.TimeoutError):
            logs.log(logging.ERROR, f"Google Places timed out after {self.timeout}s")
            return self._fallback(params, "timeout")
        except Exception as e:
            logs.log(logging.ERROR, f"Google Places request failed: {str(e)}")
            return self._fallback(params, "provider_error")

    async def _fetch_from_google(self, params: SearchParams) -> dict:
        if params.page_token:
            # Google only accepts the token (plus key) on follow-up pages
            query = {"pagetoken": params.page_token, "key": self.api_key}
        else:
            query = {
                "location": f"{params.latitude},{params.longitude}",
                "radius": params.radius,
                "type": "cafe",
                "key": self.api_key,
            }
            if params.query:
                query["keyword"] = params.query

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.get(self.base_url, params=query)
            response.raise_for_status()
            return response.json()

    def _transform(self, results: list[dict], params: SearchParams) -> list[Cafe]:
        cafes = []
        for r in results:
            cafe = self._to_cafe(r, params)
            if cafe is not None:
                cafes.append(cafe)
        return self._sort_by_distance(cafes)

    def _to_cafe(self, r: dict, params: SearchParams) -> Cafe | None:
        place_id = r.get("place_id")
        loc = (r.get("geometry") or {}).get("location") or {}
        lat = loc.get("lat")
        lng = loc.get("lng")

        if not place_id or lat is None or lng is None:
            return None

        meters = distance_meters(params.latitude, params.longitude, lat, lng)
        open_now = self._is_open(r)
        crowd = self.rng.randint(1, 5) if open_now else 0

        return Cafe(
            id=stable_place_id(place_id),
            external_id=place_id,
            name=r.get("name") or "Unnamed café",
            address=r.get("vicinity") or r.get("formatted_address") or "",
            latitude=lat,
            longitude=lng,
            rating=r.get("rating") or 0.0,
            price_level=r["price_level"] if r.get("price_level") is not None else 2,
            distance_meters=meters,
            distance_label=format_distance(meters),
            crowd_level=crowd,
            crowd_label=crowd_label(crowd),
            predicted_wait_label=self._predict_wait(open_now),
            tags=self._build_tags(r.get("types") or []),
            ai_score=self.rng.randint(80, 99),
            open_now=open_now,
        )

    def _is_open(self, r: dict) -> bool:
        operational = r.get("business_status", "OPERATIONAL") == "OPERATIONAL"
        # No opening hours from Google means we assume open
        open_hours = (r.get("opening_hours") or {}).get("open_now")
        return operational and open_hours is not False

    def _build_tags(self, types: list[str]) -> list[str]:
        tags = [IDENTITY_TAG]
        for place_type in types:
            label = TYPE_TAGS.get(place_type)
            if label and label not in tags:
                tags.append(label)
            if len(tags) == MAX_TAGS:
                break
        return tags

    def _predict_wait(self, open_now: bool) -> str:
        if not open_now:
            return "Closed"
        low = self.rng.randint(2, 11)
        high = low + self.rng.randint(3, 8)
        return f"{low}-{high} min"

    def _sort_by_distance(self, cafes: list[Cafe]) -> list[Cafe]:
        """Nearest first. sorted() is stable so ties keep Google's order."""
        return sorted(cafes, key=lambda c: c.distance_meters)

    # ===== Synthetic Fallback =====

    def _fallback(self, params: SearchParams, reason: str) -> SyntheticResult:
        logs.log(logging.WARNING, f"Serving mock cafés (reason: {reason})")
        return SyntheticResult(cafes=self.generate_mock_cafes(params), reason=reason)

    def generate_mock_cafes(self, params: SearchParams) -> list[Cafe]:
        """Placeholder cafés scattered within the search radius."""
        cafes = []
        for index in range(self.mock_batch_size):
            bearing = self.rng.uniform(0, 2 * math.pi)
            offset = self.rng.uniform(0, params.radius)
            lat, lng = destination_point(params.latitude, params.longitude, bearing, offset)
            meters = distance_meters(params.latitude, params.longitude, lat, lng)
            crowd = self.rng.randint(1, 5)
            external_id = f"mock-{index + 1}"

            cafes.append(Cafe(
                id=stable_place_id(external_id),
                external_id=external_id,
                name=MOCK_CAFE_NAMES[index % len(MOCK_CAFE_NAMES)],
                address="Sample listing (live data unavailable)",
                latitude=lat,
                longitude=lng,
                rating=round(self.rng.uniform(3.8, 4.9), 1),
                price_level=self.rng.randint(1, 3),
                distance_meters=meters,
                distance_label=format_distance(meters),
                crowd_level=crowd,
                crowd_label=crowd_label(crowd),
                predicted_wait_label=self._predict_wait(True),
                tags=[IDENTITY_TAG] + self.rng.sample(MOCK_TAG_POOL, MAX_TAGS - 1),
                ai_score=self.rng.randint(80, 99),
                open_now=True,
                is_mock=True,
            ))

        return self._sort_by_distance(cafes)
