from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Literal, Optional


class CamelModel(BaseModel):
    """Snake case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Domain Models ---
class Cafe(CamelModel):
    id: int
    external_id: str
    name: str
    address: str
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    rating: float = Field(0.0, ge=0, le=5)
    price_level: int = 2
    # Only used for ordering, never sent to clients
    distance_meters: float = Field(0.0, exclude=True)
    distance_label: str
    crowd_level: int = Field(0, ge=0, le=5)  # 0 = closed / unknown
    crowd_label: str
    predicted_wait_label: str
    tags: List[str] = Field(default_factory=list, max_length=3)
    ai_score: int = Field(..., ge=80, le=99)
    open_now: bool = True
    is_mock: bool = False
    cached: bool = False


class SearchParams(CamelModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    radius: int = Field(5000, ge=1)
    query: str = ""
    page_token: Optional[str] = None


class CafeSearchResult(CamelModel):
    """What the cache stores for a first-page search."""
    cafes: List[Cafe] = []
    next_page_token: Optional[str] = None


# --- Provider Results ---
class AuthoritativeResult(CafeSearchResult):
    """Data that really came from Google Places (possibly zero results)."""
    source: Literal["google"] = "google"


class SyntheticResult(CafeSearchResult):
    """Placeholder data produced because the provider was unusable."""
    source: Literal["mock"] = "mock"
    reason: str


# --- API Response Models ---
class SearchMeta(CamelModel):
    count: int
    cache_hit: bool
    cache_source: Literal["memory", "none"]
    response_time: int  # milliseconds
    timestamp: str
    has_more: bool


class CafeSearchResponse(CamelModel):
    success: bool = True
    data: List[Cafe]
    next_page_token: Optional[str] = None
    meta: SearchMeta


class ErrorResponse(CamelModel):
    success: bool = False
    error: str
    message: Optional[str] = None


class MetricsSnapshot(CamelModel):
    total_requests: int
    cache_hit_rate: float
    avg_response_time: float
    error_rate: float
    cache_size: int = 0


class MetricsResponse(CamelModel):
    success: bool = True
    data: MetricsSnapshot
