import threading
import time
from typing import Any, Callable, Optional

from cafe_finder.models.cafe_model import SearchParams
from cafe_finder.models.cache_model import CacheEntry

MEMORY_CACHE_TTL = 5 * 60  # seconds
MAX_MEMORY_CACHE_SIZE = 100


def build_cache_key(params: SearchParams) -> str:
    """
    Builds the cache key for a search.
    Coordinates are rounded to 3 decimals (~111m at the equator) so nearby
    requests land on the same entry. Paginated requests get their token
    appended so they can never collide with a first-page key.
    """
    lat = f"{params.latitude:.3f}"
    lng = f"{params.longitude:.3f}"
    key = f"cafes:{lat},{lng}:{params.radius}:{params.query or ''}"
    if params.page_token:
        key = f"{key}:page:{params.page_token}"
    return key


class MemoryCache:
    """
    Bounded in-memory store with a TTL checked on read.

    When full, the entry inserted first is evicted (FIFO). Reads never
    change the order, and overwriting a key keeps its original slot.
    """

    def __init__(
        self,
        ttl_seconds: float = MEMORY_CACHE_TTL,
        max_entries: int = MAX_MEMORY_CACHE_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        # dicts keep insertion order, which is the eviction order
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if self._clock() - entry.inserted_at > self.ttl_seconds:
                del self._entries[key]
                return None

            return entry.payload

    def set(self, key: str, payload: Any) -> None:
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_entries:
                oldest_key = next(iter(self._entries))
                del self._entries[oldest_key]

            self._entries[key] = CacheEntry(
                key=key,
                payload=payload,
                inserted_at=self._clock(),
            )

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> int:
        """Drops every entry and returns how many there were."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
            return removed

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def keys(self) -> list[str]:
        """Currently held keys, oldest first."""
        with self._lock:
            return list(self._entries)
