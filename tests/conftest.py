import random

import pytest

from cafe_finder.core.config import Settings
from cafe_finder.main import create_app
from cafe_finder.repos.cache_repo import MemoryCache


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def no_key_settings():
    return Settings(GOOGLE_PLACES_API_KEY="", DEFAULT_RADIUS=5000)


@pytest.fixture
def app(no_key_settings, clock):
    cache = MemoryCache(ttl_seconds=300, max_entries=100, clock=clock)
    return create_app(no_key_settings, rng=random.Random(7), cache=cache)
