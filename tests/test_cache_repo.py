import threading

import pytest

from cafe_finder.models.cafe_model import SearchParams
from cafe_finder.repos.cache_repo import MemoryCache, build_cache_key


def _params(lat=37.7749, lng=-122.4194, radius=5000, query="", page_token=None):
    return SearchParams(latitude=lat, longitude=lng, radius=radius, query=query, page_token=page_token)


# ===== Cache Keys =====

def test_cache_key_format():
    assert build_cache_key(_params()) == "cafes:37.775,-122.419:5000:"
    assert build_cache_key(_params(query="latte")) == "cafes:37.775,-122.419:5000:latte"


def test_cache_key_ignores_small_perturbations():
    base = build_cache_key(_params())
    assert build_cache_key(_params(lat=37.7752, lng=-122.4192)) == base
    assert build_cache_key(_params(lat=37.7746, lng=-122.4186)) == base


def test_cache_key_changes_with_rounded_coordinates():
    base = build_cache_key(_params())
    assert build_cache_key(_params(lat=37.7760)) != base
    assert build_cache_key(_params(lng=-122.4210)) != base


def test_cache_key_includes_radius_and_query():
    base = build_cache_key(_params())
    assert build_cache_key(_params(radius=25000)) != base
    assert build_cache_key(_params(query="tea")) != base


def test_page_token_gets_its_own_key():
    first_page = build_cache_key(_params())
    second_page = build_cache_key(_params(page_token="abc123"))
    assert second_page != first_page
    assert second_page.startswith(first_page)
    assert second_page.endswith(":page:abc123")


# ===== Memory Cache =====

def test_set_then_get(clock):
    cache = MemoryCache(clock=clock)
    cache.set("k", {"v": 1})
    assert cache.get("k") == {"v": 1}
    assert cache.size() == 1


def test_missing_key_returns_none(clock):
    assert MemoryCache(clock=clock).get("nope") is None


def test_entry_expires_after_ttl(clock):
    cache = MemoryCache(ttl_seconds=300, clock=clock)
    cache.set("k", "v")

    clock.advance(300)
    assert cache.get("k") == "v"

    clock.advance(0.001)
    assert cache.get("k") is None
    # expired entries are dropped on read
    assert cache.size() == 0


def test_overflow_evicts_exactly_one_oldest_entry(clock):
    cache = MemoryCache(max_entries=100, clock=clock)
    for i in range(100):
        cache.set(f"key-{i}", i)

    cache.set("key-100", 100)

    assert cache.size() == 100
    assert cache.get("key-0") is None
    assert cache.get("key-1") == 1
    assert cache.get("key-100") == 100


def test_reads_do_not_protect_from_eviction(clock):
    cache = MemoryCache(max_entries=3, clock=clock)
    for key in ("a", "b", "c"):
        cache.set(key, key)

    # a plain LRU would now evict "b"
    assert cache.get("a") == "a"
    cache.set("d", "d")

    assert cache.keys() == ["b", "c", "d"]


def test_overwrite_keeps_slot_and_capacity(clock):
    cache = MemoryCache(max_entries=3, clock=clock)
    for key in ("a", "b", "c"):
        cache.set(key, key)

    cache.set("a", "A")
    assert cache.size() == 3
    assert cache.get("a") == "A"

    cache.set("d", "d")
    assert cache.keys() == ["b", "c", "d"]


def test_overwrite_refreshes_ttl(clock):
    cache = MemoryCache(ttl_seconds=300, clock=clock)
    cache.set("k", 1)
    clock.advance(200)
    cache.set("k", 2)
    clock.advance(200)
    assert cache.get("k") == 2


def test_delete_and_clear(clock):
    cache = MemoryCache(clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)

    cache.delete("a")
    cache.delete("missing")
    assert cache.get("a") is None
    assert cache.size() == 1

    assert cache.clear() == 1
    assert cache.size() == 0


def test_rejects_zero_capacity():
    with pytest.raises(ValueError):
        MemoryCache(max_entries=0)


def test_concurrent_overflow_keeps_capacity(clock):
    cache = MemoryCache(max_entries=50, clock=clock)

    def writer(prefix):
        for i in range(200):
            cache.set(f"{prefix}-{i}", i)

    threads = [threading.Thread(target=writer, args=(f"t{n}",)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert cache.size() == 50
