# tests/services/test_cache_service.py
import time

from pmtool.services.cache_service import CacheService, MemoryCache


def test_memory_cache_get_set_and_stats():
    cache = MemoryCache(max_size=10)

    cache.set("a", 1, ttl=60)

    assert cache.get("a") == 1
    assert cache.get("missing") is None
    stats = cache.get_stats()
    assert stats["stats"]["hits"] == 1
    assert stats["stats"]["misses"] == 1
    assert stats["hit_rate"] == 0.5


def test_memory_cache_expiry():
    cache = MemoryCache()
    cache.set("short", "value", ttl=0.01)

    time.sleep(0.05)

    assert cache.get("short") is None
    assert cache.exists("short") is False


def test_memory_cache_evicts_least_recently_used():
    cache = MemoryCache(max_size=2)
    cache.set("old", 1)
    time.sleep(0.01)
    cache.set("new", 2)
    time.sleep(0.01)
    cache.get("old")

    cache.set("newest", 3)

    assert cache.exists("old")
    assert not cache.exists("new")
    assert cache.get_stats()["stats"]["evictions"] == 1


def test_cache_service_namespacing_and_pattern_invalidation():
    service = CacheService(namespace="ns", default_ttl=60)
    service.set("projects:user:1", ["p1"])
    service.set("projects:user:2", ["p2"])
    service.set("project:1", {"id": "1"})

    removed = service.invalidate_pattern("projects:user:")

    assert removed == 2
    assert service.get("projects:user:1") is None
    assert service.get("project:1") == {"id": "1"}
    assert "ns:project:1" in service.backend.cache


def test_cache_service_get_or_set_calls_getter_once():
    service = CacheService(default_ttl=60)
    calls = []

    def getter():
        calls.append(1)
        return {"value": 42}

    assert service.get_or_set("key", getter) == {"value": 42}
    assert service.get_or_set("key", getter) == {"value": 42}
    assert len(calls) == 1


def test_zero_ttl_disables_caching():
    service = CacheService(default_ttl=0)

    assert service.set("key", "value") is False
    assert service.get("key", default="fallback") == "fallback"


def test_invalidate_and_clear():
    service = CacheService(default_ttl=60)
    service.set("a", 1)
    service.set("b", 2)

    assert service.invalidate("a") is True
    assert service.invalidate("a") is False
    service.clear()
    assert service.get_stats()["size"] == 0
