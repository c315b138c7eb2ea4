import pytest

from store.cache import MISS, ResultCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_entry_expires_after_ttl() -> None:
    clock = FakeClock()
    cache = ResultCache(capacity=10, ttl=300, clock=clock)

    cache.set("k", ["example.com"])
    clock.now += 300
    assert cache.get("k") == ["example.com"]

    clock.now += 0.001
    assert cache.get("k") is MISS
    assert cache.size() == 0


def test_lru_eviction_drops_least_recently_used() -> None:
    cache = ResultCache(capacity=2, ttl=60, clock=FakeClock())

    cache.set("a", 1)
    cache.set("b", 2)
    # Reading "a" makes "b" the oldest entry.
    assert cache.get("a") == 1
    cache.set("c", 3)

    assert cache.get("b") is MISS
    assert cache.get("a") == 1
    assert cache.get("c") == 3
    assert cache.stats()["evictions"] == 1


def test_overwrite_refreshes_without_evicting() -> None:
    clock = FakeClock()
    cache = ResultCache(capacity=2, ttl=60, clock=clock)

    cache.set("a", 1)
    cache.set("b", 2)
    clock.now += 50
    cache.set("a", 10)
    clock.now += 20

    assert len(cache) == 2
    assert cache.get("a") == 10
    assert cache.get("b") is MISS  # expired, not evicted
    assert cache.stats()["evictions"] == 0


def test_cached_falsy_values_are_hits() -> None:
    cache = ResultCache(clock=FakeClock())
    cache.set("empty", [])
    cache.set("none", None)

    assert cache.get("empty") == []
    assert cache.get("none") is None
    assert not MISS
    assert repr(MISS) == "MISS"


def test_generate_key_is_order_independent() -> None:
    a = ResultCache.generate_key("search", {"query": "shop", "expanded": "1"})
    b = ResultCache.generate_key("search", {"expanded": "1", "query": "shop"})

    assert a == b == "search?expanded=1&query=shop"
    assert ResultCache.generate_key("status", {"domain": None}) == "status?domain="
    assert ResultCache.generate_key("status") == "status"
    assert ResultCache.generate_key("status", "not-a-mapping") == "status"


def test_disabling_clears_and_bypasses_cache() -> None:
    cache = ResultCache(clock=FakeClock())
    cache.set("k", 1)

    cache.set_enabled(False)
    assert cache.size() == 0
    cache.set("k", 2)
    assert cache.get("k") is MISS
    assert cache.size() == 0

    cache.set_enabled(True)
    cache.set("k", 3)
    assert cache.get("k") == 3


def test_stats_track_hits_and_misses() -> None:
    cache = ResultCache(capacity=5, ttl=120, clock=FakeClock())
    cache.set("k", 1)
    cache.get("k")
    cache.get("k")
    cache.get("missing")

    stats = cache.stats()
    assert stats["enabled"] is True
    assert stats["size"] == 1
    assert stats["capacity"] == 5
    assert stats["ttl_seconds"] == 120
    assert stats["hits"] == 2
    assert stats["misses"] == 1
    assert stats["hit_rate"] == round(2 / 3, 4)


def test_delete_and_clear() -> None:
    cache = ResultCache(clock=FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)

    cache.delete("a")
    cache.delete("never-set")
    assert cache.get("a") is MISS

    cache.clear()
    assert cache.size() == 0


def test_rejects_invalid_bounds() -> None:
    with pytest.raises(ValueError):
        ResultCache(capacity=0)
    with pytest.raises(ValueError):
        ResultCache(ttl=0)
