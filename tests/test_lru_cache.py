"""Tests for the LRU cache: eviction order, max_age, copies on read and counters."""
import pytest

from conftest import FakeClock
from octranspo_fetch.cache.lru import LRUCache


def test_miss_then_hit():
    cache = LRUCache(max_size=2)
    assert cache.get("k1") is None
    cache.put("k1", "v1")
    entry = cache.get("k1")
    assert entry is not None
    assert entry.payload == "v1"
    assert (cache.hits, cache.misses) == (1, 1)


def test_evicts_least_recently_used():
    cache = LRUCache(max_size=2)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.get("a")  # promotes a
    cache.put("c", 3)
    assert "a" in cache
    assert "b" not in cache
    assert "c" in cache
    assert len(cache) == 2


def test_max_age_treats_old_entry_as_miss():
    clock = FakeClock()
    cache = LRUCache(max_size=2, clock=clock)
    cache.put("stop", "routes")
    clock.advance(60)
    assert cache.get("stop", max_age=60) is not None
    clock.advance(1)
    assert cache.get("stop", max_age=60) is None
    # still stored; a refetch overwrites it
    assert "stop" in cache


def test_entry_age_and_explicit_store_time():
    clock = FakeClock(now=1000.0)
    cache = LRUCache(clock=clock)
    cache.put("k", [1], now=900.0)
    entry = cache.get("k")
    assert entry.stored_at == 900.0
    assert entry.age(clock()) == 100.0


def test_reads_return_copies():
    cache = LRUCache()
    cache.put("k", {"trips": [1, 2, 3]})
    cache.get("k").payload["trips"].clear()
    assert cache.get("k").payload == {"trips": [1, 2, 3]}


def test_put_stores_a_copy():
    cache = LRUCache()
    trips = [1, 2]
    cache.put("k", trips)
    trips.append(3)
    assert cache.get("k").payload == [1, 2]


def test_clear():
    cache = LRUCache()
    cache.put("k", 1)
    cache.clear()
    assert len(cache) == 0
    assert cache.get("k") is None


def test_rejects_zero_size():
    with pytest.raises(ValueError):
        LRUCache(max_size=0)
