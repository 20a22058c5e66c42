"""
Bounded in-memory LRU cache that remembers when each entry was stored.
Reads hand out deep copies so callers can adjust payloads freely.
"""
import copy
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from threading import Lock
from typing import Any

DEFAULT_CACHE_SIZE = 100


@dataclass
class CacheEntry:
    payload: Any
    stored_at: float  # clock() when stored, epoch seconds

    def age(self, now: float) -> float:
        return now - self.stored_at


class LRUCache:
    """LRU cache of CacheEntry values. Every get() promotes the key, so access is locked."""

    def __init__(
        self,
        max_size: int = DEFAULT_CACHE_SIZE,
        clock: Callable[[], float] = time.time,
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._max_size = max_size
        self._clock = clock
        self._store: OrderedDict[Hashable, CacheEntry] = OrderedDict()
        self._lock = Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: Hashable, max_age: float | None = None) -> CacheEntry | None:
        """
        Return a copy of the entry for key, or None on a miss.
        With max_age, an entry older than max_age seconds counts as a miss
        (it stays stored until the next put overwrites it).
        """
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None
            if max_age is not None and entry.age(self._clock()) > max_age:
                self._misses += 1
                return None
            self._store.move_to_end(key)
            self._hits += 1
            return CacheEntry(payload=copy.deepcopy(entry.payload), stored_at=entry.stored_at)

    def put(self, key: Hashable, payload: Any, now: float | None = None) -> None:
        stored_at = self._clock() if now is None else now
        with self._lock:
            self._store[key] = CacheEntry(payload=copy.deepcopy(payload), stored_at=stored_at)
            self._store.move_to_end(key)
            while len(self._store) > self._max_size:
                self._store.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._store

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses
