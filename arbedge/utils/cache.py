"""
In-memory TTL cache.

Stores computed values per key together with the time they were stored.
Owned by the request-handling layer; the arbitrage engine never sees it.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value and when it was stored (clock seconds)."""
    value: T
    stored_at: float


@dataclass(frozen=True)
class CacheLookup(Generic[T]):
    """Outcome of get_or_compute."""
    value: T
    hit: bool
    age_seconds: float = 0.0

    @property
    def age_minutes(self) -> int:
        return round(self.age_seconds / 60)


class TTLCache:
    """
    Key -> (value, timestamp) store with a fixed time-to-live.

    Usage:
        cache = TTLCache(ttl_seconds=1800)
        lookup = await cache.get_or_compute("soccer", compute_opportunities)
        if lookup.hit:
            print(f"cached ({lookup.age_minutes} min old)")
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")

        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._locks: dict[str, asyncio.Lock] = {}

        self.logger = logger.bind(component="cache")

        # Stats
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def age_seconds(self, entry: CacheEntry) -> float:
        return self._clock() - entry.stored_at

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self.age_seconds(entry) < self.ttl_seconds

    def get(self, key: str) -> Optional[CacheEntry]:
        """Get a fresh entry, evicting it if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not self._is_fresh(entry):
            del self._entries[key]
            self.logger.debug("Cache entry expired", key=key)
            return None
        return entry

    def set(self, key: str, value: Any) -> CacheEntry:
        entry = CacheEntry(value=value, stored_at=self._clock())
        self._entries[key] = entry
        return entry

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def fresh_items(self) -> list[tuple[str, CacheEntry]]:
        """All non-expired (key, entry) pairs."""
        items = []
        for key in list(self._entries):
            entry = self.get(key)
            if entry is not None:
                items.append((key, entry))
        return items

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[T]],
    ) -> CacheLookup[T]:
        """
        Return the cached value for key, computing and storing it on a miss.

        Concurrent misses for the same key compute once. If compute raises,
        the exception propagates and nothing is stored.
        """
        entry = self.get(key)
        if entry is not None:
            self._hits += 1
            return CacheLookup(value=entry.value, hit=True, age_seconds=self.age_seconds(entry))

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            # Another waiter may have filled it
            entry = self.get(key)
            if entry is not None:
                self._hits += 1
                return CacheLookup(value=entry.value, hit=True, age_seconds=self.age_seconds(entry))

            self._misses += 1
            value = await compute()
            self.set(key, value)
            self.logger.debug("Cache entry stored", key=key)
            return CacheLookup(value=value, hit=False)

    def get_metrics(self) -> dict:
        return {
            "entries": len(self._entries),
            "ttl_seconds": self.ttl_seconds,
            "hits": self._hits,
            "misses": self._misses,
        }
