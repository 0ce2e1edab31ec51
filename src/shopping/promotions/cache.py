"""Injectable TTL cache for promotion lookups.

The promotion catalog receives its cache explicitly, so tests can drive
expiry with a fake clock and inspect hit/miss statistics.
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

MISSING = object()


@dataclass
class CacheStats:
    """Statistics for cache performance tracking."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Cache hit rate as a percentage."""
        if self.total_requests == 0:
            return 0.0
        return (self.hits / self.total_requests) * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "total_requests": self.total_requests,
            "hit_rate": self.hit_rate,
        }


class PromotionCache(ABC):
    @abstractmethod
    def get(self, key: str) -> Any:
        """Return the cached value, or ``MISSING``."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any, ttl: float | None = None) -> None: ...

    @abstractmethod
    def evict(self, key: str) -> bool:
        """Drop ``key``. Returns True when something was removed."""
        ...


class MemoryTTLCache(PromotionCache):
    """Thread-safe in-process cache with per-entry expiry."""

    def __init__(self, default_ttl: float = 300, clock=time.monotonic) -> None:
        self.default_ttl = default_ttl
        self.stats = CacheStats()
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.stats.misses += 1
                return MISSING

            value, expires_at = entry
            if expires_at <= self._clock():
                del self._entries[key]
                self.stats.evictions += 1
                self.stats.misses += 1
                return MISSING

            self.stats.hits += 1
            return value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            return
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl)

    def evict(self, key: str) -> bool:
        with self._lock:
            if self._entries.pop(key, None) is None:
                return False
            self.stats.evictions += 1
            return True

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
            for key in expired:
                del self._entries[key]
            self.stats.evictions += len(expired)
            return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
