"""In-memory LRU result cache with TTL expiration.

Memoizes search results and status lookups so identical queries inside the
TTL window never hit the upstream API twice. Entries are kept in access
order: every successful get() or set() moves the key to the most recently
used end, and the oldest end is evicted when a new key would exceed capacity.

Safe for asyncio (single-threaded event loop): no method awaits.
"""

import logging
import time
from collections import OrderedDict
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger("domaincheck.cache")

# Defaults mirror engine.config.Settings
DEFAULT_TTL = 300.0      # 5 minutes
DEFAULT_MAX_SIZE = 100


class _Miss:
    def __repr__(self) -> str:
        return "MISS"

    def __bool__(self) -> bool:
        return False


MISS = _Miss()
"""Returned by ResultCache.get() when there is no usable entry."""


@dataclass
class CacheEntry:
    """A cached value and the monotonic time after which it is invalid."""
    value: Any
    expiry: float


class ResultCache:
    """Bounded key/value cache with per-entry expiry and LRU eviction."""

    def __init__(
        self,
        capacity: int = DEFAULT_MAX_SIZE,
        ttl: float = DEFAULT_TTL,
        *,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self._capacity = capacity
        self._ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._enabled = enabled
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def enabled(self) -> bool:
        return self._enabled

    @staticmethod
    def generate_key(base: str, params: Any = None) -> str:
        """Build a deterministic key from a base name and a parameter mapping.

        Parameter names are sorted, so two mappings with the same items give
        the same key whatever order they were built in:

            generate_key("search", {"query": "a", "x": "1"})
            -> "search?query=a&x=1"
        """
        if not isinstance(params, Mapping):
            params = {}
        pairs = "&".join(
            f"{name}={'' if params[name] is None else params[name]}"
            for name in sorted(params, key=str)
        )
        return f"{base}?{pairs}" if pairs else base

    def get(self, key: str) -> Any:
        """Return the cached value, or MISS if absent, expired or disabled."""
        if not self._enabled:
            return MISS

        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return MISS

        if self._clock() > entry.expiry:
            del self._entries[key]
            self._misses += 1
            logger.debug("Cache entry expired: %s", key)
            return MISS

        self._entries.move_to_end(key)
        self._hits += 1
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Insert or overwrite an entry, evicting the LRU entry if full."""
        if not self._enabled:
            return

        if key in self._entries:
            self._entries.move_to_end(key)
        elif len(self._entries) >= self._capacity:
            evicted, _ = self._entries.popitem(last=False)
            self._evictions += 1
            logger.debug("Cache full, evicted %s", evicted)

        self._entries[key] = CacheEntry(value=value, expiry=self._clock() + self._ttl)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Clear all cached entries."""
        self._entries.clear()

    def size(self) -> int:
        return len(self._entries)

    def set_enabled(self, enabled: bool) -> None:
        """Toggle caching. Disabling also drops every entry."""
        self._enabled = enabled
        if not enabled:
            self.clear()

    def stats(self) -> dict:
        """Return cache statistics."""
        lookups = self._hits + self._misses
        return {
            "enabled": self._enabled,
            "size": len(self._entries),
            "capacity": self._capacity,
            "ttl_seconds": self._ttl,
            "hits": self._hits,
            "misses": self._misses,
            "evictions": self._evictions,
            "hit_rate": round(self._hits / lookups, 4) if lookups else 0.0,
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ResultCache(capacity={self._capacity}, ttl={self._ttl}, size={len(self._entries)})"
