"""In-memory cache backend implementation."""

import math
import re
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any

from cachetools import TLRUCache  # type: ignore[import-untyped]

from listingkit.core.entities.cache_entry import CacheEntry


def _time_to_use(key: str, entry: CacheEntry, now: float) -> float:
    # TLRUCache drops an item once ``timer() >= ttu``; an entry is still
    # live at exactly ``expires_at``.
    return math.nextafter(entry.expires_at, math.inf)


class InMemoryCacheBackend:
    """In-memory cache backend with per-entry TTL.

    Uses cachetools' TLRUCache so that every entry carries its own
    expiry. When ``maxsize`` is reached, expired entries are dropped
    first and then the least recently used one. Suitable for a single
    process.
    """

    def __init__(
        self,
        maxsize: int | None = 1000,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the in-memory cache backend.

        Args:
            maxsize: Maximum number of entries, or None for no bound.
            timer: Clock returning seconds; injectable for tests.
        """
        self._maxsize = maxsize
        self._timer = timer
        self._cache: TLRUCache[str, CacheEntry] = TLRUCache(
            maxsize=math.inf if maxsize is None else maxsize,
            ttu=_time_to_use,
            timer=timer,
        )

    async def get(self, key: str) -> Any | None:
        """Retrieve cached value by key.

        Args:
            key: The cache key to retrieve.

        Returns:
            The cached value, or None if not found or expired.
        """
        entry = self._cache.get(key)
        if entry is None:
            # Drop the stale entry (if any) instead of waiting for the next write
            self._cache.expire()
            return None
        return entry.value

    async def set(self, key: str, value: Any, ttl: timedelta) -> None:
        """Store value with its own TTL.

        Args:
            key: The cache key.
            value: The value to store.
            ttl: Time-to-live for this entry.
        """
        self._cache[key] = CacheEntry.create(key, value, ttl, now=self._timer())

    async def delete(self, key: str) -> bool:
        """Delete cached value.

        Args:
            key: The cache key to delete.

        Returns:
            True if a live entry existed and was deleted, False otherwise.
        """
        self._cache.expire()
        try:
            del self._cache[key]
            return True
        except KeyError:
            return False

    async def exists(self, key: str) -> bool:
        """Check if key exists in cache.

        Args:
            key: The cache key to check.

        Returns:
            True if a live entry exists, False otherwise.
        """
        return key in self._cache

    async def clear(self) -> None:
        """Clear all cached values."""
        self._cache.clear()

    async def delete_pattern(self, pattern: re.Pattern[str]) -> int:
        """Delete keys matching pattern.

        Args:
            pattern: Compiled regex matched with ``search``.

        Returns:
            Number of live keys deleted.
        """
        self._cache.expire()
        keys_to_delete = [key for key in list(self._cache) if pattern.search(key)]

        count = 0
        for key in keys_to_delete:
            try:
                del self._cache[key]
                count += 1
            except KeyError:
                pass

        return count

    def keys(self) -> list[str]:
        """Return the keys of all live entries."""
        self._cache.expire()
        return list(self._cache)

    def __len__(self) -> int:
        """Return the number of live entries in the cache."""
        self._cache.expire()
        return len(self._cache)

    @property
    def maxsize(self) -> int | None:
        """Return the maximum size of the cache."""
        return self._maxsize
