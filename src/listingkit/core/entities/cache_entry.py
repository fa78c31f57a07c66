"""Cache entry entity."""

import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """Immutable cache entry value object.

    Holds a cached value together with the moment it was stored and
    its time-to-live. Timestamps come from the owning cache's timer,
    so they are only comparable with that timer's readings. An entry
    is live up to and including ``expires_at``.
    """

    key: str
    value: Any
    created_at: float
    ttl: timedelta

    @property
    def expires_at(self) -> float:
        """Return the absolute expiry time on the cache timer's scale."""
        return self.created_at + self.ttl.total_seconds()

    @classmethod
    def create(
        cls,
        key: str,
        value: Any,
        ttl: timedelta,
        now: float | None = None,
    ) -> "CacheEntry":
        """Factory method to create a new cache entry.

        Args:
            key: The cache key.
            value: The value to cache.
            ttl: Time-to-live for the entry.
            now: Creation time. Defaults to ``time.monotonic()``.

        Returns:
            A new CacheEntry instance.
        """
        return cls(
            key=key,
            value=value,
            created_at=time.monotonic() if now is None else now,
            ttl=ttl,
        )
