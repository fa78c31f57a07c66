"""Cache service - main entry point for caching operations."""

import logging
import re
from datetime import timedelta
from typing import Any

from listingkit.core.entities.cache_config import CacheConfig
from listingkit.core.entities.cache_key import ListCacheKey, family_pattern
from listingkit.core.exceptions import CacheBackendError, SerializationError
from listingkit.core.interfaces.cache_backend import ICacheBackend
from listingkit.infrastructure.key_builders.listing import ListingKeyBuilder

logger = logging.getLogger(__name__)

KeyLike = str | ListCacheKey


class CacheService:
    """Domain service that orchestrates caching operations.

    Wraps a backend with the get/set/clear contract used by every
    list and detail loader. A miss is never an error, and the service
    never raises: backend failures are logged and treated as a miss
    (for reads) or a no-op (for writes and invalidation).
    """

    def __init__(
        self,
        backend: ICacheBackend,
        key_builder: ListingKeyBuilder | None = None,
        config: CacheConfig | None = None,
    ) -> None:
        """Initialize the cache service.

        Args:
            backend: The cache backend to use for storage.
            key_builder: Key builder shared by callers. Defaults to
                ``ListingKeyBuilder``.
            config: Optional cache configuration. Uses defaults if not provided.
        """
        self._backend = backend
        self._key_builder = key_builder or ListingKeyBuilder()
        self._config = config or CacheConfig()

        # Statistics
        self._hits = 0
        self._misses = 0

    @property
    def config(self) -> CacheConfig:
        """Get the cache configuration."""
        return self._config

    @property
    def keys(self) -> ListingKeyBuilder:
        """Get the key builder callers should compose keys with."""
        return self._key_builder

    @property
    def backend(self) -> ICacheBackend:
        return self._backend

    @property
    def stats(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with hits, misses, and total requests.
        """
        return {
            "hits": self._hits,
            "misses": self._misses,
            "total": self._hits + self._misses,
        }

    async def get(self, key: KeyLike) -> Any | None:
        """Return the cached value for ``key`` if present and live.

        Args:
            key: Cache key.

        Returns:
            The cached value, or None on a miss.
        """
        if not self._config.enabled:
            return None

        try:
            value = await self._backend.get(str(key))
        except (CacheBackendError, SerializationError) as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            value = None

        if value is None:
            self._misses += 1
            return None

        self._hits += 1
        return value

    async def set(
        self,
        key: KeyLike,
        value: Any,
        ttl: timedelta | float | None = None,
    ) -> None:
        """Store ``value`` under ``key`` until ``now + ttl``.

        Args:
            key: Cache key. Any existing entry is replaced.
            value: Value to store.
            ttl: Time-to-live as a timedelta or seconds. Uses the
                configured default when omitted.
        """
        if not self._config.enabled:
            return

        effective_ttl = _as_timedelta(ttl) if ttl is not None else self._config.default_ttl
        if effective_ttl <= timedelta(0):
            return

        try:
            await self._backend.set(str(key), value, effective_ttl)
        except (CacheBackendError, SerializationError) as e:
            logger.warning("Cache write failed for %s: %s", key, e)

    async def clear(self, key_or_pattern: KeyLike | re.Pattern[str] | None = None) -> int:
        """Remove one key, every key matching a pattern, or everything.

        Args:
            key_or_pattern: An exact key, a compiled regex such as
                ``re.compile("^companies_")``, or None to empty the cache
                (which also resets statistics).

        Returns:
            Number of entries removed (0 when unknown after a full clear).
        """
        try:
            if key_or_pattern is None:
                await self._backend.clear()
                self._hits = 0
                self._misses = 0
                return 0
            if isinstance(key_or_pattern, re.Pattern):
                count = await self._backend.delete_pattern(key_or_pattern)
                logger.debug(
                    "Cleared %d cache entries matching %s", count, key_or_pattern.pattern
                )
                return count
            return int(await self._backend.delete(str(key_or_pattern)))
        except CacheBackendError as e:
            logger.warning("Cache invalidation failed for %s: %s", key_or_pattern, e)
            return 0

    async def clear_family(self, family: str) -> int:
        """Remove every key of an entity family, e.g. all ``companies`` lists."""
        return await self.clear(family_pattern(family))


def _as_timedelta(ttl: timedelta | float) -> timedelta:
    if isinstance(ttl, timedelta):
        return ttl
    return timedelta(seconds=ttl)
