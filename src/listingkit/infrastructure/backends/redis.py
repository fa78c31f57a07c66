"""Redis cache backend implementation."""

import re
from datetime import timedelta
from typing import Any

import redis.asyncio as redis

from listingkit.core.exceptions import CacheBackendError
from listingkit.core.interfaces.serializer import ISerializer
from listingkit.infrastructure.serializers.json import JsonSerializer


class RedisCacheBackend:
    """Redis cache backend for multi-process deployments.

    Values are serialized with the configured serializer and expire
    through Redis' own per-key TTL. Regex invalidation scans the
    backend's key prefix and matches on the unprefixed key.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        key_prefix: str = "listingkit",
        serializer: ISerializer | None = None,
        client: "redis.Redis | None" = None,
    ) -> None:
        """Initialize the Redis cache backend.

        Args:
            redis_url: Redis connection URL.
            key_prefix: Prefix for all cache keys.
            serializer: Value serializer. Defaults to JSON.
            client: Pre-built client; overrides ``redis_url``.
        """
        self._redis: redis.Redis = client or redis.from_url(redis_url)  # type: ignore
        self._key_prefix = key_prefix
        self._serializer = serializer or JsonSerializer()

    async def get(self, key: str) -> Any | None:
        """Retrieve cached value by key."""
        try:
            data = await self._redis.get(self._prefixed_key(key))
        except redis.RedisError as e:
            raise CacheBackendError(f"Redis GET failed: {e}") from e
        if data is None:
            return None
        return self._serializer.deserialize(data)

    async def set(self, key: str, value: Any, ttl: timedelta) -> None:
        """Store value with its TTL in milliseconds."""
        data = self._serializer.serialize(value)
        millis = max(1, int(ttl.total_seconds() * 1000))
        try:
            await self._redis.set(self._prefixed_key(key), data, px=millis)
        except redis.RedisError as e:
            raise CacheBackendError(f"Redis SET failed: {e}") from e

    async def delete(self, key: str) -> bool:
        """Delete cached value."""
        try:
            result = await self._redis.delete(self._prefixed_key(key))
        except redis.RedisError as e:
            raise CacheBackendError(f"Redis DEL failed: {e}") from e
        return result > 0

    async def exists(self, key: str) -> bool:
        """Check if key exists in cache."""
        try:
            result = await self._redis.exists(self._prefixed_key(key))
        except redis.RedisError as e:
            raise CacheBackendError(f"Redis EXISTS failed: {e}") from e
        return result > 0

    async def clear(self) -> None:
        """Clear all keys under this backend's prefix."""
        await self.delete_pattern(re.compile(""))

    async def delete_pattern(self, pattern: re.Pattern[str]) -> int:
        """Delete keys whose unprefixed name matches ``pattern``.

        Args:
            pattern: Compiled regex matched with ``search``.

        Returns:
            Number of keys deleted.
        """
        prefix = f"{self._key_prefix}:"
        try:
            keys = [
                raw
                async for raw in self._redis.scan_iter(match=f"{prefix}*")
                if pattern.search(_decode(raw)[len(prefix):])
            ]
            if not keys:
                return 0
            return int(await self._redis.delete(*keys))
        except redis.RedisError as e:
            raise CacheBackendError(f"Redis pattern delete failed: {e}") from e

    async def close(self) -> None:
        """Close the Redis connection."""
        await self._redis.aclose()

    def _prefixed_key(self, key: str) -> str:
        return f"{self._key_prefix}:{key}"


def _decode(raw: bytes | str) -> str:
    return raw.decode() if isinstance(raw, bytes) else raw
