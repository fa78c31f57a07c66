"""Cache backend interface."""

import re
from datetime import timedelta
from typing import Any, Protocol


class ICacheBackend(Protocol):
    """Contract for cache storage backends.

    All cache backends must implement this protocol to be used
    with CacheService. Methods are async so that in-memory and
    networked stores share one calling convention. ``None`` is
    reserved for "miss" and cannot be cached as a value.
    """

    async def get(self, key: str) -> Any | None:
        """Retrieve cached value by key.

        Expired entries are removed as a side effect.

        Args:
            key: The cache key to retrieve.

        Returns:
            The cached value, or None if not found or expired.
        """
        ...

    async def set(self, key: str, value: Any, ttl: timedelta) -> None:
        """Store value, replacing any existing entry for ``key``.

        Args:
            key: The cache key.
            value: The value to store.
            ttl: Time-to-live for this entry.
        """
        ...

    async def delete(self, key: str) -> bool:
        """Delete cached value.

        Args:
            key: The cache key to delete.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        ...

    async def exists(self, key: str) -> bool:
        """Check if a live entry exists for ``key``."""
        ...

    async def clear(self) -> None:
        """Clear all cached values."""
        ...

    async def delete_pattern(self, pattern: re.Pattern[str]) -> int:
        """Delete keys matching pattern.

        Args:
            pattern: Compiled regex, matched with ``pattern.search``.

        Returns:
            Number of keys deleted.
        """
        ...
