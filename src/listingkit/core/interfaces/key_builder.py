"""Key builder interface."""

from typing import Any, Protocol

from listingkit.core.entities.cache_key import ListCacheKey
from listingkit.core.entities.listing import ListQuery


class IKeyBuilder(Protocol):
    """Contract for building cache keys.

    Key builders own the shape of every key in a family, so the
    pattern used to invalidate a family always matches the keys
    written for it.
    """

    def list_key(self, family: str, query: ListQuery) -> ListCacheKey:
        """Build the key for a sorted, filtered list (page excluded).

        Args:
            family: Entity family, e.g. ``companies``.
            query: Active filters and sort.

        Returns:
            The key under which the full sorted set is cached.
        """
        ...

    def page_key(self, family: str, query: ListQuery) -> ListCacheKey:
        """Build the key for one remotely paged page of a list.

        Args:
            family: Entity family.
            query: Active filters, sort and page.

        Returns:
            A key in the same family as ``list_key``.
        """
        ...

    def entity_key(self, family: str, *parts: Any) -> ListCacheKey:
        """Build the key for a single entity or aggregate.

        Args:
            family: Entity family, e.g. ``company_rating``.
            *parts: Distinguishing values such as an id or slug.

        Returns:
            The cache key.
        """
        ...
