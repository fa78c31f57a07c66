"""Near-static reference lists."""

from typing import Any

from listingkit.core.entities.query import Filter, QueryRequest
from listingkit.core.interfaces.remote_client import IRemoteClient
from listingkit.core.services.cache_service import CacheService

CATEGORY_COLLECTIONS = {
    "company": "company_categories",
    "classified": "classified_categories",
    "news": "news_categories",
    "blog": "blog_categories",
}


class ReferenceData:
    """Countries and categories, cached for the reference TTL."""

    def __init__(self, client: IRemoteClient, cache: CacheService) -> None:
        self._client = client
        self._cache = cache

    async def countries(self) -> list[dict[str, Any]]:
        """Countries with a phone code, ordered by name."""
        key = self._cache.keys.countries()
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        request = (
            QueryRequest(select="id, name, iso2, iso3, phone_code, emoji")
            .where(Filter.not_null("phone_code"))
            .order_by("name")
        )
        result = await self._client.query("countries_v2", request)
        await self._cache.set(key, result.rows, self._cache.config.reference_ttl)
        return result.rows

    async def categories(self, kind: str) -> list[dict[str, Any]]:
        """Categories of one kind (``company``, ``classified``, ``news``, ``blog``)."""
        try:
            collection = CATEGORY_COLLECTIONS[kind]
        except KeyError:
            raise ValueError(f"Unknown category kind: {kind}") from None

        key = self._cache.keys.categories(kind)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        result = await self._client.query(
            collection, QueryRequest(select="id, name").order_by("name")
        )
        await self._cache.set(key, result.rows, self._cache.config.reference_ttl)
        return result.rows
