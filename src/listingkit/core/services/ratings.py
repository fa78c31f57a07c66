"""Rating and vote-count aggregation for company rows."""

import asyncio
import logging
from typing import Any

from listingkit.core.entities.listing import Record
from listingkit.core.entities.votes import RatingSummary
from listingkit.core.exceptions import RemoteError
from listingkit.core.interfaces.remote_client import IRemoteClient
from listingkit.core.services.cache_service import CacheService

logger = logging.getLogger(__name__)

RATING_PROCEDURE = "get_company_rating"
VOTE_COUNT_PROCEDURE = "get_company_vote_count"


class RatingService:
    """Reads per-company aggregates through remote procedures.

    Both aggregates are volatile and cached for the configured
    ratings TTL under ``company_rating_<id>`` and
    ``company_vote_count_<id>``.
    """

    def __init__(self, client: IRemoteClient, cache: CacheService) -> None:
        self._client = client
        self._cache = cache

    async def rating(self, company_id: Any) -> RatingSummary:
        """Return the average rating and vote total for a company.

        Raises:
            RemoteError: If the procedure call fails.
        """
        key = self._cache.keys.company_rating(company_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return RatingSummary(**cached)

        data = await self._client.call(RATING_PROCEDURE, {"company_id": company_id})
        row = _first(data) or {}
        summary = RatingSummary(
            average_rating=float(row.get("average_rating") or 0),
            total_votes=int(row.get("total_votes") or 0),
        )
        await self._cache.set(
            key,
            {"average_rating": summary.average_rating, "total_votes": summary.total_votes},
            self._cache.config.ratings_ttl,
        )
        return summary

    async def vote_count(self, company_id: Any) -> int:
        """Return how many rating votes (not reviews) a company has.

        Raises:
            RemoteError: If the procedure call fails.
        """
        key = self._cache.keys.company_vote_count(company_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return int(cached)

        data = await self._client.call(VOTE_COUNT_PROCEDURE, {"company_id": company_id})
        count = int(_first(data) or 0)
        await self._cache.set(key, count, self._cache.config.ratings_ttl)
        return count

    async def invalidate(self, company_id: Any) -> None:
        """Drop the cached aggregates of one company."""
        await self._cache.clear(self._cache.keys.company_rating(company_id))
        await self._cache.clear(self._cache.keys.company_vote_count(company_id))

    async def enrich(self, records: list[Record]) -> list[Record]:
        """Add ``average_rating``, ``total_votes`` and ``vote_count`` to rows.

        Aggregates are loaded concurrently. A company whose aggregates
        cannot be loaded gets zeros instead of failing the whole list.
        """
        return list(await asyncio.gather(*(self._enrich_one(r) for r in records)))

    async def _enrich_one(self, record: Record) -> Record:
        company_id = record.get("id")
        try:
            summary, votes = await asyncio.gather(
                self.rating(company_id), self.vote_count(company_id)
            )
        except RemoteError as e:
            logger.error("Error loading rating for company %s: %s", company_id, e)
            summary, votes = RatingSummary(), 0
        return {
            **record,
            "average_rating": summary.average_rating,
            "total_votes": summary.total_votes,
            "vote_count": votes,
        }


def _first(data: Any) -> Any:
    """Unwrap single-row procedure results, which may arrive as a list."""
    if isinstance(data, list):
        return data[0] if data else None
    return data
