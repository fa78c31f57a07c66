"""Detail-page loading with canonical-URL and not-found redirects."""

import asyncio
import logging
from typing import Any

from listingkit.core.entities.query import Filter, QueryRequest
from listingkit.core.entities.votes import DetailOutcome
from listingkit.core.exceptions import NotFoundError, RemoteError, describe_error
from listingkit.core.interfaces.remote_client import IRemoteClient
from listingkit.core.services.cache_service import CacheService
from listingkit.core.services.ratings import RatingService
from listingkit.core.services.slugs import slugify
from listingkit.core.services.votes import VoteService

logger = logging.getLogger(__name__)

COMPANIES_COLLECTION = "mlm_companies"
COMPANIES_PATH = "/companies"
VIEW_PROCEDURE = "increment_company_views"
COMPANY_COLUMNS = (
    "id, name, logo_url, country, country_name, state, city, category, "
    "established, description, headquarters, website, status, view_count, slug, "
    "meta_description, meta_keywords, focus_keyword"
)


async def fetch_single(
    client: IRemoteClient, collection: str, request: QueryRequest
) -> dict[str, Any]:
    """Fetch exactly one row.

    Raises:
        NotFoundError: If no row matches.
        RemoteError: If the query fails.
    """
    request.limit = 1
    result = await client.query(collection, request)
    if not result.rows:
        raise NotFoundError(f"No row in {collection} matches")
    return result.rows[0]


class DetailLoader:
    """Loads company detail pages.

    A missing company or a failed load redirects to the company list
    instead of rendering an empty page; a URL with the wrong country
    segment redirects to the canonical one.
    """

    def __init__(
        self,
        client: IRemoteClient,
        cache: CacheService,
        ratings: RatingService | None = None,
        votes: VoteService | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._ratings = ratings or RatingService(client, cache)
        self._votes = votes or VoteService(client, cache, ratings=self._ratings)
        self._background: set[asyncio.Task[None]] = set()

    async def load_company(
        self, country_slug: str, slug: str, user_id: Any = None
    ) -> DetailOutcome:
        """Load a company with its rating, vote count and reviews.

        Args:
            country_slug: Country segment of the requested URL.
            slug: Company slug.
            user_id: Current user, if logged in; adds their rating and
                vote eligibility to ``extras``.

        Returns:
            The company, or a redirect with a message.
        """
        key = self._cache.keys.company(slug)
        try:
            company = await self._cache.get(key)
            if company is None:
                company = await fetch_single(
                    self._client,
                    COMPANIES_COLLECTION,
                    QueryRequest(select=COMPANY_COLUMNS).where(Filter.eq("slug", slug)),
                )
                await self._cache.set(key, company, self._cache.config.detail_ttl)
        except NotFoundError:
            logger.info("Company %s not found", slug)
            return DetailOutcome(redirect_to=COMPANIES_PATH, message="Company not found")
        except RemoteError as e:
            logger.error("Error loading company details: %s", e)
            return DetailOutcome(
                redirect_to=COMPANIES_PATH,
                message=describe_error(e, "Error loading company details"),
            )

        canonical = slugify(company.get("country_name") or company.get("country") or "")
        if canonical != country_slug:
            return DetailOutcome(
                record=company, redirect_to=f"/company/{canonical}/{slug}"
            )

        self._increment_views(slug)

        # Each fetch fills its own slot, so completion order does not matter
        loaders: dict[str, Any] = {
            "rating": self._ratings.rating(company["id"]),
            "vote_count": self._ratings.vote_count(company["id"]),
            "reviews": self._votes.list_reviews(company["id"]),
        }
        if user_id:
            loaders["user_rating"] = self._votes.load_user_rating(user_id, company["id"])
            loaders["eligibility"] = self._votes.check_eligibility(user_id, company["id"])

        results = await asyncio.gather(*loaders.values(), return_exceptions=True)
        extras: dict[str, Any] = {}
        for name, result in zip(loaders, results):
            if isinstance(result, RemoteError):
                logger.error("Error loading %s for company %s: %s", name, slug, result)
                continue
            if isinstance(result, BaseException):
                raise result
            extras[name] = result

        return DetailOutcome(record=company, extras=extras)

    def _increment_views(self, slug: str) -> None:
        task = asyncio.create_task(self._record_view(slug))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _record_view(self, slug: str) -> None:
        try:
            await self._client.call(VIEW_PROCEDURE, {"slug_or_id": slug})
        except RemoteError as e:
            logger.error("Error incrementing view count: %s", e)

    async def drain(self) -> None:
        """Wait for pending view-count updates."""
        if self._background:
            await asyncio.gather(*self._background)
