"""Company votes and reviews.

Both live in ``company_votes`` and are told apart by the ``voting``
flag: ``true`` rows are votes and count toward the rating, ``false``
or null rows are review-only. A user holds at most one vote row and,
independently, at most one review row per company. Votes are limited
to one per calendar year; reviews are not limited and never touch the
vote row, so writing a review neither consumes nor resets the vote
cooldown.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from listingkit.core.entities.query import Filter, MutationOp, QueryRequest
from listingkit.core.entities.votes import UserRating, VoteEligibility
from listingkit.core.exceptions import RemoteError, ValidationError, VoteNotAllowedError
from listingkit.core.interfaces.remote_client import IRemoteClient
from listingkit.core.services.cache_service import CacheService
from listingkit.core.services.points import PointsAwarder
from listingkit.core.services.ratings import RatingService
from listingkit.core.services.validation import check_length, check_rating
from listingkit.infrastructure.key_builders.listing import COMPANIES

logger = logging.getLogger(__name__)

VOTES_COLLECTION = "company_votes"
ELIGIBILITY_PROCEDURE = "can_user_vote_company"
SUBMIT_VOTE_PROCEDURE = "submit_company_vote"
REVIEW_PAGE_SIZE = 20
MAX_REVIEW_LENGTH = 5000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VoteService:
    """Eligibility checks and submissions for votes and reviews."""

    def __init__(
        self,
        client: IRemoteClient,
        cache: CacheService,
        ratings: RatingService | None = None,
        points: PointsAwarder | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._client = client
        self._cache = cache
        self._ratings = ratings or RatingService(client, cache)
        self._points = points or PointsAwarder(client)
        self._clock = clock

    async def check_eligibility(self, user_id: Any, company_id: Any) -> VoteEligibility:
        """Tell whether ``user_id`` may vote for ``company_id`` now.

        Asks the eligibility procedure first. When it fails or returns
        nothing, decides from the user's latest vote row: no vote, or a
        vote more than a year old, allows a new one.
        """
        if not user_id or not company_id:
            return VoteEligibility(False, "Please log in to vote")

        try:
            data = await self._client.call(
                ELIGIBILITY_PROCEDURE,
                {"p_user_id": user_id, "p_company_id": company_id},
            )
        except RemoteError as e:
            logger.warning("Eligibility procedure failed, checking votes directly: %s", e)
            data = None

        result = data[0] if isinstance(data, list) and data else data
        if isinstance(result, dict):
            last = parse_timestamp(result.get("last_vote_date"))
            return VoteEligibility(
                can_vote=bool(result.get("can_vote")),
                message=result.get("message") or "",
                last_vote_date=last,
                next_vote_date=one_year_after(last) if last else None,
            )

        try:
            latest = await self._latest_vote(user_id, company_id)
        except RemoteError as e:
            logger.error("Error checking voting eligibility: %s", e)
            return VoteEligibility(
                False, "Unable to check voting eligibility. Please try again later."
            )

        if latest is None:
            return VoteEligibility(True, "You can vote for this company")

        voted_at = parse_timestamp(latest.get("created_at"))
        if voted_at is None or voted_at < one_year_before(self._clock()):
            return VoteEligibility(
                True, "You can vote for this company again", last_vote_date=voted_at
            )

        next_date = one_year_after(voted_at)
        return VoteEligibility(
            False,
            f"You can vote for this company again after {next_date:%Y-%m-%d}",
            last_vote_date=voted_at,
            next_vote_date=next_date,
        )

    async def submit_vote(self, user_id: Any, company_id: Any, rating: int) -> int:
        """Cast a rating vote.

        Never writes review text. On success the company's aggregates
        and every cached company list are invalidated, since list
        ordering depends on votes.

        Returns:
            Points awarded for voting.

        Raises:
            ValidationError: If not logged in or the rating is invalid.
            VoteNotAllowedError: If the user is inside the cooldown or
                the backend refuses the vote.
            RemoteError: If the submission itself fails.
        """
        if not user_id:
            raise ValidationError("Please log in to vote", field="user_id")
        rating = check_rating(rating)

        eligibility = await self.check_eligibility(user_id, company_id)
        if not eligibility.can_vote:
            raise VoteNotAllowedError(
                eligibility.message or "You can only vote for this company once per year",
                next_vote_date=eligibility.next_vote_date,
            )

        data = await self._client.call(
            SUBMIT_VOTE_PROCEDURE,
            {
                "p_user_id": user_id,
                "p_company_id": company_id,
                "p_rating": rating,
                "p_review": None,
                "p_voting": True,
            },
        )
        result = data[0] if isinstance(data, list) and data else data
        if not isinstance(result, dict) or not result.get("success"):
            message = (result or {}).get("message") if isinstance(result, dict) else None
            raise VoteNotAllowedError(message or "Failed to submit vote")

        await self._ratings.invalidate(company_id)
        await self._cache.clear_family(COMPANIES)

        return await self._points.award(user_id, "voting")

    async def submit_review(
        self, user_id: Any, company_id: Any, rating: int, text: str
    ) -> int:
        """Write or update the user's review of a company.

        Only review rows (``voting`` false or null) are touched, so the
        user's vote row and its cooldown stay as they are.

        Returns:
            Points awarded; only the first review of a company earns any.

        Raises:
            ValidationError: If not logged in, no rating, or empty text.
            RemoteError: If reading or writing the review fails.
        """
        if not user_id:
            raise ValidationError("Please log in first to write a review", field="user_id")
        rating = check_rating(rating)
        text = (text or "").strip()
        if not text:
            raise ValidationError("Please write a review", field="review")
        check_length(text, "review", maximum=MAX_REVIEW_LENGTH)

        existing = await self._review_row(user_id, company_id)
        if existing is not None:
            first_review = not (existing.get("review") or "").strip()
            await self._client.mutate(
                VOTES_COLLECTION,
                MutationOp.UPDATE,
                {"rating": rating, "review": text, "voting": False},
                match=[Filter.eq("id", existing["id"])],
            )
        else:
            first_review = True
            await self._client.mutate(
                VOTES_COLLECTION,
                MutationOp.INSERT,
                {
                    "company_id": company_id,
                    "user_id": user_id,
                    "rating": rating,
                    "review": text,
                    "voting": False,
                },
            )

        await self._cache.clear(self._cache.keys.company_reviews(company_id))

        if not first_review:
            logger.debug("Not awarding points - user already had a review")
            return 0
        return await self._points.award(user_id, "company_review")

    async def load_user_rating(self, user_id: Any, company_id: Any) -> UserRating:
        """Return the user's own vote rating and review text."""
        vote = await self._latest_vote(user_id, company_id, columns="rating, created_at")
        review = await self._review_row(user_id, company_id, columns="review")
        return UserRating(
            rating=int((vote or {}).get("rating") or 0),
            review=(review or {}).get("review") or "",
            last_vote_date=parse_timestamp((vote or {}).get("created_at")),
        )

    async def list_reviews(
        self, company_id: Any, limit: int = REVIEW_PAGE_SIZE
    ) -> list[dict[str, Any]]:
        """Return the latest non-empty review-only rows for a company."""
        key = self._cache.keys.company_reviews(company_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        request = (
            QueryRequest(
                select=(
                    "id, company_id, user_id, rating, review, created_at, "
                    "user:profiles!user_id(username, full_name, image_url, avatar_url)"
                ),
                limit=limit,
            )
            .where(
                Filter.eq("company_id", company_id),
                Filter.not_null("review"),
                Filter.neq("review", ""),
            )
            .where_any(Filter.is_null("voting"), Filter.eq("voting", False))
            .order_by("created_at", descending=True)
        )
        result = await self._client.query(VOTES_COLLECTION, request)

        reviews = []
        for row in result.rows:
            user = row.get("user")
            if isinstance(user, list):
                user = user[0] if user else None
            reviews.append({**row, "user": user})

        await self._cache.set(key, reviews, self._cache.config.ratings_ttl)
        return reviews

    async def _latest_vote(
        self, user_id: Any, company_id: Any, columns: str = "created_at, voting"
    ) -> dict[str, Any] | None:
        request = (
            QueryRequest(select=columns, limit=1)
            .where(
                Filter.eq("company_id", company_id),
                Filter.eq("user_id", user_id),
                Filter.eq("voting", True),
            )
            .order_by("created_at", descending=True)
        )
        result = await self._client.query(VOTES_COLLECTION, request)
        return result.rows[0] if result.rows else None

    async def _review_row(
        self, user_id: Any, company_id: Any, columns: str = "id, review"
    ) -> dict[str, Any] | None:
        request = (
            QueryRequest(select=columns, limit=1)
            .where(Filter.eq("company_id", company_id), Filter.eq("user_id", user_id))
            .where_any(Filter.is_null("voting"), Filter.eq("voting", False))
        )
        result = await self._client.query(VOTES_COLLECTION, request)
        return result.rows[0] if result.rows else None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO timestamp from the backend into an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        moment = value
    else:
        try:
            moment = datetime.fromisoformat(str(value))
        except ValueError:
            return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def one_year_before(moment: datetime) -> datetime:
    """Same calendar date one year earlier (Feb 29 maps to Feb 28)."""
    return _shift_years(moment, -1)


def one_year_after(moment: datetime) -> datetime:
    """Same calendar date one year later (Feb 29 maps to Feb 28)."""
    return _shift_years(moment, 1)


def _shift_years(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, day=28)
