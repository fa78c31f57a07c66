"""Vote, review and detail-page entities."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class VoteEligibility:
    """Whether a user may cast a rating vote for a company right now."""

    can_vote: bool
    message: str = ""
    last_vote_date: datetime | None = None
    next_vote_date: datetime | None = None


@dataclass(frozen=True)
class UserRating:
    """A user's own vote and review for one company.

    The two are tracked independently: ``rating`` comes from the
    user's vote row, ``review`` from their review row.
    """

    rating: int = 0
    review: str = ""
    last_vote_date: datetime | None = None


@dataclass(frozen=True)
class RatingSummary:
    """Aggregated rating for a company as returned by the backend."""

    average_rating: float = 0.0
    total_votes: int = 0


@dataclass
class DetailOutcome:
    """Result of loading a detail page.

    Exactly one of ``record`` and ``redirect_to`` is set. A redirect
    carries an optional message for the notification shown after it.
    """

    record: dict[str, Any] | None = None
    redirect_to: str | None = None
    message: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    @property
    def found(self) -> bool:
        return self.record is not None and self.redirect_to is None
