"""Domain entities for listingkit."""

from listingkit.core.entities.cache_config import CacheConfig
from listingkit.core.entities.cache_entry import CacheEntry
from listingkit.core.entities.cache_key import ListCacheKey, family_pattern
from listingkit.core.entities.listing import (
    Enricher,
    ListQuery,
    ListSource,
    PagedResult,
    Record,
    SortMode,
)
from listingkit.core.entities.query import (
    Filter,
    FilterOp,
    MutationOp,
    Ordering,
    QueryRequest,
    QueryResult,
)
from listingkit.core.entities.votes import (
    DetailOutcome,
    RatingSummary,
    UserRating,
    VoteEligibility,
)

__all__ = [
    "CacheConfig",
    "CacheEntry",
    "ListCacheKey",
    "family_pattern",
    # Listing
    "Enricher",
    "ListQuery",
    "ListSource",
    "PagedResult",
    "Record",
    "SortMode",
    # Remote queries
    "Filter",
    "FilterOp",
    "MutationOp",
    "Ordering",
    "QueryRequest",
    "QueryResult",
    # Votes and details
    "DetailOutcome",
    "RatingSummary",
    "UserRating",
    "VoteEligibility",
]
