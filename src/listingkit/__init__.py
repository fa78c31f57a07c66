"""listingkit - Data layer for a directory/listing web app.

Loads filtered, sorted and paginated lists from a PostgREST backend
with an in-process (or Redis) TTL cache in front of it, and handles
company details, annual votes, reviews and slugged submissions.

Example:
    from listingkit import COMPANIES_SOURCE, Directory, ListQuery, RemoteSettings

    settings = RemoteSettings(url="https://xyz.supabase.co", anon_key="...")

    async with Directory.from_settings(settings) as directory:
        page = await directory.composer.compose(
            COMPANIES_SOURCE,
            ListQuery(country="US", sort="a-z", page=2),
        )
        print(page.total_count, [c["name"] for c in page.items])

        # Votes clear every cached company list
        await directory.votes.submit_vote(user_id, company_id, rating=5)

Caching an application loader:
    from listingkit import cached, configure

    configure(directory.cache)

    @cached(ttl=3600, key="blog_posts_{category}")
    async def blog_posts(category: str) -> list[dict]:
        ...
"""

from listingkit.config import RemoteSettings, get_settings
from listingkit.core.entities import (
    CacheConfig,
    CacheEntry,
    DetailOutcome,
    Filter,
    FilterOp,
    ListCacheKey,
    ListQuery,
    ListSource,
    MutationOp,
    Ordering,
    PagedResult,
    QueryRequest,
    QueryResult,
    RatingSummary,
    SortMode,
    UserRating,
    VoteEligibility,
    family_pattern,
)
from listingkit.core.exceptions import (
    CacheBackendError,
    ConflictError,
    ListingKitError,
    NotFoundError,
    RemoteError,
    SerializationError,
    TransientRemoteError,
    ValidationError,
    VoteNotAllowedError,
    describe_error,
)
from listingkit.core.interfaces import (
    ICacheBackend,
    IKeyBuilder,
    IRemoteClient,
    ISerializer,
)
from listingkit.core.services import (
    CacheService,
    CompanySubmissions,
    DetailLoader,
    ListQueryComposer,
    ListView,
    PointsAwarder,
    RatingService,
    ReferenceData,
    SlugAllocator,
    VoteService,
    slugify,
    sort_records,
)
from listingkit.decorators import cached, configure, invalidates
from listingkit.directory import Directory
from listingkit.infrastructure import (
    InMemoryCacheBackend,
    JsonSerializer,
    ListingKeyBuilder,
    PostgrestClient,
)
from listingkit.sources import (
    CLASSIFIEDS_SOURCE,
    COMPANIES_SOURCE,
    DIRECT_SELLERS_SOURCE,
    NEWS_SOURCE,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Configuration
    "RemoteSettings",
    "get_settings",
    "CacheConfig",
    # Core entities
    "CacheEntry",
    "ListCacheKey",
    "family_pattern",
    "ListQuery",
    "ListSource",
    "PagedResult",
    "SortMode",
    "Filter",
    "FilterOp",
    "MutationOp",
    "Ordering",
    "QueryRequest",
    "QueryResult",
    "DetailOutcome",
    "RatingSummary",
    "UserRating",
    "VoteEligibility",
    # Errors
    "ListingKitError",
    "ValidationError",
    "RemoteError",
    "TransientRemoteError",
    "ConflictError",
    "NotFoundError",
    "CacheBackendError",
    "SerializationError",
    "VoteNotAllowedError",
    "describe_error",
    # Core interfaces
    "ICacheBackend",
    "IKeyBuilder",
    "IRemoteClient",
    "ISerializer",
    # Core services
    "CacheService",
    "ListQueryComposer",
    "ListView",
    "RatingService",
    "VoteService",
    "DetailLoader",
    "PointsAwarder",
    "CompanySubmissions",
    "ReferenceData",
    "SlugAllocator",
    "slugify",
    "sort_records",
    # Infrastructure implementations
    "InMemoryCacheBackend",
    "ListingKeyBuilder",
    "JsonSerializer",
    "PostgrestClient",
    # List sources
    "COMPANIES_SOURCE",
    "CLASSIFIEDS_SOURCE",
    "NEWS_SOURCE",
    "DIRECT_SELLERS_SOURCE",
    # Wiring
    "Directory",
    # Decorators
    "cached",
    "invalidates",
    "configure",
]
