"""Wiring of the directory services around one client and one cache."""

import logging

from listingkit.config import RemoteSettings
from listingkit.core.entities.cache_config import CacheConfig
from listingkit.core.entities.listing import ListQuery, ListSource
from listingkit.core.interfaces.cache_backend import ICacheBackend
from listingkit.core.interfaces.remote_client import IRemoteClient
from listingkit.core.services.cache_service import CacheService
from listingkit.core.services.details import DetailLoader
from listingkit.core.services.list_composer import ListQueryComposer
from listingkit.core.services.list_view import ListView, Notifier
from listingkit.core.services.points import PointsAwarder
from listingkit.core.services.ratings import RatingService
from listingkit.core.services.reference import ReferenceData
from listingkit.core.services.slugs import SlugAllocator
from listingkit.core.services.submissions import CompanySubmissions
from listingkit.core.services.votes import VoteService
from listingkit.infrastructure.backends.memory import InMemoryCacheBackend
from listingkit.infrastructure.remote.postgrest import PostgrestClient

logger = logging.getLogger(__name__)


class Directory:
    """Entry point holding every service of the directory app.

    All services share the same remote client and cache, so an
    invalidation issued by one (e.g. a vote clearing the company
    lists) is seen by every other.

    Example:
        async with Directory.from_settings() as directory:
            view = directory.list_view(COMPANIES_SOURCE)
            await view.set_filters(sort="a-z")
    """

    def __init__(
        self,
        client: IRemoteClient,
        cache: CacheService | None = None,
        config: CacheConfig | None = None,
    ) -> None:
        self.client = client
        self.cache = cache or CacheService(
            InMemoryCacheBackend(maxsize=(config or CacheConfig()).max_size),
            config=config,
        )

        self.composer = ListQueryComposer(client, self.cache)
        self.points = PointsAwarder(client)
        self.ratings = RatingService(client, self.cache)
        self.votes = VoteService(client, self.cache, self.ratings, self.points)
        self.details = DetailLoader(client, self.cache, self.ratings, self.votes)
        self.submissions = CompanySubmissions(
            client, self.cache, self.points, SlugAllocator(client)
        )
        self.reference = ReferenceData(client, self.cache)

    @classmethod
    def from_settings(
        cls,
        settings: RemoteSettings | None = None,
        config: CacheConfig | None = None,
    ) -> "Directory":
        """Build a directory talking to the configured backend.

        A Redis cache is used when ``redis_url`` is set, otherwise the
        in-process cache.
        """
        if settings is None:
            from listingkit.config import get_settings

            settings = get_settings()
        config = config or CacheConfig()
        logging.getLogger("listingkit").setLevel(settings.log_level.upper())

        backend: ICacheBackend
        if settings.redis_url:
            from listingkit.infrastructure.backends.redis import RedisCacheBackend

            backend = RedisCacheBackend(settings.redis_url)
            logger.info("Using Redis cache backend")
        else:
            backend = InMemoryCacheBackend(maxsize=config.max_size)

        return cls(PostgrestClient(settings), CacheService(backend, config=config))

    def list_view(
        self,
        source: ListSource,
        notify: Notifier | None = None,
        query: ListQuery | None = None,
    ) -> ListView:
        """Create the view state for one list page."""
        return ListView(self.composer, self.resolve(source), notify=notify, query=query)

    def resolve(self, source: ListSource) -> ListSource:
        """Attach the rating enricher to sources whose rows need it."""
        if source.needs_ratings and source.enricher is None:
            return source.with_enricher(self.ratings.enrich)
        return source

    async def close(self) -> None:
        """Wait for background writes and release connections."""
        await self.details.drain()
        close = getattr(self.client, "close", None)
        if close is not None:
            await close()
        backend_close = getattr(self.cache.backend, "close", None)
        if backend_close is not None:
            await backend_close()

    async def __aenter__(self) -> "Directory":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
