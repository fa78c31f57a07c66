"""Tests for cache decorators."""

from datetime import timedelta

import pytest
from fakes import FakeClock

from listingkit import CacheConfig, CacheService, InMemoryCacheBackend
from listingkit.decorators import cached, configure, get_cache_service, invalidates


@pytest.fixture
def cache_service(clock: FakeClock) -> CacheService:
    """Create and configure a cache service for testing."""
    backend = InMemoryCacheBackend(maxsize=100, timer=clock)
    config = CacheConfig(default_ttl=timedelta(minutes=5))

    service = CacheService(backend=backend, config=config)

    configure(service)
    return service


class TestCachedDecorator:
    """Tests for @cached decorator."""

    @pytest.mark.asyncio
    async def test_cached_function(self, cache_service: CacheService) -> None:
        """Test that @cached caches function results."""
        call_count = 0

        @cached()
        async def blog_posts(category: str) -> list[dict]:
            nonlocal call_count
            call_count += 1
            return [{"title": "Hello", "category": category}]

        # First call - should execute function
        result1 = await blog_posts(category="tips")
        assert result1 == [{"title": "Hello", "category": "tips"}]
        assert call_count == 1

        # Second call - should return cached result
        result2 = await blog_posts(category="tips")
        assert result2 == result1
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_cached_different_args(self, cache_service: CacheService) -> None:
        """Test that different args create different cache entries."""
        call_count = 0

        @cached()
        async def related(category: str) -> list[str]:
            nonlocal call_count
            call_count += 1
            return [category]

        await related(category="a")
        await related(category="b")
        await related(category="a")

        assert call_count == 2

    @pytest.mark.asyncio
    async def test_cached_with_ttl(
        self, cache_service: CacheService, clock: FakeClock
    ) -> None:
        """Test @cached with custom TTL."""
        call_count = 0

        @cached(ttl=timedelta(seconds=10))
        async def headline() -> str:
            nonlocal call_count
            call_count += 1
            return "news"

        await headline()
        clock.advance(5)
        await headline()
        assert call_count == 1

        clock.advance(6)
        await headline()
        assert call_count == 2

    @pytest.mark.asyncio
    async def test_custom_key_template(self, cache_service: CacheService) -> None:
        """Test {arg} interpolation, including positional arguments."""

        @cached(key="blog_posts_{category}")
        async def blog_posts(category: str) -> list[str]:
            return ["post"]

        await blog_posts("tips")

        assert await cache_service.get("blog_posts_tips") == ["post"]

    @pytest.mark.asyncio
    async def test_custom_key_callable(self, cache_service: CacheService) -> None:
        @cached(key=lambda slug: f"related_{slug}")
        async def related(slug: str) -> list[str]:
            return ["other"]

        await related("acme")

        assert await cache_service.get("related_acme") == ["other"]

    @pytest.mark.asyncio
    async def test_none_is_not_cached(self, cache_service: CacheService) -> None:
        call_count = 0

        @cached()
        async def maybe() -> None:
            nonlocal call_count
            call_count += 1
            return None

        await maybe()
        await maybe()

        assert call_count == 2

    @pytest.mark.asyncio
    async def test_not_configured(self) -> None:
        """Test that functions run uncached without a service."""
        configure(None)
        call_count = 0

        @cached()
        async def load() -> int:
            nonlocal call_count
            call_count += 1
            return 1

        await load()
        await load()

        assert call_count == 2
        assert get_cache_service() is None


class TestInvalidatesDecorator:
    """Tests for @invalidates decorator."""

    @pytest.mark.asyncio
    async def test_invalidates_keys_and_families(
        self, cache_service: CacheService
    ) -> None:
        await cache_service.set("company_acme", {"id": 1})
        await cache_service.set("companies_all_all_all_newest", {"items": []})
        await cache_service.set("news_all_all_all_newest", {"items": []})

        @invalidates(keys=["company_{slug}"], families=["companies"])
        async def approve(slug: str) -> str:
            return slug

        assert await approve("acme") == "acme"

        assert await cache_service.get("company_acme") is None
        assert await cache_service.get("companies_all_all_all_newest") is None
        assert await cache_service.get("news_all_all_all_newest") == {"items": []}

    @pytest.mark.asyncio
    async def test_failed_mutation_keeps_cache(self, cache_service: CacheService) -> None:
        await cache_service.set("company_acme", {"id": 1})

        @invalidates(keys=["company_{slug}"])
        async def approve(slug: str) -> None:
            raise RuntimeError("write failed")

        with pytest.raises(RuntimeError):
            await approve(slug="acme")

        assert await cache_service.get("company_acme") == {"id": 1}
