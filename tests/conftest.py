"""Pytest configuration for listingkit tests."""

from collections.abc import Callable
from typing import Any

import pytest
from fakes import FakeClock, FakeRemoteClient

from listingkit.core.entities.cache_config import CacheConfig
from listingkit.core.services.cache_service import CacheService
from listingkit.infrastructure.backends.memory import InMemoryCacheBackend


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend(clock: FakeClock) -> InMemoryCacheBackend:
    return InMemoryCacheBackend(maxsize=100, timer=clock)


@pytest.fixture
def cache(backend: InMemoryCacheBackend) -> CacheService:
    return CacheService(backend=backend, config=CacheConfig())


@pytest.fixture
def client() -> FakeRemoteClient:
    return FakeRemoteClient()


@pytest.fixture
def make_rows() -> Callable[..., list[dict[str, Any]]]:
    """Build ``n`` approved company rows with distinct names and dates."""

    def factory(n: int, **overrides: Any) -> list[dict[str, Any]]:
        return [
            {
                "id": i,
                "name": f"Company {i:02d}",
                "description": f"Description of company {i}",
                "country": "US",
                "country_name": "United States",
                "category": "beauty",
                "status": "approved",
                "slug": f"company-{i:02d}",
                "created_at": f"2024-01-{(i % 28) + 1:02d}T{i % 24:02d}:00:00+00:00",
                **overrides,
            }
            for i in range(1, n + 1)
        ]

    return factory


@pytest.fixture(autouse=True)
def reset_decorator_config():
    """Reset decorator configuration before each test."""
    import listingkit.decorators

    # Store original value
    original_service = listingkit.decorators._cache_service

    yield

    # Restore original value after test
    listingkit.decorators._cache_service = original_service
