"""Tests for DetailLoader and fetch_single."""

from collections.abc import Callable
from typing import Any

import pytest
from fakes import FakeRemoteClient

from listingkit.core.entities.query import Filter, QueryRequest
from listingkit.core.entities.votes import RatingSummary
from listingkit.core.exceptions import NotFoundError, RemoteError
from listingkit.core.services.cache_service import CacheService
from listingkit.core.services.details import DetailLoader, fetch_single


@pytest.fixture
def detail_client(
    client: FakeRemoteClient, make_rows: Callable[..., list[dict[str, Any]]]
) -> FakeRemoteClient:
    client.tables["mlm_companies"] = make_rows(3)
    client.tables["company_votes"] = []
    client.procedures["get_company_rating"] = [{"average_rating": 4.5, "total_votes": 2}]
    client.procedures["get_company_vote_count"] = 2
    return client


@pytest.fixture
def loader(detail_client: FakeRemoteClient, cache: CacheService) -> DetailLoader:
    return DetailLoader(detail_client, cache)


class TestFetchSingle:
    """Tests for fetch_single."""

    @pytest.mark.asyncio
    async def test_found(self, detail_client: FakeRemoteClient) -> None:
        row = await fetch_single(
            detail_client, "mlm_companies", QueryRequest().where(Filter.eq("id", 2))
        )

        assert row["name"] == "Company 02"

    @pytest.mark.asyncio
    async def test_missing(self, detail_client: FakeRemoteClient) -> None:
        with pytest.raises(NotFoundError):
            await fetch_single(
                detail_client, "mlm_companies", QueryRequest().where(Filter.eq("id", 99))
            )


class TestDetailLoader:
    """Tests for DetailLoader.load_company."""

    @pytest.mark.asyncio
    async def test_loads_company_with_aggregates(
        self, loader: DetailLoader, detail_client: FakeRemoteClient
    ) -> None:
        outcome = await loader.load_company("united-states", "company-01")
        await loader.drain()

        assert outcome.found
        assert outcome.record["name"] == "Company 01"
        assert outcome.extras["rating"] == RatingSummary(4.5, 2)
        assert outcome.extras["vote_count"] == 2
        assert outcome.extras["reviews"] == []
        assert "eligibility" not in outcome.extras
        assert ("call", "increment_company_views", {"slug_or_id": "company-01"}) in (
            detail_client.calls
        )

    @pytest.mark.asyncio
    async def test_company_is_cached(
        self, loader: DetailLoader, detail_client: FakeRemoteClient
    ) -> None:
        await loader.load_company("united-states", "company-01")
        await loader.load_company("united-states", "company-01")
        await loader.drain()

        assert detail_client.count("query", "mlm_companies") == 1
        assert detail_client.count("call", "increment_company_views") == 2

    @pytest.mark.asyncio
    async def test_not_found_redirects(self, loader: DetailLoader) -> None:
        outcome = await loader.load_company("united-states", "nope")

        assert not outcome.found
        assert outcome.redirect_to == "/companies"
        assert outcome.message == "Company not found"

    @pytest.mark.asyncio
    async def test_remote_error_redirects(
        self, loader: DetailLoader, detail_client: FakeRemoteClient
    ) -> None:
        detail_client.errors["mlm_companies"] = RemoteError("x", code="PGRST200")

        outcome = await loader.load_company("united-states", "company-01")

        assert outcome.redirect_to == "/companies"
        assert outcome.message == "Database query error. Please try again."

    @pytest.mark.asyncio
    async def test_wrong_country_redirects_to_canonical(
        self, loader: DetailLoader, detail_client: FakeRemoteClient
    ) -> None:
        outcome = await loader.load_company("canada", "company-01")
        await loader.drain()

        assert outcome.redirect_to == "/company/united-states/company-01"
        assert outcome.record is not None
        assert detail_client.count("call", "increment_company_views") == 0

    @pytest.mark.asyncio
    async def test_logged_in_user_extras(self, loader: DetailLoader) -> None:
        outcome = await loader.load_company("united-states", "company-01", user_id="user-1")
        await loader.drain()

        assert outcome.extras["eligibility"].can_vote is True
        assert outcome.extras["user_rating"].rating == 0

    @pytest.mark.asyncio
    async def test_failed_aggregate_is_skipped(
        self, loader: DetailLoader, detail_client: FakeRemoteClient
    ) -> None:
        detail_client.errors["get_company_rating"] = RemoteError("timeout")

        outcome = await loader.load_company("united-states", "company-01")
        await loader.drain()

        assert outcome.found
        assert "rating" not in outcome.extras
        assert outcome.extras["vote_count"] == 2

    @pytest.mark.asyncio
    async def test_view_count_failure_is_logged(
        self, loader: DetailLoader, detail_client: FakeRemoteClient
    ) -> None:
        detail_client.errors["increment_company_views"] = RemoteError("denied")

        outcome = await loader.load_company("united-states", "company-01")
        await loader.drain()

        assert outcome.found
