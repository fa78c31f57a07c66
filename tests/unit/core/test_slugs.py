"""Tests for slug generation and allocation."""

import pytest
from fakes import FakeRemoteClient

from listingkit.core.exceptions import ConflictError, RemoteError, ValidationError
from listingkit.core.services.slugs import SlugAllocator, slugify


class TestSlugify:
    """Tests for slugify."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Acme & Co.  -- Ltd!", "acme-co-ltd"),
            ("  Hello World  ", "hello-world"),
            ("Already-a-slug", "already-a-slug"),
            ("Ünïcode Brand", "ncode-brand"),
            ("2024 Top 10", "2024-top-10"),
            ("--Edge--", "edge"),
            ("!!!", ""),
        ],
    )
    def test_slugify(self, name: str, expected: str) -> None:
        assert slugify(name) == expected


class TestSlugAllocator:
    """Tests for SlugAllocator."""

    @pytest.fixture
    def companies(self, client: FakeRemoteClient) -> FakeRemoteClient:
        client.tables["mlm_companies"] = []
        client.unique["mlm_companies"] = ("slug",)
        return client

    @pytest.mark.asyncio
    async def test_first_insert_uses_base_slug(self, companies: FakeRemoteClient) -> None:
        allocator = SlugAllocator(companies)

        row = await allocator.insert_unique("mlm_companies", {"name": "Acme"})

        assert row["slug"] == "acme"
        assert companies.count("query") == 0

    @pytest.mark.asyncio
    async def test_conflicts_get_numeric_suffixes(
        self, companies: FakeRemoteClient
    ) -> None:
        """Test acme, acme-1, acme-2 for three companies named Acme."""
        allocator = SlugAllocator(companies)

        slugs = [
            (await allocator.insert_unique("mlm_companies", {"name": "Acme"}))["slug"]
            for _ in range(3)
        ]

        assert slugs == ["acme", "acme-1", "acme-2"]

    @pytest.mark.asyncio
    async def test_probe_skips_taken_suffixes(self, companies: FakeRemoteClient) -> None:
        """Test that probing continues past suffixes already in use."""
        companies.tables["mlm_companies"] = [
            {"id": 1, "slug": "acme"},
            {"id": 2, "slug": "acme-1"},
            {"id": 3, "slug": "acme-2"},
        ]
        allocator = SlugAllocator(companies)

        row = await allocator.insert_unique("mlm_companies", {"name": "ACME"})

        assert row["slug"] == "acme-3"

    @pytest.mark.asyncio
    async def test_lost_race_resumes_probing(self, client: FakeRemoteClient) -> None:
        """Test that a conflict on the retried insert moves to the next suffix."""
        client.tables["mlm_companies"] = [{"id": 1, "slug": "acme"}]
        client.unique["mlm_companies"] = ("slug",)
        allocator = SlugAllocator(client)

        original_exists = allocator.exists

        async def racing_exists(collection: str, slug: str) -> bool:
            free = not await original_exists(collection, slug)
            if free and slug == "acme-1":
                # Another writer takes acme-1 between the probe and the insert
                client.tables["mlm_companies"].append({"id": 99, "slug": "acme-1"})
            return not free

        allocator.exists = racing_exists  # type: ignore[method-assign]

        row = await allocator.insert_unique("mlm_companies", {"name": "Acme"})

        assert row["slug"] == "acme-2"

    @pytest.mark.asyncio
    async def test_empty_slug_is_rejected(self, companies: FakeRemoteClient) -> None:
        allocator = SlugAllocator(companies)

        with pytest.raises(ValidationError):
            await allocator.insert_unique("mlm_companies", {"name": "!!!"})
        assert companies.calls == []

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, companies: FakeRemoteClient) -> None:
        companies.errors["mlm_companies"] = RemoteError("permission denied", code="42501")
        allocator = SlugAllocator(companies)

        with pytest.raises(RemoteError):
            await allocator.insert_unique("mlm_companies", {"name": "Acme"})

    @pytest.mark.asyncio
    async def test_conflict_on_other_column_propagates(self, client: FakeRemoteClient) -> None:
        """Test that a clash on a unique name is not retried as a slug clash."""
        client.tables["mlm_companies"] = [{"id": 1, "name": "Acme", "slug": "acme-inc"}]
        client.unique["mlm_companies"] = ("slug", "name")
        allocator = SlugAllocator(client)

        with pytest.raises(ConflictError):
            await allocator.insert_unique("mlm_companies", {"name": "Acme"})

        assert client.count("insert") == 1
        assert client.count("query") == 1
