"""Tests for InMemoryCacheBackend."""

import re
from datetime import timedelta

import pytest
from fakes import FakeClock

from listingkit.infrastructure.backends.memory import InMemoryCacheBackend

TTL = timedelta(minutes=5)


class TestInMemoryCacheBackend:
    """Tests for InMemoryCacheBackend."""

    @pytest.mark.asyncio
    async def test_set_and_get(self, backend: InMemoryCacheBackend) -> None:
        """Test basic set and get operations."""
        await backend.set("key1", {"rows": [1, 2]}, TTL)
        result = await backend.get("key1")
        assert result == {"rows": [1, 2]}

    @pytest.mark.asyncio
    async def test_get_missing_key(self, backend: InMemoryCacheBackend) -> None:
        """Test getting a missing key returns None."""
        result = await backend.get("nonexistent")
        assert result is None

    @pytest.mark.asyncio
    async def test_set_overwrites(self, backend: InMemoryCacheBackend) -> None:
        """Test that set replaces an existing entry."""
        await backend.set("key1", "old", TTL)
        await backend.set("key1", "new", TTL)
        assert await backend.get("key1") == "new"

    @pytest.mark.asyncio
    async def test_delete(self, backend: InMemoryCacheBackend) -> None:
        """Test deleting a key."""
        await backend.set("key1", "value1", TTL)

        # Delete existing key
        deleted = await backend.delete("key1")
        assert deleted is True

        # Verify deleted
        result = await backend.get("key1")
        assert result is None

        # Delete non-existing key
        deleted = await backend.delete("key1")
        assert deleted is False

    @pytest.mark.asyncio
    async def test_exists(self, backend: InMemoryCacheBackend) -> None:
        """Test checking if key exists."""
        await backend.set("key1", "value1", TTL)

        assert await backend.exists("key1") is True
        assert await backend.exists("nonexistent") is False

    @pytest.mark.asyncio
    async def test_clear(self, backend: InMemoryCacheBackend) -> None:
        """Test clearing all keys."""
        await backend.set("key1", "value1", TTL)
        await backend.set("key2", "value2", TTL)
        await backend.set("key3", "value3", TTL)

        await backend.clear()

        assert await backend.get("key1") is None
        assert await backend.get("key2") is None
        assert await backend.get("key3") is None
        assert len(backend) == 0

    @pytest.mark.asyncio
    async def test_delete_pattern(self, backend: InMemoryCacheBackend) -> None:
        """Test deleting keys by anchored regex."""
        await backend.set("companies_US_all_all_newest", 1, TTL)
        await backend.set("companies_all_all_all_a-z", 2, TTL)
        await backend.set("classifieds_all_all_all_newest", 3, TTL)
        await backend.set("top_companies_all", 4, TTL)

        deleted = await backend.delete_pattern(re.compile("^companies_"))
        assert deleted == 2

        assert await backend.get("companies_US_all_all_newest") is None
        assert await backend.get("companies_all_all_all_a-z") is None
        assert await backend.get("classifieds_all_all_all_newest") == 3
        assert await backend.get("top_companies_all") == 4

    @pytest.mark.asyncio
    async def test_unanchored_pattern_matches_anywhere(
        self, backend: InMemoryCacheBackend
    ) -> None:
        """Test that patterns use search semantics."""
        await backend.set("companies_US", 1, TTL)
        await backend.set("top_companies", 2, TTL)

        assert await backend.delete_pattern(re.compile("companies")) == 2


class TestExpiry:
    """Tests for per-entry TTL with an injected clock."""

    @pytest.mark.asyncio
    async def test_entry_expires_after_its_ttl(
        self, backend: InMemoryCacheBackend, clock: FakeClock
    ) -> None:
        """Test that a get after the TTL misses."""
        await backend.set("k", "v", timedelta(seconds=60))

        clock.advance(59)
        assert await backend.get("k") == "v"

        clock.advance(2)
        assert await backend.get("k") is None

    @pytest.mark.asyncio
    async def test_entry_is_live_at_exact_expiry(
        self, backend: InMemoryCacheBackend, clock: FakeClock
    ) -> None:
        """Test that expiry is strictly after now + ttl."""
        await backend.set("k", "v", timedelta(seconds=60))

        clock.advance(60)
        assert await backend.get("k") == "v"

        clock.advance(0.001)
        assert await backend.get("k") is None

    @pytest.mark.asyncio
    async def test_ttl_is_per_entry(
        self, backend: InMemoryCacheBackend, clock: FakeClock
    ) -> None:
        """Test that entries with different TTLs expire independently."""
        await backend.set("rating", 4.5, timedelta(minutes=1))
        await backend.set("countries", ["US"], timedelta(hours=24))

        clock.advance(120)

        assert await backend.get("rating") is None
        assert await backend.get("countries") == ["US"]

    @pytest.mark.asyncio
    async def test_expired_entry_is_not_resurrected(
        self, backend: InMemoryCacheBackend, clock: FakeClock
    ) -> None:
        """Test lazy eviction removes the entry for good."""
        await backend.set("k", "v", timedelta(seconds=10))
        clock.advance(11)

        assert await backend.get("k") is None
        assert len(backend) == 0
        assert await backend.exists("k") is False
        assert await backend.get("k") is None

    @pytest.mark.asyncio
    async def test_expired_entries_are_not_counted_by_pattern_delete(
        self, backend: InMemoryCacheBackend, clock: FakeClock
    ) -> None:
        """Test that only live keys are reported as deleted."""
        await backend.set("companies_a", 1, timedelta(seconds=10))
        await backend.set("companies_b", 2, timedelta(seconds=100))
        clock.advance(50)

        assert await backend.delete_pattern(re.compile("^companies_")) == 1

    @pytest.mark.asyncio
    async def test_keys_lists_live_entries(
        self, backend: InMemoryCacheBackend, clock: FakeClock
    ) -> None:
        """Test keys() skips expired entries."""
        await backend.set("short", 1, timedelta(seconds=1))
        await backend.set("long", 2, timedelta(seconds=100))
        clock.advance(5)

        assert backend.keys() == ["long"]


class TestCapacity:
    """Tests for size-bounded eviction."""

    @pytest.mark.asyncio
    async def test_lru_eviction(self, clock: FakeClock) -> None:
        """Test LRU eviction when maxsize is reached."""
        backend = InMemoryCacheBackend(maxsize=3, timer=clock)

        await backend.set("key1", "value1", TTL)
        await backend.set("key2", "value2", TTL)
        await backend.set("key3", "value3", TTL)

        # Access key1 to make it recently used
        await backend.get("key1")

        # Add key4, should evict key2 (least recently used)
        await backend.set("key4", "value4", TTL)

        assert await backend.get("key1") == "value1"
        assert await backend.get("key2") is None
        assert await backend.get("key3") == "value3"
        assert await backend.get("key4") == "value4"

    @pytest.mark.asyncio
    async def test_expired_entries_evicted_before_lru(self, clock: FakeClock) -> None:
        """Test that an expired entry makes room before a live one is evicted."""
        backend = InMemoryCacheBackend(maxsize=2, timer=clock)

        await backend.set("old", 1, TTL)
        await backend.set("short", 2, timedelta(seconds=1))
        clock.advance(5)

        await backend.set("new", 3, TTL)

        assert await backend.get("old") == 1
        assert await backend.get("new") == 3

    def test_unbounded(self) -> None:
        """Test that maxsize None means no bound."""
        backend = InMemoryCacheBackend(maxsize=None)
        assert backend.maxsize is None
        assert len(backend) == 0
