"""URL slug generation with uniqueness retry."""

import logging
import re
from typing import Any

from listingkit.core.entities.query import Filter, MutationOp, QueryRequest
from listingkit.core.exceptions import ConflictError, ValidationError
from listingkit.core.interfaces.remote_client import IRemoteClient

logger = logging.getLogger(__name__)

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def slugify(name: str) -> str:
    """Derive a URL slug from a display name.

    Lowercases, drops everything except ``a-z``, digits, whitespace
    and hyphens, turns whitespace runs into one hyphen, collapses
    hyphen runs and trims hyphens from both ends.

    >>> slugify("Acme & Co.  -- Ltd!")
    'acme-co-ltd'
    """
    slug = _DISALLOWED.sub("", name.lower())
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")


class SlugAllocator:
    """Inserts rows under a unique slug.

    The storage layer's unique constraint is the source of truth:
    the row is inserted with the base slug, and only a constraint
    violation on a slug that is really taken triggers probing
    ``base-1``, ``base-2``... for a free slug. A conflict on the
    retried insert (another writer won the race) resumes probing after
    the suffix that just failed. A conflict on any other unique column
    propagates.
    """

    def __init__(self, client: IRemoteClient, slug_field: str = "slug") -> None:
        self._client = client
        self._slug_field = slug_field

    async def insert_unique(
        self,
        collection: str,
        payload: dict[str, Any],
        source_field: str = "name",
    ) -> dict[str, Any]:
        """Insert ``payload`` with a unique slug derived from ``source_field``.

        Args:
            collection: Remote table with a unique slug column.
            payload: Row to insert; its slug (if any) is replaced.
            source_field: Field the slug is derived from.

        Returns:
            The inserted row as stored.

        Raises:
            ValidationError: If no slug can be derived from the name.
            ConflictError: If a unique constraint other than the slug
                column is violated.
            RemoteError: For any other remote failure.
        """
        base = slugify(str(payload.get(source_field) or ""))
        if not base:
            raise ValidationError(
                f"{source_field} must contain letters or digits", field=source_field
            )

        slug = base
        suffix = 0
        while True:
            try:
                rows = await self._client.mutate(
                    collection,
                    MutationOp.INSERT,
                    {**payload, self._slug_field: slug},
                )
                return rows[0] if rows else {**payload, self._slug_field: slug}
            except ConflictError:
                # Another unique column clashed; a new slug would not help
                if not await self.exists(collection, slug):
                    raise
                logger.info("Slug %r already taken in %s", slug, collection)
                slug, suffix = await self.next_free(collection, base, suffix + 1)

    async def next_free(self, collection: str, base: str, start: int = 1) -> tuple[str, int]:
        """Probe ``base-<n>`` from ``start`` upward until one is unused.

        Returns:
            The free slug and its numeric suffix.
        """
        suffix = start
        while True:
            candidate = f"{base}-{suffix}"
            if not await self.exists(collection, candidate):
                return candidate, suffix
            suffix += 1

    async def exists(self, collection: str, slug: str) -> bool:
        """Check whether any row in ``collection`` already uses ``slug``."""
        request = QueryRequest(select="id", count=True, head=True).where(
            Filter.eq(self._slug_field, slug)
        )
        result = await self._client.query(collection, request)
        return bool(result.count)
