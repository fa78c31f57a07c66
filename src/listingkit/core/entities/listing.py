"""Listing query and result entities."""

import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")

Record = dict[str, Any]
Enricher = Callable[[list[Record]], Awaitable[list[Record]]]


class SortMode(str, Enum):
    """Global orderings offered by list pages."""

    NEWEST = "newest"
    ALPHABETICAL = "a-z"
    TOP_REVIEW = "top-review"
    PREMIUM = "premium"


@dataclass(frozen=True)
class ListQuery:
    """Filters, sort and page requested by a list page.

    ``country`` and ``category`` use ``None`` (or ``"all"`` or ``""``)
    for no filter. Pages are 1-based.
    """

    country: str | None = None
    category: str | None = None
    search: str = ""
    sort: SortMode = SortMode.NEWEST
    page: int = 1
    page_size: int | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page numbers start at 1")
        if self.page_size is not None and self.page_size <= 0:
            raise ValueError("page_size must be positive")
        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "sort", SortMode(self.sort))
        object.__setattr__(self, "search", (self.search or "").strip())
        for name in ("country", "category"):
            if getattr(self, name) in ("all", ""):
                object.__setattr__(self, name, None)

    def with_page(self, page: int) -> "ListQuery":
        """Return the same filters at another page."""
        return replace(self, page=page)

    def with_filters(self, **changes: Any) -> "ListQuery":
        """Return new filters, starting again from page 1."""
        return replace(self, page=1, **changes)

    @property
    def filter_signature(self) -> tuple[Any, ...]:
        """Everything except the page, used to detect filter changes."""
        return (
            self.country,
            self.category,
            self.search,
            self.sort,
            self.page_size,
            self.created_from,
            self.created_to,
        )


@dataclass
class PagedResult(Generic[T]):
    """One page of a globally sorted collection."""

    items: list[T]
    total_count: int
    page: int
    page_size: int
    from_cache: bool = False

    @property
    def total_pages(self) -> int:
        """Number of pages; an empty collection still has zero pages."""
        return math.ceil(self.total_count / self.page_size) if self.page_size else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


@dataclass
class ListSource:
    """Describes how one kind of list page reads its remote collection.

    Attributes:
        family: Cache key family, e.g. ``companies``.
        collection: Remote table name.
        select: Column list, including embedded joins.
        base_filters: Conditions every row must meet (e.g. approved status).
        filter_columns: Maps ``country``/``category`` to remote columns.
        search_columns: Remote columns searched with ILIKE, OR-combined.
        client_search_fields: Flattened fields searched locally after fetch.
        flatten: Maps display field to a dotted path into joined data.
        page_size: Default page size for the list.
        ttl: How long the sorted set stays cached. Defaults to the
            configured listings TTL.
        enricher: Optional coroutine adding derived fields to rows.
        remote_rank_column: Column used for top-review ordering when
            the composer pages remotely.
        needs_ratings: Rows carry company ratings and vote counts;
            ``Directory`` attaches its rating enricher when no other
            enricher is set.
    """

    family: str
    collection: str
    select: str = "*"
    base_filters: dict[str, Any] = field(default_factory=dict)
    filter_columns: dict[str, str] = field(default_factory=dict)
    search_columns: tuple[str, ...] = ()
    client_search_fields: tuple[str, ...] = ()
    flatten: dict[str, str] = field(default_factory=dict)
    page_size: int = 24
    ttl: timedelta | None = None
    enricher: Enricher | None = None
    created_column: str = "created_at"
    remote_rank_column: str | None = None
    needs_ratings: bool = False

    def with_enricher(self, enricher: Enricher | None) -> "ListSource":
        """Return a copy using ``enricher``."""
        return replace(self, enricher=enricher)
