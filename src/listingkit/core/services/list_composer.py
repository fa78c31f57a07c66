"""List query composer - filtered, sorted, paginated views over a remote collection."""

import logging
from typing import Any

from listingkit.core.entities.cache_config import CacheConfig
from listingkit.core.entities.listing import (
    ListQuery,
    ListSource,
    PagedResult,
    Record,
)
from listingkit.core.entities.query import Filter, FilterOp, QueryRequest
from listingkit.core.interfaces.key_builder import IKeyBuilder
from listingkit.core.interfaces.remote_client import IRemoteClient
from listingkit.core.services.cache_service import CacheService
from listingkit.core.services.pagination import paginate
from listingkit.core.services.sorting import remote_ordering, sort_records

logger = logging.getLogger(__name__)


class ListQueryComposer:
    """Produces one page of a globally sorted remote collection.

    On a miss the composer counts the matching rows, fetches the whole
    matching set, flattens joined fields, applies the client-side
    search over derived fields, enriches and sorts the rows, caches
    the full sorted set and slices out the requested page. Further
    pages with the same filters are served from the cache without any
    remote call.

    Sets larger than ``CacheConfig.max_materialized`` are not fetched
    whole; the page is read remotely with the closest ordering the
    store supports and only that page is cached.

    Remote errors propagate unchanged; nothing is cached for a failed
    composition.
    """

    def __init__(
        self,
        client: IRemoteClient,
        cache: CacheService,
        key_builder: IKeyBuilder | None = None,
        config: CacheConfig | None = None,
    ) -> None:
        """Initialize the composer.

        Args:
            client: Remote backend client.
            cache: Cache shared with the rest of the application.
            key_builder: Builder for list keys. Defaults to the cache's.
            config: Cache configuration. Defaults to the cache's.
        """
        self._client = client
        self._cache = cache
        self._keys = key_builder or cache.keys
        self._config = config or cache.config

    async def compose(self, source: ListSource, query: ListQuery) -> PagedResult[Record]:
        """Return the requested page and the total count.

        Args:
            source: Which collection to read and how.
            query: Active filters, sort and page.

        Returns:
            The page of rows with the total number of matching rows.

        Raises:
            RemoteError: If the count or data query fails.
        """
        page_size = query.page_size or source.page_size
        key = self._keys.list_key(source.family, query)

        cached = await self._cache.get(key)
        if cached is not None:
            logger.debug("Serving %s page %d from cache", key, query.page)
            return PagedResult(
                items=paginate(cached["items"], query.page, page_size),
                total_count=cached["total_count"],
                page=query.page,
                page_size=page_size,
                from_cache=True,
            )

        page_key = self._keys.page_key(source.family, query)
        cached_page = await self._cache.get(page_key)
        if cached_page is not None:
            return PagedResult(
                items=cached_page["items"],
                total_count=cached_page["total_count"],
                page=query.page,
                page_size=page_size,
                from_cache=True,
            )

        count_result = await self._client.query(
            source.collection, self.build_request(source, query, head=True)
        )
        remote_count = count_result.count or 0

        if remote_count > self._config.max_materialized:
            logger.info(
                "%s matched %d rows (cap %d); paging remotely",
                source.collection,
                remote_count,
                self._config.max_materialized,
            )
            return await self._compose_remote_page(source, query, page_size, remote_count)

        data_result = await self._client.query(
            source.collection, self.build_request(source, query)
        )
        rows = await self._post_process(source, query, data_result.rows)
        ordered = sort_records(rows, query.sort, created_field=source.created_column)

        if len(ordered) != remote_count:
            logger.debug(
                "%s: remote count %d, %d rows after local filtering",
                source.collection,
                remote_count,
                len(ordered),
            )

        await self._cache.set(
            key,
            {"items": ordered, "total_count": len(ordered)},
            source.ttl or self._config.listings_ttl,
        )

        return PagedResult(
            items=paginate(ordered, query.page, page_size),
            total_count=len(ordered),
            page=query.page,
            page_size=page_size,
        )

    def build_request(
        self, source: ListSource, query: ListQuery, head: bool = False
    ) -> QueryRequest:
        """Build the remote request for ``query`` without pagination.

        Args:
            source: The list source.
            query: Active filters.
            head: Build a count-only request.

        Returns:
            The request; count and data requests share every filter.
        """
        request = QueryRequest(
            select="*" if head else source.select,
            count=head,
            head=head,
        )

        for column, value in source.base_filters.items():
            request.where(Filter.eq(column, value))

        for name in ("country", "category"):
            value = getattr(query, name)
            column = source.filter_columns.get(name)
            if value is not None and column:
                request.where(Filter.eq(column, value))

        if query.search and source.search_columns:
            request.where_any(
                *(Filter.ilike(column, query.search) for column in source.search_columns)
            )

        if query.created_from is not None:
            request.where(
                Filter(source.created_column, FilterOp.GTE, query.created_from.isoformat())
            )
        if query.created_to is not None:
            request.where(
                Filter(source.created_column, FilterOp.LTE, query.created_to.isoformat())
            )

        return request

    async def _compose_remote_page(
        self,
        source: ListSource,
        query: ListQuery,
        page_size: int,
        total_count: int,
    ) -> PagedResult[Record]:
        request = self.build_request(source, query)
        request.order.extend(
            remote_ordering(
                query.sort,
                created_field=source.created_column,
                rank_field=source.remote_rank_column,
            )
        )
        request.paginate((query.page - 1) * page_size, page_size)

        result = await self._client.query(source.collection, request)
        # Remote order is kept; the page is not re-sorted locally
        rows = await self._post_process(source, query, result.rows)

        await self._cache.set(
            self._keys.page_key(source.family, query),
            {"items": rows, "total_count": total_count},
            source.ttl or self._config.listings_ttl,
        )

        return PagedResult(
            items=rows,
            total_count=total_count,
            page=query.page,
            page_size=page_size,
        )

    async def _post_process(
        self, source: ListSource, query: ListQuery, rows: list[Record]
    ) -> list[Record]:
        records = [flatten_record(row, source.flatten) for row in rows]
        if query.search and source.client_search_fields:
            records = filter_by_search(records, query.search, source.client_search_fields)
        if source.enricher is not None and records:
            records = await source.enricher(records)
        return records


def flatten_record(record: Record, mapping: dict[str, str]) -> Record:
    """Copy ``record`` adding flat display fields for joined data.

    Args:
        record: A row as returned by the remote store.
        mapping: Display field to dotted path, e.g.
            ``{"category_name": "category_info.name"}``.

    Returns:
        A new dict with each display field set (None when the path is
        missing). One-element join arrays are unwrapped on the way.
    """
    flat = dict(record)
    for field_name, path in mapping.items():
        flat[field_name] = _resolve(record, path)
    return flat


def filter_by_search(
    records: list[Record], term: str, fields: tuple[str, ...]
) -> list[Record]:
    """Keep records where any of ``fields`` contains ``term``, ignoring case."""
    needle = term.strip().lower()
    if not needle:
        return records
    return [
        record
        for record in records
        if any(needle in str(record.get(name) or "").lower() for name in fields)
    ]


def _resolve(value: Any, path: str) -> Any:
    for part in path.split("."):
        if isinstance(value, list):
            value = value[0] if value else None
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value
