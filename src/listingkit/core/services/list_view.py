"""View state for a list page."""

import itertools
import logging
from collections.abc import Callable
from typing import Any

from listingkit.core.entities.listing import ListQuery, ListSource, Record
from listingkit.core.exceptions import RemoteError, describe_error
from listingkit.core.services.list_composer import ListQueryComposer

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]


class ListView:
    """Holds what a list page shows and keeps it consistent.

    Every load is tagged with a generation number. When loads overlap
    (the user changes filters before the previous response arrives),
    only the latest one may update the state; earlier responses and
    errors are discarded. A failed load leaves the previously shown
    rows in place and reports a message through ``notify``.
    """

    def __init__(
        self,
        composer: ListQueryComposer,
        source: ListSource,
        notify: Notifier | None = None,
        query: ListQuery | None = None,
    ) -> None:
        self._composer = composer
        self._source = source
        self._notify = notify
        self._generation = itertools.count(1)
        self._latest = 0

        self.query = query or ListQuery()
        self.items: list[Record] = []
        self.total_count = 0
        self.loading = False
        self.error: str | None = None

    @property
    def page(self) -> int:
        return self.query.page

    @property
    def page_size(self) -> int:
        return self.query.page_size or self._source.page_size

    async def load(self, query: ListQuery | None = None) -> bool:
        """Load ``query`` (or reload the current one).

        Returns:
            True if this load updated the state, False if it failed or
            was superseded by a newer load.
        """
        query = query or self.query
        generation = next(self._generation)
        self._latest = generation
        self.query = query
        self.loading = True

        try:
            result = await self._composer.compose(self._source, query)
        except RemoteError as e:
            if generation != self._latest:
                logger.debug("Dropping error from superseded load %d", generation)
                return False
            logger.error("Error loading %s: %s", self._source.family, e)
            self.error = describe_error(e, f"Error loading {self._source.family}")
            self.loading = False
            if self._notify is not None:
                self._notify(self.error)
            return False

        if generation != self._latest:
            logger.debug("Dropping stale response for load %d", generation)
            return False

        self.items = result.items
        self.total_count = result.total_count
        self.error = None
        self.loading = False
        return True

    async def set_filters(self, **changes: Any) -> bool:
        """Change filters or sort and load page 1."""
        return await self.load(self.query.with_filters(**changes))

    async def go_to_page(self, page: int) -> bool:
        """Load another page with the same filters."""
        return await self.load(self.query.with_page(page))

    async def retry(self) -> bool:
        """Re-issue the last load, e.g. after an error."""
        return await self.load(self.query)
