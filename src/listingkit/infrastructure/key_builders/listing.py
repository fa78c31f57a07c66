"""Key builder for listing families."""

import re
from typing import Any

from listingkit.core.entities.cache_key import ListCacheKey, family_pattern
from listingkit.core.entities.listing import ListQuery
from listingkit.utils.hashing import hash_value, normalize_search

# Entity families
COMPANIES = "companies"
CLASSIFIEDS = "classifieds"
NEWS = "news"
DIRECT_SELLERS = "direct_sellers"
COMPANY = "company"
COMPANY_RATING = "company_rating"
COMPANY_VOTE_COUNT = "company_vote_count"
COMPANY_REVIEWS = "company_reviews"
COUNTRIES = "countries"
CATEGORIES = "categories"
FUNCTION = "fn"


class ListingKeyBuilder:
    """Builds every cache key used by listingkit.

    List keys have the shape
    ``<family>_<country>_<category>_<search>_<sort>[_<range>]``. A search
    term is prefixed with ``s`` so it never renders as the ``all``
    wildcard. Entity keys are ``<family>_<id>``. Keeping both in one
    place means ``family_pattern(family)`` always matches what was
    written.
    """

    def list_key(self, family: str, query: ListQuery) -> ListCacheKey:
        """Build the key for a sorted, filtered list (page excluded).

        Args:
            family: Entity family, e.g. ``companies``.
            query: Active filters and sort.

        Returns:
            The cache key for the full sorted set.
        """
        parts: list[Any] = [
            query.country,
            query.category,
            _search_part(query.search),
            query.sort,
        ]
        if query.page_size is not None:
            parts.append(f"n{query.page_size}")
        if query.created_from is not None or query.created_to is not None:
            parts.append(
                hash_value(
                    [
                        query.created_from and query.created_from.isoformat(),
                        query.created_to and query.created_to.isoformat(),
                    ]
                )
            )
        return ListCacheKey.from_components(family, *parts)

    def page_key(self, family: str, query: ListQuery) -> ListCacheKey:
        """Build the key for a single remotely paged page.

        Args:
            family: Entity family.
            query: Active filters, sort and page.

        Returns:
            The list key extended with the page number.
        """
        base = self.list_key(family, query)
        return ListCacheKey(base.family, (*base.parts, f"p{query.page}"))

    def entity_key(self, family: str, *parts: Any) -> ListCacheKey:
        """Build the key for a single entity or aggregate."""
        return ListCacheKey.from_components(family, *parts)

    def company(self, slug: str) -> ListCacheKey:
        return self.entity_key(COMPANY, slug)

    def company_rating(self, company_id: Any) -> ListCacheKey:
        return self.entity_key(COMPANY_RATING, company_id)

    def company_vote_count(self, company_id: Any) -> ListCacheKey:
        return self.entity_key(COMPANY_VOTE_COUNT, company_id)

    def company_reviews(self, company_id: Any) -> ListCacheKey:
        return self.entity_key(COMPANY_REVIEWS, company_id)

    def countries(self) -> ListCacheKey:
        return self.entity_key(COUNTRIES, "list")

    def categories(self, kind: str) -> ListCacheKey:
        return self.entity_key(CATEGORIES, kind)

    def build_function_key(
        self,
        module: str,
        name: str,
        kwargs: dict[str, Any] | None = None,
        subject: Any | None = None,
    ) -> ListCacheKey:
        """Build the default key for a cached coroutine call.

        Args:
            module: Module of the decorated function.
            name: Function name.
            kwargs: Keyword arguments of the call.
            subject: First positional argument, identified by its ``id``
                when it has one.

        Returns:
            A key in the ``fn`` family.
        """
        parts: list[Any] = [module.split(".")[-1] if module else "default", name]

        if kwargs:
            parts.append(f"a{hash_value(kwargs)}")

        if subject is not None:
            if hasattr(subject, "id"):
                parts.append(f"p{subject.id}")
            elif isinstance(subject, dict) and "id" in subject:
                parts.append(f"p{subject['id']}")
            else:
                parts.append(f"p{hash_value(subject)}")

        return ListCacheKey.from_components(FUNCTION, *parts)

    @staticmethod
    def family_pattern(family: str) -> re.Pattern[str]:
        """Return the invalidation pattern for ``family``."""
        return family_pattern(family)


def _search_part(term: str) -> str | None:
    normalized = normalize_search(term)
    return f"s{normalized}" if normalized else None
