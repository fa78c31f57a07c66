"""Domain services for listingkit."""

from listingkit.core.services.cache_service import CacheService
from listingkit.core.services.details import DetailLoader, fetch_single
from listingkit.core.services.list_composer import (
    ListQueryComposer,
    filter_by_search,
    flatten_record,
)
from listingkit.core.services.list_view import ListView
from listingkit.core.services.pagination import page_bounds, paginate, total_pages
from listingkit.core.services.points import PointsAwarder
from listingkit.core.services.ratings import RatingService
from listingkit.core.services.reference import ReferenceData
from listingkit.core.services.slugs import SlugAllocator, slugify
from listingkit.core.services.sorting import remote_ordering, sort_records
from listingkit.core.services.submissions import CompanySubmissions
from listingkit.core.services.votes import VoteService

__all__ = [
    "CacheService",
    # Lists
    "ListQueryComposer",
    "ListView",
    "filter_by_search",
    "flatten_record",
    "page_bounds",
    "paginate",
    "total_pages",
    "remote_ordering",
    "sort_records",
    # Companies, votes and reviews
    "CompanySubmissions",
    "DetailLoader",
    "PointsAwarder",
    "RatingService",
    "VoteService",
    "fetch_single",
    # Slugs
    "SlugAllocator",
    "slugify",
    # Reference data
    "ReferenceData",
]
