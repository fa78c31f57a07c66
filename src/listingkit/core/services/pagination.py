"""Page arithmetic for 1-based pages."""

import math
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def page_bounds(page: int, page_size: int) -> tuple[int, int]:
    """Return the ``[start, stop)`` slice bounds of a 1-based page.

    Raises:
        ValueError: If ``page`` is below 1 or ``page_size`` is not positive.
    """
    if page < 1:
        raise ValueError("page numbers start at 1")
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    start = (page - 1) * page_size
    return start, start + page_size


def paginate(items: Sequence[T], page: int, page_size: int) -> list[T]:
    """Return page ``page`` of ``items``.

    The last page may be short; pages past the end are empty.
    """
    start, stop = page_bounds(page, page_size)
    return list(items[start:stop])


def total_pages(total_count: int, page_size: int) -> int:
    """Number of pages needed for ``total_count`` items."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return math.ceil(max(total_count, 0) / page_size)
