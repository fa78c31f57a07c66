"""Global orderings for materialized result sets."""

import math
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from listingkit.core.entities.listing import Record, SortMode
from listingkit.core.entities.query import Ordering


def sort_records(
    records: Iterable[Record],
    mode: SortMode | str,
    *,
    name_field: str = "name",
    created_field: str = "created_at",
    vote_field: str = "vote_count",
    rating_field: str = "average_rating",
    premium_field: str = "is_premium",
) -> list[Record]:
    """Return ``records`` sorted for ``mode``.

    ``newest`` orders by creation time, latest first, rows without a
    timestamp last. ``a-z`` compares names case-insensitively and
    uses case only to break ties, lowercase first. ``top-review``
    orders by ``vote_count`` (rating votes only, reviews excluded)
    then average rating, both descending; ``total_votes`` from the
    rating procedure is not used for ranking. ``premium`` puts premium
    rows first, newest first within each group. All orderings are
    stable, so equal rows keep their fetched order.
    """
    mode = SortMode(mode)
    rows = list(records)

    if mode is SortMode.ALPHABETICAL:
        return sorted(rows, key=lambda r: _name_key(r.get(name_field)))

    if mode is SortMode.TOP_REVIEW:
        return sorted(
            rows,
            key=lambda r: (
                -_number(r.get(vote_field)),
                -_number(r.get(rating_field)),
            ),
        )

    if mode is SortMode.PREMIUM:
        return sorted(
            rows,
            key=lambda r: (
                not bool(r.get(premium_field)),
                -_timestamp(r.get(created_field)),
            ),
        )

    return sorted(rows, key=lambda r: -_timestamp(r.get(created_field)))


def remote_ordering(
    mode: SortMode | str,
    *,
    name_field: str = "name",
    created_field: str = "created_at",
    rank_field: str | None = None,
    premium_field: str = "is_premium",
) -> list[Ordering]:
    """Closest ordering the remote store can apply by itself for ``mode``.

    Used when a result set is too large to materialize. ``top-review``
    needs a precomputed rank column; without one it degrades to newest.
    """
    mode = SortMode(mode)
    if mode is SortMode.ALPHABETICAL:
        return [Ordering(name_field)]
    if mode is SortMode.TOP_REVIEW and rank_field:
        return [Ordering(rank_field, descending=True), Ordering(created_field, descending=True)]
    if mode is SortMode.PREMIUM:
        return [Ordering(premium_field, descending=True), Ordering(created_field, descending=True)]
    return [Ordering(created_field, descending=True)]


def _name_key(value: Any) -> tuple[str, str]:
    text = "" if value is None else str(value)
    # Lowercase before uppercase on ties, as locale collation does
    return (text.casefold(), text.swapcase())


def _number(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _timestamp(value: Any) -> float:
    if value is None or value == "":
        return -math.inf
    if isinstance(value, datetime):
        moment = value
    else:
        try:
            moment = datetime.fromisoformat(str(value))
        except ValueError:
            return -math.inf
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()
