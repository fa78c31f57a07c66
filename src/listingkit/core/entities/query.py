"""Remote query request and result entities."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FilterOp(str, Enum):
    """Comparison operators understood by the remote store."""

    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    ILIKE = "ilike"
    IN = "in"
    IS = "is"
    NOT_IS = "not.is"


class MutationOp(str, Enum):
    """Write operations on a remote collection."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Filter:
    """A single ``column <op> value`` condition."""

    column: str
    op: FilterOp
    value: Any = None

    @classmethod
    def eq(cls, column: str, value: Any) -> "Filter":
        return cls(column, FilterOp.EQ, value)

    @classmethod
    def neq(cls, column: str, value: Any) -> "Filter":
        return cls(column, FilterOp.NEQ, value)

    @classmethod
    def is_null(cls, column: str) -> "Filter":
        return cls(column, FilterOp.IS, None)

    @classmethod
    def not_null(cls, column: str) -> "Filter":
        return cls(column, FilterOp.NOT_IS, None)

    @classmethod
    def ilike(cls, column: str, term: str) -> "Filter":
        """Case-insensitive substring match on ``column``."""
        return cls(column, FilterOp.ILIKE, term)


@dataclass(frozen=True)
class Ordering:
    """Single-column ordering."""

    column: str
    descending: bool = False
    nulls_last: bool = True


@dataclass
class QueryRequest:
    """Description of one read against a remote collection.

    ``filters`` are AND-combined. Each group in ``any_of`` is
    OR-combined internally and AND-combined with everything else,
    which is how free-text search across several columns is expressed.
    """

    select: str = "*"
    filters: list[Filter] = field(default_factory=list)
    any_of: list[list[Filter]] = field(default_factory=list)
    order: list[Ordering] = field(default_factory=list)
    offset: int | None = None
    limit: int | None = None
    count: bool = False
    head: bool = False

    def where(self, *filters: Filter) -> "QueryRequest":
        """Add AND-combined filters and return self for chaining."""
        self.filters.extend(filters)
        return self

    def where_any(self, *filters: Filter) -> "QueryRequest":
        """Add one OR-combined group and return self for chaining."""
        if filters:
            self.any_of.append(list(filters))
        return self

    def order_by(
        self, column: str, descending: bool = False, nulls_last: bool = True
    ) -> "QueryRequest":
        """Append an ordering column and return self for chaining."""
        self.order.append(Ordering(column, descending, nulls_last))
        return self

    def paginate(self, offset: int, limit: int) -> "QueryRequest":
        """Restrict the read to ``limit`` rows starting at ``offset``."""
        self.offset = offset
        self.limit = limit
        return self


@dataclass
class QueryResult:
    """Rows returned by a query plus the exact count when requested."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    count: int | None = None
