"""Test doubles for the remote backend and the cache clock."""

import operator
from typing import Any

from listingkit.core.entities.query import (
    Filter,
    FilterOp,
    MutationOp,
    QueryRequest,
    QueryResult,
)
from listingkit.core.exceptions import UNIQUE_VIOLATION, ConflictError

_COMPARISONS = {
    FilterOp.GT: operator.gt,
    FilterOp.GTE: operator.ge,
    FilterOp.LT: operator.lt,
    FilterOp.LTE: operator.le,
}


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRemoteClient:
    """In-memory stand-in for the hosted backend.

    Tables are lists of rows filtered with the same semantics the
    backend applies. Procedures are either fixed return values or
    callables receiving the arguments. An exception placed in
    ``errors`` under a collection or procedure name is raised on the
    next access to it (and on every one after, until removed).
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.procedures: dict[str, Any] = {}
        self.errors: dict[str, Exception] = {}
        self.unique: dict[str, tuple[str, ...]] = {}
        self.calls: list[tuple[str, str, Any]] = []

    async def query(self, collection: str, request: QueryRequest) -> QueryResult:
        self.calls.append(("query", collection, request))
        self._maybe_fail(collection)

        rows = [r for r in self.tables.get(collection, []) if _matches_request(r, request)]
        count = len(rows) if request.count or request.head else None
        if request.head:
            return QueryResult(rows=[], count=count)

        for ordering in reversed(request.order):
            column = ordering.column
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: r[column], reverse=ordering.descending)
            rows = present + missing if ordering.nulls_last else missing + present
        start = request.offset or 0
        stop = start + request.limit if request.limit is not None else None
        return QueryResult(rows=[dict(r) for r in rows[start:stop]], count=count)

    async def call(self, procedure: str, args: dict[str, Any] | None = None) -> Any:
        self.calls.append(("call", procedure, args))
        self._maybe_fail(procedure)
        handler = self.procedures.get(procedure)
        if callable(handler):
            return handler(args or {})
        return handler

    async def mutate(
        self,
        collection: str,
        operation: MutationOp,
        payload: Any = None,
        match: list[Filter] | None = None,
    ) -> list[dict[str, Any]]:
        self.calls.append((MutationOp(operation).value, collection, payload))
        self._maybe_fail(collection)
        table = self.tables.setdefault(collection, [])

        if operation is MutationOp.INSERT:
            rows = payload if isinstance(payload, list) else [payload]
            for row in rows:
                for column in self.unique.get(collection, ()):
                    if any(r.get(column) == row.get(column) for r in table):
                        raise ConflictError(
                            f'duplicate key value violates unique constraint "{column}"',
                            code=UNIQUE_VIOLATION,
                        )
                stored = {"id": f"{collection}-{len(table) + 1}", **row}
                table.append(stored)
            return [dict(r) for r in table[-len(rows):]]

        matched = [r for r in table if all(_matches(r, f) for f in match or [])]
        if operation is MutationOp.UPDATE:
            for row in matched:
                row.update(payload)
        else:
            for row in matched:
                table.remove(row)
        return [dict(r) for r in matched]

    def count(self, kind: str, name: str | None = None) -> int:
        """Number of recorded calls of ``kind``, optionally on ``name``."""
        return sum(1 for k, n, _ in self.calls if k == kind and (name is None or n == name))

    def _maybe_fail(self, name: str) -> None:
        error = self.errors.get(name)
        if error is not None:
            raise error


def _matches_request(row: dict[str, Any], request: QueryRequest) -> bool:
    if not all(_matches(row, f) for f in request.filters):
        return False
    return all(any(_matches(row, f) for f in group) for group in request.any_of)


def _matches(row: dict[str, Any], f: Filter) -> bool:
    value = row.get(f.column)
    if f.op is FilterOp.EQ:
        return value == f.value
    if f.op is FilterOp.NEQ:
        return value is not None and value != f.value
    if f.op is FilterOp.IS:
        return value is f.value
    if f.op is FilterOp.NOT_IS:
        return value is not f.value
    if f.op is FilterOp.ILIKE:
        return str(f.value).lower() in str(value or "").lower()
    if f.op is FilterOp.IN:
        return value in f.value
    return value is not None and _COMPARISONS[f.op](value, f.value)


