"""Remote backend client interface."""

from typing import Any, Protocol

from listingkit.core.entities.query import (
    Filter,
    MutationOp,
    QueryRequest,
    QueryResult,
)


class IRemoteClient(Protocol):
    """Contract for the hosted backend that owns all persistent state.

    Implementations raise ``RemoteError`` (or a subclass) on failure;
    they never return partial results.
    """

    async def query(self, collection: str, request: QueryRequest) -> QueryResult:
        """Read rows and/or the exact count from a collection.

        Args:
            collection: Remote table or view name.
            request: Filters, ordering, pagination and count options.

        Returns:
            The matching rows (empty when ``request.head``) and the
            count when ``request.count`` or ``request.head`` is set.
        """
        ...

    async def call(self, procedure: str, args: dict[str, Any] | None = None) -> Any:
        """Invoke a named remote procedure.

        Args:
            procedure: Procedure name.
            args: Named arguments.

        Returns:
            The decoded JSON result, or None when the procedure
            returns nothing.
        """
        ...

    async def mutate(
        self,
        collection: str,
        operation: MutationOp,
        payload: dict[str, Any] | list[dict[str, Any]] | None = None,
        match: list[Filter] | None = None,
    ) -> list[dict[str, Any]]:
        """Insert, update or delete rows.

        Args:
            collection: Remote table name.
            operation: The write to perform.
            payload: Row(s) to insert or columns to update.
            match: Conditions selecting rows for update/delete.

        Returns:
            The affected rows as stored by the backend.
        """
        ...
