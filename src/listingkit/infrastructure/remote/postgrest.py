"""PostgREST client for the hosted backend."""

import logging
from types import TracebackType
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from listingkit.config import RemoteSettings
from listingkit.core.entities.query import (
    Filter,
    FilterOp,
    MutationOp,
    Ordering,
    QueryRequest,
    QueryResult,
)
from listingkit.core.exceptions import (
    NO_ROWS,
    UNIQUE_VIOLATION,
    ConflictError,
    NotFoundError,
    RemoteError,
    TransientRemoteError,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({502, 503, 504})
_RESERVED = set(',()":')


class PostgrestClient:
    """Talks to the backend's REST interface over HTTPS.

    Reads map to ``GET``/``HEAD`` on ``/<collection>`` with PostgREST
    filter parameters, procedures to ``POST /rpc/<name>`` and writes
    to ``POST``/``PATCH``/``DELETE``. Network failures and gateway
    errors are retried; every other error surfaces immediately as a
    ``RemoteError`` carrying the backend's error code.
    """

    def __init__(
        self,
        settings: RemoteSettings,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Connection settings.
            http: Pre-built HTTP client (e.g. with a mock transport).
                Its base URL must point at the REST root.
        """
        self._settings = settings
        self._http = http or httpx.AsyncClient(
            base_url=settings.rest_url,
            timeout=settings.timeout,
        )

    async def query(self, collection: str, request: QueryRequest) -> QueryResult:
        """Read rows and/or the exact count from a collection."""
        params = self.encode_params(request)
        headers = self._headers(read=True)
        if request.count or request.head:
            headers["Prefer"] = "count=exact"

        method = "HEAD" if request.head else "GET"
        response = await self._send(method, f"/{collection}", params=params, headers=headers)

        count = _parse_count(response.headers.get("content-range"))
        rows = [] if request.head else _json(response) or []
        return QueryResult(rows=rows, count=count)

    async def call(self, procedure: str, args: dict[str, Any] | None = None) -> Any:
        """Invoke a remote procedure and return its decoded result."""
        response = await self._send(
            "POST",
            f"/rpc/{procedure}",
            json=args or {},
            headers=self._headers(read=False),
        )
        return _json(response)

    async def mutate(
        self,
        collection: str,
        operation: MutationOp,
        payload: dict[str, Any] | list[dict[str, Any]] | None = None,
        match: list[Filter] | None = None,
    ) -> list[dict[str, Any]]:
        """Insert, update or delete rows and return them as stored."""
        operation = MutationOp(operation)
        headers = self._headers(read=False)
        headers["Prefer"] = "return=representation"

        if operation is MutationOp.INSERT:
            response = await self._send(
                "POST", f"/{collection}", json=payload, headers=headers
            )
        else:
            if not match:
                raise ValueError(f"{operation.value} requires at least one match filter")
            params = [_encode_filter(f) for f in match]
            method = "PATCH" if operation is MutationOp.UPDATE else "DELETE"
            response = await self._send(
                method,
                f"/{collection}",
                params=params,
                json=payload if operation is MutationOp.UPDATE else None,
                headers=headers,
            )

        data = _json(response)
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    @staticmethod
    def encode_params(request: QueryRequest) -> list[tuple[str, str]]:
        """Encode a request as PostgREST query parameters."""
        params: list[tuple[str, str]] = [("select", request.select)]
        params.extend(_encode_filter(f) for f in request.filters)
        for group in request.any_of:
            inner = ",".join(
                f"{f.column}.{f.op.value}.{_quote(_encode_value(f))}" for f in group
            )
            params.append(("or", f"({inner})"))
        if request.order:
            params.append(("order", ",".join(_encode_order(o) for o in request.order)))
        if request.offset is not None:
            params.append(("offset", str(request.offset)))
        if request.limit is not None:
            params.append(("limit", str(request.limit)))
        return params

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()

    async def __aenter__(self) -> "PostgrestClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        wait = self._settings.retry_wait
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._settings.retries + 1),
            wait=wait_incrementing(start=wait, increment=wait),
            retry=retry_if_exception_type(TransientRemoteError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self._send_once(method, path, **kwargs)
        raise AssertionError("unreachable")  # pragma: no cover

    async def _send_once(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise TransientRemoteError(f"Request timed out: {e}", code="timeout") from e
        except httpx.TransportError as e:
            raise TransientRemoteError(f"Network error: {e}", code="network") from e

        if response.status_code >= 400:
            raise _error_from(response)
        return response

    def _headers(self, read: bool) -> dict[str, str]:
        token = self._settings.access_token or self._settings.anon_key
        profile = "Accept-Profile" if read else "Content-Profile"
        return {
            "apikey": self._settings.anon_key,
            "Authorization": f"Bearer {token}",
            profile: self._settings.schema_name,
        }


def _error_from(response: httpx.Response) -> RemoteError:
    body: dict[str, Any] = {}
    try:
        parsed = response.json()
        if isinstance(parsed, dict):
            body = parsed
    except ValueError:
        pass

    code = body.get("code")
    message = body.get("message") or response.reason_phrase or "Request failed"
    details = body.get("details") or body.get("hint")
    status = response.status_code

    if status in RETRYABLE_STATUSES:
        return TransientRemoteError(message, code=code, details=details, status=status)
    if code == UNIQUE_VIOLATION:
        return ConflictError(message, code=code, details=details, status=status)
    if code == NO_ROWS:
        return NotFoundError(message)
    return RemoteError(message, code=code, details=details, status=status)


def _json(response: httpx.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    return response.json()


def _parse_count(content_range: str | None) -> int | None:
    # "0-23/37", "*/37" or "*/*"
    if not content_range or "/" not in content_range:
        return None
    total = content_range.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


def _encode_filter(f: Filter) -> tuple[str, str]:
    return f.column, f"{f.op.value}.{_encode_value(f)}"


def _encode_value(f: Filter) -> str:
    if f.op in (FilterOp.IS, FilterOp.NOT_IS):
        return "null" if f.value is None else _scalar(f.value)
    if f.op is FilterOp.ILIKE:
        return f"*{f.value}*"
    if f.op is FilterOp.IN:
        return "(" + ",".join(_quote(_scalar(v)) for v in f.value) + ")"
    return _scalar(f.value)


def _encode_order(o: Ordering) -> str:
    direction = "desc" if o.descending else "asc"
    nulls = "nullslast" if o.nulls_last else "nullsfirst"
    return f"{o.column}.{direction}.{nulls}"


def _scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _quote(text: str) -> str:
    if text.startswith("(") or not _RESERVED.intersection(text):
        return text
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
