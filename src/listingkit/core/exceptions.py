"""Exception hierarchy for listingkit."""

from typing import Any

# PostgreSQL / PostgREST error codes with a dedicated meaning
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NO_ROWS = "PGRST116"
RELATIONSHIP_ERROR = "PGRST200"
JWT_ERROR = "PGRST301"


class ListingKitError(Exception):
    """Base class for all listingkit errors."""

    pass


class ValidationError(ListingKitError):
    """Raised when input fails client-side validation.

    Always raised before any remote call is issued.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class RemoteError(ListingKitError):
    """Raised when the hosted backend rejects or fails a request."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: Any = None,
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.status = status

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class TransientRemoteError(RemoteError):
    """Remote failure worth retrying (network trouble, gateway errors)."""

    pass


class ConflictError(RemoteError):
    """Unique constraint violation reported by the backend."""

    pass


class NotFoundError(RemoteError):
    """Exactly one row was expected but none matched."""

    def __init__(self, message: str = "Record not found") -> None:
        super().__init__(message, code=NO_ROWS)


class CacheBackendError(ListingKitError):
    """Raised by cache backends when the underlying store fails."""

    pass


class SerializationError(ListingKitError):
    """Raised when serialization or deserialization fails."""

    pass


class VoteNotAllowedError(ListingKitError):
    """Raised when a vote is refused, e.g. during the annual cooldown."""

    def __init__(self, message: str, next_vote_date: Any = None) -> None:
        super().__init__(message)
        self.next_vote_date = next_vote_date


def describe_error(error: BaseException, fallback: str = "An error occurred") -> str:
    """Translate an error into a message suitable for a notification.

    Args:
        error: The error raised by a remote call or local validation.
        fallback: Message used when nothing more specific applies.

    Returns:
        A short user-facing message.
    """
    if isinstance(error, (ValidationError, VoteNotAllowedError)):
        return str(error) or fallback
    if isinstance(error, TransientRemoteError):
        if error.code == "timeout":
            return "Request timed out. Please try again."
        return "Network error. Please check your connection and try again."
    if isinstance(error, RemoteError):
        if error.code == RELATIONSHIP_ERROR:
            return "Database query error. Please try again."
        if error.code == UNIQUE_VIOLATION:
            return "This record already exists."
        if error.code == FOREIGN_KEY_VIOLATION:
            return "Referenced record does not exist."
        return error.message or fallback
    return fallback

