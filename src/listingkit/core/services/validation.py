"""Client-side validation run before any remote call."""

from typing import Any
from urllib.parse import urlparse

from listingkit.core.exceptions import ValidationError

MIN_RATING = 1
MAX_RATING = 5


def require(data: dict[str, Any], *fields: str) -> None:
    """Raise if any of ``fields`` is missing or blank in ``data``."""
    for name in fields:
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            label = name.replace("_", " ").capitalize()
            raise ValidationError(f"{label} is required", field=name)


def check_length(
    value: str | None,
    field: str,
    minimum: int | None = None,
    maximum: int | None = None,
) -> None:
    """Raise if ``value`` (stripped) is outside the allowed length."""
    length = len((value or "").strip())
    label = field.replace("_", " ").capitalize()
    if minimum is not None and length < minimum:
        raise ValidationError(
            f"{label} must be at least {minimum} characters", field=field
        )
    if maximum is not None and length > maximum:
        raise ValidationError(
            f"{label} must be at most {maximum} characters", field=field
        )


def check_url(value: str | None, field: str = "website") -> None:
    """Raise unless ``value`` is empty or an absolute http(s) URL."""
    if not value:
        return
    parsed = urlparse(value.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError("Please enter a valid URL", field=field)


def check_rating(rating: Any) -> int:
    """Return ``rating`` as an int, raising unless it is 1 to 5."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Please select a rating first", field="rating")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}", field="rating"
        )
    return rating
