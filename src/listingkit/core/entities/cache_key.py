"""Cache key value object."""

import re
from dataclasses import dataclass
from typing import Any

SEPARATOR = "_"
WILDCARD = "all"


@dataclass(frozen=True)
class ListCacheKey:
    """Immutable cache key value object.

    A key is an entity family (``companies``, ``company_rating``...)
    followed by the parts that distinguish one cached value from
    another. Empty parts render as ``all``; ``%`` and the separator
    are percent-encoded inside parts, so distinct part tuples never
    join into the same string.
    """

    family: str
    parts: tuple[str, ...] = ()

    def __str__(self) -> str:
        """Return the full cache key string."""
        return SEPARATOR.join([self.family, *self.parts])

    @property
    def pattern(self) -> re.Pattern[str]:
        """Return the regex matching every key of this key's family."""
        return family_pattern(self.family)

    @classmethod
    def from_components(cls, family: str, *parts: Any) -> "ListCacheKey":
        """Create a key from raw components.

        Args:
            family: The entity family the key belongs to.
            *parts: Distinguishing values; None and "" become ``all``.

        Returns:
            A new ListCacheKey instance.
        """
        return cls(
            family=family,
            parts=tuple(_render(part) for part in parts),
        )


def family_pattern(family: str) -> re.Pattern[str]:
    """Build the invalidation pattern for an entity family.

    Args:
        family: The family name, e.g. ``companies``.

    Returns:
        A compiled regex matching ``<family>_`` at the start of a key.
    """
    return re.compile(f"^{re.escape(family)}{SEPARATOR}")


def escape_part(text: str) -> str:
    """Percent-encode ``%`` and the separator inside one key part."""
    return text.replace("%", "%25").replace(SEPARATOR, "%5F")


def _render(part: Any) -> str:
    if part is None:
        return WILDCARD
    text = str(getattr(part, "value", part))
    return escape_part(text) if text else WILDCARD
