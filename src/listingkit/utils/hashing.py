"""Hashing utilities for cache key generation."""

import hashlib
import json
from typing import Any


def hash_value(value: Any) -> str:
    """Create a deterministic hash of a value.

    Args:
        value: Any JSON-serializable value.

    Returns:
        A hexadecimal hash string (first 16 chars of SHA-256).
    """
    if value is None:
        return "none"

    # Normalize to JSON with sorted keys for determinism
    normalized = json.dumps(value, sort_keys=True, default=str)
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


def normalize_search(term: str | None) -> str:
    """Normalize a free-text search term for use in a cache key.

    Trims and lowercases, matching the case-insensitive remote and
    local search. Inner whitespace is kept: ``"a  b"`` and ``"a b"``
    match different rows.
    """
    if not term:
        return ""
    return term.strip().lower()
