"""Cache configuration entity."""

from dataclasses import dataclass, field
from datetime import timedelta


@dataclass
class CacheConfig:
    """Cache configuration.

    TTL tiers are a caller convention: volatile aggregates (ratings,
    vote counts) live for a minute, listing rows for a couple of
    minutes, detail and related rows a little longer, and reference
    lists such as countries for a day.
    """

    enabled: bool = True
    max_size: int | None = 5000

    default_ttl: timedelta = field(default_factory=lambda: timedelta(minutes=5))
    ratings_ttl: timedelta = field(default_factory=lambda: timedelta(minutes=1))
    listings_ttl: timedelta = field(default_factory=lambda: timedelta(minutes=2))
    detail_ttl: timedelta = field(default_factory=lambda: timedelta(minutes=5))
    related_ttl: timedelta = field(default_factory=lambda: timedelta(minutes=10))
    reference_ttl: timedelta = field(default_factory=lambda: timedelta(hours=24))

    # Above this many matching rows the composer stops materializing the
    # full set and pages remotely instead.
    max_materialized: int = 2000

    def __post_init__(self) -> None:
        """Validate numeric limits."""
        if self.max_size is not None and self.max_size <= 0:
            raise ValueError("max_size must be positive or None")
        if self.max_materialized <= 0:
            raise ValueError("max_materialized must be positive")
