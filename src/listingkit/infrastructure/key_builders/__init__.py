"""Cache key builders."""

from listingkit.infrastructure.key_builders.listing import ListingKeyBuilder

__all__ = ["ListingKeyBuilder"]
