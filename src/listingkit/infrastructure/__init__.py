"""Infrastructure layer implementations for listingkit."""

from listingkit.infrastructure.backends import InMemoryCacheBackend
from listingkit.infrastructure.key_builders import ListingKeyBuilder
from listingkit.infrastructure.remote import PostgrestClient
from listingkit.infrastructure.serializers import JsonSerializer

__all__ = [
    "InMemoryCacheBackend",
    "ListingKeyBuilder",
    "JsonSerializer",
    "PostgrestClient",
]
