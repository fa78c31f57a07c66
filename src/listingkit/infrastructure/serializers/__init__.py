"""Serializers for byte-oriented cache backends."""

from listingkit.infrastructure.serializers.json import JsonSerializer

__all__ = ["JsonSerializer"]
