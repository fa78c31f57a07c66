"""Core interfaces (Protocol classes) for listingkit."""

from listingkit.core.interfaces.cache_backend import ICacheBackend
from listingkit.core.interfaces.key_builder import IKeyBuilder
from listingkit.core.interfaces.remote_client import IRemoteClient
from listingkit.core.interfaces.serializer import ISerializer

__all__ = [
    "ICacheBackend",
    "IKeyBuilder",
    "IRemoteClient",
    "ISerializer",
]
