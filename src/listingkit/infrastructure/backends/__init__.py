"""Cache backend implementations.

``RedisCacheBackend`` lives in ``listingkit.infrastructure.backends.redis``
and needs the ``redis`` extra.
"""

from listingkit.infrastructure.backends.memory import InMemoryCacheBackend

__all__ = ["InMemoryCacheBackend"]
