"""Remote backend clients."""

from listingkit.infrastructure.remote.postgrest import PostgrestClient

__all__ = ["PostgrestClient"]
