"""Identity cache adapters (visitor side)."""

from lead_funnel.adapters.outbound.identity_cache.file_identity_cache import FileIdentityCache
from lead_funnel.adapters.outbound.identity_cache.identity_cache import InMemoryIdentityCache
from lead_funnel.adapters.outbound.identity_cache.redis_identity_cache import RedisIdentityCache

__all__ = [
    "FileIdentityCache",
    "InMemoryIdentityCache",
    "RedisIdentityCache",
]
