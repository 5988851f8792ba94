"""Idempotency store adapters."""

from lead_funnel.adapters.outbound.idempotency.in_memory_idempotency_store import InMemoryIdempotencyStore
from lead_funnel.adapters.outbound.idempotency.redis_idempotency_store import RedisIdempotencyStore

__all__ = ["InMemoryIdempotencyStore", "RedisIdempotencyStore"]
