"""Redis idempotency store adapter."""

from typing import Optional

from redis import asyncio as aioredis

from lead_funnel.application.ports.idempotency_store import IdempotencyStore


class RedisIdempotencyStore(IdempotencyStore):
    """Redis adapter holding short-lived dispatch locks with SET NX EX."""

    KEY_PREFIX = "lead_funnel:dispatch:"

    def __init__(self, redis_url: str) -> None:
        """
        Initialize Redis idempotency store.

        Args:
            redis_url: Redis connection URL
        """
        self._redis_url = redis_url
        self._client: Optional[aioredis.Redis] = None

    async def _get_client(self) -> aioredis.Redis:
        """
        Get or create Redis client.

        Returns:
            Redis client instance
        """
        if self._client is None:
            self._client = await aioredis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    def _make_key(self, key: str) -> str:
        """
        Make Redis key for a dispatch lock.

        Args:
            key: Operation key (e.g., notify:<lead_id>)

        Returns:
            Redis key string
        """
        return f"{self.KEY_PREFIX}{key}"

    async def try_acquire(self, key: str, ttl_seconds: int) -> bool:
        """
        Claim a key if nobody else holds it.

        Args:
            key: Operation key
            ttl_seconds: Lock expiry in seconds

        Returns:
            True if the lock was acquired
        """
        client = await self._get_client()
        acquired = await client.set(self._make_key(key), "1", nx=True, ex=ttl_seconds)
        return bool(acquired)

    async def release(self, key: str) -> None:
        """
        Release a key.

        Args:
            key: Operation key
        """
        client = await self._get_client()
        await client.delete(self._make_key(key))

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.close()
            self._client = None
