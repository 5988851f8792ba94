"""In-process idempotency store adapter for single-worker deployments."""

import time

from lead_funnel.application.ports.idempotency_store import IdempotencyStore


class InMemoryIdempotencyStore(IdempotencyStore):
    """In-memory adapter holding dispatch locks for the lifetime of the process."""

    def __init__(self) -> None:
        """Initialize with no keys held."""
        self._expires_at: dict[str, float] = {}

    async def try_acquire(self, key: str, ttl_seconds: int) -> bool:
        """
        Claim a key if nobody else holds it.

        The check and the claim run without an await in between, so two
        coroutines on the same loop cannot both win.

        Args:
            key: Operation key
            ttl_seconds: Lock expiry in seconds

        Returns:
            True if the lock was acquired
        """
        now = time.monotonic()
        expires_at = self._expires_at.get(key)
        if expires_at is not None and expires_at > now:
            return False
        self._expires_at[key] = now + ttl_seconds
        return True

    async def release(self, key: str) -> None:
        """
        Release a key.

        Args:
            key: Operation key
        """
        self._expires_at.pop(key, None)
