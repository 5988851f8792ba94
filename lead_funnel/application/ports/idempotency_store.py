"""Idempotency store port."""

from abc import ABC, abstractmethod


class IdempotencyStore(ABC):
    """Port interface for short-lived dispatch locks."""

    @abstractmethod
    async def try_acquire(self, key: str, ttl_seconds: int) -> bool:
        """
        Claim a key if nobody else holds it.

        Args:
            key: Unique identifier for the guarded operation
            ttl_seconds: Time-to-live in seconds, so a crashed holder cannot block forever

        Returns:
            True if this caller now holds the key
        """
        pass

    @abstractmethod
    async def release(self, key: str) -> None:
        """
        Release a key claimed with try_acquire.

        Args:
            key: Unique identifier for the guarded operation
        """
        pass
