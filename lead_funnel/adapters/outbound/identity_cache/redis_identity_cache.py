"""Redis identity cache adapter."""

import json
from typing import Optional

from redis import asyncio as aioredis

from lead_funnel.application.ports.identity_cache import IdentityCache
from lead_funnel.domain.value_objects.contact_identity import ContactIdentity


class RedisIdentityCache(IdentityCache):
    """Stores the profile's identity under one Redis key, without expiry."""

    KEY_PREFIX = "lead_funnel:identity:"

    def __init__(self, redis_url: str, profile_id: str) -> None:
        """
        Initialize Redis identity cache.

        Args:
            redis_url: Redis connection URL
            profile_id: Browser profile identifier
        """
        self._redis_url = redis_url
        self._profile_id = profile_id
        self._client: Optional[aioredis.Redis] = None

    async def _get_client(self) -> aioredis.Redis:
        if self._client is None:
            self._client = await aioredis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    def _make_key(self) -> str:
        return f"{self.KEY_PREFIX}{self._profile_id}"

    async def load(self) -> Optional[ContactIdentity]:
        """
        Load the cached identity.

        Returns:
            Cached identity, or None if nothing was stored
        """
        client = await self._get_client()
        raw = await client.get(self._make_key())
        if raw is None:
            return None
        data = json.loads(raw)
        return ContactIdentity(
            name=data.get("name"),
            phone=data.get("phone"),
            email=data.get("email"),
        )

    async def store(self, identity: ContactIdentity) -> None:
        """
        Persist the identity.

        Args:
            identity: Completed identity
        """
        client = await self._get_client()
        payload = {"name": identity.name, "phone": identity.phone, "email": identity.email}
        await client.set(self._make_key(), json.dumps(payload, ensure_ascii=False))

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.close()
            self._client = None
