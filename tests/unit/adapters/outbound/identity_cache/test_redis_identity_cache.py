"""Unit tests for Redis identity cache adapter."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from lead_funnel.adapters.outbound.identity_cache import RedisIdentityCache
from lead_funnel.domain.value_objects.contact_identity import ContactIdentity

FROM_URL = "lead_funnel.adapters.outbound.identity_cache.redis_identity_cache.aioredis.from_url"


@pytest.fixture
def mock_redis_client():
    """Create a mock Redis client."""
    client = AsyncMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock()
    return client


@pytest.mark.asyncio
async def test_load_missing_key_returns_none(mock_redis_client):
    """Test a profile without a stored identity."""
    with patch(FROM_URL, new_callable=AsyncMock) as mock_from_url:
        mock_from_url.return_value = mock_redis_client

        cache = RedisIdentityCache("redis://localhost:6379/0", "profile-1")

        assert await cache.load() is None
        mock_redis_client.get.assert_called_once_with("lead_funnel:identity:profile-1")


@pytest.mark.asyncio
async def test_store_writes_json_without_expiry(mock_redis_client):
    """Test the identity is stored as JSON under the profile key."""
    with patch(FROM_URL, new_callable=AsyncMock) as mock_from_url:
        mock_from_url.return_value = mock_redis_client

        cache = RedisIdentityCache("redis://localhost:6379/0", "profile-1")
        await cache.store(ContactIdentity(name="Dana", phone="0501234567", email="d@example.com"))

        key, payload = mock_redis_client.set.call_args.args
        assert key == "lead_funnel:identity:profile-1"
        assert json.loads(payload) == {
            "name": "Dana",
            "phone": "0501234567",
            "email": "d@example.com",
        }
        assert mock_redis_client.set.call_args.kwargs == {}


@pytest.mark.asyncio
async def test_load_decodes_stored_identity(mock_redis_client):
    """Test a stored payload becomes a contact identity."""
    mock_redis_client.get.return_value = json.dumps(
        {"name": "Dana", "phone": "0501234567", "email": "d@example.com"}
    )
    with patch(FROM_URL, new_callable=AsyncMock) as mock_from_url:
        mock_from_url.return_value = mock_redis_client

        cache = RedisIdentityCache("redis://localhost:6379/0", "profile-1")
        identity = await cache.load()

        assert identity == ContactIdentity(name="Dana", phone="0501234567", email="d@example.com")
