"""Unit tests for JSON-file identity cache adapter."""

import pytest

from lead_funnel.adapters.outbound.identity_cache import FileIdentityCache
from lead_funnel.domain.value_objects.contact_identity import ContactIdentity


@pytest.mark.asyncio
async def test_load_without_file_returns_none(tmp_path):
    """Test an unknown profile has no cached identity."""
    cache = FileIdentityCache(str(tmp_path), "profile-1")

    assert await cache.load() is None


@pytest.mark.asyncio
async def test_store_then_load(tmp_path):
    """Test a stored identity survives a new cache instance."""
    identity = ContactIdentity(name="דנה", phone="0501234567", email="dana@example.com")
    await FileIdentityCache(str(tmp_path / "profiles"), "profile-1").store(identity)

    loaded = await FileIdentityCache(str(tmp_path / "profiles"), "profile-1").load()

    assert loaded == identity


@pytest.mark.asyncio
async def test_profiles_are_isolated(tmp_path):
    """Test one profile never sees another's identity."""
    identity = ContactIdentity(name="Dana", phone="0501234567", email="dana@example.com")
    await FileIdentityCache(str(tmp_path), "profile-1").store(identity)

    assert await FileIdentityCache(str(tmp_path), "profile-2").load() is None


@pytest.mark.asyncio
async def test_corrupt_file_returns_none(tmp_path):
    """Test an unreadable profile file counts as empty."""
    (tmp_path / "profile-1.json").write_text("{not json", encoding="utf-8")

    assert await FileIdentityCache(str(tmp_path), "profile-1").load() is None
