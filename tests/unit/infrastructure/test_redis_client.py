"""RedisClient: revocation writes with NX/EX against a mocked redis.asyncio client."""

from unittest.mock import AsyncMock

import pytest

from account_audit.infrastructure.cache.redis_client import RedisClient


@pytest.fixture
def redis_mock():
    client = AsyncMock()
    client.set = AsyncMock(return_value=True)
    client.exists = AsyncMock(return_value=1)
    client.ping = AsyncMock(return_value=True)
    return client


@pytest.mark.asyncio
async def test_set_nx_ex_uses_nx_and_ttl(redis_mock):
    redis_client = RedisClient("redis://unused", client=redis_mock)
    assert await redis_client.set_nx_ex("session:revoked:abc", "1", 120) is True
    redis_mock.set.assert_awaited_once_with("session:revoked:abc", "1", nx=True, ex=120)


@pytest.mark.asyncio
async def test_set_nx_ex_existing_key_returns_false(redis_mock):
    redis_mock.set = AsyncMock(return_value=None)
    redis_client = RedisClient("redis://unused", client=redis_mock)
    assert await redis_client.set_nx_ex("k", "1", 60) is False


@pytest.mark.asyncio
async def test_non_positive_ttl_is_not_written(redis_mock):
    redis_client = RedisClient("redis://unused", client=redis_mock)
    assert await redis_client.set_nx_ex("k", "1", 0) is False
    assert redis_mock.set.await_count == 0


@pytest.mark.asyncio
async def test_exists_ping_close(redis_mock):
    redis_client = RedisClient("redis://unused", client=redis_mock)
    assert await redis_client.exists("k") == 1
    assert await redis_client.ping() is True
    await redis_client.close()
    redis_mock.aclose.assert_awaited_once()
