# account_audit/infrastructure/cache/redis_client.py

from typing import Optional

import redis.asyncio as redis


class RedisClient:
    """
    Redis access for session revocation. Keys are written once with a TTL and
    expire on their own; nothing is ever updated in place.
    """

    def __init__(self, url: str, client: Optional[redis.Redis] = None):
        self.client = client or redis.from_url(
            url,
            decode_responses=True,
        )

    async def exists(self, key: str) -> int:
        return await self.client.exists(key)

    async def set_nx_ex(self, key: str, value: str, ttl: int) -> bool:
        """Set key only if absent, expiring after ttl seconds. True if this call set it."""
        if ttl <= 0:
            return False
        return bool(await self.client.set(key, value, nx=True, ex=ttl))

    async def ping(self) -> bool:
        return bool(await self.client.ping())

    async def close(self) -> None:
        await self.client.aclose()
