import math
from typing import Optional

from redis.asyncio import Redis

from app.platform.cache.base import KeyValueBackend
from app.platform.cache.memory import InMemoryKeyValueBackend
from app.platform.config import Settings
from app.platform.logger import get_logger

logger = get_logger(__name__)


class RedisKeyValueBackend:
    """KeyValueBackend over an injected ``redis.asyncio.Redis`` client."""

    def __init__(self, client: Redis):
        self.client = client

    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def set(self, key: str, value: str, ttl: Optional[float] = None) -> None:
        if ttl is None:
            await self.client.set(key, value)
            return
        # Server-side expiry only reclaims abandoned keys; reads still check issued_at
        await self.client.set(key, value, px=max(1, math.ceil(ttl * 1000)))

    async def incr(self, key: str, ttl: Optional[float] = None) -> int:
        count = await self.client.incr(key)
        if count == 1 and ttl is not None:
            await self.client.pexpire(key, max(1, math.ceil(ttl * 1000)))
        return count

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def close(self) -> None:
        await self.client.aclose()


def create_backend(settings: Settings) -> KeyValueBackend:
    """Build the credential backend for this process.

    Called from the application lifespan; the caller owns the returned
    object and must ``close()`` it on shutdown.
    """
    if settings.FORCE_IN_MEMORY_STORE or not settings.REDIS_URL:
        logger.warning("Using in-memory credential store; codes will not survive a restart")
        return InMemoryKeyValueBackend()

    client = Redis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
    )
    logger.info("Using Redis credential store")
    return RedisKeyValueBackend(client)
