import logging
import redis.asyncio as redis
from .config import settings
from typing import Optional

logger = logging.getLogger(__name__)

class RedisClient:
    def __init__(self):
        self.client: Optional[redis.Redis] = None

    async def connect(self, url: Optional[str] = None):
        url = url or settings.REDIS_URL
        if not url:
            logger.info("REDIS_URL not set, rate limiting disabled")
            return
        client = redis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True
        )
        try:
            await client.ping()
        except redis.RedisError as e:
            logger.error(f"Redis unavailable, rate limiting disabled: {e}")
            await client.aclose()
            return
        self.client = client

    async def close(self):
        if self.client:
            await self.client.aclose()
            self.client = None

    async def incr_window(self, key: str, window: int) -> Optional[int]:
        """Increment a fixed-window counter, returning None when Redis is unusable."""
        if not self.client:
            return None
        try:
            count = await self.client.incr(key)
            if count == 1:
                await self.client.expire(key, window)
            return count
        except redis.RedisError as e:
            logger.error(f"Redis counter error: {e}")
            return None

redis_client = RedisClient()
