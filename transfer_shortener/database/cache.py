"""Redis cache layer for token resolution."""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError


class RedisCache:
    """Read-through cache for token -> target URL mappings.

    Cache failures are logged and reported as misses; they never fail a
    request.
    """

    KEY_PREFIX = "transfer:shortener:"

    def __init__(
        self,
        redis_url: str,
        ttl_seconds: int = 3600,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            ttl_seconds: TTL for cached mappings
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = True
        self.client: Optional[redis.Redis] = None

    async def connect(self) -> None:
        """Connect to Redis. Disables the cache if Redis is unreachable."""
        try:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self.client.ping()
            self.logger.info(f"Connected to Redis, TTL={self.ttl_seconds}s")
        except (RedisError, OSError) as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            self.enabled = False

    def get_cache_key(self, token: str) -> str:
        return f"{self.KEY_PREFIX}{token}"

    async def get(self, token: str) -> Optional[str]:
        """Get the cached target URL for a token, or None."""
        if not self.enabled or not self.client:
            return None

        try:
            return await self.client.get(self.get_cache_key(token))
        except RedisError as e:
            self.logger.error(f"Cache get error: {e}")
            return None

    async def set(self, token: str, target_url: str) -> bool:
        """Cache a token -> target URL mapping.

        Returns:
            True if successful
        """
        if not self.enabled or not self.client:
            return False

        try:
            await self.client.setex(self.get_cache_key(token), self.ttl_seconds, target_url)
            return True
        except RedisError as e:
            self.logger.error(f"Cache set error: {e}")
            return False

    async def ping(self) -> bool:
        if not self.enabled or not self.client:
            return False

        try:
            return bool(await self.client.ping())
        except RedisError as e:
            self.logger.error(f"Cache ping error: {e}")
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis connection closed")
