"""
Redis connection for replay state

Unlike a cache, the nonce store must not degrade silently: if Redis is
unreachable, claims are refused rather than issued without replay
protection.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from badger_claims.exceptions import InternalError

logger = logging.getLogger(__name__)


class RedisConnection:
    """Owns one redis.asyncio client shared by the nonce and claim guards"""

    def __init__(self, redis_url: str = "redis://localhost:6379/0", client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self._client = client

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                max_connections=10,
            )
        return self._client

    async def connect(self) -> None:
        """Verify the server answers; raises InternalError otherwise"""
        try:
            await self.client.ping()
            logger.info(f"Redis connected: {self.redis_url}")
        except RedisError as e:
            raise InternalError(
                f"Redis connection failed: {e}",
                operation="redis_connect",
                cause=e
            )

    async def close(self) -> None:
        if self._client is None:
            return
        try:
            await self._client.aclose()
            logger.info("Redis connection closed")
        except RedisError as e:
            logger.error(f"Error closing Redis connection: {e}")
        finally:
            self._client = None
