"""redis.asyncio implementation of CacheBackend."""

import logging
from collections.abc import Sequence

import redis.asyncio
from redis.exceptions import RedisError

from etag_cache.errors import BackendError

from .redis_backend import decode_value

logger = logging.getLogger(__name__)


class AsyncRedisBackend:
    """redis-py asyncio implementation of CacheBackend.

    This class satisfies the CacheBackend protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        client = redis.asyncio.from_url("redis://localhost:6379")
        backend = AsyncRedisBackend(client)
        await backend.set_with_expiry("express-cache:/products\"2-abc\"", "{...}", 60)
        ```
    """

    def __init__(self, client: redis.asyncio.Redis) -> None:
        """Initialize the backend.

        Args:
            client: A redis.asyncio.Redis instance, owned by the caller.
        """
        self._client = client

    async def get(self, key: str) -> str | None:
        try:
            value = await self._client.get(key)
            if value is None:
                return None
            return decode_value(value)
        except (RedisError, UnicodeDecodeError) as e:
            logger.warning("Redis GET failed for %s: %s", key, e)
            raise BackendError("get", key=key, original_error=e) from e

    async def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._client.set(key, value, ex=ttl_seconds)
        except RedisError as e:
            logger.warning("Redis SET failed for %s: %s", key, e)
            raise BackendError("set", key=key, original_error=e) from e

    async def delete(self, keys: Sequence[str]) -> int:
        if not keys:
            return 0

        try:
            count = await self._client.delete(*keys)
        except RedisError as e:
            logger.warning("Redis DEL failed for %d keys: %s", len(keys), e)
            raise BackendError("delete", original_error=e) from e

        return int(count)

    async def find_by_pattern(self, pattern: str) -> list[str]:
        try:
            return [decode_value(key) async for key in self._client.scan_iter(match=pattern)]
        except (RedisError, UnicodeDecodeError) as e:
            logger.warning("Redis SCAN failed for %s: %s", pattern, e)
            raise BackendError("find_by_pattern", key=pattern, original_error=e) from e

    async def close(self) -> None:
        """Close the underlying connection pool.

        Should be called when shutting down the application.
        """
        await self._client.aclose()

    @property
    def client(self) -> redis.asyncio.Redis:
        """Get the Redis client."""
        return self._client
