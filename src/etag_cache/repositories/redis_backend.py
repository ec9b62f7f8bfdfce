"""Synchronous redis-py implementation of CacheBackend.

redis.Redis blocks the calling thread on every command, so each call is
moved onto a worker thread with asyncio.to_thread.
"""

import asyncio
import logging
from collections.abc import Sequence

import redis
from redis.exceptions import RedisError

from etag_cache.errors import BackendError

logger = logging.getLogger(__name__)


def decode_value(value: bytes | str) -> str:
    """Decode a Redis reply that may be raw bytes (decode_responses=False)."""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisBackend:
    """redis-py (blocking client) implementation of CacheBackend.

    This class satisfies the CacheBackend protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, client: redis.Redis) -> None:
        """Initialize the backend.

        Args:
            client: A connected redis.Redis instance, owned by the caller.
        """
        self._client = client

    async def get(self, key: str) -> str | None:
        try:
            value = await asyncio.to_thread(self._client.get, key)
            if value is None:
                return None
            return decode_value(value)
        except (RedisError, UnicodeDecodeError) as e:
            logger.warning("Redis GET failed for %s: %s", key, e)
            raise BackendError("get", key=key, original_error=e) from e

    async def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await asyncio.to_thread(self._client.set, key, value, ex=ttl_seconds)
        except RedisError as e:
            logger.warning("Redis SET failed for %s: %s", key, e)
            raise BackendError("set", key=key, original_error=e) from e

    async def delete(self, keys: Sequence[str]) -> int:
        if not keys:
            return 0

        try:
            count = await asyncio.to_thread(self._client.delete, *keys)
        except RedisError as e:
            logger.warning("Redis DEL failed for %d keys: %s", len(keys), e)
            raise BackendError("delete", original_error=e) from e

        return int(count)

    async def find_by_pattern(self, pattern: str) -> list[str]:
        def scan() -> list[str]:
            return [decode_value(key) for key in self._client.scan_iter(match=pattern)]

        try:
            return await asyncio.to_thread(scan)
        except (RedisError, UnicodeDecodeError) as e:
            logger.warning("Redis SCAN failed for %s: %s", pattern, e)
            raise BackendError("find_by_pattern", key=pattern, original_error=e) from e

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
