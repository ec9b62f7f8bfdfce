"""Backend selection by kind tag.

The set of backends is closed: a configured kind string maps to exactly one
adapter class, chosen once when the cache is constructed.
"""

from enum import Enum
from typing import Any

from etag_cache.errors import ConfigurationError
from etag_cache.protocols import CacheBackend

from .async_redis_backend import AsyncRedisBackend
from .memory_backend import MemoryBackend
from .redis_backend import RedisBackend


class BackendKind(str, Enum):
    """Supported store clients."""

    REDIS = "redis"
    REDIS_ASYNCIO = "redis-asyncio"
    MEMORY = "memory"


def create_backend(kind: BackendKind | str, client: Any = None) -> CacheBackend:
    """Build the adapter for ``kind`` around ``client``.

    Args:
        kind: A BackendKind or its string value (e.g. "redis-asyncio")
        client: The native client handle. Required for Redis kinds; for the
            memory kind it is an optional mapping used as the store.

    Returns:
        A CacheBackend implementation

    Raises:
        ConfigurationError: If the kind is unknown or a Redis client is missing
    """
    if not kind:
        raise ConfigurationError("cache backend kind is required")

    try:
        backend_kind = BackendKind(kind)
    except ValueError as e:
        supported = ", ".join(k.value for k in BackendKind)
        raise ConfigurationError(
            f"unsupported cache backend {kind!r}, expected one of: {supported}",
            details={"kind": str(kind)},
        ) from e

    if backend_kind is BackendKind.MEMORY:
        return MemoryBackend(store=client)

    if client is None:
        raise ConfigurationError(
            "redis client is required",
            details={"kind": backend_kind.value},
        )

    if backend_kind is BackendKind.REDIS:
        return RedisBackend(client)
    return AsyncRedisBackend(client)
