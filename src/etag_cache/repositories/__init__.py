"""Repository layer for data access.

This layer adapts concrete key-value store clients to the CacheBackend
protocol. This enables:
- Swapping redis-py sync, redis-py asyncio or an in-process store
- Unit testing with mock clients
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required coroutines will satisfy the protocol.
"""

from etag_cache.protocols import CacheBackend

from .async_redis_backend import AsyncRedisBackend
from .factory import BackendKind, create_backend
from .memory_backend import MemoryBackend
from .redis_backend import RedisBackend

__all__ = [
    "CacheBackend",
    "BackendKind",
    "create_backend",
    "RedisBackend",
    "AsyncRedisBackend",
    "MemoryBackend",
]
