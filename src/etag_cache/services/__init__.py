"""Service layer for cache logic.

This layer contains key building, conditional lookup, fingerprinted storage
and pattern invalidation. The service depends on the CacheBackend protocol,
not on a concrete store, making it testable and flexible.

Architecture:
    Middleware -> ResponseCache -> CacheBackend
    (HTTP)     -> (Business)    -> (Data Access)

Usage:
    ```python
    from etag_cache.services import ResponseCache

    # Using factory method (recommended)
    cache = ResponseCache.create("redis-asyncio", client)
    cache = ResponseCache.create("memory", ttl=300)

    # Or manual creation
    cache = ResponseCache(backend=AsyncRedisBackend(client))
    ```
"""

from .response_cache import ResponseCache

__all__ = [
    "ResponseCache",
]
