"""ETag Cache - HTTP response caching middleware keyed by entity tags.

This package provides a layered architecture for response caching:

Layers:
    - protocols: Interface contracts (CacheBackend, ResponseSink)
    - repositories: Store adapters (redis sync, redis asyncio, memory)
    - services: Cache logic (ResponseCache)
    - handlers: ASGI middleware (CacheMiddleware, ClearCacheMiddleware)
    - interceptor: Response body capture
    - models: Stored cache entry

Usage:
    ```python
    from etag_cache import ResponseCache

    cache = ResponseCache.create("redis-asyncio", redis_client)

    routes = [
        Route("/products", list_products, middleware=[cache.middleware()]),
        Route("/products", create_product, methods=["POST"],
              middleware=[cache.clear(tag_pattern="/products*")]),
    ]
    ```

For the example HTTP API:
    ```python
    from etag_cache.api.app import app
    ```
"""

from etag_cache.config import get_async_redis_client, get_redis_client, settings
from etag_cache.errors import (
    BackendError,
    ConfigurationError,
    ResponseCacheError,
    SerializationError,
)
from etag_cache.handlers import CacheMiddleware, ClearCacheMiddleware
from etag_cache.interceptor import ASGIResponseSink, BodyInterceptor, intercept
from etag_cache.keys import generate_etag, is_success_status
from etag_cache.models import CacheEntry
from etag_cache.protocols import CacheBackend, ResponseSink
from etag_cache.repositories import (
    AsyncRedisBackend,
    BackendKind,
    MemoryBackend,
    RedisBackend,
    create_backend,
)
from etag_cache.services import ResponseCache

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    "get_async_redis_client",
    # Protocols (interfaces)
    "CacheBackend",
    "ResponseSink",
    # Services (business logic)
    "ResponseCache",
    # Handlers (HTTP)
    "CacheMiddleware",
    "ClearCacheMiddleware",
    # Repositories (data access)
    "BackendKind",
    "create_backend",
    "RedisBackend",
    "AsyncRedisBackend",
    "MemoryBackend",
    # Interception
    "ASGIResponseSink",
    "BodyInterceptor",
    "intercept",
    # Models and helpers
    "CacheEntry",
    "generate_etag",
    "is_success_status",
    # Errors
    "ResponseCacheError",
    "ConfigurationError",
    "BackendError",
    "SerializationError",
]
