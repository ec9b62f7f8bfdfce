"""Handler layer for the HTTP pipeline.

This layer contains the ASGI middleware that applies the cache to requests.
Handlers depend on the service (cache logic), not directly on backends.

Architecture:
    Middleware -> ResponseCache -> CacheBackend
    (HTTP)     -> (Business)    -> (Data Access)
"""

from .cache_middleware import CacheMiddleware, ClearCacheMiddleware

__all__ = [
    "CacheMiddleware",
    "ClearCacheMiddleware",
]
