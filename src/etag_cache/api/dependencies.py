"""Dependency injection configuration for the FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - ResponseCache stored in app.state during lifespan
    - Cache middleware and dependency functions read it from app.state
    - Clean separation, no global mutable state
"""

from contextlib import asynccontextmanager
from typing import Annotated, Any

import redis
import redis.asyncio
from fastapi import Depends, FastAPI, Request

from etag_cache.config import get_async_redis_client, get_redis_client, settings
from etag_cache.repositories import BackendKind
from etag_cache.services import ResponseCache


def get_response_cache(request: Request) -> ResponseCache:
    """Dependency injection for ResponseCache from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The ResponseCache instance from app.state

    Raises:
        RuntimeError: If the cache is not initialized
    """
    cache = getattr(request.app.state, "response_cache", None)
    if cache is None:
        raise RuntimeError("ResponseCache not initialized. Check lifespan setup.")
    return cache


def _create_client(kind: str) -> Any:
    if kind == BackendKind.REDIS:
        return get_redis_client()
    if kind == BackendKind.REDIS_ASYNCIO:
        return get_async_redis_client()
    return None


async def _close_client(client: Any) -> None:
    if isinstance(client, redis.asyncio.Redis):
        await client.aclose()
    elif isinstance(client, redis.Redis):
        client.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Builds the ResponseCache from settings, unless one was injected into
    app.state beforehand (tests, embedding applications), and closes the
    client it created on shutdown.

    Args:
        app: The FastAPI application instance

    Yields:
        None
    """
    client = None
    created = getattr(app.state, "response_cache", None) is None
    if created:
        client = _create_client(settings.cache_backend)
        app.state.response_cache = ResponseCache.create(settings.cache_backend, client)

    cache: ResponseCache = app.state.response_cache
    print("✓ Response cache initialized")
    print(f"✓ Backend: {type(cache.backend).__name__}")
    print(f"✓ Key prefix: {cache.key_prefix} (ttl {cache.ttl}s)")

    yield

    if created:
        await _close_client(client)
        del app.state.response_cache
    print("✓ Response cache shut down")


# Type alias for cleaner dependency injection
CacheDep = Annotated[ResponseCache, Depends(get_response_cache)]
