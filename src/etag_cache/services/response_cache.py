"""Response cache service.

Holds the cache configuration and the storage backend, and implements the
key-level operations the middleware layer builds on: conditional lookup,
fingerprinted save and pattern invalidation. No per-request state lives
here; tag prefixes and captured bodies are passed in by the caller.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import Response

from etag_cache.config import settings
from etag_cache.errors import ErrorHandler, raise_error
from etag_cache.keys import (
    EligibilityPredicate,
    TagPattern,
    TagPrefix,
    build_key,
    generate_etag,
    maybe_await,
)
from etag_cache.models import CacheEntry
from etag_cache.protocols import CacheBackend
from etag_cache.repositories import BackendKind, create_backend

logger = logging.getLogger(__name__)


class ResponseCache:
    """ETag-keyed HTTP response cache.

    This service depends on the CacheBackend PROTOCOL, not a concrete
    store: redis-py sync, redis-py asyncio and the in-process memory store
    are interchangeable.

    Example:
        ```python
        from etag_cache import ResponseCache

        cache = ResponseCache.create("redis-asyncio", redis_client, ttl=300)

        routes = [
            Route("/products", list_products, middleware=[cache.middleware()]),
            Route(
                "/products/{id}",
                update_product,
                methods=["PUT"],
                middleware=[cache.clear(tag_pattern="/products*")],
            ),
        ]
        ```
    """

    def __init__(
        self,
        backend: CacheBackend,
        key_prefix: str | None = None,
        ttl: int | None = None,
        request_header_name: str | None = None,
        response_header_name: str | None = None,
        read_error_handler: ErrorHandler | None = None,
        write_error_handler: ErrorHandler | None = None,
        clear_error_handler: ErrorHandler | None = None,
    ) -> None:
        """Initialize the response cache.

        Args:
            backend: Storage backend (required).
            key_prefix: Namespace for every key. Defaults to settings.
            ttl: Entry time-to-live in seconds. Defaults to settings.
            request_header_name: Header carrying the client's tag. Defaults to settings.
            response_header_name: Header the fingerprint is sent in. Defaults to settings.
            read_error_handler: Called when a lookup fails. Default re-raises.
            write_error_handler: Called when storing fails. Default re-raises.
            clear_error_handler: Called when invalidation fails. Default re-raises.
        """
        self._backend = backend
        self._key_prefix = key_prefix or settings.cache_key_prefix
        self._ttl = settings.cache_ttl if ttl is None else ttl
        self._request_header_name = (request_header_name or settings.request_header_name).lower()
        self._response_header_name = (response_header_name or settings.response_header_name).lower()
        self._read_error_handler = read_error_handler or raise_error
        self._write_error_handler = write_error_handler or raise_error
        self._clear_error_handler = clear_error_handler or raise_error

        if self._ttl <= 0:
            raise ValueError(f"ttl must be a positive number of seconds, got {self._ttl}")

    @classmethod
    def create(
        cls,
        backend_kind: BackendKind | str,
        client: Any = None,
        **options: Any,
    ) -> "ResponseCache":
        """Factory method selecting the backend by kind tag.

        Args:
            backend_kind: "redis", "redis-asyncio" or "memory".
            client: Native client handle for the chosen kind.
            **options: Any ResponseCache keyword argument.

        Returns:
            Configured ResponseCache

        Raises:
            ConfigurationError: If the kind is unknown or the client is missing.
        """
        return cls(backend=create_backend(backend_kind, client), **options)

    def build_key(self, tag_prefix: str, tag: str) -> str:
        """Full store key for a tag under a tag prefix."""
        return build_key(self._key_prefix, tag_prefix, tag)

    async def lookup(self, tag_prefix: str, token: str) -> CacheEntry | None:
        """Find the entry a client's validation token points at.

        Business logic:
        1. Build the key from the tag prefix and the token
        2. Read it from the backend
        3. Treat absent and empty values alike as a miss
        4. Decode the stored entry

        Returns:
            The cached entry, or None on a miss

        Raises:
            BackendError: If the backend read fails
            SerializationError: If the stored value is malformed
        """
        key = self.build_key(tag_prefix, token)
        raw = await self._backend.get(key)
        if not raw:
            logger.debug("Cache miss for %s", key)
            return None

        logger.debug("Cache hit for %s", key)
        return CacheEntry.decode(raw)

    async def save(self, tag_prefix: str, entry: CacheEntry) -> str:
        """Store an entry under its body fingerprint.

        Returns:
            The storage key for the entry
        """
        key = self.build_key(tag_prefix, generate_etag(entry.body))
        await self._backend.set_with_expiry(key, entry.encode(), self._ttl)
        logger.debug("Stored %s (ttl=%ss)", key, self._ttl)
        return key

    def key_patterns(self, fragments: Sequence[str]) -> list[str]:
        """Prefix each pattern fragment with the key namespace."""
        return [self._key_prefix + fragment for fragment in fragments]

    async def resolve_keys(self, patterns: Sequence[str]) -> list[str]:
        """Resolve key patterns concurrently into one de-duplicated key list."""
        results = await asyncio.gather(*(self._backend.find_by_pattern(pattern) for pattern in patterns))
        return list(dict.fromkeys(key for keys in results for key in keys))

    async def invalidate(self, patterns: Sequence[str]) -> int:
        """Delete every key matching any of the patterns.

        Args:
            patterns: Full key patterns (key prefix included)

        Returns:
            Number of entries deleted
        """
        keys = await self.resolve_keys(patterns)
        if not keys:
            logger.debug("Nothing to clear for %s", list(patterns))
            return 0

        count = await self._backend.delete(keys)
        logger.debug("Cleared %d of %d keys for %s", count, len(keys), list(patterns))
        return count

    async def handle_read_error(self, error: Exception, request: Request) -> Response | None:
        return await maybe_await(self._read_error_handler(error, request))

    async def handle_write_error(self, error: Exception, request: Request) -> None:
        await maybe_await(self._write_error_handler(error, request))

    async def handle_clear_error(self, error: Exception, request: Request) -> None:
        await maybe_await(self._clear_error_handler(error, request))

    def middleware(
        self,
        tag_prefix: TagPrefix | None = None,
        is_eligible_for_save: EligibilityPredicate | None = None,
    ) -> Middleware:
        """Middleware entry serving and storing responses through this cache."""
        from etag_cache.handlers import CacheMiddleware

        return Middleware(
            CacheMiddleware,
            cache=self,
            tag_prefix=tag_prefix,
            is_eligible_for_save=is_eligible_for_save,
        )

    def clear(
        self,
        tag_pattern: TagPattern,
        is_eligible_for_clear: EligibilityPredicate | None = None,
    ) -> Middleware:
        """Middleware entry invalidating entries after a successful response."""
        from etag_cache.handlers import ClearCacheMiddleware

        return Middleware(
            ClearCacheMiddleware,
            cache=self,
            tag_pattern=tag_pattern,
            is_eligible_for_clear=is_eligible_for_clear,
        )

    @property
    def key_prefix(self) -> str:
        return self._key_prefix

    @property
    def ttl(self) -> int:
        return self._ttl

    @property
    def request_header_name(self) -> str:
        return self._request_header_name

    @property
    def response_header_name(self) -> str:
        return self._response_header_name

    @property
    def backend(self) -> CacheBackend:
        """Get the underlying backend (for testing)."""
        return self._backend
