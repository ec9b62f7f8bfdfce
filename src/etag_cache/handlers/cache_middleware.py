"""ASGI middleware for cached routes.

CacheMiddleware serves a stored response when the client presents a known
validation tag, and otherwise captures the downstream response and stores
it under its fingerprint. ClearCacheMiddleware invalidates groups of
entries once a (mutating) route has answered successfully.

Both can wrap a whole application or a single Starlette route::

    Route("/products/{id}", get_product, middleware=[
        Middleware(CacheMiddleware, tag_prefix=lambda r: f"product-{r.path_params['id']}"),
    ])

Storage and invalidation failures are reported to the configured error
handlers only after the response has been sent, so they never alter what
the client receives.
"""

import logging

from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from etag_cache.interceptor import ASGIResponseSink, asgi_send, intercept
from etag_cache.keys import (
    EligibilityPredicate,
    TagPattern,
    TagPrefix,
    generate_etag,
    is_success_status,
    resolve_tag_patterns,
    resolve_tag_prefix,
)
from etag_cache.models import CacheEntry
from etag_cache.services import ResponseCache

logger = logging.getLogger(__name__)


class _CacheMiddlewareBase:
    def __init__(self, app: ASGIApp, cache: ResponseCache | None = None) -> None:
        self.app = app
        self._cache = cache

    def _resolve_cache(self, scope: Scope) -> ResponseCache:
        """Use the bound cache, else the one stored on the application state."""
        if self._cache is not None:
            return self._cache

        app = scope.get("app")
        cache = getattr(getattr(app, "state", None), "response_cache", None)
        if cache is None:
            raise RuntimeError("ResponseCache not initialized. Pass cache= or set app.state.response_cache.")
        return cache


class CacheMiddleware(_CacheMiddlewareBase):
    """Serve responses from the cache and store fresh ones.

    Args:
        app: The downstream ASGI application.
        cache: The ResponseCache to use. If None, taken from
            ``app.state.response_cache`` at request time.
        tag_prefix: Static string or callable of the request. Defaults to
            the request path plus its query parameters.
        is_eligible_for_save: Predicate on the final status code. Defaults
            to 2xx only. It runs before the final chunk is sent and is not
            routed to the write-error handler, so an exception it raises
            aborts the response.
    """

    def __init__(
        self,
        app: ASGIApp,
        cache: ResponseCache | None = None,
        tag_prefix: TagPrefix | None = None,
        is_eligible_for_save: EligibilityPredicate | None = None,
    ) -> None:
        super().__init__(app, cache)
        self.tag_prefix = tag_prefix
        self.is_eligible_for_save = is_eligible_for_save or is_success_status

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        cache = self._resolve_cache(scope)
        request = Request(scope, receive)
        sink = ASGIResponseSink(send)
        tag_prefix = await resolve_tag_prefix(request, self.tag_prefix)
        token = request.headers.get(cache.request_header_name)

        try:
            entry = await cache.lookup(tag_prefix, token) if token else None
        except Exception as e:
            response = await cache.handle_read_error(e, request)
            if response is not None:
                await response(scope, receive, send)
            return

        if entry is not None:
            sink.begin(entry.status_code, entry.raw_headers())
            await sink.end(entry.body.encode("utf-8"))
            return

        failures: list[Exception] = []

        async def store_response(body: str) -> None:
            if not self.is_eligible_for_save(sink.status_code):
                logger.debug("Not caching %s: status %d", request.url.path, sink.status_code)
                return

            try:
                if sink.headers_sent:
                    logger.debug("Not caching %s: headers already sent", request.url.path)
                    return
                if body.encode("utf-8") != interceptor.captured_body:
                    logger.debug("Not caching %s: body is not UTF-8 text", request.url.path)
                    return

                sink.headers[cache.response_header_name] = generate_etag(body)
                entry = CacheEntry.snapshot(sink.status_code, sink.headers.items(), body)
                await cache.save(tag_prefix, entry)
            except Exception as e:
                failures.append(e)

        interceptor = intercept(sink, store_response)
        await self.app(scope, receive, asgi_send(interceptor))

        for error in failures:
            await cache.handle_write_error(error, request)


class ClearCacheMiddleware(_CacheMiddlewareBase):
    """Invalidate cached entries after an eligible response.

    Args:
        app: The downstream ASGI application.
        tag_pattern: Glob fragment(s) appended to the key prefix, or a
            callable of the request returning them.
        cache: The ResponseCache to use. If None, taken from
            ``app.state.response_cache`` at request time.
        is_eligible_for_clear: Predicate on the final status code. Defaults
            to 2xx only. It runs before the final chunk is sent and is not
            routed to the clear-error handler, so an exception it raises
            aborts the response.
    """

    def __init__(
        self,
        app: ASGIApp,
        tag_pattern: TagPattern | None = None,
        cache: ResponseCache | None = None,
        is_eligible_for_clear: EligibilityPredicate | None = None,
    ) -> None:
        super().__init__(app, cache)
        self.tag_pattern = tag_pattern
        self.is_eligible_for_clear = is_eligible_for_clear or is_success_status

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        cache = self._resolve_cache(scope)
        request = Request(scope, receive)
        fragments = await resolve_tag_patterns(request, self.tag_pattern)
        if not fragments:
            await self.app(scope, receive, send)
            return

        patterns = cache.key_patterns(fragments)
        sink = ASGIResponseSink(send)
        failures: list[Exception] = []

        async def clear_entries(body: str) -> None:
            if not self.is_eligible_for_clear(sink.status_code):
                logger.debug("Not clearing %s: status %d", patterns, sink.status_code)
                return

            try:
                await cache.invalidate(patterns)
            except Exception as e:
                failures.append(e)

        await self.app(scope, receive, asgi_send(intercept(sink, clear_entries)))

        for error in failures:
            await cache.handle_clear_error(error, request)
