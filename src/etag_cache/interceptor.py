"""Response body interception.

ASGIResponseSink turns the raw ASGI ``send`` callable into a ResponseSink
whose status and headers stay mutable until the first body chunk leaves.
BodyInterceptor decorates any ResponseSink: it records every chunk on the
way through and, when the response ends, hands the full body to a callback
before the real end is sent.

Typical wiring inside a middleware::

    sink = ASGIResponseSink(send)
    interceptor = intercept(sink, on_finalize)
    await app(scope, receive, asgi_send(interceptor))
"""

import logging
from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

from starlette.datastructures import MutableHeaders
from starlette.types import Message, Send

from etag_cache.protocols import ResponseSink

logger = logging.getLogger(__name__)

FinalizeCallback = Callable[[str], Awaitable[None]]


class ASGIResponseSink:
    """ResponseSink over an ASGI ``send`` callable.

    ``http.response.start`` is held back until the first write or the end,
    so headers set in between still reach the client.
    """

    def __init__(self, send: Send) -> None:
        self._send = send
        self.status_code = 200
        self._headers = MutableHeaders()
        self._headers_sent = False
        self._finished = False

    @property
    def headers(self) -> MutableHeaders:
        return self._headers

    @property
    def headers_sent(self) -> bool:
        return self._headers_sent

    @property
    def finished(self) -> bool:
        return self._finished

    def begin(self, status_code: int, raw_headers: list[tuple[bytes, bytes]]) -> None:
        self.status_code = status_code
        self._headers = MutableHeaders(raw=list(raw_headers))

    async def _flush_headers(self) -> None:
        if self._headers_sent:
            return
        self._headers_sent = True
        await self._send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self._headers.raw,
            }
        )

    async def write(self, chunk: bytes) -> None:
        if self._finished:
            logger.debug("Ignoring write after response end")
            return
        await self._flush_headers()
        await self._send({"type": "http.response.body", "body": chunk, "more_body": True})

    async def end(self, chunk: bytes = b"") -> None:
        if self._finished:
            logger.debug("Ignoring repeated response end")
            return
        await self._flush_headers()
        self._finished = True
        await self._send({"type": "http.response.body", "body": chunk, "more_body": False})

    async def passthrough(self, message: MutableMapping[str, Any]) -> None:
        await self._send(message)


class BodyInterceptor:
    """ResponseSink decorator that captures the body for ``on_finalize``.

    Chunks reach the inner sink unchanged and in order. On the first end the
    captured bytes are joined, decoded as UTF-8 and passed to
    ``on_finalize``; the inner end only runs once the callback has
    completed. Later ends are forwarded without capturing again.
    The raw bytes stay available as ``captured_body`` once captured.
    """

    def __init__(self, inner: ResponseSink, on_finalize: FinalizeCallback) -> None:
        self._inner = inner
        self._on_finalize = on_finalize
        self._chunks: list[bytes] = []
        self._captured = False
        self.captured_body: bytes | None = None

    @property
    def status_code(self) -> int:
        return self._inner.status_code

    @status_code.setter
    def status_code(self, value: int) -> None:
        self._inner.status_code = value

    @property
    def headers(self) -> MutableHeaders:
        return self._inner.headers

    @property
    def headers_sent(self) -> bool:
        return self._inner.headers_sent

    @property
    def finished(self) -> bool:
        return self._inner.finished

    def begin(self, status_code: int, raw_headers: list[tuple[bytes, bytes]]) -> None:
        self._inner.begin(status_code, raw_headers)

    async def write(self, chunk: bytes) -> None:
        if not self._captured:
            self._chunks.append(bytes(chunk))
        await self._inner.write(chunk)

    async def end(self, chunk: bytes = b"") -> None:
        if self._captured:
            await self._inner.end(chunk)
            return

        self._captured = True
        if chunk:
            self._chunks.append(bytes(chunk))
        self.captured_body = b"".join(self._chunks)
        self._chunks = []
        body = self.captured_body.decode("utf-8", errors="replace")

        await self._on_finalize(body)
        await self._inner.end(chunk)

    async def passthrough(self, message: MutableMapping[str, Any]) -> None:
        await self._inner.passthrough(message)


def intercept(sink: ResponseSink, on_finalize: FinalizeCallback) -> BodyInterceptor:
    """Wrap ``sink`` so its body is handed to ``on_finalize`` before it ends."""
    return BodyInterceptor(sink, on_finalize)


def asgi_send(sink: ResponseSink) -> Send:
    """Adapt a ResponseSink back to an ASGI ``send`` callable for the app."""

    async def send(message: Message) -> None:
        message_type = message["type"]
        if message_type == "http.response.start":
            sink.begin(message["status"], list(message.get("headers", [])))
        elif message_type == "http.response.body":
            body = message.get("body", b"")
            if message.get("more_body", False):
                await sink.write(body)
            else:
                await sink.end(body)
        else:
            await sink.passthrough(message)

    return send
