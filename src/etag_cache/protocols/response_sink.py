"""Response sink protocol.

The outgoing side of one HTTP exchange: status and headers that can still
change until they are flushed, incremental writes, and a final ``end``.
"""

from collections.abc import MutableMapping
from typing import Any, Protocol

from starlette.datastructures import MutableHeaders


class ResponseSink(Protocol):
    """Protocol for an outgoing HTTP response."""

    status_code: int

    @property
    def headers(self) -> MutableHeaders:
        """Current response headers (mutable until flushed)."""
        ...

    @property
    def headers_sent(self) -> bool:
        """Whether status and headers have been flushed to the transport."""
        ...

    @property
    def finished(self) -> bool:
        """Whether the final chunk has been sent."""
        ...

    def begin(self, status_code: int, raw_headers: list[tuple[bytes, bytes]]) -> None:
        """Set status and headers without flushing them."""
        ...

    async def write(self, chunk: bytes) -> None:
        """Send one body chunk, more to follow."""
        ...

    async def end(self, chunk: bytes = b"") -> None:
        """Send the final body chunk and complete the response."""
        ...

    async def passthrough(self, message: MutableMapping[str, Any]) -> None:
        """Forward a transport message the sink does not interpret."""
        ...
