"""Cache backend protocol.

Defines the uniform asynchronous contract every key-value store adapter
exposes to the response cache, whatever the calling convention of the
underlying client.

Implementations include:
- redis-py synchronous client (bridged onto the event loop)
- redis-py asyncio client
- in-process memory store
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class CacheBackend(Protocol):
    """Protocol for cache storage backends.

    Any type that implements these coroutines satisfies the protocol,
    no explicit inheritance needed.

    Example:
        ```python
        from etag_cache.protocols import CacheBackend

        backend: CacheBackend = AsyncRedisBackend(client)
        backend: CacheBackend = MemoryBackend()
        ```
    """

    async def get(self, key: str) -> str | None:
        """Read a stored value.

        Args:
            key: The cache key

        Returns:
            The stored string, or None if the key is absent.
            An empty string is a present value.
        """
        ...

    async def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        """Write a value that expires after ``ttl_seconds``.

        Args:
            key: The cache key
            value: The serialized entry
            ttl_seconds: Time-to-live in seconds (> 0)
        """
        ...

    async def delete(self, keys: Sequence[str]) -> int:
        """Delete keys.

        Args:
            keys: Keys to remove

        Returns:
            Number of keys actually removed (0 for an empty sequence)
        """
        ...

    async def find_by_pattern(self, pattern: str) -> list[str]:
        """Enumerate stored keys matching a glob pattern.

        Args:
            pattern: Glob expression, e.g. ``express-cache:product-*``

        Returns:
            Matching keys, in no particular order
        """
        ...
