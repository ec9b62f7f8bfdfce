"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Swapping store clients without touching the cache logic
- Unit testing with stub backends and recording sinks
- Clear separation of concerns

Usage:
    ```python
    from etag_cache.protocols import CacheBackend, ResponseSink

    backend: CacheBackend = AsyncRedisBackend(client)  # works
    backend: CacheBackend = MemoryBackend()            # also works
    ```
"""

from .cache_backend import CacheBackend
from .response_sink import ResponseSink

__all__ = [
    "CacheBackend",
    "ResponseSink",
]
