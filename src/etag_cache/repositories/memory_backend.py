"""In-process implementation of CacheBackend.

Keeps entries in a plain mapping with a monotonic expiry time per key.
Expired keys are dropped lazily when they are next touched. Intended for
local development and tests, not for multi-process deployments.
"""

import time
from collections.abc import Callable, MutableMapping, Sequence
from fnmatch import fnmatchcase


class MemoryBackend:
    """Dictionary-backed implementation of CacheBackend.

    This class satisfies the CacheBackend protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        store: MutableMapping[str, tuple[str, float]] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the memory backend.

        Args:
            store: Mapping of key -> (value, expires_at). Created if None.
            clock: Monotonic time source, overridable in tests.
        """
        self._store = store if store is not None else {}
        self._clock = clock

    def _live(self, key: str) -> str | None:
        item = self._store.get(key)
        if item is None:
            return None

        value, expires_at = item
        if expires_at <= self._clock():
            del self._store[key]
            return None
        return value

    async def get(self, key: str) -> str | None:
        return self._live(key)

    async def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        self._store[key] = (value, self._clock() + ttl_seconds)

    async def delete(self, keys: Sequence[str]) -> int:
        count = 0
        for key in set(keys):
            if self._live(key) is not None:
                del self._store[key]
                count += 1
        return count

    async def find_by_pattern(self, pattern: str) -> list[str]:
        return [key for key in list(self._store) if fnmatchcase(key, pattern) and self._live(key) is not None]

    def __len__(self) -> int:
        return sum(1 for key in list(self._store) if self._live(key) is not None)
