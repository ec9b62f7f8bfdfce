"""
Shared fixtures for the response cache tests.
"""

from unittest.mock import AsyncMock

import pytest

from etag_cache import MemoryBackend, ResponseCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Create a fake clock starting at t=1000."""
    return FakeClock()


@pytest.fixture
def memory_backend(clock):
    """Create an empty memory backend driven by the fake clock."""
    return MemoryBackend(clock=clock)


@pytest.fixture
def mock_backend():
    """Create a CacheBackend double that records every call."""
    backend = AsyncMock()
    backend.get.return_value = None
    backend.find_by_pattern.return_value = []
    backend.delete.return_value = 0
    return backend


@pytest.fixture
def cache(mock_backend):
    """Create a ResponseCache over the mock backend with explicit defaults."""
    return ResponseCache(
        backend=mock_backend,
        key_prefix="express-cache:",
        ttl=60,
        request_header_name="if-none-match",
        response_header_name="etag",
    )
