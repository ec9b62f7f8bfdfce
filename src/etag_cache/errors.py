"""Error taxonomy for the response cache.

Every error raised by the cache derives from ResponseCacheError and keeps
the original exception chained as ``__cause__``.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from starlette.requests import Request
from starlette.responses import Response


class ResponseCacheError(Exception):
    """Base exception for response cache errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(ResponseCacheError):
    """Raised at construction when the backend selection or client is invalid."""


class BackendError(ResponseCacheError):
    """Raised when a store operation fails."""

    def __init__(
        self,
        operation: str,
        key: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        details: dict[str, Any] = {"operation": operation}
        if key is not None:
            details["key"] = key
        if original_error is not None:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        message = f"Cache backend {operation} failed"
        if original_error is not None:
            message = f"{message}: {original_error}"

        super().__init__(message=message, details=details)
        self.operation = operation
        self.key = key
        if original_error is not None:
            self.__cause__ = original_error


class SerializationError(ResponseCacheError):
    """Raised when a stored value cannot be decoded into a cache entry."""


ErrorHandler = Callable[
    [Exception, Request],
    Response | None | Awaitable[Response | None],
]


def raise_error(error: Exception, request: Request) -> None:
    """Default handler: propagate the error to the surrounding pipeline."""
    raise error
