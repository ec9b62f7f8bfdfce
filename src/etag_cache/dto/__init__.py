"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract of the example
application. The stored cache entry itself lives in etag_cache.models.
"""

from .requests import CacheInvalidateRequest, ProductUpdateRequest
from .responses import CacheConfigResponse, CacheInvalidateResponse

__all__ = [
    "CacheInvalidateRequest",
    "ProductUpdateRequest",
    "CacheConfigResponse",
    "CacheInvalidateResponse",
]
