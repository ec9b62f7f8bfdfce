"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field


class CacheInvalidateResponse(BaseModel):
    """Response DTO for cache invalidation."""

    deleted_count: int = Field(..., description="Number of entries removed", ge=0)
    patterns: list[str] = Field(..., description="Full key patterns that were resolved")


class CacheConfigResponse(BaseModel):
    """Response DTO for the effective cache configuration."""

    key_prefix: str = Field(..., description="Namespace prepended to every key")
    ttl_seconds: int = Field(..., description="Entry time-to-live in seconds", ge=1)
    request_header_name: str = Field(..., description="Header carrying the client's tag")
    response_header_name: str = Field(..., description="Header the fingerprint is sent in")
    backend: str = Field(..., description="Backend implementation in use")
