"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field


class CacheInvalidateRequest(BaseModel):
    """Request DTO for invalidating cache entries by pattern."""

    patterns: list[str] = Field(
        ...,
        description="Glob fragments appended to the key prefix (e.g. 'product-*')",
        min_length=1,
    )


class ProductUpdateRequest(BaseModel):
    """Request DTO for updating a catalogue product."""

    name: str = Field(..., description="Product name", min_length=1)
    price: float = Field(..., description="Unit price", ge=0.0)
