"""Request DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class StoreCacheRequest(BaseModel):
    """Request DTO for writing a cache entry."""

    data: Any = Field(..., description="JSON-serializable payload to cache")
    expiry_minutes: float | None = Field(
        None,
        description="Minutes until the entry expires (omit to keep it until cleared)",
        gt=0,
    )


class PreloadRequest(BaseModel):
    """Request DTO for seeding the in-memory mirror."""

    keys: list[str] = Field(..., description="Domain cache keys to preload", min_length=1)
