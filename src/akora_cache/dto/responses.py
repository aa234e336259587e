"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class CacheEntryResponse(BaseModel):
    """Response DTO for reading one cache entry."""

    key: str = Field(..., description="Domain cache key")
    hit: bool = Field(..., description="Whether a live entry was found in the persistent store")
    value: Any = Field(None, description="The cached value, if any")
    expires_at: int | None = Field(None, description="Expiry as epoch milliseconds, null if permanent")
    in_memory: bool = Field(..., description="Whether the in-memory mirror holds a value for the key")


class CacheStoreResponse(BaseModel):
    """Response DTO for cache store operation."""

    success: bool = Field(..., description="Whether the value reached the persistent store")
    key: str = Field(..., description="The domain cache key")
    message: str = Field(..., description="Human-readable status message")


class ClearCacheResponse(BaseModel):
    """Response DTO for clear operations."""

    deleted_count: int = Field(..., description="Number of persisted keys removed", ge=0)
    message: str = Field(..., description="Human-readable status message")


class PreloadResponse(BaseModel):
    """Response DTO for mirror preload."""

    requested: int = Field(..., ge=0)
    loaded: int = Field(..., description="Keys found live and copied into memory", ge=0)


class DomainQueryResponse(BaseModel):
    """Response DTO for a revalidated domain query."""

    key: str = Field(..., description="Domain cache key")
    instant: Any = Field(None, description="Value served from memory before revalidation")
    data: Any = Field(None, description="Fresh value from the remote source")
    status: str = Field(..., description="Query status after revalidation")


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    cache_prefix: str
    expiry_prefix: str
    memory_entries: int = Field(..., ge=0)
    default_expiry_minutes: float = Field(..., ge=0)
    store_healthy: bool


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    store_healthy: bool = Field(..., description="Whether the persistent store is reachable")
