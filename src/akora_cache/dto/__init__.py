"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
Internal logic should use entities from the entities package.
"""

from .requests import PreloadRequest, StoreCacheRequest
from .responses import (
    CacheEntryResponse,
    CacheStatsResponse,
    CacheStoreResponse,
    ClearCacheResponse,
    DomainQueryResponse,
    HealthCheckResponse,
    PreloadResponse,
)

__all__ = [
    "PreloadRequest",
    "StoreCacheRequest",
    "CacheEntryResponse",
    "CacheStatsResponse",
    "CacheStoreResponse",
    "ClearCacheResponse",
    "DomainQueryResponse",
    "HealthCheckResponse",
    "PreloadResponse",
]
