"""HTTP handlers for cache operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes and error mapping.
"""

from fastapi import HTTPException, status

from akora_cache.dto import (
    CacheEntryResponse,
    CacheStatsResponse,
    CacheStoreResponse,
    ClearCacheResponse,
    DomainQueryResponse,
    HealthCheckResponse,
    PreloadRequest,
    PreloadResponse,
    StoreCacheRequest,
)
from akora_cache.exceptions import RemoteFetchError
from akora_cache.keys import CacheKeys
from akora_cache.services import CacheService, DomainQueries


class CacheHandler:
    """HTTP handlers for cache inspection and domain reads.

    Delegates to CacheService and DomainQueries and handles:
    - Converting entities to DTOs
    - Setting appropriate status codes
    - Mapping remote failures to 502
    """

    def __init__(self, cache_service: CacheService, queries: DomainQueries) -> None:
        """Initialize the cache handler.

        Args:
            cache_service: The cache service (required).
            queries: Domain query factory (required).
        """
        self._cache = cache_service
        self._queries = queries

    async def get_entry(self, key: str) -> CacheEntryResponse:
        """Handle GET /cache/{key} requests."""
        entry = await self._cache.get_entry(key)
        return CacheEntryResponse(
            key=key,
            hit=entry is not None,
            value=entry.value if entry is not None else None,
            expires_at=entry.expires_at if entry is not None else None,
            in_memory=self._cache.get_memory_cache_sync(key) is not None,
        )

    async def store_entry(self, key: str, request: StoreCacheRequest) -> CacheStoreResponse:
        """Handle PUT /cache/{key} requests."""
        stored = await self._cache.cache_data(key, request.data, expiry_minutes=request.expiry_minutes)
        return CacheStoreResponse(
            success=stored,
            key=key,
            message="Entry stored successfully" if stored else "Entry could not be persisted",
        )

    async def delete_entry(self, key: str) -> ClearCacheResponse:
        """Handle DELETE /cache/{key} requests."""
        count = await self._cache.clear_cache(key)
        return ClearCacheResponse(deleted_count=count, message=f"Cleared {key}")

    async def clear_all(self) -> ClearCacheResponse:
        """Handle DELETE /cache requests."""
        count = await self._cache.clear_all_cache()
        return ClearCacheResponse(deleted_count=count, message="Cache cleared successfully")

    async def preload(self, request: PreloadRequest) -> PreloadResponse:
        """Handle POST /cache/preload requests."""
        loaded = await self._cache.preload_cache_to_memory(request.keys)
        return PreloadResponse(requested=len(request.keys), loaded=loaded)

    async def read_domain(self, user_id: str, domain: str, category: str | None = None) -> DomainQueryResponse:
        """Handle GET /users/{user_id}/{domain} requests.

        Returns the instant (mirror) value together with the revalidated one.

        Raises:
            HTTPException: 404 for unknown domains, 502 if the remote fetch fails
        """
        if domain not in CacheKeys.DOMAINS:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown cache domain: {domain}",
            )

        handle = self._queries.for_domain(domain, user_id, category)  # type: ignore[arg-type]
        instant = handle.data
        task = handle.start()

        try:
            fresh = await task if task is not None else instant
        except RemoteFetchError as e:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Failed to revalidate {handle.key}: {e}",
            ) from e

        return DomainQueryResponse(
            key=handle.key or "",
            instant=instant,
            data=fresh,
            status=handle.status.value,
        )

    async def invalidate_user(self, user_id: str, categories: list[str]) -> ClearCacheResponse:
        """Handle DELETE /users/{user_id}/cache requests."""
        count = await self._queries.invalidate_user(user_id, tuple(categories))
        return ClearCacheResponse(deleted_count=count, message=f"Invalidated cache for user {user_id}")

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /stats requests."""
        return CacheStatsResponse(**await self._cache.get_stats())

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        stats = await self._cache.get_stats()
        healthy = stats["store_healthy"]
        return HealthCheckResponse(status="healthy" if healthy else "unhealthy", store_healthy=healthy)
