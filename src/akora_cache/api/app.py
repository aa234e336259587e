from typing import Any

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

from akora_cache.api.dependencies import HandlerDep, build_lifespan
from akora_cache.config import configure_logging, settings
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
from akora_cache.protocols import PersistentStore, RemoteDataSource


def create_app(store: PersistentStore | None = None, remote: RemoteDataSource | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        store: Persistent store override (tests use an in-memory one).
        remote: Remote data source override.
    """
    app = FastAPI(
        title="Akora Cache API",
        description="Stale-while-revalidate cache for Akora community data",
        version="0.1.0",
        lifespan=build_lifespan(store=store, remote=remote),
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "Akora Cache API",
            "version": "0.1.0",
            "endpoints": {
                "cache": "/cache",
                "users": "/users/{user_id}/{domain}",
                "stats": "/stats",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        return await handler.health_check()

    @app.get("/stats", response_model=CacheStatsResponse)
    async def stats(handler: HandlerDep) -> CacheStatsResponse:
        return await handler.get_stats()

    @app.post("/cache/preload", response_model=PreloadResponse)
    async def preload(request: PreloadRequest, handler: HandlerDep) -> PreloadResponse:
        return await handler.preload(request)

    @app.get("/cache/{key}", response_model=CacheEntryResponse)
    async def get_entry(key: str, handler: HandlerDep) -> CacheEntryResponse:
        return await handler.get_entry(key)

    @app.put("/cache/{key}", response_model=CacheStoreResponse)
    async def store_entry(key: str, request: StoreCacheRequest, handler: HandlerDep) -> CacheStoreResponse:
        return await handler.store_entry(key, request)

    @app.delete("/cache/{key}", response_model=ClearCacheResponse)
    async def delete_entry(key: str, handler: HandlerDep) -> ClearCacheResponse:
        return await handler.delete_entry(key)

    @app.delete("/cache", response_model=ClearCacheResponse)
    async def clear_cache(handler: HandlerDep) -> ClearCacheResponse:
        """Clear every cache-owned key."""
        return await handler.clear_all()

    @app.get("/users/{user_id}/{domain}", response_model=DomainQueryResponse)
    async def read_domain(
        user_id: str,
        domain: str,
        handler: HandlerDep,
        category: str | None = None,
    ) -> DomainQueryResponse:
        """Serve the instant value and revalidate it against the remote source."""
        return await handler.read_domain(user_id, domain, category)

    @app.delete("/users/{user_id}/cache", response_model=ClearCacheResponse)
    async def invalidate_user(
        user_id: str,
        handler: HandlerDep,
        category: list[str] = Query(default=[]),
    ) -> ClearCacheResponse:
        """Drop a user's persisted domain entries."""
        return await handler.invalidate_user(user_id, category)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    configure_logging()
    uvicorn.run(
        "akora_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
