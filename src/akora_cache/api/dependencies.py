"""Dependency injection configuration for the FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - No global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from akora_cache.handlers import CacheHandler
from akora_cache.protocols import PersistentStore, RemoteDataSource
from akora_cache.repositories import PostgrestRemoteSource
from akora_cache.services import CacheService, DomainQueries

logger = logging.getLogger(__name__)


def get_handler(request: Request) -> CacheHandler:
    """Dependency injection for CacheHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "cache_handler", None)
    if handler is None:
        raise RuntimeError("CacheHandler not initialized. Check lifespan setup.")
    return handler


def build_lifespan(store: PersistentStore | None = None, remote: RemoteDataSource | None = None):
    """Create the lifespan context manager.

    Args:
        store: Persistent store to use. Defaults to Redis or in-memory per settings.
        remote: Remote data source to use. Defaults to PostgREST per settings.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize all layers into app.state and tear them down on shutdown.

        1. Service (expiring cache + mirror) - app.state.cache_service
        2. Domain queries (remote source + cache) - app.state.queries
        3. Handler (HTTP endpoints) - app.state.cache_handler
        """
        cache_service = CacheService.create(store=store)
        remote_source = remote or PostgrestRemoteSource.create()
        queries = DomainQueries(cache_service, remote_source)

        app.state.cache_service = cache_service
        app.state.queries = queries
        app.state.cache_handler = CacheHandler(cache_service=cache_service, queries=queries)

        stats = await cache_service.get_stats()
        logger.info("Cache service initialized (store healthy: %s)", stats["store_healthy"])

        yield

        await remote_source.close()
        close_store = getattr(cache_service.store, "close", None)
        if close_store is not None:
            await close_store()

        del app.state.cache_handler
        del app.state.queries
        del app.state.cache_service
        logger.info("Cache service shut down")

    return lifespan


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[CacheHandler, Depends(get_handler)]
