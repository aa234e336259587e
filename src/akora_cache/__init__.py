"""Akora Cache - two-tier stale-while-revalidate cache for community data.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (PersistentStore, RemoteDataSource)
    - repositories: Redis / in-memory stores, PostgREST remote source
    - services: Expiring cache + in-memory mirror, domain queries
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from akora_cache.services import CacheService, DomainQueries

    cache = CacheService.create()
    queries = DomainQueries(cache, PostgrestRemoteSource.create())
    feed = queries.home_posts(user_id)
    ```

For HTTP API:
    ```python
    from akora_cache.api.app import app
    ```
"""

from akora_cache.config import get_redis_client, settings
from akora_cache.entities import CacheEntryEntity, QuerySnapshot, QueryStatus, TableQuery
from akora_cache.exceptions import AkoraCacheError, RemoteFetchError, StorageError
from akora_cache.keys import CacheKeys
from akora_cache.protocols import PersistentStore, RemoteDataSource
from akora_cache.repositories import (
    InMemoryPersistentStore,
    PostgrestRemoteSource,
    RedisPersistentStore,
)
from akora_cache.services import (
    CacheService,
    DomainQueries,
    ExpiryPolicy,
    MemoryMirror,
    QueryHandle,
    get_cache_service,
)

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Errors
    "AkoraCacheError",
    "RemoteFetchError",
    "StorageError",
    # Keys
    "CacheKeys",
    # Protocols (interfaces)
    "PersistentStore",
    "RemoteDataSource",
    # Repositories (data access)
    "InMemoryPersistentStore",
    "PostgrestRemoteSource",
    "RedisPersistentStore",
    # Services
    "CacheService",
    "DomainQueries",
    "ExpiryPolicy",
    "MemoryMirror",
    "QueryHandle",
    "get_cache_service",
    # Entities (domain models)
    "CacheEntryEntity",
    "QuerySnapshot",
    "QueryStatus",
    "TableQuery",
]
