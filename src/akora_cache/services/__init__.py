"""Service layer for cache logic.

Services depend on protocols (interfaces), not concrete implementations,
which keeps them testable with in-memory fakes.

Architecture:
    Handler -> DomainQueries -> CacheService -> PersistentStore
                             -> RemoteDataSource

Usage:
    ```python
    from akora_cache.services import CacheService, DomainQueries

    cache = CacheService.create()
    queries = DomainQueries(cache, remote)
    ```
"""

from .cache_service import CacheService, get_cache_service
from .memory_mirror import MemoryMirror
from .queries import DomainQueries, ExpiryPolicy, QueryHandle

__all__ = [
    "CacheService",
    "DomainQueries",
    "ExpiryPolicy",
    "MemoryMirror",
    "QueryHandle",
    "get_cache_service",
]
