"""Repository layer for data access.

This layer hides external dependencies (Redis, the remote table API)
behind protocol-based interfaces. Any class implementing the required
methods satisfies the protocol; nothing here inherits from it.
"""

from akora_cache.protocols import PersistentStore, RemoteDataSource

from .memory_store import InMemoryPersistentStore
from .postgrest_source import PostgrestRemoteSource
from .redis_store import RedisPersistentStore

__all__ = [
    "PersistentStore",
    "RemoteDataSource",
    "InMemoryPersistentStore",
    "PostgrestRemoteSource",
    "RedisPersistentStore",
]
