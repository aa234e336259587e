"""Protocol interfaces for swappable implementations.

Protocols enable:
- Swapping the durable store (Redis → in-memory, etc.)
- Swapping the remote data service client
- Unit testing with fake implementations

Usage:
    ```python
    from akora_cache.protocols import PersistentStore, RemoteDataSource

    store: PersistentStore = InMemoryPersistentStore()
    remote: RemoteDataSource = PostgrestRemoteSource.create()
    ```
"""

from .persistent_store import PersistentStore
from .remote_source import RemoteDataSource

__all__ = [
    "PersistentStore",
    "RemoteDataSource",
]
