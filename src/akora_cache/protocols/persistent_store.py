"""Persistent store protocol.

Defines the interface for the durable key/value store that backs the
cache across process restarts. Keys are plain strings, values are
pre-serialized JSON text.

Implementations can include:
- Redis (default)
- In-process dictionary (tests, offline use)
- Any other key/value store with key enumeration
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class PersistentStore(Protocol):
    """Protocol for persistent key/value backends.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed.

    Implementations report failures by raising ``StorageError``. Callers
    inside this package never let that error escape the cache boundary.

    Example:
        ```python
        store: PersistentStore = RedisPersistentStore.create()
        store: PersistentStore = InMemoryPersistentStore()
        ```
    """

    async def get(self, key: str) -> str | None:
        """Read a value.

        Args:
            key: The store key

        Returns:
            The stored text, or None if the key is absent
        """
        ...

    async def get_many(self, keys: list[str]) -> dict[str, str | None]:
        """Read several values in one round trip.

        Args:
            keys: The store keys

        Returns:
            Mapping of every requested key to its text or None
        """
        ...

    async def set(self, key: str, value: str) -> None:
        """Write a value, overwriting any previous one.

        Args:
            key: The store key
            value: Serialized text to store
        """
        ...

    async def remove_many(self, keys: list[str]) -> int:
        """Delete several keys. Missing keys are ignored.

        Args:
            keys: The store keys to delete

        Returns:
            Number of keys that existed and were removed
        """
        ...

    async def list_keys(self) -> list[str]:
        """List every key in the store.

        Returns:
            All keys, including ones not owned by the cache
        """
        ...

    async def health_check(self) -> bool:
        """Check if the store is accessible.

        Returns:
            True if healthy, False otherwise
        """
        ...
