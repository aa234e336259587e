"""Expiring cache service.

This service layers expiry and an in-memory mirror on top of a
PersistentStore. Every value lives under ``akora_cache_<key>``; entries
written with an expiry get a companion ``akora_expiry_<key>`` marker
holding the expiry as epoch milliseconds.

Storage failures never leave this module: they are logged and turned
into a miss or a skipped write. Only ``fetch_fn`` errors passed to
``get_cached_or_fetch`` propagate.
"""

import json
import logging
import time
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Any, TypeVar

from akora_cache.config import get_redis_client, settings
from akora_cache.entities import CacheEntryEntity
from akora_cache.exceptions import StorageError
from akora_cache.keys import CacheKeys
from akora_cache.protocols import PersistentStore
from akora_cache.repositories import InMemoryPersistentStore, RedisPersistentStore
from akora_cache.services.memory_mirror import MemoryMirror

logger = logging.getLogger(__name__)

T = TypeVar("T")

MS_PER_MINUTE = 60_000


class CacheService:
    """Two-tier (memory + persistent) cache with expiry.

    Depends on the PersistentStore PROTOCOL, so the durable tier can be
    Redis, an in-process dict, or anything else with the same methods.

    Example:
        ```python
        from akora_cache.services import CacheService

        cache = CacheService.create()
        await cache.cache_data("profile-42", {"name": "Ama"}, expiry_minutes=30)
        await cache.get_cached_data("profile-42")  # {"name": "Ama"}
        cache.get_memory_cache_sync("profile-42")  # same, without awaiting
        ```
    """

    def __init__(
        self,
        store: PersistentStore,
        mirror: MemoryMirror | None = None,
        clock: Callable[[], float] | None = None,
        default_expiry_minutes: float | None = None,
    ) -> None:
        """Initialize the cache service.

        Args:
            store: Durable key/value backend (required).
            mirror: In-memory mirror. A fresh one is created if None.
            clock: Returns the current time in epoch seconds. Defaults to time.time.
            default_expiry_minutes: Expiry used by get_cached_or_fetch. Defaults to settings.
        """
        self._store = store
        self._mirror = mirror or MemoryMirror()
        self._clock = clock or time.time
        self._default_expiry = (
            default_expiry_minutes if default_expiry_minutes is not None else settings.cache_default_expiry_minutes
        )

    @classmethod
    def create(cls, store: PersistentStore | None = None, **kwargs: Any) -> "CacheService":
        """Factory method to create CacheService with sensible defaults.

        Uses Redis when REDIS_URL is configured, an in-memory store otherwise.
        """
        if store is None:
            if settings.uses_redis:
                store = RedisPersistentStore(redis_client=get_redis_client())
            else:
                store = InMemoryPersistentStore()
        return cls(store=store, **kwargs)

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    # -------------------------------------------------------------------------
    # Expiring cache layer
    # -------------------------------------------------------------------------

    async def cache_data(self, key: str, data: Any, expiry_minutes: float | None = None) -> bool:
        """Write a value, optionally with an expiry, and mirror it in memory.

        Writing without an expiry drops any earlier expiry marker, so the
        entry stays until it is cleared explicitly.

        Args:
            key: Domain cache key
            data: JSON-serializable payload
            expiry_minutes: Minutes until the entry expires, None for no expiry

        Returns:
            True if the value reached the persistent store, False otherwise
        """
        try:
            payload = json.dumps(data)
        except (TypeError, ValueError) as e:
            logger.error("Cache write skipped for %s: value is not serializable (%s)", key, e)
            return False

        value_key = CacheKeys.value_key(key)
        expiry_key = CacheKeys.expiry_key(key)

        # Any partial write must leave the entry expiring, never permanent:
        # the marker goes first, the value after it.
        if expiry_minutes is not None:
            expires_at = self._now_ms() + int(expiry_minutes * MS_PER_MINUTE)
            try:
                await self._store.set(expiry_key, str(expires_at))
            except StorageError as e:
                logger.error("Cache expiry write error for %s: %s", key, e)
                return False

        try:
            await self._store.set(value_key, payload)
        except StorageError as e:
            logger.error("Cache write error for %s: %s", key, e)
            return False

        self._mirror.set(key, data)

        if expiry_minutes is None:
            try:
                await self._store.remove_many([expiry_key])
            except StorageError as e:
                # The old marker stays, so the entry still expires on schedule
                logger.error("Cache expiry removal error for %s: %s", key, e)
                return False

        return True

    async def get_entry(self, key: str) -> CacheEntryEntity | None:
        """Read a live entry with its expiry.

        An expired entry is deleted (value and marker) and reported as a
        miss. Corrupt values are a miss as well.
        """
        value_key = CacheKeys.value_key(key)
        expiry_key = CacheKeys.expiry_key(key)

        try:
            raw = await self._store.get_many([expiry_key, value_key])
        except StorageError as e:
            logger.warning("Cache read error for %s: %s", key, e)
            return None

        expiry_raw = raw.get(expiry_key)
        expires_at: int | None = None
        if expiry_raw is not None:
            try:
                expires_at = int(expiry_raw)
            except ValueError:
                logger.warning("Corrupt expiry marker for %s, dropping entry", key)
                await self.clear_cache(key)
                return None

            if self._now_ms() >= expires_at:
                logger.debug("Cache entry %s expired", key)
                await self.clear_cache(key)
                return None

        value_raw = raw.get(value_key)
        if value_raw is None:
            return None

        try:
            value = json.loads(value_raw)
        except json.JSONDecodeError:
            logger.warning("Corrupt cache value for %s, treating as miss", key)
            return None

        return CacheEntryEntity(key=key, value=value, expires_at=expires_at)

    async def get_cached_data(self, key: str) -> Any | None:
        """Read a live cached value.

        Returns:
            The value, or None if absent, expired, corrupt or unreadable
        """
        entry = await self.get_entry(key)
        return entry.value if entry is not None else None

    async def clear_cache(self, key: str) -> int:
        """Remove a value and its expiry marker. Safe to call repeatedly.

        Returns:
            Number of persisted keys removed (0, 1 or 2)
        """
        try:
            return await self._store.remove_many([CacheKeys.value_key(key), CacheKeys.expiry_key(key)])
        except StorageError as e:
            logger.error("Cache clear error for %s: %s", key, e)
            return 0

    async def clear_all_cache(self) -> int:
        """Remove every cache-owned key, leaving other persisted state alone.

        Returns:
            Number of persisted keys removed
        """
        try:
            keys = [key for key in await self._store.list_keys() if CacheKeys.is_cache_owned(key)]
            await self._store.remove_many(keys)
        except StorageError as e:
            logger.error("Clear all cache error: %s", e)
            return 0

        logger.info("Cleared %d cache keys", len(keys))
        return len(keys)

    async def get_cached_or_fetch(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[T]],
        expiry_minutes: float | None = None,
    ) -> T:
        """Return the cached value, or fetch, cache and return a fresh one.

        Args:
            key: Domain cache key
            fetch_fn: Coroutine function producing the fresh value
            expiry_minutes: Expiry for the fetched value. Defaults to 5 minutes.

        Raises:
            Whatever fetch_fn raises; nothing is cached in that case
        """
        cached = await self.get_cached_data(key)
        if cached is not None:
            return cached

        fresh = await fetch_fn()
        if expiry_minutes is None:
            expiry_minutes = self._default_expiry
        await self.cache_data(key, fresh, expiry_minutes=expiry_minutes)
        return fresh

    # -------------------------------------------------------------------------
    # In-memory mirror
    # -------------------------------------------------------------------------

    def set_memory_cache_sync(self, key: str, value: Any) -> None:
        """Overwrite the mirrored value for a key without touching storage."""
        self._mirror.set(key, value)

    def get_memory_cache_sync(self, key: str) -> Any | None:
        """Read the mirrored value for a key. Never awaits."""
        return self._mirror.get(key)

    async def preload_cache_to_memory(self, keys: list[str]) -> int:
        """Seed the mirror from the persistent store.

        Goes through get_cached_data, so expired entries are dropped
        rather than mirrored. Call once the user id is known.

        Returns:
            Number of keys loaded into the mirror
        """
        loaded = 0
        for key in keys:
            value = await self.get_cached_data(key)
            if value is not None:
                self._mirror.set(key, value)
                loaded += 1

        logger.debug("Preloaded %d of %d cache keys into memory", loaded, len(keys))
        return loaded

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    async def get_stats(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with prefixes, mirror size and store health
        """
        return {
            "cache_prefix": CacheKeys.PREFIX,
            "expiry_prefix": CacheKeys.EXPIRY_PREFIX,
            "memory_entries": len(self._mirror),
            "default_expiry_minutes": self._default_expiry,
            "store_healthy": await self._store.health_check(),
        }

    @property
    def store(self) -> PersistentStore:
        """Get the underlying store (for testing)."""
        return self._store

    @property
    def mirror(self) -> MemoryMirror:
        """Get the in-memory mirror (for testing)."""
        return self._mirror


@lru_cache
def get_cache_service() -> CacheService:
    """Get the process-wide cache service."""
    return CacheService.create()
