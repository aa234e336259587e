"""Redis implementation of PersistentStore.

Uses the redis-py asyncio client. Redis errors are wrapped in
StorageError so callers only deal with one failure type.
"""

from __future__ import annotations

import redis.asyncio as redis
from redis.exceptions import RedisError

from akora_cache.config import get_redis_client
from akora_cache.exceptions import StorageError


class RedisPersistentStore:
    """Redis key/value store.

    This class satisfies the PersistentStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, redis_client: redis.Redis | None = None, scan_count: int = 500) -> None:
        """Initialize the Redis store.

        Args:
            redis_client: Async Redis client. If None, creates default from settings.
            scan_count: Batch size hint for SCAN when listing keys.
        """
        self._client = redis_client or get_redis_client()
        self._scan_count = scan_count

    @classmethod
    def create(cls, redis_client: redis.Redis | None = None) -> "RedisPersistentStore":
        """Factory method to create RedisPersistentStore with defaults."""
        return cls(redis_client=redis_client)

    async def get(self, key: str) -> str | None:
        try:
            value = await self._client.get(key)
        except RedisError as e:
            raise StorageError("get", str(e)) from e
        return self._decode(value)

    async def get_many(self, keys: list[str]) -> dict[str, str | None]:
        if not keys:
            return {}
        try:
            values = await self._client.mget(keys)
        except RedisError as e:
            raise StorageError("get_many", str(e)) from e
        return {key: self._decode(value) for key, value in zip(keys, values)}

    async def set(self, key: str, value: str) -> None:
        try:
            await self._client.set(key, value)
        except RedisError as e:
            raise StorageError("set", str(e)) from e

    async def remove_many(self, keys: list[str]) -> int:
        if not keys:
            return 0
        try:
            return int(await self._client.delete(*keys))
        except RedisError as e:
            raise StorageError("remove_many", str(e)) from e

    async def list_keys(self) -> list[str]:
        try:
            return [self._decode(key) async for key in self._client.scan_iter(count=self._scan_count)]
        except RedisError as e:
            raise StorageError("list_keys", str(e)) from e

    async def health_check(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        """Close Redis connections."""
        await self._client.aclose()

    @staticmethod
    def _decode(value: str | bytes | None) -> str | None:
        if isinstance(value, bytes):
            return value.decode()
        return value

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
