"""In-process implementation of PersistentStore.

Keeps everything in a dictionary. Used when no Redis URL is configured
and by the test suite, which can switch on failure injection to exercise
the cache's degradation path.
"""

from akora_cache.exceptions import StorageError


class InMemoryPersistentStore:
    """Dictionary-backed key/value store.

    Satisfies the PersistentStore protocol. Data lives as long as the
    instance does.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self.fail_reads = False
        self.fail_writes = False

    async def get(self, key: str) -> str | None:
        self._check_read("get")
        return self._data.get(key)

    async def get_many(self, keys: list[str]) -> dict[str, str | None]:
        self._check_read("get_many")
        return {key: self._data.get(key) for key in keys}

    async def set(self, key: str, value: str) -> None:
        self._check_write("set")
        self._data[key] = value

    async def remove_many(self, keys: list[str]) -> int:
        self._check_write("remove_many")
        removed = [key for key in keys if self._data.pop(key, None) is not None]
        return len(removed)

    async def list_keys(self) -> list[str]:
        self._check_read("list_keys")
        return list(self._data)

    async def health_check(self) -> bool:
        return not (self.fail_reads or self.fail_writes)

    async def close(self) -> None:
        return None

    def snapshot(self) -> dict[str, str]:
        """Copy of the raw stored data."""
        return dict(self._data)

    def _check_read(self, operation: str) -> None:
        if self.fail_reads:
            raise StorageError(operation, "store unavailable for reads")

    def _check_write(self, operation: str) -> None:
        if self.fail_writes:
            raise StorageError(operation, "store unavailable for writes")
