"""Exception types for the cache and its collaborators."""


class AkoraCacheError(Exception):
    """Base class for all errors raised by this package."""


class StorageError(AkoraCacheError):
    """A persistent store operation failed.

    Raised by store implementations and always caught by CacheService,
    which logs it and degrades to a cache miss or a skipped write.
    """

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"Storage {operation} failed: {detail}")


class RemoteFetchError(AkoraCacheError):
    """The remote data service could not answer a query."""

    def __init__(self, table: str, detail: str, status_code: int | None = None) -> None:
        self.table = table
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"Remote fetch from '{table}' failed: {detail}")
