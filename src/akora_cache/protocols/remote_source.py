"""Remote data source protocol.

Defines the interface for the canonical data service behind the cache.
The cache only ever reads from it, and treats every read as opaque and
idempotent.
"""

from typing import Any, Protocol, runtime_checkable

from akora_cache.entities import TableQuery


@runtime_checkable
class RemoteDataSource(Protocol):
    """Protocol for table-style remote data services."""

    async def fetch(self, query: TableQuery) -> list[dict[str, Any]] | dict[str, Any] | None:
        """Run a read query.

        Args:
            query: Table, columns, filters, ordering and range to apply

        Returns:
            A list of records, or a single record when ``query.single`` is set

        Raises:
            RemoteFetchError: If the service cannot answer
        """
        ...

    async def close(self) -> None:
        """Release any open connections."""
        ...
