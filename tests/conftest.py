"""Shared fixtures: simulated clock, in-memory store, fake remote source."""

from typing import Any

import pytest

from akora_cache.entities import TableQuery
from akora_cache.exceptions import RemoteFetchError
from akora_cache.repositories import InMemoryPersistentStore
from akora_cache.services import CacheService


class FakeClock:
    """Controllable epoch-seconds clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, minutes: float) -> None:
        self.now += minutes * 60


class FakeRemote:
    """RemoteDataSource answering from a per-table response map."""

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.queries: list[TableQuery] = []
        self.closed = False

    async def fetch(self, query: TableQuery) -> Any:
        self.queries.append(query)
        response = self.responses.get(query.table)
        if isinstance(response, Exception):
            raise response
        if response is None:
            raise RemoteFetchError(query.table, "no such table")
        return response

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryPersistentStore:
    return InMemoryPersistentStore()


@pytest.fixture
def cache(store: InMemoryPersistentStore, clock: FakeClock) -> CacheService:
    return CacheService(store=store, clock=clock)


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()
