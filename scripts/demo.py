#!/usr/bin/env python3
"""
Demo script for the Akora cache.

Walks through the stale-while-revalidate flow with an in-memory store and
a canned remote source: first launch, app restart with preload, expiry,
and a failed revalidation.
"""

import asyncio
import time

from akora_cache import CacheService, DomainQueries, InMemoryPersistentStore, RemoteFetchError
from akora_cache.entities import TableQuery


class CannedRemote:
    """Remote source answering from a table → rows map."""

    def __init__(self) -> None:
        self.tables = {
            "profiles": {"id": "42", "full_name": "Ama Mensah", "class_year": 2009},
            "posts": [{"id": 1, "content": "Homecoming photos are up!"}],
        }
        self.offline = False

    async def fetch(self, query: TableQuery):
        await asyncio.sleep(0.2)
        if self.offline:
            raise RemoteFetchError(query.table, "network unreachable")
        return self.tables[query.table]

    async def close(self) -> None:
        return None


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def demo_first_launch(store: InMemoryPersistentStore, remote: CannedRemote) -> None:
    print_section("First launch (nothing cached)")

    queries = DomainQueries(CacheService(store=store), remote)
    profile = queries.profile("42")
    profile.subscribe(lambda snap: print(f"  → {snap.status.value}: {snap.data}"))

    print(f"  Instant value: {profile.data} ({profile.status.value})")
    await profile.start()
    await queries.home_posts("42").start()

    print(f"\n  Persisted keys: {sorted(store.snapshot())}")


async def demo_restart(store: InMemoryPersistentStore, remote: CannedRemote) -> None:
    print_section("Restart with preload")

    queries = DomainQueries(CacheService(store=store), remote)
    start = time.time()
    loaded = await queries.prefetch("42")
    print(f"  Preloaded {loaded} keys in {(time.time() - start) * 1000:.1f}ms")

    remote.tables["posts"] = [{"id": 2, "content": "Donation drive starts Monday"}] + remote.tables["posts"]

    feed = queries.home_posts("42")
    print(f"  Instant home feed: {feed.data} ({feed.status.value})")
    await feed.start()
    print(f"  Fresh home feed:   {feed.data}")


async def demo_failure(store: InMemoryPersistentStore, remote: CannedRemote) -> None:
    print_section("Revalidation while offline")

    queries = DomainQueries(CacheService(store=store), remote)
    await queries.prefetch("42")
    remote.offline = True

    feed = queries.home_posts("42")
    try:
        await feed.start()
    except RemoteFetchError as e:
        print(f"  ✗ {e}")
    print(f"  Still showing: {feed.data} ({feed.status.value})")


async def main() -> None:
    store = InMemoryPersistentStore()
    remote = CannedRemote()

    await demo_first_launch(store, remote)
    await demo_restart(store, remote)
    await demo_failure(store, remote)


if __name__ == "__main__":
    asyncio.run(main())
