"""Tests for stale-while-revalidate domain queries."""

import asyncio

import pytest

from akora_cache.entities import QueryStatus
from akora_cache.exceptions import RemoteFetchError
from akora_cache.services import CacheService, DomainQueries, ExpiryPolicy
from akora_cache.services.queries import HOME_FEED_PAGE_SIZE


@pytest.fixture
def queries(cache, remote) -> DomainQueries:
    return DomainQueries(cache, remote, ExpiryPolicy())


class TestQueryHandle:
    """Tests for the per-query state machine."""

    def test_empty_when_never_cached(self, queries) -> None:
        handle = queries.profile("42")

        assert handle.enabled
        assert handle.key == "profile-42"
        assert handle.data is None
        assert handle.status is QueryStatus.EMPTY

    def test_instant_hit_from_mirror(self, queries, cache) -> None:
        cache.set_memory_cache_sync("profile-42", {"name": "Ama"})

        handle = queries.profile("42")

        assert handle.data == {"name": "Ama"}
        assert handle.status is QueryStatus.INSTANT_HIT

    @pytest.mark.asyncio
    async def test_disabled_without_user(self, queries, remote) -> None:
        """No key and no fetch while the user id is unknown."""
        handle = queries.home_posts(None)

        assert not handle.enabled
        assert handle.status is QueryStatus.IDLE
        assert await handle.refetch() is None
        assert handle.start() is None
        assert remote.queries == []

    @pytest.mark.asyncio
    async def test_stale_then_fresh_ordering(self, queries, cache, remote) -> None:
        """Subscribers see the mirror value first and the fetched value last."""
        cache.set_memory_cache_sync("profile-42", {"name": "Old"})
        remote.responses["profiles"] = {"name": "New"}
        handle = queries.profile("42")
        seen = [handle.data]
        handle.subscribe(lambda snap: seen.append(snap.data))

        fresh = await handle.start()

        assert fresh == {"name": "New"}
        assert seen == [{"name": "Old"}, {"name": "Old"}, {"name": "New"}]
        assert handle.status is QueryStatus.SETTLED

    @pytest.mark.asyncio
    async def test_fetch_even_on_instant_hit(self, queries, cache, remote) -> None:
        cache.set_memory_cache_sync("group-chats-42", [{"group_id": "old"}])
        remote.responses["group_members"] = [{"group_id": "g1"}]

        await queries.group_chats("42").start()

        assert len(remote.queries) == 1

    @pytest.mark.asyncio
    async def test_fresh_value_is_cached_with_domain_expiry(self, queries, cache, store, clock, remote) -> None:
        remote.responses["chat_participants"] = [{"chat_id": "c1"}]

        await queries.conversations("42").start()

        raw = store.snapshot()
        assert raw["akora_expiry_conversations-42"] == str(int(clock.now * 1000) + 2 * 60_000)
        assert cache.get_memory_cache_sync("conversations-42") == [{"chat_id": "c1"}]

        clock.advance(3)
        assert await cache.get_cached_data("conversations-42") is None

    @pytest.mark.asyncio
    async def test_failure_keeps_stale_value(self, queries, cache, store, remote) -> None:
        """A failed fetch reports the error and leaves cache state alone."""
        cache.set_memory_cache_sync("saved-posts-42", [{"post_id": "p1"}])
        remote.responses["post_bookmarks"] = RemoteFetchError("post_bookmarks", "offline")
        handle = queries.saved_posts("42")
        statuses = []
        handle.subscribe(lambda snap: statuses.append(snap.status))

        with pytest.raises(RemoteFetchError):
            await handle.start()

        assert statuses == [QueryStatus.FETCHING, QueryStatus.FAILED]
        assert handle.data == [{"post_id": "p1"}]
        assert isinstance(handle.error, RemoteFetchError)
        assert store.snapshot() == {}

    @pytest.mark.asyncio
    async def test_recovers_after_failure(self, queries, remote) -> None:
        remote.responses["posts"] = RemoteFetchError("posts", "offline")
        handle = queries.user_posts("42")
        with pytest.raises(RemoteFetchError):
            await handle.start()

        remote.responses["posts"] = [{"id": 1}]
        await handle.refetch()

        assert handle.error is None
        assert handle.status is QueryStatus.SETTLED

    @pytest.mark.asyncio
    async def test_unsubscribe(self, queries, remote) -> None:
        remote.responses["quick_actions"] = [{"id": "donate"}]
        handle = queries.home_config("42")
        seen = []
        unsubscribe = handle.subscribe(seen.append)

        unsubscribe()
        unsubscribe()
        await handle.start()

        assert seen == []

    @pytest.mark.asyncio
    async def test_subscriber_gets_fresh_value_without_fetching(self, queries, cache, remote) -> None:
        """Building the query inside a running loop is enough to revalidate."""
        cache.set_memory_cache_sync("profile-42", {"name": "Old"})
        remote.responses["profiles"] = {"name": "New"}
        handle = queries.profile("42")
        seen = []
        handle.subscribe(seen.append)

        await asyncio.sleep(0.01)

        assert len(remote.queries) == 1
        assert [snap.status for snap in seen] == [QueryStatus.FETCHING, QueryStatus.SETTLED]
        assert seen[-1].data == {"name": "New"}

    def test_no_fetch_outside_event_loop(self, queries, remote) -> None:
        handle = queries.profile("42")

        assert handle.status is QueryStatus.EMPTY
        assert remote.queries == []

    @pytest.mark.asyncio
    async def test_auto_start_can_be_disabled(self, cache, remote) -> None:
        queries = DomainQueries(cache, remote, ExpiryPolicy(), auto_start=False)
        remote.responses["profiles"] = {"name": "Ama"}

        handle = queries.profile("42")
        await asyncio.sleep(0.01)

        assert remote.queries == []
        assert await handle.start() == {"name": "Ama"}

    @pytest.mark.asyncio
    async def test_start_runs_in_background(self, queries, remote) -> None:
        remote.responses["posts"] = [{"id": 1}]
        handle = queries.home_posts("42")

        task = handle.start()
        assert handle.start() is task
        await task

        assert handle.data == [{"id": 1}]

    @pytest.mark.asyncio
    async def test_start_failure_is_recorded(self, queries, remote) -> None:
        remote.responses["posts"] = RemoteFetchError("posts", "offline")
        handle = queries.home_posts("42")

        task = handle.start()
        await asyncio.wait([task])

        assert handle.status is QueryStatus.FAILED
        assert isinstance(handle.error, RemoteFetchError)


class TestDomainQueries:
    """Tests for domain wiring, prefetch and invalidation."""

    def test_domain_keys(self, queries) -> None:
        assert queries.home_posts("7").key == "home-posts-7"
        assert queries.home_config("7").key == "home-config-7"
        assert queries.conversations("7").key == "conversations-7"
        assert queries.user_posts("7").key == "user-posts-7"
        assert queries.saved_posts("7").key == "saved-posts-7"
        assert queries.group_chats("7").key == "group-chats-7"
        assert queries.discover_feed("7").key == "discover-feed-7-all"
        assert queries.discover_feed("7", "jobs").key == "discover-feed-7-jobs"

    def test_for_domain(self, queries) -> None:
        assert queries.for_domain("profile", "7").key == "profile-7"
        assert queries.for_domain("discover-feed", "7", "events").key == "discover-feed-7-events"
        with pytest.raises(ValueError):
            queries.for_domain("notifications", "7")  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_remote_parameters(self, queries, remote) -> None:
        remote.responses["profiles"] = {"id": "7"}
        remote.responses["posts"] = []

        await queries.profile("7").start()
        await queries.discover_feed("7", "jobs").start()

        profile_query, discover_query = remote.queries
        assert profile_query.single
        assert ("id", "eq.7") in profile_query.to_params()
        assert ("category", "eq.jobs") in discover_query.to_params()
        assert ("order", "created_at.desc") in discover_query.to_params()

    def test_expiry_policy(self) -> None:
        policy = ExpiryPolicy()

        assert policy.for_domain("profile") == 30
        assert policy.for_domain("home-posts") == 2
        assert policy.for_domain("discover-feed") == 5

    @pytest.mark.asyncio
    async def test_home_feed_caches_first_page_only(self, queries, cache, remote) -> None:
        page = [{"id": i} for i in range(HOME_FEED_PAGE_SIZE)]
        remote.responses["posts"] = page

        assert await queries.home_feed_page("42", 0) == page
        cache.set_memory_cache_sync("home-posts-42", None)
        await queries.home_feed_page("42", 1)

        assert cache.get_memory_cache_sync("home-posts-42") is None
        assert await cache.get_cached_data("home-posts-42") == page
        assert ("offset", "10") in remote.queries[1].to_params()

    @pytest.mark.asyncio
    async def test_home_feed_rejects_negative_page(self, queries) -> None:
        with pytest.raises(ValueError):
            await queries.home_feed_page("42", -1)

    @pytest.mark.asyncio
    async def test_user_interests_are_read_live(self, queries, store, remote) -> None:
        remote.responses["user_interests"] = [{"interest_id": 3}, {"interest_id": 8}, {"interest_id": 3}]

        assert await queries.user_interests("42") == {3, 8}
        assert ("user_id", "eq.42") in remote.queries[0].to_params()
        assert store.snapshot() == {}

    @pytest.mark.asyncio
    async def test_friend_ids_take_the_other_side(self, queries, remote) -> None:
        remote.responses["friendships"] = [
            {"user_id": "42", "friend_id": "7"},
            {"user_id": "9", "friend_id": "42"},
        ]

        assert await queries.friend_ids("42") == {"7", "9"}
        params = remote.queries[0].to_params()
        assert ("or", "(user_id.eq.42,friend_id.eq.42)") in params
        assert ("status", "eq.accepted") in params

    def test_next_page(self) -> None:
        full = [{}] * HOME_FEED_PAGE_SIZE

        assert DomainQueries.next_page(full, 1) == 1
        assert DomainQueries.next_page(full[:3], 2) is None

    @pytest.mark.asyncio
    async def test_prefetch_preloads_and_fetches_profile(self, cache, store, clock, remote) -> None:
        """Persisted entries become instant reads for a fresh process."""
        await cache.cache_data("home-posts-42", [{"id": 1}], expiry_minutes=2)
        await cache.cache_data("discover-feed-42-jobs", [{"id": 2}], expiry_minutes=5)
        remote.responses["profiles"] = {"id": "42"}

        fresh_process = CacheService(store=store, clock=clock)
        fresh_queries = DomainQueries(fresh_process, remote, ExpiryPolicy(), auto_start=False)
        loaded = await fresh_queries.prefetch("42", categories=("jobs",))

        assert loaded == 2
        assert fresh_queries.home_posts("42").status is QueryStatus.INSTANT_HIT
        assert fresh_queries.discover_feed("42", "jobs").data == [{"id": 2}]
        assert await fresh_process.get_cached_data("profile-42") == {"id": "42"}

    @pytest.mark.asyncio
    async def test_prefetch_tolerates_remote_failure(self, queries, remote) -> None:
        remote.responses["profiles"] = RemoteFetchError("profiles", "offline")

        assert await queries.prefetch("42") == 0

    @pytest.mark.asyncio
    async def test_invalidate_user_only_touches_that_user(self, queries, cache, store) -> None:
        await cache.cache_data("profile-42", {"id": "42"}, expiry_minutes=30)
        await cache.cache_data("conversations-42", [], expiry_minutes=2)
        await cache.cache_data("discover-feed-42-jobs", [])
        await cache.cache_data("profile-7", {"id": "7"})

        removed = await queries.invalidate_user("42", categories=("jobs",))

        assert removed == 5
        assert store.snapshot() == {"akora_cache_profile-7": '{"id": "7"}'}
        assert cache.get_memory_cache_sync("profile-42") == {"id": "42"}
