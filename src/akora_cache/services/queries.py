"""Stale-while-revalidate domain queries.

Each domain query seeds its value from the in-memory mirror (instant,
possibly stale), always revalidates against the remote data source, and
writes the fresh result back through CacheService before surfacing it.

Business logic per query:
1. Build the cache key for (domain, user id)
2. Read the mirror synchronously for an instant value
3. Fetch from the remote source
4. Cache the result with the domain expiry (also updates the mirror)
5. Notify subscribers with the fresh value

Fetch failures are not retried here. They leave cache and mirror as they
were and are reported to the caller and to subscribers.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from akora_cache.config import settings
from akora_cache.entities import Filter, Order, QuerySnapshot, QueryStatus, TableQuery
from akora_cache.exceptions import RemoteFetchError
from akora_cache.keys import CacheKeys, Domain
from akora_cache.protocols import RemoteDataSource
from akora_cache.services.cache_service import CacheService

logger = logging.getLogger(__name__)

T = TypeVar("T")

Subscriber = Callable[[QuerySnapshot], None]

HOME_FEED_PAGE_SIZE = 10
DISCOVER_FEED_LIMIT = 20

POST_WITH_AUTHOR_COLUMNS = """
    *,
    profiles!posts_user_id_fkey (id, username, full_name, avatar_url, is_admin, role),
    likes:post_likes(count),
    comments:post_comments(count)
"""


class QueryHandle(Generic[T]):
    """Framework-independent observable for one domain query.

    Example:
        ```python
        handle = queries.profile(user_id)
        render(handle.data)              # instant value from the mirror, or None
        handle.subscribe(lambda snap: render(snap.data))
        await handle.refetch()           # fresh value, cached for next time
        ```
    """

    def __init__(
        self,
        cache: CacheService,
        key: str | None,
        fetch_fn: Callable[[], Awaitable[T]],
        expiry_minutes: float | None,
    ) -> None:
        """Initialize the handle.

        Args:
            cache: Cache service used for the mirror read and the write-back
            key: Domain cache key, or None while the user id is unknown
            fetch_fn: Coroutine function fetching the canonical value
            expiry_minutes: Expiry applied when caching fetched values
        """
        self._cache = cache
        self._key = key
        self._fetch_fn = fetch_fn
        self._expiry_minutes = expiry_minutes
        self._subscribers: list[Subscriber] = []
        self._error: BaseException | None = None
        self._task: asyncio.Task | None = None

        if key is None:
            self._data: T | None = None
            self._status = QueryStatus.IDLE
        else:
            self._data = cache.get_memory_cache_sync(key)
            self._status = QueryStatus.INSTANT_HIT if self._data is not None else QueryStatus.EMPTY

    @property
    def key(self) -> str | None:
        return self._key

    @property
    def enabled(self) -> bool:
        """False while the user id is unknown; no fetch happens then."""
        return self._key is not None

    @property
    def data(self) -> T | None:
        return self._data

    @property
    def status(self) -> QueryStatus:
        return self._status

    @property
    def error(self) -> BaseException | None:
        return self._error

    def snapshot(self) -> QuerySnapshot:
        return QuerySnapshot(key=self._key, data=self._data, status=self._status, error=self._error)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for every state change.

        Returns:
            A function that removes the callback
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for callback in list(self._subscribers):
            callback(snapshot)

    async def refetch(self) -> T | None:
        """Fetch fresh data, cache it and publish it.

        Returns:
            The fresh value, or the current value if the query is disabled

        Raises:
            Whatever the fetch raises; the displayed value stays as it was
        """
        if not self.enabled:
            return self._data

        self._status = QueryStatus.FETCHING
        self._notify()

        try:
            fresh = await self._fetch_fn()
        except Exception as e:
            logger.warning("Revalidation of %s failed: %s", self._key, e)
            self._error = e
            self._status = QueryStatus.FAILED
            self._notify()
            raise

        await self._cache.cache_data(self._key, fresh, expiry_minutes=self._expiry_minutes)
        self._data = fresh
        self._error = None
        self._status = QueryStatus.SETTLED
        self._notify()
        return fresh

    def start(self) -> "asyncio.Task | None":
        """Schedule a background revalidation on the running loop.

        Returns the in-flight task when one is already running, so awaiting
        the result joins it instead of fetching twice. Failures are reported
        through ``error`` and subscribers.
        """
        if not self.enabled:
            return None
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.refetch())
            self._task.add_done_callback(_consume_task_error)
        return self._task


def _consume_task_error(task: asyncio.Task) -> None:
    # Error already recorded on the handle
    if not task.cancelled():
        task.exception()


@dataclass(frozen=True)
class ExpiryPolicy:
    """Expiry in minutes per domain. Higher-churn domains expire sooner."""

    home_posts: float = 2
    home_config: float = 10
    conversations: float = 2
    profile: float = 30
    user_posts: float = 5
    saved_posts: float = 5
    group_chats: float = 5
    discover_feed: float = 5

    @classmethod
    def from_settings(cls) -> "ExpiryPolicy":
        return cls(
            home_posts=settings.expiry_home_posts_minutes,
            home_config=settings.expiry_home_config_minutes,
            conversations=settings.expiry_conversations_minutes,
            profile=settings.expiry_profile_minutes,
            user_posts=settings.expiry_user_posts_minutes,
            saved_posts=settings.expiry_saved_posts_minutes,
            group_chats=settings.expiry_group_chats_minutes,
            discover_feed=settings.expiry_discover_feed_minutes,
        )

    def for_domain(self, domain: Domain) -> float:
        return getattr(self, domain.replace("-", "_"))


def home_posts_query(page: int = 0) -> TableQuery:
    start = page * HOME_FEED_PAGE_SIZE
    return TableQuery(
        table="posts",
        columns=POST_WITH_AUTHOR_COLUMNS,
        order=Order("created_at", ascending=False),
        range_start=start,
        range_end=start + HOME_FEED_PAGE_SIZE - 1,
    )


def home_config_query() -> TableQuery:
    return TableQuery(
        table="quick_actions",
        filters=(Filter("is_active", "eq", True),),
        order=Order("sort_order"),
    )


def conversations_query(user_id: str) -> TableQuery:
    return TableQuery(
        table="chat_participants",
        columns="chat_id, last_read_at, chats(*)",
        filters=(Filter("user_id", "eq", user_id),),
        order=Order("created_at", ascending=False),
    )


def profile_query(user_id: str) -> TableQuery:
    return TableQuery(table="profiles", filters=(Filter("id", "eq", user_id),), single=True)


def user_posts_query(user_id: str) -> TableQuery:
    return TableQuery(
        table="posts",
        columns=POST_WITH_AUTHOR_COLUMNS,
        filters=(Filter("user_id", "eq", user_id),),
        order=Order("created_at", ascending=False),
    )


def saved_posts_query(user_id: str) -> TableQuery:
    return TableQuery(
        table="post_bookmarks",
        columns="post_id, created_at, posts:post_id(*)",
        filters=(Filter("user_id", "eq", user_id),),
        order=Order("created_at", ascending=False),
    )


def group_chats_query(user_id: str) -> TableQuery:
    return TableQuery(
        table="group_members",
        columns="group_id, role, groups(*)",
        filters=(Filter("user_id", "eq", user_id),),
    )


def discover_feed_query(category: str | None = None) -> TableQuery:
    filters = (Filter("category", "eq", category),) if category else ()
    return TableQuery(
        table="posts",
        columns="*, user:profiles(id, username, full_name, avatar_url)",
        filters=filters,
        order=Order("created_at", ascending=False),
        range_start=0,
        range_end=DISCOVER_FEED_LIMIT - 1,
    )


def user_interests_query(user_id: str) -> TableQuery:
    return TableQuery(table="user_interests", columns="interest_id", filters=(Filter("user_id", "eq", user_id),))


def friendships_query(user_id: str) -> TableQuery:
    return TableQuery(
        table="friendships",
        columns="friend_id, user_id",
        filters=(Filter("status", "eq", "accepted"),),
        or_filter=f"user_id.eq.{user_id},friend_id.eq.{user_id}",
    )


def _loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class DomainQueries:
    """Factory for the per-domain stale-while-revalidate queries.

    Queries built inside a running event loop start revalidating right
    away; subscribers get the fresh value without further calls. Outside
    a loop the handle waits for ``start()``.

    Example:
        ```python
        queries = DomainQueries(cache, PostgrestRemoteSource.create())
        await queries.prefetch(user_id)      # right after sign-in
        feed = queries.home_posts(user_id)   # instant value in feed.data
        await feed.start()                   # same task, now settled
        ```
    """

    def __init__(
        self,
        cache: CacheService,
        remote: RemoteDataSource,
        expiry_policy: ExpiryPolicy | None = None,
        auto_start: bool = True,
    ) -> None:
        """Initialize the query factory.

        Args:
            cache: Cache service shared by every query
            remote: Source of canonical data
            expiry_policy: Per-domain expiry. Defaults to settings.
            auto_start: Start revalidation when a query is built in a running loop
        """
        self._cache = cache
        self._remote = remote
        self._expiry = expiry_policy or ExpiryPolicy.from_settings()
        self._auto_start = auto_start

    def _handle(
        self,
        domain: Domain,
        user_id: str | None,
        query: TableQuery,
        qualifier: str | None = None,
    ) -> QueryHandle:
        key = CacheKeys.build(domain, user_id, qualifier) if user_id else None

        async def fetch() -> Any:
            return await self._remote.fetch(query)

        handle = QueryHandle(self._cache, key, fetch, self._expiry.for_domain(domain))
        if self._auto_start and _loop_running():
            handle.start()
        return handle

    def home_posts(self, user_id: str | None) -> QueryHandle:
        return self._handle("home-posts", user_id, home_posts_query())

    def home_config(self, user_id: str | None) -> QueryHandle:
        return self._handle("home-config", user_id, home_config_query())

    def conversations(self, user_id: str | None) -> QueryHandle:
        return self._handle("conversations", user_id, conversations_query(user_id or ""))

    def profile(self, user_id: str | None) -> QueryHandle:
        return self._handle("profile", user_id, profile_query(user_id or ""))

    def user_posts(self, user_id: str | None) -> QueryHandle:
        return self._handle("user-posts", user_id, user_posts_query(user_id or ""))

    def saved_posts(self, user_id: str | None) -> QueryHandle:
        return self._handle("saved-posts", user_id, saved_posts_query(user_id or ""))

    def group_chats(self, user_id: str | None) -> QueryHandle:
        return self._handle("group-chats", user_id, group_chats_query(user_id or ""))

    def discover_feed(self, user_id: str | None, category: str | None = None) -> QueryHandle:
        return self._handle("discover-feed", user_id, discover_feed_query(category), qualifier=category or "all")

    def for_domain(self, domain: Domain, user_id: str | None, category: str | None = None) -> QueryHandle:
        """Build the query for a domain by name."""
        if domain == "discover-feed":
            return self.discover_feed(user_id, category)
        if domain not in CacheKeys.DOMAINS:
            raise ValueError(f"Unknown cache domain: {domain}")
        return getattr(self, domain.replace("-", "_"))(user_id)

    async def home_feed_page(self, user_id: str, page: int = 0) -> list[dict[str, Any]]:
        """Fetch one page of the home feed.

        Only the first page is cached, later pages are fetched live.
        """
        if page < 0:
            raise ValueError("page must not be negative")

        rows = await self._remote.fetch(home_posts_query(page)) or []
        if page == 0:
            await self._cache.cache_data(
                CacheKeys.home_posts(user_id), rows, expiry_minutes=self._expiry.home_posts
            )
        return rows

    async def user_interests(self, user_id: str) -> set[Any]:
        """Interest ids of a user, read live. Not cached."""
        rows = await self._remote.fetch(user_interests_query(user_id)) or []
        return {row["interest_id"] for row in rows}

    async def friend_ids(self, user_id: str) -> set[Any]:
        """Ids on the other side of a user's accepted friendships, read live. Not cached."""
        rows = await self._remote.fetch(friendships_query(user_id)) or []
        return {row["friend_id"] if row["user_id"] == user_id else row["user_id"] for row in rows}

    @staticmethod
    def next_page(last_page: list[Any], pages_loaded: int) -> int | None:
        """Index of the next home feed page, or None once a short page was seen."""
        return pages_loaded if len(last_page) == HOME_FEED_PAGE_SIZE else None

    async def prefetch(self, user_id: str, categories: tuple[str, ...] = ()) -> int:
        """Warm the mirror for a user and revalidate their profile.

        A failed profile fetch is logged; the preloaded values stay usable.

        Returns:
            Number of keys loaded from the persistent store
        """
        loaded = await self._cache.preload_cache_to_memory(CacheKeys.user_keys(user_id, categories))
        try:
            await self._cache.get_cached_or_fetch(
                CacheKeys.profile(user_id),
                lambda: self._remote.fetch(profile_query(user_id)),
                expiry_minutes=self._expiry.profile,
            )
        except RemoteFetchError as e:
            logger.warning("Profile prefetch for %s failed: %s", user_id, e)
        return loaded

    async def invalidate_user(self, user_id: str, categories: tuple[str, ...] = ()) -> int:
        """Drop every persisted domain entry of a user.

        The mirror keeps its values until the next successful fetch.

        Returns:
            Number of persisted keys removed
        """
        removed = 0
        for key in CacheKeys.user_keys(user_id, categories):
            removed += await self._cache.clear_cache(key)
        return removed
