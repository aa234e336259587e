"""Cache key registry.

Domain key format: {domain}-{user_id}[-{qualifier}]
Persisted format:  {prefix}{domain key}

Where:
- domain: "home-posts", "profile", "discover-feed", ...
- user_id: stable identifier of the signed-in user
- qualifier: optional sub-scope (e.g. discover category, "all" when unset)
- prefix: "akora_cache_" for values, "akora_expiry_" for expiry markers

Keys are persisted on the device, so they derive only from stable
identifiers and the format must not change.
"""

from __future__ import annotations

from typing import Literal

from akora_cache.config import settings

Domain = Literal[
    "home-posts",
    "home-config",
    "conversations",
    "profile",
    "user-posts",
    "saved-posts",
    "group-chats",
    "discover-feed",
]

KeyKind = Literal["value", "expiry"]


class CacheKeys:
    """Cache key generator following a consistent naming convention."""

    PREFIX = settings.cache_prefix
    EXPIRY_PREFIX = settings.cache_expiry_prefix

    DOMAINS: tuple[Domain, ...] = (
        "home-posts",
        "home-config",
        "conversations",
        "profile",
        "user-posts",
        "saved-posts",
        "group-chats",
        "discover-feed",
    )

    @classmethod
    def build(cls, domain: Domain, user_id: str, qualifier: str | None = None) -> str:
        """Compose a domain key.

        Raises:
            ValueError: If the domain is unknown or the user id is empty
        """
        if domain not in cls.DOMAINS:
            raise ValueError(f"Unknown cache domain: {domain}")
        if not user_id:
            raise ValueError("user_id is required to build a cache key")
        key = f"{domain}-{user_id}"
        if qualifier is not None:
            key = f"{key}-{qualifier}"
        return key

    @classmethod
    def home_posts(cls, user_id: str) -> str:
        """Key for the first page of the home feed."""
        return cls.build("home-posts", user_id)

    @classmethod
    def home_config(cls, user_id: str) -> str:
        """Key for home screen quick actions."""
        return cls.build("home-config", user_id)

    @classmethod
    def conversations(cls, user_id: str) -> str:
        return cls.build("conversations", user_id)

    @classmethod
    def profile(cls, user_id: str) -> str:
        return cls.build("profile", user_id)

    @classmethod
    def user_posts(cls, user_id: str) -> str:
        return cls.build("user-posts", user_id)

    @classmethod
    def saved_posts(cls, user_id: str) -> str:
        return cls.build("saved-posts", user_id)

    @classmethod
    def group_chats(cls, user_id: str) -> str:
        return cls.build("group-chats", user_id)

    @classmethod
    def discover_feed(cls, user_id: str, category: str | None = None) -> str:
        """Key for the discover feed, one entry per category ("all" when unset)."""
        return cls.build("discover-feed", user_id, category or "all")

    @classmethod
    def user_keys(cls, user_id: str, categories: tuple[str, ...] = ()) -> list[str]:
        """All domain keys of a user.

        The discover feed contributes its "all" key plus one per category.
        """
        keys = [cls.build(domain, user_id) for domain in cls.DOMAINS if domain != "discover-feed"]
        keys.append(cls.discover_feed(user_id))
        keys.extend(cls.discover_feed(user_id, category) for category in categories)
        return keys

    @classmethod
    def value_key(cls, key: str) -> str:
        """Persisted key holding the serialized value."""
        return f"{cls.PREFIX}{key}"

    @classmethod
    def expiry_key(cls, key: str) -> str:
        """Persisted key holding the expiry marker (epoch milliseconds)."""
        return f"{cls.EXPIRY_PREFIX}{key}"

    @classmethod
    def is_cache_owned(cls, store_key: str) -> bool:
        """Check if a persisted key belongs to the cache namespace."""
        return store_key.startswith(cls.PREFIX) or store_key.startswith(cls.EXPIRY_PREFIX)

    @classmethod
    def parse_key(cls, store_key: str) -> tuple[KeyKind, str] | None:
        """Split a persisted key into its kind and domain key.

        Returns None if the key is not owned by the cache.
        """
        if store_key.startswith(cls.PREFIX):
            return ("value", store_key[len(cls.PREFIX) :])
        if store_key.startswith(cls.EXPIRY_PREFIX):
            return ("expiry", store_key[len(cls.EXPIRY_PREFIX) :])
        return None
