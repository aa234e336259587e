import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import redis.asyncio as redis
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis (empty URL means the in-memory store is used)
    redis_url: str = os.getenv("REDIS_URL", "")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Cache namespace, persisted on devices so it must stay stable
    cache_prefix: str = os.getenv("CACHE_PREFIX", "akora_cache_")
    cache_expiry_prefix: str = os.getenv("CACHE_EXPIRY_PREFIX", "akora_expiry_")
    cache_default_expiry_minutes: float = float(os.getenv("CACHE_DEFAULT_EXPIRY_MINUTES", "5"))

    # Per-domain expiry (minutes)
    expiry_home_posts_minutes: float = float(os.getenv("EXPIRY_HOME_POSTS_MINUTES", "2"))
    expiry_home_config_minutes: float = float(os.getenv("EXPIRY_HOME_CONFIG_MINUTES", "10"))
    expiry_conversations_minutes: float = float(os.getenv("EXPIRY_CONVERSATIONS_MINUTES", "2"))
    expiry_profile_minutes: float = float(os.getenv("EXPIRY_PROFILE_MINUTES", "30"))
    expiry_user_posts_minutes: float = float(os.getenv("EXPIRY_USER_POSTS_MINUTES", "5"))
    expiry_saved_posts_minutes: float = float(os.getenv("EXPIRY_SAVED_POSTS_MINUTES", "5"))
    expiry_group_chats_minutes: float = float(os.getenv("EXPIRY_GROUP_CHATS_MINUTES", "5"))
    expiry_discover_feed_minutes: float = float(os.getenv("EXPIRY_DISCOVER_FEED_MINUTES", "5"))

    # Remote data service (PostgREST-style table API)
    remote_url: str = os.getenv("REMOTE_URL", "http://localhost:54321/rest/v1")
    remote_api_key: str | None = os.getenv("REMOTE_API_KEY")
    remote_timeout: float = float(os.getenv("REMOTE_TIMEOUT", "30"))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def uses_redis(self) -> bool:
        """Check if a Redis backend is configured."""
        return bool(self.redis_url)

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if not self.cache_prefix or not self.cache_expiry_prefix:
            raise ValueError("CACHE_PREFIX and CACHE_EXPIRY_PREFIX must not be empty")

        if self.cache_prefix.startswith(self.cache_expiry_prefix) or self.cache_expiry_prefix.startswith(
            self.cache_prefix
        ):
            raise ValueError("CACHE_PREFIX and CACHE_EXPIRY_PREFIX must not overlap")

        if self.cache_default_expiry_minutes <= 0:
            raise ValueError("CACHE_DEFAULT_EXPIRY_MINUTES must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create an async Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
    )


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
