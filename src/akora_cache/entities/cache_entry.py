"""Cache entry domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a persisted cache entry.

    Attributes:
        key: Domain cache key (without the persisted prefix)
        value: JSON-serializable payload, replaced wholesale on every write
        expires_at: Expiry as epoch milliseconds, or None to never expire by time
    """

    key: str
    value: Any
    expires_at: int | None = None
