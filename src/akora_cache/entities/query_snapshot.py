"""Query state entities."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class QueryStatus(str, Enum):
    """Lifecycle of a stale-while-revalidate query."""

    IDLE = "idle"
    INSTANT_HIT = "instant_hit"
    EMPTY = "empty"
    FETCHING = "fetching"
    SETTLED = "settled"
    FAILED = "failed"


@dataclass(frozen=True)
class QuerySnapshot:
    """What a subscriber sees at one point in time.

    Attributes:
        key: Domain cache key, or None while the user is unknown
        data: Value currently displayed (instant, stale or fresh)
        status: Current query status
        error: Last fetch error, if the latest fetch failed
    """

    key: str | None
    data: Any
    status: QueryStatus
    error: BaseException | None = None
