"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services and
repositories. They are NOT used for API contracts - use DTOs from the dto
package for that.
"""

from .cache_entry import CacheEntryEntity
from .query_snapshot import QuerySnapshot, QueryStatus
from .table_query import Filter, Order, TableQuery

__all__ = [
    "CacheEntryEntity",
    "Filter",
    "Order",
    "QuerySnapshot",
    "QueryStatus",
    "TableQuery",
]
