"""HTTP handlers layer.

Handlers convert between DTOs and service calls and own HTTP concerns
(status codes, error mapping).
"""

from .cache_handler import CacheHandler

__all__ = ["CacheHandler"]
