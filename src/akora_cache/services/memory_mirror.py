"""Process-lifetime in-memory mirror of cached values."""

from typing import Any


class MemoryMirror:
    """Synchronous key → last-known value map.

    Entries carry no expiry of their own. They are overwritten on every
    successful cache write and seeded during preload; nothing else
    removes them. Safe to read from render paths since it never awaits.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def get(self, key: str) -> Any | None:
        return self._values.get(key)

    def __len__(self) -> int:
        return len(self._values)
