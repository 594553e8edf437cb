"""Time-stamped in-memory cache for discovered specs.

The cache only stores entries and their timestamps; callers own the clock and
decide whether an entry is still fresh (see ``CacheEntry.is_fresh``).
"""

from collections.abc import Hashable
from typing import Any

from pydantic import BaseModel

DEFAULT_TTL_SECONDS = 5 * 60


class CacheEntry(BaseModel):
    value: Any
    timestamp: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.timestamp < ttl


class SpecCache:
    """Process-wide spec cache, shared by every request that holds a reference to it.

    There is no locking: two requests racing through a miss may both rescan and
    both ``put``; the last write wins and writes are idempotent.
    """

    def __init__(self):
        self._entries: dict[Hashable, CacheEntry] = {}

    def get(self, key: Hashable) -> CacheEntry | None:
        return self._entries.get(key)

    def put(self, key: Hashable, value: Any, timestamp: float) -> CacheEntry:
        entry = CacheEntry(value=value, timestamp=timestamp)
        self._entries[key] = entry
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries
