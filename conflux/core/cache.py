"""TTL cache for dotted-path lookups."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional

from .paths import MISSING, is_prefix
from .types import CacheEntry, CacheStats


class ConfigurationCache:
    """Lazily-expiring cache of resolved configuration values.

    Entries are never evicted in the background; staleness is checked on
    read and a stale entry is dropped and counted as a miss. Every
    ``clear`` or ``invalidate`` bumps a generation counter so a reader that
    resolved its value against an older tree cannot store it afterwards.
    """

    def __init__(
        self,
        ttl: float = 60.0,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.enabled = enabled
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._generation = 0
        self.hits = 0
        self.misses = 0

    @property
    def generation(self) -> int:
        return self._generation

    def lookup(self, key: str) -> Any:
        """Return the fresh cached value for ``key`` or ``MISSING``.

        Hits and misses are only counted while the cache is enabled.
        """
        if not self.enabled:
            return MISSING
        entry = self._entries.get(key)
        if entry is not None and not entry.is_stale(self._clock(), self.ttl):
            self.hits += 1
            return entry.value
        if entry is not None:
            self._entries.pop(key, None)
        self.misses += 1
        return MISSING

    def store(self, key: str, value: Any, generation: Optional[int] = None) -> bool:
        """Store a value unless the cache changed since ``generation``."""
        if not self.enabled:
            return False
        if generation is not None and generation != self._generation:
            return False
        self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())
        return True

    def invalidate(self, key: str) -> None:
        """Drop ``key``, every cached ancestor of it and every cached descendant."""
        self._generation += 1
        for cached in list(self._entries):
            if cached == key or is_prefix(cached, key) or is_prefix(key, cached):
                self._entries.pop(cached, None)

    def clear(self) -> None:
        self._generation += 1
        self._entries.clear()

    def stats(self) -> CacheStats:
        return CacheStats(
            enabled=self.enabled,
            size=len(self._entries),
            hits=self.hits,
            misses=self.misses,
        )

    def __len__(self) -> int:
        return len(self._entries)
