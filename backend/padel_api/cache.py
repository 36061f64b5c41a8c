"""Per-process cache for read-heavy group views."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Hashable, Optional

from .config import GROUP_STREAKS_CACHE_TTL

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: Any
    expires_at: float


class TTLCache:
    """Values expire ``ttl_seconds`` after they are stored.

    Nothing is shared between worker processes; writers call
    :meth:`invalidate` after changing the underlying rows.
    """

    def __init__(
        self, ttl_seconds: float = 300.0, *, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, _Entry] = {}
        # Bumped by invalidate/clear so a compute that started earlier is not stored.
        self._generations: dict[Hashable, int] = {}
        self._epoch = 0
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: Hashable) -> Optional[Any]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                return None
            return entry.value

    async def set(self, key: Hashable, value: Any) -> None:
        if self.ttl_seconds <= 0:
            return
        async with self._lock:
            self._entries[key] = _Entry(value, self._clock() + self.ttl_seconds)

    async def get_or_compute(
        self, key: Hashable, compute: Callable[[], Awaitable[Any]]
    ) -> Any:
        """Return the cached value or store the result of ``compute()``.

        ``compute`` runs outside the lock; concurrent misses may both compute,
        the last one stored wins. A result is returned but not stored when
        the key was invalidated while ``compute`` ran.
        """

        value = await self.get(key)
        if value is not None:
            return value
        started = self._generation(key)
        value = await compute()
        if self.ttl_seconds <= 0:
            return value
        async with self._lock:
            if self._generation(key) == started:
                self._entries[key] = _Entry(value, self._clock() + self.ttl_seconds)
            else:
                logger.debug("Dropped stale cache result for %r", key)
        return value

    def _generation(self, key: Hashable) -> tuple[int, int]:
        return self._epoch, self._generations.get(key, 0)

    async def invalidate(self, key: Hashable) -> None:
        async with self._lock:
            self._generations[key] = self._generations.get(key, 0) + 1
            if self._entries.pop(key, None) is not None:
                logger.debug("Invalidated cache entry %r", key)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()
            self._generations.clear()
            self._epoch += 1


# Keyed by group id; recording a match in the group invalidates its entry.
group_streaks_cache = TTLCache(ttl_seconds=GROUP_STREAKS_CACHE_TTL)
