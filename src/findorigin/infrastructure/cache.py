"""In-memory TTL cache for search results and AI analyses."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60
SEARCH_TTL_SECONDS = 10 * 60
ANALYSIS_TTL_SECONDS = 30 * 60
CLEANUP_INTERVAL_SECONDS = 10 * 60


def search_cache_key(query: str) -> str:
    """Build the cache key for a search query."""
    return f"search:{query.lower().strip()}"


def analysis_cache_key(text: str) -> str:
    """Build the cache key for an AI analysis from a normalized text prefix."""
    return f"analysis:{text.lower().strip()[:100]}"


@dataclass(frozen=True)
class CacheEntry:
    """A single cache entry with its creation time and time-to-live."""

    data: Any
    created_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        """Check if this entry has outlived its ttl."""
        return now - self.created_at > self.ttl


class TTLCache:
    """Process-local key/value cache with per-entry expiry.

    Expiry is lazy: ``get`` drops an expired entry and reports a miss.
    ``start_cleanup`` adds a periodic sweep that only bounds memory.
    Entries are never evicted for size. A deployment with several
    processes needs an external cache instead.

    Usage:
        ```python
        cache = TTLCache(default_ttl=300)
        cache.set("search:python", results, ttl=600)
        cached = cache.get("search:python")
        ```
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            default_ttl: TTL in seconds used when ``set`` gets none.
            clock: Monotonic time source, injectable for tests.
        """
        self._entries: Dict[str, CacheEntry] = {}
        self._default_ttl = float(default_ttl)
        self._clock = clock
        self._cleanup_task: Optional[asyncio.Task[None]] = None

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            logger.debug("Cache MISS: %s", key)
            return None

        if entry.is_expired(self._clock()):
            self._entries.pop(key, None)
            logger.debug("Cache MISS (expired): %s", key)
            return None

        logger.debug("Cache HIT: %s", key)
        return entry.data

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        """Store a value under key for ttl seconds (default TTL if omitted)."""
        ttl_seconds = float(ttl) if ttl is not None else self._default_ttl
        self._entries[key] = CacheEntry(
            data=data, created_at=self._clock(), ttl=ttl_seconds
        )
        logger.debug("Cache SET: %s (TTL: %.0fs)", key, ttl_seconds)

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def cleanup(self) -> int:
        """Remove all expired entries.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Cache cleanup: removed %d expired entries", len(expired))
        return len(expired)

    def start_cleanup(self, interval: float = CLEANUP_INTERVAL_SECONDS) -> None:
        """Schedule the periodic sweep on the running event loop."""
        if self._cleanup_task is not None and not self._cleanup_task.done():
            return

        async def sweep() -> None:
            while True:
                await asyncio.sleep(interval)
                self.cleanup()

        self._cleanup_task = asyncio.get_running_loop().create_task(sweep())
        logger.info("Cache cleanup scheduled every %.0f seconds", interval)

    async def stop_cleanup(self) -> None:
        """Cancel the periodic sweep, if running."""
        task, self._cleanup_task = self._cleanup_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
