"""In-memory TTL cache with a stale fallback window.

Entries are fresh until ``expires_at`` and may still be served as a
fallback until ``stale_until`` when a refresh fails. Dead entries are
dropped on lookup and by a periodic sweep task.
"""

from __future__ import annotations

import asyncio
import logging
import time
from threading import Lock
from typing import Any, Awaitable, Callable

from .models.cache import CacheEntry, CacheResult, CacheStats

logger = logging.getLogger(__name__)

__all__ = ["CacheService", "LIST_PREFIXES"]

# Prefixes of list-shaped resources; bulk invalidation of these tells
# list views to refresh.
LIST_PREFIXES = ("submissions:", "problems:")

_DEFAULT_TTL_MIN = 15.0
_DEFAULT_STALE_MIN = 30.0
_SWEEP_INTERVAL_S = 60.0


class CacheService:
    def __init__(
        self,
        default_ttl_minutes: float = _DEFAULT_TTL_MIN,
        stale_minutes: float = _DEFAULT_STALE_MIN,
        sweep_interval_s: float = _SWEEP_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl_s = default_ttl_minutes * 60.0
        self.stale_period_s = stale_minutes * 60.0
        self.sweep_interval_s = sweep_interval_s
        self.stats = CacheStats()
        self._clock = clock
        self._lock = Lock()
        self._entries: dict[str, CacheEntry] = {}
        self._invalidate_listeners: list[Callable[[str], object]] = []
        self._stale_listeners: list[Callable[[str, BaseException], object]] = []
        self._sweep_task: asyncio.Task | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def get(self, key: str) -> Any:
        """Return the cached value while fresh, otherwise None."""
        entry = self._lookup(key)
        return entry.value if entry is not None else None

    def _lookup(self, key: str) -> CacheEntry | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.stats.misses += 1
                return None
            if entry.is_fresh(now):
                self.stats.hits += 1
                return entry
            if entry.is_dead(now):
                del self._entries[key]
                self.stats.evictions += 1
            self.stats.misses += 1
            return None

    def get_stale(self, key: str) -> Any:
        """Return the value of an expired entry still inside its stale window."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_stale(now):
                return entry.value
        return None

    def set(self, key: str, value: object, ttl_minutes: float | None = None) -> None:
        ttl_s = self.default_ttl_s if ttl_minutes is None else ttl_minutes * 60.0
        expires_at = self._clock() + ttl_s
        entry = CacheEntry(
            value=value,
            expires_at=expires_at,
            stale_until=expires_at + self.stale_period_s,
        )
        with self._lock:
            self._entries[key] = entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def delete_with_prefix(self, prefix: str) -> int:
        """Remove every key starting with ``prefix``; return how many went."""
        with self._lock:
            doomed = [k for k in self._entries if k.startswith(prefix)]
            for k in doomed:
                del self._entries[k]
        if doomed:
            logger.debug("Invalidated %d cache entries with prefix %r", len(doomed), prefix)
        if prefix in LIST_PREFIXES:
            self._fire_invalidate(prefix)
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.debug("All cache cleared")
        self._fire_invalidate("")

    def sweep(self) -> int:
        """Drop entries whose stale window has passed."""
        now = self._clock()
        with self._lock:
            dead = [k for k, e in self._entries.items() if e.is_dead(now)]
            for k in dead:
                del self._entries[k]
            self.stats.evictions += len(dead)
        if dead:
            logger.debug("Cache sweep removed %d entries", len(dead))
        return len(dead)

    async def fetch(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[Any]],
        ttl_minutes: float | None = None,
    ) -> CacheResult:
        """Return a fresh value, fetching on miss and falling back to stale data.

        The fetch error is re-raised only when no stale entry exists.
        """
        cached = self._lookup(key)
        if cached is not None:
            return CacheResult(value=cached.value)

        try:
            value = await fetch_fn()
        except Exception as exc:
            now = self._clock()
            with self._lock:
                entry = self._entries.get(key)
                usable = entry is not None and entry.is_stale(now)
                if usable:
                    self.stats.stale_hits += 1
            if not usable:
                raise
            logger.warning("Using cached %s after fetch error: %s", key, exc)
            self._fire_stale(key, exc)
            return CacheResult(value=entry.value, stale=True)

        self.set(key, value, ttl_minutes)
        return CacheResult(value=value)

    async def get_or_fetch(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[Any]],
        ttl_minutes: float | None = None,
    ) -> Any:
        result = await self.fetch(key, fetch_fn, ttl_minutes)
        return result.value

    def on_invalidate(self, listener: Callable[[str], object]) -> None:
        """Register a list-refresh listener called with the invalidated prefix."""
        self._invalidate_listeners.append(listener)

    def on_stale(self, listener: Callable[[str, BaseException], object]) -> None:
        """Register a listener for degraded (stale) reads."""
        self._stale_listeners.append(listener)

    def _fire_invalidate(self, prefix: str) -> None:
        for listener in list(self._invalidate_listeners):
            try:
                listener(prefix)
            except Exception:
                logger.exception("Cache invalidate listener failed for prefix %r", prefix)

    def _fire_stale(self, key: str, exc: BaseException) -> None:
        for listener in list(self._stale_listeners):
            try:
                listener(key, exc)
            except Exception:
                logger.exception("Cache stale listener failed for %s", key)

    @property
    def running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def start(self) -> None:
        """Start the periodic sweep on the running event loop."""
        if self.running:
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop())

    async def stop(self) -> None:
        task = self._sweep_task
        self._sweep_task = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _sweep_loop(self) -> None:
        logger.info("Starting cache sweep loop (interval=%ss)", self.sweep_interval_s)
        while True:
            try:
                await asyncio.sleep(self.sweep_interval_s)
                self.sweep()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Cache sweep loop error")
