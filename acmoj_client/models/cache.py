"""Cache-related dataclasses."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CacheEntry:
    """Cached value with its freshness and stale deadlines (monotonic seconds)."""

    value: object
    expires_at: float
    stale_until: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at

    def is_stale(self, now: float) -> bool:
        return self.expires_at <= now < self.stale_until

    def is_dead(self, now: float) -> bool:
        return now >= self.stale_until


@dataclass
class CacheResult:
    value: object
    stale: bool = False


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    stale_hits: int = 0
    evictions: int = 0
