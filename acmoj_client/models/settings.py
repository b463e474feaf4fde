"""Configuration dataclass."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Settings:
    """Configuration settings for acmoj_client."""

    BASE_URL: str
    TOKEN: str | None
    CACHE_TTL_MIN: float
    CACHE_STALE_MIN: float
    CACHE_SWEEP_S: float
    API_RETRY_COUNT: int
    API_RETRY_DELAY_MS: float
    HTTP_TIMEOUT_S: float
    MONITOR_INTERVAL_MS: float
    MONITOR_TIMEOUT_MS: float
