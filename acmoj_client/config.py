"""Central configuration for acmoj_client."""

from __future__ import annotations

import logging
import os

from .models.settings import Settings

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "https://acm.sjtu.edu.cn"


def _float_env(name: str, default: float) -> float:
    """Read a positive float from the environment.

    Invalid, empty or non-positive values fall back to ``default``.
    """
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r; using %s", name, raw, default)
        return default
    return value


def _int_env(name: str, default: int) -> int:
    return int(_float_env(name, float(default)))


def _read_settings() -> Settings:
    """Read all configuration from environment variables.

    Returns:
        Settings object with all configuration values.
    """
    base_url = (os.environ.get("ACMOJ_BASE_URL") or _DEFAULT_BASE_URL).strip().rstrip("/")
    token = (os.environ.get("ACMOJ_TOKEN") or "").strip() or None

    return Settings(
        BASE_URL=base_url,
        TOKEN=token,
        CACHE_TTL_MIN=_float_env("ACMOJ_CACHE_TTL_MIN", 15.0),
        CACHE_STALE_MIN=_float_env("ACMOJ_CACHE_STALE_MIN", 30.0),
        CACHE_SWEEP_S=_float_env("ACMOJ_CACHE_SWEEP_S", 60.0),
        API_RETRY_COUNT=_int_env("ACMOJ_API_RETRY_COUNT", 3),
        API_RETRY_DELAY_MS=_float_env("ACMOJ_API_RETRY_DELAY_MS", 1000.0),
        HTTP_TIMEOUT_S=_float_env("ACMOJ_HTTP_TIMEOUT_S", 15.0),
        MONITOR_INTERVAL_MS=_float_env("ACMOJ_MONITOR_INTERVAL_MS", 3000.0),
        MONITOR_TIMEOUT_MS=_float_env("ACMOJ_MONITOR_TIMEOUT_MS", 120000.0),
    )


settings = _read_settings()


def validate_settings(current: Settings | None = None) -> None:
    """Log warnings for configuration that will limit what the client can do."""
    current = current or settings
    if current.TOKEN is None:
        logger.warning("ACMOJ_TOKEN is not set; only public endpoints will work.")
    if not current.BASE_URL.startswith(("http://", "https://")):
        logger.error("ACMOJ_BASE_URL must be an http(s) URL, got %r", current.BASE_URL)
    if current.MONITOR_TIMEOUT_MS < current.MONITOR_INTERVAL_MS:
        logger.warning(
            "ACMOJ_MONITOR_TIMEOUT_MS is shorter than one poll interval; "
            "submissions will be checked only once."
        )
