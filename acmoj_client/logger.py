"""Logging setup for the acmoj-watch console script."""
import logging
import os

PACKAGE_LOGGER = "acmoj_client"

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> logging.Logger:
    """Attach one stream handler to the ``acmoj_client`` logger.

    ``level`` overrides ``ACMOJ_LOG_LEVEL``; unknown names fall back to INFO.
    Calling it again only updates the level.
    """
    level_name = (level or os.environ.get("ACMOJ_LOG_LEVEL", "INFO")).upper()
    resolved = logging.getLevelName(level_name)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(getattr(h, "_acmoj", False) for h in package_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
        handler._acmoj = True  # type: ignore[attr-defined]
        package_logger.addHandler(handler)
    package_logger.setLevel(resolved)
    package_logger.propagate = False

    # Retry and cache logs already cover every request.
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)
    return package_logger


__all__ = ["PACKAGE_LOGGER", "setup_logging"]
