"""Composition root wiring cache, executor, client and monitor together."""

from __future__ import annotations

import logging

from . import config
from .api import AcmojClient, ResourceTTLs
from .auth import StaticTokenProvider
from .cache import CacheService
from .executor import RequestExecutor, RetryPolicy, TokenProvider, api_base_url
from .models.settings import Settings
from .monitor import SubmissionMonitor

logger = logging.getLogger(__name__)


class AcmojService:
    """Owns one instance of every component; call ``shutdown()`` when done."""

    def __init__(
        self,
        cache: CacheService,
        executor: RequestExecutor,
        client: AcmojClient,
        monitor: SubmissionMonitor,
    ) -> None:
        self.cache = cache
        self.executor = executor
        self.client = client
        self.monitor = monitor
        self._started = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        token_provider: TokenProvider | None = None,
        ttls: ResourceTTLs | None = None,
    ) -> AcmojService:
        settings = settings or config.settings
        config.validate_settings(settings)
        if token_provider is None:
            token_provider = StaticTokenProvider(settings.TOKEN)

        cache = CacheService(
            default_ttl_minutes=settings.CACHE_TTL_MIN,
            stale_minutes=settings.CACHE_STALE_MIN,
            sweep_interval_s=settings.CACHE_SWEEP_S,
        )
        executor = RequestExecutor(
            api_base_url(settings.BASE_URL),
            token_provider=token_provider,
            policy=RetryPolicy(
                max_attempts=settings.API_RETRY_COUNT,
                base_delay_s=settings.API_RETRY_DELAY_MS / 1000.0,
            ),
            timeout_s=settings.HTTP_TIMEOUT_S,
        )
        client = AcmojClient(executor, cache, ttls=ttls)
        monitor = SubmissionMonitor(
            client,
            cache,
            poll_interval_s=settings.MONITOR_INTERVAL_MS / 1000.0,
            timeout_s=settings.MONITOR_TIMEOUT_MS / 1000.0,
        )
        return cls(cache, executor, client, monitor)

    def start(self) -> None:
        """Start background cache maintenance. The monitor starts on demand."""
        if self._started:
            return
        self.cache.start()
        self._started = True

    async def submit_and_track(
        self,
        problem_id: int,
        language: str,
        code: str,
        is_public: bool = False,
    ) -> int:
        result = await self.client.submit_code(problem_id, language, code, is_public)
        submission_id = int(result["id"])
        self.monitor.track(submission_id)
        return submission_id

    async def shutdown(self) -> None:
        await self.monitor.shutdown()
        await self.cache.stop()
        self.cache.clear()
        await self.executor.aclose()
        self._started = False
        logger.info("ACMOJ service stopped")

    async def __aenter__(self) -> AcmojService:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()
