"""Background polling of in-flight submissions until the judge finishes.

The poll task only runs while something is tracked. Each tick bypasses the
cache for every tracked submission, reports status changes to subscribers
and retires submissions that reached a terminal status or ran out of
attempts.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import math
from typing import Callable

from .api import AcmojClient
from .cache import CacheService
from .models.submission import StatusChange, TrackedSubmission, is_terminal
from .view import render_status_change

__all__ = ["SubmissionMonitor", "max_attempts_for"]

logger = logging.getLogger(__name__)

_DEFAULT_INTERVAL_S = 3.0
_DEFAULT_TIMEOUT_S = 120.0

StatusListener = Callable[[StatusChange], object]


def max_attempts_for(timeout_s: float, interval_s: float) -> int:
    if interval_s <= 0:
        interval_s = _DEFAULT_INTERVAL_S
    return max(1, math.ceil(timeout_s / interval_s))


class SubmissionMonitor:
    def __init__(
        self,
        client: AcmojClient,
        cache: CacheService | None = None,
        poll_interval_s: float = _DEFAULT_INTERVAL_S,
        timeout_s: float = _DEFAULT_TIMEOUT_S,
    ) -> None:
        self.client = client
        self.cache = cache if cache is not None else client.cache
        self.poll_interval_s = poll_interval_s if poll_interval_s > 0 else _DEFAULT_INTERVAL_S
        self.max_attempts = max_attempts_for(timeout_s, self.poll_interval_s)
        self._tracked: dict[int, TrackedSubmission] = {}
        self._listeners: list[StatusListener] = []
        self._task: asyncio.Task | None = None
        self._tick_lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tracked_ids(self) -> list[int]:
        return list(self._tracked)

    def is_tracking(self, submission_id: int) -> bool:
        return submission_id in self._tracked

    def get(self, submission_id: int) -> TrackedSubmission | None:
        return self._tracked.get(submission_id)

    def subscribe(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    def track(self, submission_id: int, initial_status: str = "pending") -> None:
        """Start (or restart) tracking a submission.

        Must be called from the event loop; lazily starts the poll task.
        """
        logger.info("Adding submission #%s to monitor (%s)", submission_id, initial_status)
        self._tracked[submission_id] = TrackedSubmission(
            submission_id=submission_id, last_status=str(initial_status)
        )
        self._ensure_started()

    def untrack(self, submission_id: int) -> None:
        self._tracked.pop(submission_id, None)

    def stop(self) -> asyncio.Task | None:
        """Cancel the poll task and forget every tracked submission.

        Returns the cancelled task (if any) so callers may await it.
        """
        task = self._task
        self._task = None
        self._tracked.clear()
        if task is None or task.done():
            return None
        task.cancel()
        logger.info("Submission monitor stopped")
        return task

    async def shutdown(self) -> None:
        task = self.stop()
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    def _ensure_started(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._poll_loop())

    async def _poll_loop(self) -> None:
        logger.info("Starting submission monitor (interval=%ss)", self.poll_interval_s)
        try:
            while self._tracked:
                await asyncio.sleep(self.poll_interval_s)
                if not self._tracked:
                    break
                try:
                    await self.tick()
                except asyncio.CancelledError:
                    raise
                except Exception:
                    logger.exception("Submission monitor loop error")
        finally:
            if self._task is asyncio.current_task():
                self._task = None
        logger.info("Submission monitor idle")

    async def tick(self) -> None:
        """Poll every tracked submission once. Overlapping calls are skipped."""
        if self._tick_lock.locked():
            logger.debug("Previous monitor tick still running; skipping")
            return
        async with self._tick_lock:
            for entry in list(self._tracked.values()):
                if self._tracked.get(entry.submission_id) is not entry:
                    continue
                await self._check(entry)

    async def _check(self, entry: TrackedSubmission) -> None:
        submission_id = entry.submission_id
        entry.attempt_count += 1
        retire = False
        try:
            self.cache.delete(f"submission:{submission_id}")
            submission = await self.client.get_submission_details(submission_id)
            current = str(submission.get("status") or "")
        except Exception as exc:
            logger.warning("Error checking submission #%s: %s", submission_id, exc)
        else:
            if current and current != entry.last_status:
                old = entry.last_status
                logger.info(
                    "Submission #%s status changed: %s -> %s", submission_id, old, current
                )
                entry.last_status = current
                # List views cached before the change are now wrong.
                self.cache.delete_with_prefix("submissions:")
                await self._emit(submission_id, old, current)
            if is_terminal(current):
                retire = True

        if entry.attempt_count >= self.max_attempts and not retire:
            logger.info("Submission #%s monitoring timed out", submission_id)
            retire = True
        if retire and self._tracked.get(submission_id) is entry:
            del self._tracked[submission_id]

    async def _emit(self, submission_id: int, old: str, new: str) -> None:
        terminal = is_terminal(new)
        change = StatusChange(
            submission_id=submission_id,
            old_status=old,
            new_status=new,
            terminal=terminal,
            message=render_status_change(submission_id, new, terminal),
        )
        for listener in list(self._listeners):
            try:
                result = listener(change)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Status listener failed for submission #%s", submission_id)
