"""Shared test fixtures and dummy classes."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx

from acmoj_client.api import AcmojClient
from acmoj_client.cache import CacheService
from acmoj_client.executor import RequestExecutor, RetryPolicy

BASE_URL = "https://oj.test/OnlineJudge/api/v1"


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_minutes(self, minutes: float) -> None:
        self.now += minutes * 60.0


class DummyTokenProvider:
    """Token provider that records unauthorized callbacks."""

    def __init__(self, token: str | None = "secret") -> None:
        self.token = token
        self.unauthorized_calls = 0

    def get_token(self) -> str | None:
        return self.token

    def on_unauthorized(self) -> None:
        self.unauthorized_calls += 1


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class Router:
    """httpx handler returning queued responses per (method, path)."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], list[Callable[[httpx.Request], httpx.Response]]] = {}

    def add(self, method: str, path: str, *responses: Any) -> None:
        queue = self._routes.setdefault((method, path), [])
        for resp in responses:
            queue.append(resp if callable(resp) else _as_response(resp))

    def calls(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r.method == method and r.url.path == path)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": "no route"})
        handler = queue[0] if len(queue) == 1 else queue.pop(0)
        return handler(request)


def _as_response(value: Any) -> Callable[[httpx.Request], httpx.Response]:
    if isinstance(value, httpx.Response):
        status, content, headers = value.status_code, value.content, dict(value.headers)

        def _replay(_request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, content=content, headers=headers)

        return _replay
    if isinstance(value, BaseException):

        def _raise(_request: httpx.Request) -> httpx.Response:
            raise value

        return _raise

    body = json.dumps(value).encode()

    def _ok(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body, headers={"Content-Type": "application/json"})

    return _ok


def make_executor(
    router: Router,
    token_provider: DummyTokenProvider | None = None,
    max_attempts: int = 3,
    base_delay_s: float = 1.0,
) -> tuple[RequestExecutor, RecordingSleep]:
    sleep = RecordingSleep()
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(router))
    executor = RequestExecutor(
        BASE_URL,
        token_provider=token_provider,
        policy=RetryPolicy(max_attempts=max_attempts, base_delay_s=base_delay_s),
        client=client,
        sleep=sleep,
    )
    return executor, sleep


def make_client(
    router: Router,
    clock: FakeClock | None = None,
    token_provider: DummyTokenProvider | None = None,
    max_attempts: int = 3,
) -> AcmojClient:
    executor, _ = make_executor(router, token_provider, max_attempts=max_attempts)
    cache = CacheService(clock=clock or FakeClock())
    return AcmojClient(executor, cache)
