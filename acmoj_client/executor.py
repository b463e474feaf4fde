"""HTTP request executor with bearer auth, error classification and retries."""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol

import httpx

from .errors import ApiError, AuthError, ClientError, NetworkError, ServerError

__all__ = ["RetryPolicy", "TokenProvider", "RequestExecutor", "api_base_url"]

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_S = 15.0
_MAX_REDIRECTS = 5


def api_base_url(base_url: str) -> str:
    return f"{base_url.rstrip('/')}/OnlineJudge/api/v1"


@dataclass(frozen=True)
class RetryPolicy:
    """Linear backoff: wait ``base_delay_s * attempt`` after failed attempt N."""

    max_attempts: int = 3
    base_delay_s: float = 1.0

    def delay_for(self, attempt: int) -> float:
        return self.base_delay_s * attempt


class TokenProvider(Protocol):
    """Credential collaborator; both methods may be sync or async."""

    def get_token(self) -> str | None | Awaitable[str | None]: ...

    def on_unauthorized(self) -> None | Awaitable[None]: ...


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return resp.reason_phrase or f"HTTP {resp.status_code}"


class RequestExecutor:
    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider | None = None,
        policy: RetryPolicy | None = None,
        timeout_s: float = _DEFAULT_TIMEOUT_S,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.policy = policy or RetryPolicy()
        self._base_host = httpx.URL(self.base_url).host
        self._sleep = sleep
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=httpx.Timeout(timeout_s),
            follow_redirects=True,
            max_redirects=_MAX_REDIRECTS,
        )

    def _same_host(self, path: str) -> bool:
        """Relative paths and absolute URLs on the API host may carry the token."""
        url = httpx.URL(path)
        if not url.is_absolute_url:
            return True
        return url.host == self._base_host

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def execute(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        expect: str = "json",
    ) -> Any:
        """Send a request, retrying transient failures.

        Raises:
            AuthError: HTTP 401; the token provider has been told.
            ClientError: any other 4xx, never retried.
            NetworkError: transport failure after all attempts.
            ServerError: 5xx after all attempts.
        """
        max_attempts = max(1, self.policy.max_attempts)
        attempt = 0
        while True:
            try:
                return await self._send(method, path, params=params, data=data, expect=expect)
            except AuthError:
                await self._notify_unauthorized()
                raise
            except ApiError as exc:
                if not exc.retryable:
                    raise
                attempt += 1
                if attempt >= max_attempts:
                    logger.warning(
                        "%s %s failed after %d attempts: %s", method, path, attempt, exc
                    )
                    raise
                delay = self.policy.delay_for(attempt)
                logger.info(
                    "Request retry %d/%d in %.2fs: %s %s (%s)",
                    attempt,
                    max_attempts,
                    delay,
                    method,
                    path,
                    exc,
                )
                await self._sleep(delay)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None,
        data: dict[str, Any] | None,
        expect: str,
    ) -> Any:
        headers: dict[str, str] = {}
        if self.token_provider is not None:
            token = await _maybe_await(self.token_provider.get_token())
            if token and self._same_host(path):
                headers["Authorization"] = f"Bearer {token}"

        try:
            resp = await self._client.request(
                method.upper(), path, params=params, data=data, headers=headers
            )
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Request timed out ({exc.__class__.__name__})") from exc
        except httpx.RequestError as exc:
            # connect, TLS, redirect loops, bad content encoding
            raise NetworkError(str(exc) or exc.__class__.__name__) from exc

        status = resp.status_code
        if status == 401:
            logger.warning("API request unauthorized (401). Invalidating token.")
            raise AuthError(_error_message(resp), status=status)
        if 400 <= status < 500:
            raise ClientError(_error_message(resp), status=status)
        if status >= 500:
            raise ServerError(_error_message(resp), status=status)
        if not resp.is_success:
            raise ClientError(_error_message(resp), status=status)

        if expect == "text":
            return resp.text
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise ServerError("Invalid JSON in response", status=status) from exc

    async def _notify_unauthorized(self) -> None:
        if self.token_provider is None:
            return
        try:
            await _maybe_await(self.token_provider.on_unauthorized())
        except Exception:
            logger.exception("Token provider failed to handle unauthorized response")
