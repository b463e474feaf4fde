"""Error taxonomy for ACMOJ API calls.

``AuthError`` and ``ClientError`` are fatal to the current call.
``FetchError`` subclasses (``NetworkError``, ``ServerError``) are transient
and retried by the request executor before they reach the caller.
"""

from __future__ import annotations

__all__ = [
    "ApiError",
    "AuthError",
    "ClientError",
    "FetchError",
    "NetworkError",
    "ServerError",
]


class ApiError(RuntimeError):
    """Base class for every failure surfaced by the client."""

    retryable = False

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    @property
    def user_message(self) -> str:
        return self.message


class AuthError(ApiError):
    @property
    def user_message(self) -> str:
        return "Invalid or expired token. Please set a new one."


class ClientError(ApiError):
    @property
    def user_message(self) -> str:
        if self.status is None:
            return f"Request rejected: {self.message}"
        return f"Request rejected (HTTP {self.status}): {self.message}"


class FetchError(ApiError):
    retryable = True


class NetworkError(FetchError):
    @property
    def user_message(self) -> str:
        return (
            f"Network connectivity issue: {self.message}. "
            "Try checking your network connection or VPN settings."
        )


class ServerError(FetchError):
    @property
    def user_message(self) -> str:
        if self.status is None:
            return f"Server error: {self.message}. Please try again later."
        return f"Server error (HTTP {self.status}): {self.message}. Please try again later."
