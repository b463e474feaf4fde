"""In-memory personal access token holder."""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class StaticTokenProvider:
    """Token provider backed by a single bearer token.

    ``on_unauthorized`` forgets the token so later calls go out anonymously
    until a new one is set.
    """

    def __init__(
        self,
        token: str | None = None,
        on_change: Callable[[bool], object] | None = None,
    ) -> None:
        self._token = (token or "").strip() or None
        self._on_change = on_change
        self.unauthorized_count = 0

    @property
    def logged_in(self) -> bool:
        return self._token is not None

    def get_token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        self._token = (token or "").strip() or None
        self._notify()

    def on_unauthorized(self) -> None:
        self.unauthorized_count += 1
        if self._token is None:
            return
        logger.warning("Token rejected by server; clearing it. Set a new token to continue.")
        self._token = None
        self._notify()

    def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self.logged_in)
        except Exception:
            logger.exception("Login status callback failed")
