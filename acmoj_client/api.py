"""ACMOJ API client: cached reads and invalidating writes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, cast
from urllib.parse import quote

from .cache import CacheService
from .executor import RequestExecutor
from .models.api import (
    Problem,
    ProblemPage,
    Problemset,
    ProblemsetList,
    Profile,
    Submission,
    SubmissionPage,
    SubmitResult,
)

__all__ = ["AcmojClient", "ResourceTTLs"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceTTLs:
    """Cache lifetimes in minutes per resource class."""

    problems: float = 5
    problem: float = 30
    problemsets: float = 15
    problemset: float = 20
    submissions: float = 2
    submission: float = 5
    submission_code: float = 30
    profile: float = 15


def _key(*parts: object) -> str:
    head, *rest = parts
    # Selectors are escaped so user text containing ":" cannot collide.
    return ":".join([str(head), *("" if p is None else quote(str(p), safe="") for p in rest)])


def _params(**values: object) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None and v != ""}


class AcmojClient:
    def __init__(
        self,
        executor: RequestExecutor,
        cache: CacheService,
        ttls: ResourceTTLs | None = None,
        site_url: str | None = None,
    ) -> None:
        self.executor = executor
        self.cache = cache
        self.ttls = ttls or ResourceTTLs()
        # Submission code URLs are relative to the site root, not the API root.
        self.site_url = (site_url or executor.base_url.removesuffix("/api/v1")).rstrip("/")

    def clear_cache(self) -> None:
        self.cache.clear()

    # --- Problems ---

    async def get_problems(
        self,
        cursor: str | None = None,
        keyword: str | None = None,
        problemset_id: int | None = None,
    ) -> ProblemPage:
        key = _key("problems", cursor, keyword, problemset_id)

        async def fetch() -> Any:
            return await self.executor.execute(
                "GET",
                "/problem/",
                params=_params(cursor=cursor, keyword=keyword, problemset_id=problemset_id),
            )

        return cast(ProblemPage, await self.cache.get_or_fetch(key, fetch, self.ttls.problems))

    async def get_problem_details(self, problem_id: int) -> Problem:
        async def fetch() -> Any:
            return await self.executor.execute("GET", f"/problem/{problem_id}")

        return cast(
            Problem,
            await self.cache.get_or_fetch(_key("problem", problem_id), fetch, self.ttls.problem),
        )

    # --- Problemsets ---

    async def get_user_problemsets(self) -> ProblemsetList:
        async def fetch() -> Any:
            return await self.executor.execute("GET", "/user/problemsets")

        return cast(
            ProblemsetList,
            await self.cache.get_or_fetch("user:problemsets", fetch, self.ttls.problemsets),
        )

    async def get_problemset_details(self, problemset_id: int) -> Problemset:
        async def fetch() -> Any:
            return await self.executor.execute("GET", f"/problemset/{problemset_id}")

        return cast(
            Problemset,
            await self.cache.get_or_fetch(
                _key("problemset", problemset_id), fetch, self.ttls.problemset
            ),
        )

    # --- Submissions ---

    async def submit_code(
        self,
        problem_id: int,
        language: str,
        code: str,
        is_public: bool = False,
    ) -> SubmitResult:
        result = await self.executor.execute(
            "POST",
            f"/problem/{problem_id}/submit",
            data={"language": language, "code": code, "public": str(is_public).lower()},
        )
        self.cache.delete_with_prefix("submissions:")
        logger.info("Submitted code for problem %s (%s)", problem_id, language)
        return cast(SubmitResult, result)

    async def get_submissions(
        self,
        cursor: str | None = None,
        username: str | None = None,
        problem_id: int | None = None,
        status: str | None = None,
        lang: str | None = None,
    ) -> SubmissionPage:
        key = _key("submissions", cursor, username, problem_id, status, lang)

        async def fetch() -> Any:
            return await self.executor.execute(
                "GET",
                "/submission/",
                params=_params(
                    cursor=cursor,
                    username=username,
                    problem_id=problem_id,
                    status=status,
                    lang=lang,
                ),
            )

        return cast(
            SubmissionPage, await self.cache.get_or_fetch(key, fetch, self.ttls.submissions)
        )

    def expire_submission_cache(self, submission_id: int) -> None:
        self.cache.delete(_key("submission", submission_id))

    async def get_submission_details(self, submission_id: int) -> Submission:
        async def fetch() -> Any:
            return await self.executor.execute("GET", f"/submission/{submission_id}")

        return cast(
            Submission,
            await self.cache.get_or_fetch(
                _key("submission", submission_id), fetch, self.ttls.submission
            ),
        )

    async def get_submission_code(self, code_url: str) -> str:
        if code_url.startswith(("http://", "https://")):
            url = code_url
        else:
            url = f"{self.site_url}/{code_url.lstrip('/')}"

        async def fetch() -> Any:
            return await self.executor.execute("GET", url, expect="text")

        return cast(
            str,
            await self.cache.get_or_fetch(
                _key("submissionCode", code_url), fetch, self.ttls.submission_code
            ),
        )

    async def abort_submission(self, submission_id: int) -> None:
        await self.executor.execute("POST", f"/submission/{submission_id}/abort")
        self.cache.delete_with_prefix("submissions:")
        self.cache.delete(_key("submission", submission_id))
        logger.info("Aborted submission #%s", submission_id)

    # --- User ---

    async def get_user_profile(self) -> Profile:
        async def fetch() -> Any:
            return await self.executor.execute("GET", "/user/profile")

        return cast(Profile, await self.cache.get_or_fetch("user:profile", fetch, self.ttls.profile))
