"""ACMOJ API payload shapes."""

from __future__ import annotations

from typing import Any, TypedDict


class ProblemBrief(TypedDict, total=False):
    id: int
    title: str | None
    url: str | None
    html_url: str | None
    submit_url: str | None


class Problem(TypedDict, total=False):
    """Problem detail (partial)."""

    id: int
    title: str
    description: str | None
    input: str | None
    output: str | None
    examples: list[dict[str, str]] | None
    example_input: str | None
    example_output: str | None
    data_range: str | None
    languages_accepted: list[str] | None


class ProblemPage(TypedDict):
    problems: list[ProblemBrief]
    next: str | None


class SubmissionBrief(TypedDict, total=False):
    id: int
    friendly_name: str
    problem: ProblemBrief
    status: str
    language: str
    created_at: str
    url: str | None
    html_url: str | None


class Submission(TypedDict, total=False):
    """Submission detail."""

    id: int
    friendly_name: str
    problem: ProblemBrief
    public: bool
    language: str
    score: int | None
    message: str | None
    details: Any
    time_msecs: int | None
    memory_bytes: int | None
    status: str
    should_show_score: bool
    created_at: str
    code_url: str | None
    abort_url: str | None
    html_url: str | None


class SubmissionPage(TypedDict):
    submissions: list[SubmissionBrief]
    next: str | None


class SubmitResult(TypedDict):
    id: int


class Profile(TypedDict, total=False):
    username: str
    friendly_name: str
    student_id: str


class CourseBrief(TypedDict):
    id: int
    name: str


class Problemset(TypedDict, total=False):
    """Contest, homework or exam."""

    id: int
    course: CourseBrief | None
    name: str
    description: str | None
    allowed_languages: list[str] | None
    start_time: str
    end_time: str
    late_submission_deadline: str | None
    type: str
    problems: list[ProblemBrief]
    url: str
    join_url: str | None
    quit_url: str | None
    html_url: str


class ProblemsetList(TypedDict):
    problemsets: list[Problemset]
