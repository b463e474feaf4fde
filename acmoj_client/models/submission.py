"""Submission status taxonomy and monitor records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SubmissionStatus(str, Enum):
    ACCEPTED = "accepted"
    WRONG_ANSWER = "wrong_answer"
    COMPILE_ERROR = "compile_error"
    RUNTIME_ERROR = "runtime_error"
    TIME_LIMIT_EXCEEDED = "time_limit_exceeded"
    MEMORY_LIMIT_EXCEEDED = "memory_limit_exceeded"
    DISK_LIMIT_EXCEEDED = "disk_limit_exceeded"
    MEMORY_LEAK = "memory_leak"
    PENDING = "pending"
    COMPILING = "compiling"
    JUDGING = "judging"
    VOID = "void"
    ABORTED = "aborted"
    SKIPPED = "skipped"
    SYSTEM_ERROR = "system_error"
    BAD_PROBLEM = "bad_problem"
    UNKNOWN_ERROR = "unknown_error"

    @classmethod
    def parse(cls, value: object) -> SubmissionStatus | None:
        """Return the member for ``value`` or None if the server sent something new."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


# Statuses the judge can still move away from.
IN_PROGRESS_STATUSES = frozenset(
    {
        SubmissionStatus.PENDING,
        SubmissionStatus.COMPILING,
        SubmissionStatus.JUDGING,
    }
)

TERMINAL_STATUSES = frozenset(set(SubmissionStatus) - IN_PROGRESS_STATUSES)


def is_terminal(status: SubmissionStatus | str | None) -> bool:
    """Return True when no further status transition is possible.

    Unrecognised status strings are treated as in progress; the monitor's
    attempt ceiling still retires them.
    """
    parsed = SubmissionStatus.parse(status)
    return parsed is not None and parsed in TERMINAL_STATUSES


@dataclass
class TrackedSubmission:
    submission_id: int
    last_status: str
    attempt_count: int = 0


@dataclass(frozen=True)
class StatusChange:
    """Notification emitted when a tracked submission changes status."""

    submission_id: int
    old_status: str
    new_status: str
    terminal: bool
    message: str

    @property
    def show_details(self) -> bool:
        return self.terminal
