"""Plain-text formatting for submission statuses and notifications."""

from __future__ import annotations

from .models.submission import SubmissionStatus

STATUS_LABELS: dict[SubmissionStatus, str] = {
    SubmissionStatus.ACCEPTED: "Accepted",
    SubmissionStatus.WRONG_ANSWER: "Wrong Answer",
    SubmissionStatus.COMPILE_ERROR: "Compilation Error",
    SubmissionStatus.RUNTIME_ERROR: "Runtime Error",
    SubmissionStatus.TIME_LIMIT_EXCEEDED: "Time Limit Exceeded",
    SubmissionStatus.MEMORY_LIMIT_EXCEEDED: "Memory Limit Exceeded",
    SubmissionStatus.DISK_LIMIT_EXCEEDED: "Disk Limit Exceeded",
    SubmissionStatus.MEMORY_LEAK: "Memory Leak",
    SubmissionStatus.PENDING: "Pending",
    SubmissionStatus.COMPILING: "Compiling",
    SubmissionStatus.JUDGING: "Judging",
    SubmissionStatus.VOID: "Void",
    SubmissionStatus.ABORTED: "Aborted",
    SubmissionStatus.SKIPPED: "Skipped",
    SubmissionStatus.SYSTEM_ERROR: "System Error",
    SubmissionStatus.BAD_PROBLEM: "Bad Problem",
    SubmissionStatus.UNKNOWN_ERROR: "Unknown Error",
}

STATUS_ICONS: dict[SubmissionStatus, str] = {
    SubmissionStatus.ACCEPTED: "✅",
    SubmissionStatus.WRONG_ANSWER: "❌",
    SubmissionStatus.TIME_LIMIT_EXCEEDED: "⏱️",
    SubmissionStatus.MEMORY_LIMIT_EXCEEDED: "💾",
    SubmissionStatus.DISK_LIMIT_EXCEEDED: "💾",
    SubmissionStatus.RUNTIME_ERROR: "💥",
    SubmissionStatus.COMPILE_ERROR: "🛠️",
    SubmissionStatus.PENDING: "⏳",
    SubmissionStatus.COMPILING: "🔄",
    SubmissionStatus.JUDGING: "🔄",
    SubmissionStatus.SYSTEM_ERROR: "⚠️",
    SubmissionStatus.ABORTED: "⏹️",
    SubmissionStatus.VOID: "🚫",
}


def status_label(status: str | None) -> str:
    parsed = SubmissionStatus.parse(status)
    if parsed is None:
        return (status or "unknown").replace("_", " ").title()
    return STATUS_LABELS[parsed]


def status_icon(status: str | None) -> str:
    parsed = SubmissionStatus.parse(status)
    if parsed is None:
        return "❔"
    return STATUS_ICONS.get(parsed, "❔")


def render_status_change(submission_id: int, status: str, terminal: bool) -> str:
    text = f"Submission #{submission_id} {status_icon(status)} {status_label(status)}"
    if terminal:
        text += " (view details)"
    return text
