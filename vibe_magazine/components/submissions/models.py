from __future__ import annotations

from dataclasses import dataclass, field

from vibe_magazine.components.notifications import SendNotificationOutput
from vibe_magazine.domain.entities import Identity, Submission
from vibe_magazine.domain.errors import ErrorCode


@dataclass
class SubmitWorkInput:
    """Public submission form. No caller: students are not signed in."""

    full_name: str | None
    student_email: str | None
    title_of_work: str | None
    category: str | None
    student_id: str | None = None
    course_program: str | None = None
    abstract: str | None = None
    file_url: str | None = None


@dataclass
class ListSubmissionsInput:
    caller: Identity
    # "all" or None means every status
    status: str | None = None
    search: str | None = None


@dataclass
class DecideSubmissionInput:
    caller: Identity
    submission_id: str | None
    decision: str | None


@dataclass
class DeleteSubmissionInput:
    caller: Identity
    submission_id: str | None


@dataclass
class SubmissionOutput:
    success: bool = False
    message: str | None = None
    submission: Submission | None = None
    notification: SendNotificationOutput | None = None
    error: str | None = None
    error_code: ErrorCode | None = None


@dataclass
class SubmissionListOutput:
    submissions: list[Submission] = field(default_factory=list)
    # Counted over every submission, before filtering
    counts: dict[str, int] = field(default_factory=dict)
    success: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None
