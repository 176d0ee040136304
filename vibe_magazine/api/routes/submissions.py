"""
Submissions API.

Public endpoint for the student submission form, and the staff review
queue: list, decide (accept/reject, which emails the student) and delete.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from vibe_magazine.api.deps import get_caller, get_context
from vibe_magazine.components.submissions import (
    DecideSubmissionInput,
    DeleteSubmissionInput,
    ListSubmissionsInput,
    SubmissionListOutput,
    SubmissionOutput,
    SubmitWorkInput,
    run_decide_submission,
    run_delete_submission,
    run_list_submissions,
    run_submit_work,
)
from vibe_magazine.context import ServiceContext
from vibe_magazine.domain.entities import Identity, Submission
from vibe_magazine.domain.errors import error_for_code

router = APIRouter()


# --- Request/Response Models ---


class SubmitWorkRequest(BaseModel):
    full_name: str | None = None
    student_email: str | None = None
    student_id: str | None = None
    title_of_work: str | None = None
    course_program: str | None = None
    category: str | None = None
    abstract: str | None = None
    file_url: str | None = None


class DecisionRequest(BaseModel):
    decision: str | None = None


class SubmissionResponse(BaseModel):
    id: str
    full_name: str
    student_email: str
    student_id: str | None = None
    title_of_work: str
    course_program: str | None = None
    category: str
    abstract: str | None = None
    file_url: str | None = None
    status: str
    submitted_at: datetime
    decided_at: datetime | None = None
    decided_by: str | None = None


class SubmissionListResponse(BaseModel):
    submissions: list[SubmissionResponse]
    counts: dict[str, int]


class NotificationResponse(BaseModel):
    success: bool
    delivery_status: str | None = None
    timestamp: datetime | None = None
    error: str | None = None


class DecisionResponse(BaseModel):
    success: bool = True
    message: str
    submission: SubmissionResponse
    notification: NotificationResponse | None = None


# --- Helpers ---


def _raise_for(out: SubmissionOutput | SubmissionListOutput) -> None:
    if not out.success:
        raise error_for_code(out.error_code, out.error or "Request failed")


def _to_response(submission: Submission) -> SubmissionResponse:
    data = submission.model_dump()
    data["id"] = str(data["id"])
    data["decided_by"] = str(data["decided_by"]) if data["decided_by"] else None
    return SubmissionResponse(**data)


# --- Routes ---


@router.post(
    "/submissions",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
def submit_work(
    request: SubmitWorkRequest,
    ctx: ServiceContext = Depends(get_context),
) -> SubmissionResponse:
    out = run_submit_work(
        SubmitWorkInput(**request.model_dump()),
        ctx.submission_repo,
        ctx.rules.submissions,
        ctx.clock,
    )
    _raise_for(out)
    assert out.submission is not None
    return _to_response(out.submission)


@router.get("/admin/submissions", response_model=SubmissionListResponse)
def list_submissions(
    status_: str | None = Query(
        None, alias="status", description="all, Pending, Accepted or Rejected"
    ),
    q: str | None = Query(None, description="Search name, email or title"),
    caller: Identity = Depends(get_caller),
    ctx: ServiceContext = Depends(get_context),
) -> SubmissionListResponse:
    out = run_list_submissions(
        ListSubmissionsInput(caller=caller, status=status_, search=q),
        ctx.submission_repo,
        ctx.profile_repo,
        ctx.policy,
    )
    _raise_for(out)
    return SubmissionListResponse(
        submissions=[_to_response(s) for s in out.submissions],
        counts=out.counts,
    )


@router.post("/admin/submissions/{submission_id}/decision", response_model=DecisionResponse)
def decide_submission(
    submission_id: str,
    request: DecisionRequest,
    caller: Identity = Depends(get_caller),
    ctx: ServiceContext = Depends(get_context),
) -> DecisionResponse:
    out = run_decide_submission(
        DecideSubmissionInput(
            caller=caller, submission_id=submission_id, decision=request.decision
        ),
        ctx.submission_repo,
        ctx.profile_repo,
        ctx.policy,
        email=ctx.email,
        time=ctx.clock,
        notification_log=ctx.notification_log,
    )
    _raise_for(out)
    assert out.submission is not None

    notification = None
    if out.notification is not None:
        notification = NotificationResponse(
            success=out.notification.success,
            delivery_status=out.notification.delivery_status,
            timestamp=out.notification.timestamp,
            error=out.notification.error,
        )
    return DecisionResponse(
        message=out.message or "",
        submission=_to_response(out.submission),
        notification=notification,
    )


@router.delete("/admin/submissions/{submission_id}")
def delete_submission(
    submission_id: str,
    caller: Identity = Depends(get_caller),
    ctx: ServiceContext = Depends(get_context),
) -> dict[str, Any]:
    out = run_delete_submission(
        DeleteSubmissionInput(caller=caller, submission_id=submission_id),
        ctx.submission_repo,
        ctx.profile_repo,
        ctx.policy,
    )
    _raise_for(out)
    return {"success": True, "message": out.message}
