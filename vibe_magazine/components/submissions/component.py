"""
Submissions component - student work and its editorial review.

Students submit through the public form; staff list and decide. A
decision is final: once a submission is accepted or rejected it cannot be
decided again. The student is emailed through the notifications
component, and a failed email does not undo the decision.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from uuid import UUID

from vibe_magazine.components.notifications import (
    EmailPort,
    NotificationLogPort,
    SendNotificationInput,
    run_send_notification,
)
from vibe_magazine.domain.entities import Identity, Submission
from vibe_magazine.domain.errors import ErrorCode, UpstreamError
from vibe_magazine.domain.policy import PolicyEngine
from vibe_magazine.rules.models import SubmissionsRules

from ._impl import decision_body, decision_subject, matches_search
from .models import (
    DecideSubmissionInput,
    DeleteSubmissionInput,
    ListSubmissionsInput,
    SubmissionListOutput,
    SubmissionOutput,
    SubmitWorkInput,
)
from .ports import ProfileLookupPort, SubmissionRepoPort, TimePort

logger = logging.getLogger(__name__)

CALLER_UNVERIFIED = "Could not verify staff permissions."
STATUSES = ("Pending", "Accepted", "Rejected")
DECISIONS = ("Accepted", "Rejected")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _fail(error: str, code: ErrorCode) -> SubmissionOutput:
    return SubmissionOutput(success=False, error=error, error_code=code)


def _parse_id(raw: str | None) -> UUID | None:
    try:
        return UUID(str(raw))
    except (ValueError, TypeError):
        return None


def _caller_role(caller: Identity, profiles: ProfileLookupPort) -> str | None:
    try:
        profile = profiles.get(caller.id)
    except UpstreamError as e:
        logger.warning("Profile lookup failed for caller %s: %s", caller.id, e)
        return None
    return profile.role if profile else None


def _authorize(
    caller: Identity, action: str, profiles: ProfileLookupPort, policy: PolicyEngine
) -> str | None:
    """Return the denial reason, or None when the caller may proceed."""
    role = _caller_role(caller, profiles)
    if role is None:
        return CALLER_UNVERIFIED
    decision = policy.authorize(role, action)
    return None if decision else decision.reason


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def run_submit_work(
    inp: SubmitWorkInput,
    repo: SubmissionRepoPort,
    rules: SubmissionsRules,
    time: TimePort,
) -> SubmissionOutput:
    full_name = _clean(inp.full_name)
    student_email = _clean(inp.student_email)
    title = _clean(inp.title_of_work)
    category = _clean(inp.category)
    if not (full_name and student_email and title and category):
        return _fail(
            "Missing required fields: full_name, student_email, title_of_work, and category "
            "are required.",
            "validation",
        )

    student_email = student_email.lower()
    if not _EMAIL_RE.match(student_email):
        return _fail("Invalid email address", "validation")

    if category not in rules.categories:
        return _fail(
            f"Invalid category. Must be one of: {', '.join(rules.categories)}", "validation"
        )

    submission = Submission(
        full_name=full_name,
        student_email=student_email,
        student_id=_clean(inp.student_id),
        title_of_work=title,
        course_program=_clean(inp.course_program),
        category=category,
        abstract=_clean(inp.abstract),
        file_url=_clean(inp.file_url),
        submitted_at=time.now_utc(),
    )
    try:
        repo.insert(submission)
    except UpstreamError as e:
        return _fail(f"Failed to save submission: {e.message}", "upstream")

    logger.info("Submission %s received from %s", submission.id, student_email)
    return SubmissionOutput(success=True, message="Submission received", submission=submission)


def run_list_submissions(
    inp: ListSubmissionsInput,
    repo: SubmissionRepoPort,
    profiles: ProfileLookupPort,
    policy: PolicyEngine,
) -> SubmissionListOutput:
    denied = _authorize(inp.caller, "submissions:review", profiles, policy)
    if denied:
        return SubmissionListOutput(success=False, error=denied, error_code="permission")

    status = _clean(inp.status)
    if status and status.lower() != "all":
        status = status.capitalize()
        if status not in STATUSES:
            return SubmissionListOutput(
                success=False,
                error=f"Invalid status filter. Must be one of: all, {', '.join(STATUSES)}",
                error_code="validation",
            )
    else:
        status = None

    try:
        submissions = repo.list_all()
    except UpstreamError as e:
        return SubmissionListOutput(success=False, error=e.message, error_code="upstream")

    by_status = Counter(s.status for s in submissions)
    counts = {"total": len(submissions), **{s: by_status.get(s, 0) for s in STATUSES}}

    if status:
        submissions = [s for s in submissions if s.status == status]
    term = _clean(inp.search)
    if term:
        submissions = [s for s in submissions if matches_search(s, term)]

    return SubmissionListOutput(submissions=submissions, counts=counts, success=True)


def run_decide_submission(
    inp: DecideSubmissionInput,
    repo: SubmissionRepoPort,
    profiles: ProfileLookupPort,
    policy: PolicyEngine,
    *,
    email: EmailPort,
    time: TimePort,
    notification_log: NotificationLogPort | None = None,
) -> SubmissionOutput:
    """
    Accept or reject a pending submission and email the student.

    Returns:
        SubmissionOutput with the updated submission and the notification
        result. ``conflict`` when the submission was already decided.
    """
    denied = _authorize(inp.caller, "submissions:review", profiles, policy)
    if denied:
        return _fail(denied, "permission")

    if not inp.submission_id or not inp.decision:
        return _fail("Missing required fields: submission_id and decision", "validation")

    decision = inp.decision.strip().capitalize()
    if decision not in DECISIONS:
        return _fail(f"Invalid decision. Must be one of: {', '.join(DECISIONS)}", "validation")

    submission_id = _parse_id(inp.submission_id)
    if submission_id is None:
        return _fail("Invalid submission ID format", "validation")

    try:
        submission = repo.get(submission_id)
    except UpstreamError as e:
        return _fail(e.message, "upstream")
    if submission is None:
        return _fail("Submission not found.", "not_found")
    if submission.is_decided:
        return _fail(f"Submission has already been {submission.status.lower()}.", "conflict")

    now = time.now_utc()
    try:
        updated = repo.record_decision(submission_id, decision, inp.caller.id, now)
    except UpstreamError as e:
        return _fail(f"Failed to update submission: {e.message}", "upstream")
    if not updated:
        # Decided by someone else between the read and the write
        return _fail("Submission has already been decided.", "conflict")

    submission = submission.model_copy(
        update={"status": decision, "decided_at": now, "decided_by": inp.caller.id}
    )
    logger.info("Submission %s %s by %s", submission_id, decision.lower(), inp.caller.id)

    notification = run_send_notification(
        SendNotificationInput(
            to=submission.student_email,
            subject=decision_subject(submission, decision),
            body=decision_body(submission, decision, policy.rules.submissions.signature),
            submission_id=str(submission_id),
            status=decision,
        ),
        email=email,
        time=time,
        notification_log=notification_log,
    )
    if not notification.success or notification.delivery_status == "failed":
        logger.warning(
            "Submission %s was %s but the student was not notified: %s",
            submission_id,
            decision.lower(),
            notification.error or notification.delivery_status,
        )

    return SubmissionOutput(
        success=True,
        message=f"Submission {decision.lower()}",
        submission=submission,
        notification=notification,
    )


def run_delete_submission(
    inp: DeleteSubmissionInput,
    repo: SubmissionRepoPort,
    profiles: ProfileLookupPort,
    policy: PolicyEngine,
) -> SubmissionOutput:
    denied = _authorize(inp.caller, "submissions:delete", profiles, policy)
    if denied:
        return _fail(denied, "permission")

    if not inp.submission_id:
        return _fail("Missing required field: submission_id is required.", "validation")
    submission_id = _parse_id(inp.submission_id)
    if submission_id is None:
        return _fail("Invalid submission ID format", "validation")

    try:
        deleted = repo.delete(submission_id)
    except UpstreamError as e:
        return _fail(f"Failed to delete submission: {e.message}", "upstream")
    if not deleted:
        return _fail("Submission not found.", "not_found")

    logger.info("Submission %s deleted by %s", submission_id, inp.caller.id)
    return SubmissionOutput(success=True, message="Submission deleted")
