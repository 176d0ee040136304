"""
Wording of the decision emails sent to students.
"""

from __future__ import annotations

from datetime import datetime

from vibe_magazine.domain.entities import Submission


def _long_date(dt: datetime) -> str:
    return f"{dt:%B} {dt.day}, {dt.year}"


def _details(submission: Submission) -> str:
    return (
        "Submission Details:\n"
        f"- Title: {submission.title_of_work}\n"
        f"- Category: {submission.category}\n"
        f"- Submitted: {_long_date(submission.submitted_at)}"
    )


def decision_subject(submission: Submission, decision: str) -> str:
    if decision == "Accepted":
        return f'Congratulations! Your submission "{submission.title_of_work}" has been accepted'
    return f'Update on your submission "{submission.title_of_work}"'


def decision_body(submission: Submission, decision: str, signature: str) -> str:
    if decision == "Accepted":
        message = (
            f'We are delighted to inform you that your submission "{submission.title_of_work}" '
            "has been accepted for publication in Vibe Magazine.\n\n"
            "Our editorial team will be in touch with next steps for publication."
        )
    else:
        message = (
            f'Thank you for submitting "{submission.title_of_work}" to Vibe Magazine. '
            "After careful review, we are unable to accept it for publication at this time.\n\n"
            "We encourage you to keep creating and to submit again in the future."
        )
    return (
        f"Dear {submission.full_name},\n\n"
        f"{message}\n\n"
        f"{_details(submission)}\n\n"
        f"Best regards,\n{signature}"
    )


def matches_search(submission: Submission, term: str) -> bool:
    term = term.lower()
    return any(
        term in value.lower()
        for value in (submission.full_name, submission.student_email, submission.title_of_work)
    )
