"""
Submissions component - student work and editorial decisions.

Takes submissions from the public form, lets staff list and decide them,
and emails the student through the notifications component.
"""

from .component import (
    run_decide_submission,
    run_delete_submission,
    run_list_submissions,
    run_submit_work,
)
from .models import (
    DecideSubmissionInput,
    DeleteSubmissionInput,
    ListSubmissionsInput,
    SubmissionListOutput,
    SubmissionOutput,
    SubmitWorkInput,
)
from .ports import ProfileLookupPort, SubmissionRepoPort, TimePort

__all__ = [
    # Entry points
    "run_decide_submission",
    "run_delete_submission",
    "run_list_submissions",
    "run_submit_work",
    # Models
    "DecideSubmissionInput",
    "DeleteSubmissionInput",
    "ListSubmissionsInput",
    "SubmissionListOutput",
    "SubmissionOutput",
    "SubmitWorkInput",
    # Ports
    "ProfileLookupPort",
    "SubmissionRepoPort",
    "TimePort",
]
