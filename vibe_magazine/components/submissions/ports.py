from datetime import datetime
from typing import Protocol
from uuid import UUID

from vibe_magazine.domain.entities import Submission, UserProfile


class SubmissionRepoPort(Protocol):
    """Submission store. Every method raises UpstreamError on datastore failure."""

    def get(self, submission_id: UUID) -> Submission | None: ...
    def insert(self, submission: Submission) -> Submission: ...

    def list_all(self) -> list[Submission]:
        """Newest first."""
        ...

    def record_decision(
        self, submission_id: UUID, status: str, decided_by: UUID, at: datetime
    ) -> bool:
        """Update a pending submission; False if it is no longer pending."""
        ...

    def delete(self, submission_id: UUID) -> bool:
        """False if there was nothing to delete."""
        ...


class ProfileLookupPort(Protocol):
    def get(self, user_id: UUID) -> UserProfile | None: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
