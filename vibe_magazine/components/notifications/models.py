"""
Notifications component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from vibe_magazine.domain.entities import DeliveryStatus
from vibe_magazine.domain.errors import ErrorCode


class EmailStatus(Enum):
    """Email send result status."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"  # Dev adapter or dry-run


@dataclass
class EmailResult:
    """Result of an email send attempt."""

    status: EmailStatus
    message_id: str | None = None
    error: str | None = None
    sent_at: datetime | None = None
    recipient: str = ""

    @classmethod
    def success(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        return cls(
            status=EmailStatus.SENT,
            message_id=message_id,
            recipient=recipient,
            sent_at=datetime.now(UTC),
        )

    @classmethod
    def skipped(cls, recipient: str, reason: str = "Dev mode") -> EmailResult:
        return cls(status=EmailStatus.SKIPPED, recipient=recipient, error=reason)

    @classmethod
    def failed(cls, recipient: str, error: str) -> EmailResult:
        return cls(status=EmailStatus.FAILED, recipient=recipient, error=error)


@dataclass(frozen=True)
class SendNotificationInput:
    """Submission status notification request."""

    to: str | None
    subject: str | None
    body: str | None
    submission_id: str | None = None
    status: str | None = None


@dataclass(frozen=True)
class SendNotificationOutput:
    success: bool
    message: str | None = None
    delivery_status: DeliveryStatus | None = None
    timestamp: datetime | None = None
    error: str | None = None
    error_code: ErrorCode | None = None
