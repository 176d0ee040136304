"""
Dev email adapter.

Submission notifications are not delivered anywhere yet: this adapter logs
each message and reports it as skipped, which the notifications component
records as a simulated delivery. The most recent messages are kept in a
bounded in-memory outbox so tests can inspect them.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from vibe_magazine.components.notifications.models import EmailResult, EmailStatus

logger = logging.getLogger(__name__)


@dataclass
class LoggedEmail:
    """Record of a logged email."""

    id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str
    logged_at: datetime


@dataclass
class DevEmailAdapter:
    """Implements EmailPort by logging instead of sending."""

    log_level: int = logging.INFO
    log_body: bool = True
    body_preview_length: int = 100
    # Oldest messages drop off once the limit is reached
    outbox_limit: int = 200
    outbox: deque[LoggedEmail] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.outbox = deque(maxlen=self.outbox_limit)

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        message_id = f"dev-{uuid4().hex[:12]}"
        self.outbox.append(
            LoggedEmail(
                id=message_id,
                recipient=recipient,
                subject=subject,
                body_html=body_html,
                body_text=body_text or "",
                logged_at=datetime.now(UTC),
            )
        )

        parts = [f"EMAIL (simulated): To={recipient}", f"Subject={subject}"]
        if self.log_body and body_text:
            preview = body_text[: self.body_preview_length]
            if len(body_text) > self.body_preview_length:
                preview += "..."
            parts.append(f"Body={preview}")
        parts.append(f"MessageID={message_id}")
        logger.log(self.log_level, ", ".join(parts))

        return EmailResult(
            status=EmailStatus.SKIPPED,
            message_id=message_id,
            recipient=recipient,
            error="Simulated delivery - email logged, not sent",
        )

    # --- Test Helper Methods ---

    def last(self) -> LoggedEmail | None:
        return self.outbox[-1] if self.outbox else None

    def to(self, recipient: str) -> list[LoggedEmail]:
        return [e for e in self.outbox if e.recipient == recipient]

    def clear(self) -> None:
        self.outbox.clear()
