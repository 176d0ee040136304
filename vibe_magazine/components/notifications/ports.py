"""
Notifications component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from vibe_magazine.domain.entities import NotificationRecord

from .models import EmailResult


class EmailPort(Protocol):
    """
    Email sending interface.

    Implementations must not raise; they return a failed status instead.
    """

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult: ...


class NotificationLogPort(Protocol):
    """Notification table. Raises UpstreamError on datastore failure."""

    def insert(self, record: NotificationRecord) -> NotificationRecord: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
