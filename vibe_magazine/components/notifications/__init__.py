"""
Notifications component - simulated submission status emails.
"""

from .component import body_to_html, run_send_notification
from .models import (
    EmailResult,
    EmailStatus,
    SendNotificationInput,
    SendNotificationOutput,
)
from .ports import EmailPort, NotificationLogPort, TimePort

__all__ = [
    "run_send_notification",
    "body_to_html",
    "EmailResult",
    "EmailStatus",
    "SendNotificationInput",
    "SendNotificationOutput",
    "EmailPort",
    "NotificationLogPort",
    "TimePort",
]
