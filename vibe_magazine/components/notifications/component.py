"""
Notifications component - submission status emails.

Delivery is delegated to an EmailPort; the dev adapter only logs. Every
request with the required fields succeeds, and the notification log
write is best effort.
"""

from __future__ import annotations

import html
import logging

from vibe_magazine.domain.entities import DeliveryStatus, NotificationRecord
from vibe_magazine.domain.errors import UpstreamError

from .models import EmailStatus, SendNotificationInput, SendNotificationOutput
from .ports import EmailPort, NotificationLogPort, TimePort

logger = logging.getLogger(__name__)

_DELIVERY_BY_STATUS: dict[EmailStatus, DeliveryStatus] = {
    EmailStatus.SENT: "sent",
    EmailStatus.FAILED: "failed",
    EmailStatus.SKIPPED: "simulated",
}


def body_to_html(body: str) -> str:
    return html.escape(body).replace("\n", "<br>")


def run_send_notification(
    inp: SendNotificationInput,
    *,
    email: EmailPort,
    time: TimePort,
    notification_log: NotificationLogPort | None = None,
) -> SendNotificationOutput:
    """
    Send (or simulate) a submission status notification.

    Args:
        inp: Recipient, subject, body and optional submission reference.
        email: Email port used for delivery.
        time: Time port.
        notification_log: Optional notification table for the delivery record.

    Returns:
        SendNotificationOutput; failure only when required fields are missing.
    """
    if not (inp.to and inp.subject and inp.body):
        return SendNotificationOutput(
            success=False,
            error="Missing required fields: to, subject, body",
            error_code="validation",
        )

    logger.info(
        "Sending %s notification to %s for submission %s",
        inp.status,
        inp.to,
        inp.submission_id,
    )

    result = email.send_email(
        recipient=inp.to,
        subject=inp.subject,
        body_html=body_to_html(inp.body),
        body_text=inp.body,
    )
    delivery_status = _DELIVERY_BY_STATUS[result.status]
    if result.status == EmailStatus.FAILED:
        logger.warning("Email delivery to %s failed: %s", inp.to, result.error)

    now = time.now_utc()
    if notification_log is not None:
        record = NotificationRecord(
            recipient=inp.to,
            subject=inp.subject,
            body=inp.body,
            submission_id=inp.submission_id,
            status=inp.status.lower() if inp.status else None,
            sent_at=now,
            delivery_status=delivery_status,
        )
        try:
            notification_log.insert(record)
        except UpstreamError as e:
            logger.warning("Failed to log notification: %s", e)

    return SendNotificationOutput(
        success=True,
        message=f"Notification sent to {inp.to}",
        delivery_status=delivery_status,
        timestamp=now,
    )
