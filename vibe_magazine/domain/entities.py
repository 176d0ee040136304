from datetime import UTC, datetime
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

# --- Enums / Literals ---
RoleType = Literal["faculty", "admin", "superadmin"]
EventType = Literal["visit", "like", "comment", "save"]
DeliveryStatus = Literal["simulated", "sent", "failed"]
SubmissionStatus = Literal["Pending", "Accepted", "Rejected"]

EVENT_TYPES: tuple[EventType, ...] = ("visit", "like", "comment", "save")


def utc_now() -> datetime:
    return datetime.now(UTC)


# --- Auth & Profiles ---

class Identity(BaseModel):
    """Auth-provider record for a login identity."""

    id: UUID = Field(default_factory=uuid4)
    email: str
    email_confirmed_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)


class UserProfile(BaseModel):
    id: UUID
    username: str
    email: str
    display_name: str
    role: RoleType
    is_active: bool = True
    created_by: UUID | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    password_reset_at: datetime | None = None
    password_reset_by: UUID | None = None


class ActivityLogEntry(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    action: str
    details: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)


# --- Magazines & Engagement ---

class Magazine(BaseModel):
    id: str
    title: str
    created_at: datetime | None = None


class EngagementEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    magazine_id: str
    event_type: EventType
    created_at: datetime


# --- Notifications ---

class NotificationRecord(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    recipient: str
    subject: str
    body: str
    submission_id: str | None = None
    status: str | None = None
    sent_at: datetime = Field(default_factory=utc_now)
    delivery_status: DeliveryStatus = "simulated"


# --- Submissions ---

class Submission(BaseModel):
    """Student work sent in through the public form, awaiting editorial review."""

    id: UUID = Field(default_factory=uuid4)
    full_name: str
    student_email: str
    student_id: str | None = None
    title_of_work: str
    course_program: str | None = None
    category: str
    abstract: str | None = None
    file_url: str | None = None
    status: SubmissionStatus = "Pending"
    submitted_at: datetime = Field(default_factory=utc_now)
    decided_at: datetime | None = None
    decided_by: UUID | None = None

    @property
    def is_decided(self) -> bool:
        return self.status != "Pending"
