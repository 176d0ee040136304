from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from vibe_magazine.domain.entities import Identity, UserProfile
from vibe_magazine.domain.errors import ErrorCode, PartialFailure


@dataclass
class CreateUserInput:
    caller: Identity
    email: str | None
    password: str | None
    username: str | None
    role: str | None
    display_name: str | None = None


@dataclass
class DeleteUserInput:
    caller: Identity
    user_id: str | None


@dataclass
class ResetPasswordInput:
    caller: Identity
    user_id: str | None
    new_password: str | None


@dataclass
class ListProfilesInput:
    caller: Identity


@dataclass
class UserSummary:
    id: UUID
    email: str
    username: str | None = None
    role: str | None = None


@dataclass
class UserAdminOutput:
    success: bool = False
    message: str | None = None
    user: UserSummary | None = None
    error: str | None = None
    error_code: ErrorCode | None = None
    partial_failure: PartialFailure | None = None


@dataclass
class ProfileListOutput:
    profiles: list[UserProfile] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    error_code: ErrorCode | None = None
