from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from vibe_magazine.domain.entities import ActivityLogEntry, Identity, UserProfile


class ProfileRepoPort(Protocol):
    """Profile store. Every method raises UpstreamError on datastore failure."""

    def get(self, user_id: UUID) -> UserProfile | None: ...
    def insert(self, profile: UserProfile) -> UserProfile: ...
    def delete(self, user_id: UUID) -> None: ...
    def record_password_reset(self, user_id: UUID, reset_by: UUID, at: datetime) -> None: ...
    def list_all(self) -> list[UserProfile]: ...


class IdentityProviderPort(Protocol):
    """Hosted auth service, admin API surface."""

    def get_user(self, token: str) -> Identity | None:
        """Resolve a bearer token to its identity, or None if invalid."""
        ...

    def get_by_id(self, user_id: UUID) -> Identity | None: ...

    def create_user(
        self,
        email: str,
        password: str,
        email_confirm: bool = False,
        metadata: dict[str, Any] | None = None,
    ) -> Identity: ...

    def delete_user(self, user_id: UUID) -> None: ...

    def update_user(
        self,
        user_id: UUID,
        password: str | None = None,
        email_confirm: bool = False,
    ) -> Identity: ...

    def sign_in_with_password(self, email: str, password: str) -> str | None:
        """Issue a bearer token for valid credentials, or None."""
        ...


class ActivityLogPort(Protocol):
    def insert(self, entry: ActivityLogEntry) -> None: ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
