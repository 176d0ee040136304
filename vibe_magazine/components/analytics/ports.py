"""
Analytics component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from vibe_magazine.domain.entities import EngagementEvent, Magazine


class EngagementEventRepoPort(Protocol):
    """Datastore access for raw engagement events."""

    def list_since(self, since: datetime) -> list[EngagementEvent]:
        """Return all events with created_at >= since. Raises UpstreamError on failure."""
        ...

    def add(self, event: EngagementEvent) -> EngagementEvent:
        """Store a tracked event."""
        ...


class MagazineRepoPort(Protocol):
    """Datastore access for the magazine catalogue."""

    def list_all(self) -> list[Magazine]:
        """Return magazines in catalogue order."""
        ...

    def add(self, magazine: Magazine) -> Magazine: ...


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
