"""
Analytics component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from vibe_magazine.domain.entities import EngagementEvent

RateBand = Literal["high", "medium", "low"]


# --- Validation Error ---


@dataclass(frozen=True)
class AnalyticsValidationError:
    """Analytics validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Derived Views ---


@dataclass(frozen=True)
class MagazineSummary:
    """Per-magazine engagement counts, recomputed on every pass."""

    id: str
    title: str
    full_title: str
    visits: int = 0
    likes: int = 0
    comments: int = 0
    saves: int = 0
    total_engagement: int = 0
    engagement_rate: float = 0.0
    rate_band: RateBand = "low"


@dataclass(frozen=True)
class DailyBucket:
    """Event counts for one UTC calendar day."""

    date: str
    label: str
    visits: int = 0
    likes: int = 0
    comments: int = 0
    saves: int = 0
    total: int = 0


@dataclass(frozen=True)
class BreakdownEntry:
    """One slice of the engagement breakdown chart."""

    label: str
    value: int
    color: str


@dataclass(frozen=True)
class EngagementReport:
    """All derived views for one aggregation pass."""

    window_days: int
    generated_at: datetime
    totals: dict[str, int] = field(default_factory=dict)
    magazines: tuple[MagazineSummary, ...] = ()
    timeline: tuple[DailyBucket, ...] = ()
    breakdown: tuple[BreakdownEntry, ...] = ()

    def total(self, event_type: str) -> int:
        return self.totals.get(event_type, 0)

    @classmethod
    def empty(cls, window_days: int, generated_at: datetime) -> EngagementReport:
        return cls(window_days=window_days, generated_at=generated_at)


# --- Input Models ---


@dataclass(frozen=True)
class DashboardInput:
    """Input for building the analytics dashboard. None selects the default window."""

    window: str | None = None


@dataclass(frozen=True)
class RecordEventInput:
    """Input for recording a tracked engagement event."""

    magazine_id: str
    event_type: str


# --- Output Models ---


@dataclass(frozen=True)
class DashboardOutput:
    """
    Dashboard result.

    On fetch failure ``success`` is False, ``report`` holds empty views and
    ``loading`` is cleared so the caller can render and retry.
    """

    window: str
    report: EngagementReport
    magazine_count: int = 0
    loading: bool = False
    errors: list[AnalyticsValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class RecordEventOutput:
    """Output for event recording."""

    event: EngagementEvent | None
    errors: list[AnalyticsValidationError] = field(default_factory=list)
    success: bool = True
