"""
Analytics component - Engagement tracking and aggregation.
"""

from ._aggregate import (
    BREAKDOWN_SERIES,
    aggregate,
    daily_timeline,
    engagement_breakdown,
    engagement_rate,
    per_magazine_summary,
    rate_band,
    totals_by_type,
    truncate_title,
    utc_date_key,
)
from ._impl import (
    DEFAULT_ANALYTICS_RULES,
    DefaultTimePort,
    InMemoryEngagementRepo,
    InMemoryMagazineRepo,
    resolve_window,
    validate_event_type,
    validate_magazine_id,
)
from .component import run, run_dashboard, run_record_event
from .models import (
    AnalyticsValidationError,
    BreakdownEntry,
    DailyBucket,
    DashboardInput,
    DashboardOutput,
    EngagementReport,
    MagazineSummary,
    RecordEventInput,
    RecordEventOutput,
)
from .ports import EngagementEventRepoPort, MagazineRepoPort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_dashboard",
    "run_record_event",
    # Aggregation
    "BREAKDOWN_SERIES",
    "aggregate",
    "daily_timeline",
    "engagement_breakdown",
    "engagement_rate",
    "per_magazine_summary",
    "rate_band",
    "totals_by_type",
    "truncate_title",
    "utc_date_key",
    # Models
    "AnalyticsValidationError",
    "BreakdownEntry",
    "DailyBucket",
    "DashboardInput",
    "DashboardOutput",
    "EngagementReport",
    "MagazineSummary",
    "RecordEventInput",
    "RecordEventOutput",
    # Ports
    "EngagementEventRepoPort",
    "MagazineRepoPort",
    "TimePort",
    # Helpers / in-memory adapters
    "DEFAULT_ANALYTICS_RULES",
    "DefaultTimePort",
    "InMemoryEngagementRepo",
    "InMemoryMagazineRepo",
    "resolve_window",
    "validate_event_type",
    "validate_magazine_id",
]
