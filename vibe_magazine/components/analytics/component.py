"""
Analytics component - engagement tracking and dashboard aggregation.

Fetches one batch of engagement events per request and runs the pure
aggregation pass over it.

Invariants:
- Totals across kinds always equal the number of events in the batch
- The daily timeline has exactly one bucket per day of the window
- Magazine summaries are ranked by total engagement, ties in input order
- A failed fetch yields empty views with loading cleared, never an exception
"""

from __future__ import annotations

import logging
from datetime import timedelta

from vibe_magazine.domain.entities import EngagementEvent
from vibe_magazine.domain.errors import UpstreamError
from vibe_magazine.rules.models import AnalyticsRules

from ._aggregate import aggregate
from ._impl import (
    DEFAULT_ANALYTICS_RULES,
    DefaultTimePort,
    resolve_window,
    validate_event_type,
    validate_magazine_id,
)
from .models import (
    AnalyticsValidationError,
    DashboardInput,
    DashboardOutput,
    EngagementReport,
    RecordEventInput,
    RecordEventOutput,
)
from .ports import EngagementEventRepoPort, MagazineRepoPort, TimePort

logger = logging.getLogger(__name__)


# --- Component Entry Points ---


def run_dashboard(
    inp: DashboardInput,
    *,
    event_repo: EngagementEventRepoPort,
    magazine_repo: MagazineRepoPort,
    time_port: TimePort | None = None,
    rules: AnalyticsRules | None = None,
) -> DashboardOutput:
    """
    Build the analytics dashboard for a trailing window.

    Args:
        inp: Input naming the window (e.g. '7d'); None uses the default.
        event_repo: Engagement event store.
        magazine_repo: Magazine catalogue.
        time_port: Optional time port.
        rules: Optional analytics rules (windows, title length).

    Returns:
        DashboardOutput with the derived views, or empty views on failure.
    """
    rules = rules or DEFAULT_ANALYTICS_RULES
    time_port = time_port or DefaultTimePort()
    now = time_port.now_utc()

    window, window_days, errors = resolve_window(inp.window, rules)
    if window_days is None:
        return DashboardOutput(
            window=window,
            report=EngagementReport.empty(0, now),
            errors=errors,
            success=False,
        )

    since = now - timedelta(days=window_days)
    try:
        magazines = magazine_repo.list_all()
        events = event_repo.list_since(since)
    except UpstreamError as e:
        logger.error("Error fetching analytics for window %s: %s", window, e)
        return DashboardOutput(
            window=window,
            report=EngagementReport.empty(window_days, now),
            loading=False,
            errors=[AnalyticsValidationError(code="fetch_failed", message=str(e))],
            success=False,
        )

    report = aggregate(
        magazines,
        events,
        window_days,
        now,
        title_max_length=rules.title_max_length,
    )
    logger.debug(
        "Aggregated %d events over %d magazines for window %s",
        len(events),
        len(magazines),
        window,
    )
    return DashboardOutput(
        window=window,
        report=report,
        magazine_count=len(magazines),
    )


def run_record_event(
    inp: RecordEventInput,
    *,
    event_repo: EngagementEventRepoPort,
    time_port: TimePort | None = None,
) -> RecordEventOutput:
    """
    Record a visit/like/comment/save event stamped with the current time.

    Args:
        inp: Magazine id and event kind.
        event_repo: Engagement event store.
        time_port: Optional time port.

    Returns:
        RecordEventOutput with the stored event or validation errors.
    """
    errors = validate_magazine_id(inp.magazine_id) + validate_event_type(inp.event_type)
    if errors:
        return RecordEventOutput(event=None, errors=errors, success=False)

    time_port = time_port or DefaultTimePort()
    event = EngagementEvent(
        magazine_id=str(inp.magazine_id).strip(),
        event_type=inp.event_type,  # type: ignore[arg-type]
        created_at=time_port.now_utc(),
    )

    try:
        stored = event_repo.add(event)
    except UpstreamError as e:
        logger.warning("Failed to record %s event for %s: %s", inp.event_type, inp.magazine_id, e)
        return RecordEventOutput(
            event=None,
            errors=[AnalyticsValidationError(code="store_failed", message=str(e))],
            success=False,
        )

    return RecordEventOutput(event=stored)


def run(
    inp: DashboardInput | RecordEventInput,
    *,
    event_repo: EngagementEventRepoPort,
    magazine_repo: MagazineRepoPort | None = None,
    time_port: TimePort | None = None,
    rules: AnalyticsRules | None = None,
) -> DashboardOutput | RecordEventOutput:
    """
    Main entry point for the analytics component.

    Dispatches to the appropriate handler based on input type.
    """
    if isinstance(inp, DashboardInput):
        if magazine_repo is None:
            raise ValueError("MagazineRepoPort is required for dashboard operations")
        return run_dashboard(
            inp,
            event_repo=event_repo,
            magazine_repo=magazine_repo,
            time_port=time_port,
            rules=rules,
        )
    elif isinstance(inp, RecordEventInput):
        return run_record_event(inp, event_repo=event_repo, time_port=time_port)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
