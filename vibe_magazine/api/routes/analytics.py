"""
Analytics API.

Admin dashboard over the engagement aggregator, plus the public tracking
endpoint the magazine reader posts visit/like/comment/save events to.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from vibe_magazine.api.deps import get_caller, get_context
from vibe_magazine.components.analytics import (
    DashboardInput,
    RecordEventInput,
    run_dashboard,
    run_record_event,
)
from vibe_magazine.context import ServiceContext
from vibe_magazine.domain.entities import Identity
from vibe_magazine.domain.errors import PermissionDenied, UpstreamError, ValidationError

router = APIRouter()


# --- Request/Response Models ---


class MagazineSummaryResponse(BaseModel):
    id: str
    title: str
    full_title: str
    visits: int
    likes: int
    comments: int
    saves: int
    total_engagement: int
    engagement_rate: float
    rate_band: str


class DailyBucketResponse(BaseModel):
    date: str
    label: str
    visits: int
    likes: int
    comments: int
    saves: int
    total: int


class BreakdownEntryResponse(BaseModel):
    label: str
    value: int
    color: str


class DashboardResponse(BaseModel):
    """Dashboard payload. ``error`` is set when the event fetch failed."""

    range: str
    window_days: int
    generated_at: str
    totals: dict[str, int]
    magazine_count: int
    magazines: list[MagazineSummaryResponse]
    top_magazines: list[MagazineSummaryResponse]
    timeline: list[DailyBucketResponse]
    breakdown: list[BreakdownEntryResponse]
    error: str | None = None


class EventRequest(BaseModel):
    magazine_id: str | None = Field(None, description="Magazine identifier")
    event_type: str | None = Field(None, description="visit, like, comment or save")


class EventResponse(BaseModel):
    ok: bool = True
    magazine_id: str
    event_type: str
    created_at: str


# --- Dependencies ---


def require_staff(
    caller: Identity = Depends(get_caller),
    ctx: ServiceContext = Depends(get_context),
) -> Identity:
    """Only staff roles may view analytics."""
    try:
        profile = ctx.profile_repo.get(caller.id)
    except UpstreamError as e:
        raise PermissionDenied("Could not verify admin permissions.") from e

    decision = ctx.policy.authorize(profile.role if profile else None, "analytics:view")
    if not decision:
        raise PermissionDenied(decision.reason)
    return caller


# --- Routes ---


@router.get("/admin/analytics", response_model=DashboardResponse)
def get_dashboard(
    range_: str | None = Query(None, alias="range", description="Window, e.g. 7d, 30d, 90d"),
    caller: Identity = Depends(require_staff),
    ctx: ServiceContext = Depends(get_context),
) -> DashboardResponse:
    out = run_dashboard(
        DashboardInput(window=range_),
        event_repo=ctx.event_repo,
        magazine_repo=ctx.magazine_repo,
        time_port=ctx.clock,
        rules=ctx.rules.analytics,
    )
    window_errors = [e for e in out.errors if e.code == "window_invalid"]
    if window_errors:
        raise ValidationError(window_errors[0].message)

    report = out.report
    totals = {kind: report.total(kind) for kind in ("visit", "like", "comment", "save")}
    magazines = [MagazineSummaryResponse(**asdict(m)) for m in report.magazines]
    limit = ctx.rules.analytics.top_magazines_limit

    return DashboardResponse(
        range=out.window,
        window_days=report.window_days,
        generated_at=report.generated_at.isoformat(),
        totals=totals,
        magazine_count=out.magazine_count,
        magazines=magazines,
        top_magazines=magazines[:limit],
        timeline=[DailyBucketResponse(**asdict(b)) for b in report.timeline],
        breakdown=[BreakdownEntryResponse(**asdict(b)) for b in report.breakdown],
        error=out.errors[0].message if out.errors else None,
    )


@router.post(
    "/analytics/events",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
)
def record_event(
    request: EventRequest,
    ctx: ServiceContext = Depends(get_context),
) -> Any:
    out = run_record_event(
        RecordEventInput(magazine_id=request.magazine_id or "", event_type=request.event_type or ""),
        event_repo=ctx.event_repo,
        time_port=ctx.clock,
    )
    if not out.success or out.event is None:
        error = out.errors[0]
        if error.code == "store_failed":
            raise UpstreamError(error.message)
        raise ValidationError(error.message)

    return EventResponse(
        magazine_id=out.event.magazine_id,
        event_type=out.event.event_type,
        created_at=out.event.created_at.isoformat(),
    )
