"""
Engagement aggregation - pure functions over a fetched event batch.

Key behaviors:
- Count events per kind across the whole batch
- Summarise each magazine and rank by total engagement (stable)
- Bucket events into a zero-filled daily series, matched by UTC date string
- Derive the engagement rate and the breakdown chart slices

Nothing here performs I/O; every function is a function of its arguments.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, datetime, timedelta

from vibe_magazine.domain.entities import EngagementEvent, Magazine

from .models import (
    BreakdownEntry,
    DailyBucket,
    EngagementReport,
    MagazineSummary,
    RateBand,
)

DEFAULT_TITLE_MAX_LENGTH = 20

# (event kind, display label, chart colour)
BREAKDOWN_SERIES: tuple[tuple[str, str, str], ...] = (
    ("visit", "Views", "#8884d8"),
    ("like", "Likes", "#82ca9d"),
    ("comment", "Comments", "#ffc658"),
    ("save", "Saves", "#ff7300"),
)

HIGH_RATE_THRESHOLD = 20.0
MEDIUM_RATE_THRESHOLD = 10.0


# --- Helpers ---


def as_utc(ts: datetime) -> datetime:
    """Normalise to UTC; naive datetimes are treated as UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC)


def utc_date_key(ts: datetime) -> str:
    """ISO calendar date (YYYY-MM-DD) of a timestamp in UTC."""
    return as_utc(ts).date().isoformat()


def day_label(ts: datetime) -> str:
    """Short display label, e.g. 'Mon, Oct 19'."""
    return f"{ts:%a}, {ts:%b} {ts.day}"


def truncate_title(title: str, max_length: int = DEFAULT_TITLE_MAX_LENGTH) -> str:
    """Cut long titles for chart axes; the full title is kept separately."""
    if len(title) > max_length:
        return title[:max_length] + "..."
    return title


def _counts(stats: Mapping[str, int]) -> tuple[int, int, int, int]:
    return (
        stats.get("visit", 0),
        stats.get("like", 0),
        stats.get("comment", 0),
        stats.get("save", 0),
    )


# --- Derived Metrics ---


def engagement_rate(likes: int, comments: int, saves: int, visits: int) -> float:
    """
    Percentage of non-view interactions relative to views.

    Defined as 0.0 when there are no visits.
    """
    if visits <= 0:
        return 0.0
    return ((likes + comments + saves) / visits) * 100


def rate_band(rate: float) -> RateBand:
    if rate >= HIGH_RATE_THRESHOLD:
        return "high"
    if rate >= MEDIUM_RATE_THRESHOLD:
        return "medium"
    return "low"


# --- Views ---


def totals_by_type(events: Iterable[EngagementEvent]) -> dict[str, int]:
    """Count events per kind. Kinds with no events are absent."""
    return dict(Counter(event.event_type for event in events))


def per_magazine_summary(
    magazines: Sequence[Magazine],
    events: Iterable[EngagementEvent],
    title_max_length: int = DEFAULT_TITLE_MAX_LENGTH,
) -> list[MagazineSummary]:
    """
    Summarise engagement per magazine, highest total first.

    Every magazine appears, including those without events. Ties keep
    the input order.
    """
    by_magazine: dict[str, Counter[str]] = defaultdict(Counter)
    for event in events:
        by_magazine[event.magazine_id][event.event_type] += 1

    summaries = []
    for magazine in magazines:
        visits, likes, comments, saves = _counts(by_magazine.get(magazine.id, Counter()))
        rate = engagement_rate(likes, comments, saves, visits)
        summaries.append(
            MagazineSummary(
                id=magazine.id,
                title=truncate_title(magazine.title, title_max_length),
                full_title=magazine.title,
                visits=visits,
                likes=likes,
                comments=comments,
                saves=saves,
                total_engagement=visits + likes + comments + saves,
                engagement_rate=rate,
                rate_band=rate_band(rate),
            )
        )

    # sorted() is stable with reverse=True as well
    return sorted(summaries, key=lambda s: s.total_engagement, reverse=True)


def daily_timeline(
    events: Iterable[EngagementEvent],
    window_days: int,
    now: datetime,
) -> list[DailyBucket]:
    """
    Build exactly ``window_days`` daily buckets ending on ``now``'s UTC date.

    Buckets are oldest first and zero-filled. Events are matched to a
    bucket by UTC date string equality.
    """
    if window_days <= 0:
        raise ValueError(f"window_days must be positive, got {window_days}")

    by_day: dict[str, Counter[str]] = defaultdict(Counter)
    for event in events:
        by_day[utc_date_key(event.created_at)][event.event_type] += 1

    today = as_utc(now)
    buckets = []
    for offset in range(window_days - 1, -1, -1):
        day = today - timedelta(days=offset)
        key = day.date().isoformat()
        visits, likes, comments, saves = _counts(by_day.get(key, Counter()))
        buckets.append(
            DailyBucket(
                date=key,
                label=day_label(day),
                visits=visits,
                likes=likes,
                comments=comments,
                saves=saves,
                total=visits + likes + comments + saves,
            )
        )
    return buckets


def engagement_breakdown(totals: Mapping[str, int]) -> list[BreakdownEntry]:
    """Chart slices per kind; zero-valued kinds are left out."""
    entries = [
        BreakdownEntry(label=label, value=totals.get(kind, 0), color=color)
        for kind, label, color in BREAKDOWN_SERIES
    ]
    return [entry for entry in entries if entry.value > 0]


def aggregate(
    magazines: Sequence[Magazine],
    events: Sequence[EngagementEvent],
    window_days: int,
    now: datetime,
    title_max_length: int = DEFAULT_TITLE_MAX_LENGTH,
) -> EngagementReport:
    """Run one full aggregation pass."""
    totals = totals_by_type(events)
    return EngagementReport(
        window_days=window_days,
        generated_at=as_utc(now),
        totals=totals,
        magazines=tuple(per_magazine_summary(magazines, events, title_max_length)),
        timeline=tuple(daily_timeline(events, window_days, now)),
        breakdown=tuple(engagement_breakdown(totals)),
    )
