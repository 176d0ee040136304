"""
Analytics support code: validation helpers and in-memory adapters for dev/tests.
"""

from __future__ import annotations

from datetime import UTC, datetime

from vibe_magazine.domain.entities import EVENT_TYPES, EngagementEvent, Magazine
from vibe_magazine.domain.errors import UpstreamError
from vibe_magazine.rules.models import AnalyticsRules

from .models import AnalyticsValidationError

DEFAULT_ANALYTICS_RULES = AnalyticsRules(
    windows={"7d": 7, "30d": 30, "90d": 90},
    default_window="7d",
)


# --- Validation Functions ---


def validate_event_type(event_type: str | None) -> list[AnalyticsValidationError]:
    """Event kind must be one of the tracked kinds."""
    if not event_type:
        return [
            AnalyticsValidationError(
                code="event_type_required",
                message="event_type is required",
                field_name="event_type",
            )
        ]
    if event_type not in EVENT_TYPES:
        return [
            AnalyticsValidationError(
                code="event_type_invalid",
                message=f"Invalid event_type. Must be one of: {', '.join(EVENT_TYPES)}",
                field_name="event_type",
            )
        ]
    return []


def validate_magazine_id(magazine_id: str | None) -> list[AnalyticsValidationError]:
    if not magazine_id or not str(magazine_id).strip():
        return [
            AnalyticsValidationError(
                code="magazine_id_required",
                message="magazine_id is required",
                field_name="magazine_id",
            )
        ]
    return []


def resolve_window(
    window: str | None,
    rules: AnalyticsRules,
) -> tuple[str, int | None, list[AnalyticsValidationError]]:
    """Map a window key such as '30d' to a day count."""
    key = window or rules.default_window
    days = rules.windows.get(key)
    if days is None:
        return (
            key,
            None,
            [
                AnalyticsValidationError(
                    code="window_invalid",
                    message=f"Invalid range. Must be one of: {', '.join(rules.windows)}",
                    field_name="range",
                )
            ],
        )
    return key, days, []


# --- Default Implementations ---


class DefaultTimePort:
    """Default time provider."""

    def now_utc(self) -> datetime:
        return datetime.now(UTC)


class InMemoryEngagementRepo:
    """In-memory event store for testing/dev."""

    def __init__(self, events: list[EngagementEvent] | None = None) -> None:
        self._events: list[EngagementEvent] = list(events or [])
        self.fail_with: str | None = None

    def list_since(self, since: datetime) -> list[EngagementEvent]:
        if self.fail_with:
            raise UpstreamError(self.fail_with)
        return [e for e in self._events if _aware(e.created_at) >= _aware(since)]

    def add(self, event: EngagementEvent) -> EngagementEvent:
        if self.fail_with:
            raise UpstreamError(self.fail_with)
        self._events.append(event)
        return event

    def get_all(self) -> list[EngagementEvent]:
        return list(self._events)


class InMemoryMagazineRepo:
    """In-memory magazine catalogue for testing/dev."""

    def __init__(self, magazines: list[Magazine] | None = None) -> None:
        self._magazines: list[Magazine] = list(magazines or [])

    def list_all(self) -> list[Magazine]:
        return list(self._magazines)

    def add(self, magazine: Magazine) -> Magazine:
        self._magazines.append(magazine)
        return magazine


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo else ts.replace(tzinfo=UTC)
