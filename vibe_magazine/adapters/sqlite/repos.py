"""
SQLite adapters for the hosted datastore tables.

Implements the component repository ports using SQLite. Timestamps are
stored as UTC ISO strings with fixed microsecond precision so that string
comparison matches chronological order. Every sqlite3 failure surfaces as
UpstreamError.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from vibe_magazine.domain.entities import (
    EVENT_TYPES,
    ActivityLogEntry,
    EngagementEvent,
    Magazine,
    NotificationRecord,
    Submission,
    UserProfile,
)
from vibe_magazine.domain.errors import UpstreamError

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def format_dt(dt: datetime | None) -> str | None:
    """Serialise as UTC ISO string; naive datetimes are taken as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="microseconds")


def parse_dt(s: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s) if s else None


def parse_uuid(s: str | None) -> UUID | None:
    """Parse UUID string."""
    return UUID(s) if s else None


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise UpstreamError(f"Database unavailable: {e}") from e
        conn.row_factory = dict_factory
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None

    def _fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            return list(conn.execute(sql, params).fetchall())
        except sqlite3.Error as e:
            raise UpstreamError(str(e)) from e
        finally:
            if self._should_close():
                conn.close()

    def _fetch_one(self, sql: str, params: tuple[Any, ...] = ()) -> dict[str, Any] | None:
        rows = self._fetch_all(sql, params)
        return rows[0] if rows else None

    def _write(self, sql: str, params: tuple[Any, ...] = ()) -> int:
        """Execute a write and commit. Returns the affected row count."""
        conn = self._get_conn()
        try:
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor.rowcount
        except sqlite3.Error as e:
            conn.rollback()
            raise UpstreamError(str(e)) from e
        finally:
            if self._should_close():
                conn.close()


# -----------------------------------------------------------------------------
# Magazines & Engagement
# -----------------------------------------------------------------------------


class SQLiteMagazineRepo(SQLiteRepoBase):
    """Magazine catalogue, newest first."""

    def list_all(self) -> list[Magazine]:
        rows = self._fetch_all(
            "SELECT id, title, created_at FROM magazines ORDER BY created_at DESC, id ASC"
        )
        return [
            Magazine(id=row["id"], title=row["title"], created_at=parse_dt(row["created_at"]))
            for row in rows
        ]

    def add(self, magazine: Magazine) -> Magazine:
        self._write(
            """
            INSERT INTO magazines (id, title, created_at) VALUES (?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET title=excluded.title
            """,
            (magazine.id, magazine.title, format_dt(magazine.created_at)),
        )
        return magazine


class SQLiteEngagementRepo(SQLiteRepoBase):
    """
    The magazine_analytics event table.

    The reader also writes kinds that are not tracked here (e.g. ``rating``);
    those rows are left out of every query.
    """

    def list_since(self, since: datetime) -> list[EngagementEvent]:
        placeholders = ", ".join("?" for _ in EVENT_TYPES)
        rows = self._fetch_all(
            f"""
            SELECT id, magazine_id, event_type, created_at FROM magazine_analytics
            WHERE created_at >= ? AND event_type IN ({placeholders})
            ORDER BY created_at ASC, id ASC
            """,
            (format_dt(since), *EVENT_TYPES),
        )
        events = []
        for row in rows:
            try:
                events.append(
                    EngagementEvent(
                        magazine_id=row["magazine_id"],
                        event_type=row["event_type"],
                        created_at=datetime.fromisoformat(row["created_at"]),
                    )
                )
            except (ValueError, TypeError) as e:
                raise UpstreamError(f"Malformed engagement row {row['id']}: {e}") from e
        return events

    def add(self, event: EngagementEvent) -> EngagementEvent:
        self._write(
            "INSERT INTO magazine_analytics (magazine_id, event_type, created_at) VALUES (?, ?, ?)",
            (event.magazine_id, event.event_type, format_dt(event.created_at)),
        )
        return event


# -----------------------------------------------------------------------------
# Profiles & Activity Log
# -----------------------------------------------------------------------------


class SQLiteProfileRepo(SQLiteRepoBase):
    """The user_profiles table."""

    def get(self, user_id: UUID) -> UserProfile | None:
        row = self._fetch_one("SELECT * FROM user_profiles WHERE id = ?", (str(user_id),))
        return self._map_row(row) if row else None

    def insert(self, profile: UserProfile) -> UserProfile:
        self._write(
            """
            INSERT INTO user_profiles (
                id, username, email, display_name, role, is_active,
                created_by, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(profile.id),
                profile.username,
                profile.email,
                profile.display_name,
                profile.role,
                1 if profile.is_active else 0,
                str(profile.created_by) if profile.created_by else None,
                format_dt(profile.created_at),
                format_dt(profile.updated_at),
            ),
        )
        return profile

    def delete(self, user_id: UUID) -> None:
        self._write("DELETE FROM user_profiles WHERE id = ?", (str(user_id),))

    def record_password_reset(self, user_id: UUID, reset_by: UUID, at: datetime) -> None:
        self._write(
            """
            UPDATE user_profiles
            SET password_reset_at = ?, password_reset_by = ?, updated_at = ?
            WHERE id = ?
            """,
            (format_dt(at), str(reset_by), format_dt(at), str(user_id)),
        )

    def list_all(self) -> list[UserProfile]:
        rows = self._fetch_all("SELECT * FROM user_profiles ORDER BY created_at ASC")
        return [self._map_row(row) for row in rows]

    def _map_row(self, row: dict[str, Any]) -> UserProfile:
        return UserProfile(
            id=UUID(row["id"]),
            username=row["username"],
            email=row["email"],
            display_name=row["display_name"],
            role=row["role"],
            is_active=bool(row["is_active"]),
            created_by=parse_uuid(row["created_by"]),
            created_at=parse_dt(row["created_at"]) or datetime.min.replace(tzinfo=UTC),
            updated_at=parse_dt(row["updated_at"]) or datetime.min.replace(tzinfo=UTC),
            password_reset_at=parse_dt(row["password_reset_at"]),
            password_reset_by=parse_uuid(row["password_reset_by"]),
        )


class SQLiteActivityLogRepo(SQLiteRepoBase):
    """The user_activity_logs table (append only)."""

    def insert(self, entry: ActivityLogEntry) -> None:
        self._write(
            """
            INSERT INTO user_activity_logs (id, user_id, action, details_json, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                str(entry.id),
                str(entry.user_id),
                entry.action,
                json.dumps(entry.details),
                format_dt(entry.created_at),
            ),
        )

    def list_for_user(self, user_id: UUID) -> list[ActivityLogEntry]:
        rows = self._fetch_all(
            "SELECT * FROM user_activity_logs WHERE user_id = ? ORDER BY created_at ASC",
            (str(user_id),),
        )
        return [
            ActivityLogEntry(
                id=UUID(row["id"]),
                user_id=UUID(row["user_id"]),
                action=row["action"],
                details=json.loads(row["details_json"]),
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]


# -----------------------------------------------------------------------------
# Notifications
# -----------------------------------------------------------------------------


class SQLiteNotificationRepo(SQLiteRepoBase):
    """The email_notifications table."""

    def insert(self, record: NotificationRecord) -> NotificationRecord:
        self._write(
            """
            INSERT INTO email_notifications (
                id, recipient, subject, body, submission_id, status,
                sent_at, delivery_status
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(record.id),
                record.recipient,
                record.subject,
                record.body,
                record.submission_id,
                record.status,
                format_dt(record.sent_at),
                record.delivery_status,
            ),
        )
        return record

    def list_for_submission(self, submission_id: str) -> list[NotificationRecord]:
        rows = self._fetch_all(
            "SELECT * FROM email_notifications WHERE submission_id = ? ORDER BY sent_at ASC",
            (submission_id,),
        )
        return [
            NotificationRecord(
                id=UUID(row["id"]),
                recipient=row["recipient"],
                subject=row["subject"],
                body=row["body"],
                submission_id=row["submission_id"],
                status=row["status"],
                sent_at=datetime.fromisoformat(row["sent_at"]),
                delivery_status=row["delivery_status"],
            )
            for row in rows
        ]


# -----------------------------------------------------------------------------
# Submissions
# -----------------------------------------------------------------------------


class SQLiteSubmissionRepo(SQLiteRepoBase):
    """The submissions table, newest first."""

    def get(self, submission_id: UUID) -> Submission | None:
        row = self._fetch_one("SELECT * FROM submissions WHERE id = ?", (str(submission_id),))
        return self._map_row(row) if row else None

    def insert(self, submission: Submission) -> Submission:
        self._write(
            """
            INSERT INTO submissions (
                id, full_name, student_email, student_id, title_of_work,
                course_program, category, abstract, file_url, status,
                submitted_at, decided_at, decided_by
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(submission.id),
                submission.full_name,
                submission.student_email,
                submission.student_id,
                submission.title_of_work,
                submission.course_program,
                submission.category,
                submission.abstract,
                submission.file_url,
                submission.status,
                format_dt(submission.submitted_at),
                format_dt(submission.decided_at),
                str(submission.decided_by) if submission.decided_by else None,
            ),
        )
        return submission

    def list_all(self) -> list[Submission]:
        rows = self._fetch_all("SELECT * FROM submissions ORDER BY submitted_at DESC, id ASC")
        return [self._map_row(row) for row in rows]

    def record_decision(
        self, submission_id: UUID, status: str, decided_by: UUID, at: datetime
    ) -> bool:
        """Only a pending row is updated; False means it was already decided or is gone."""
        count = self._write(
            """
            UPDATE submissions
            SET status = ?, decided_by = ?, decided_at = ?
            WHERE id = ? AND status = 'Pending'
            """,
            (status, str(decided_by), format_dt(at), str(submission_id)),
        )
        return count == 1

    def delete(self, submission_id: UUID) -> bool:
        return self._write("DELETE FROM submissions WHERE id = ?", (str(submission_id),)) > 0

    def _map_row(self, row: dict[str, Any]) -> Submission:
        return Submission(
            id=UUID(row["id"]),
            full_name=row["full_name"],
            student_email=row["student_email"],
            student_id=row["student_id"],
            title_of_work=row["title_of_work"],
            course_program=row["course_program"],
            category=row["category"],
            abstract=row["abstract"],
            file_url=row["file_url"],
            status=row["status"],
            submitted_at=datetime.fromisoformat(row["submitted_at"]),
            decided_at=parse_dt(row["decided_at"]),
            decided_by=parse_uuid(row["decided_by"]),
        )
