"""
Identity provider backed by the auth_users table.

Stands in for the hosted auth service's admin API: password identities,
bearer token resolution and password sign-in.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from vibe_magazine.adapters.sqlite.repos import SQLiteRepoBase, format_dt, parse_dt
from vibe_magazine.domain.entities import Identity
from vibe_magazine.domain.errors import UpstreamError

from .tokens import create_access_token, decode_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)


class SQLiteIdentityProvider(SQLiteRepoBase):
    def get_user(self, token: str) -> Identity | None:
        payload = decode_access_token(token)
        if not payload:
            return None

        sub = payload.get("sub")
        if not isinstance(sub, str):
            return None
        try:
            user_id = UUID(sub)
        except ValueError:
            return None
        return self.get_by_id(user_id)

    def get_by_id(self, user_id: UUID) -> Identity | None:
        row = self._fetch_one("SELECT * FROM auth_users WHERE id = ?", (str(user_id),))
        return self._map_row(row) if row else None

    def get_by_email(self, email: str) -> Identity | None:
        row = self._fetch_one(
            "SELECT * FROM auth_users WHERE email = ?", (email.strip().lower(),)
        )
        return self._map_row(row) if row else None

    def create_user(
        self,
        email: str,
        password: str,
        email_confirm: bool = False,
        metadata: dict[str, Any] | None = None,
    ) -> Identity:
        now = datetime.now(UTC)
        identity = Identity(
            id=uuid4(),
            email=email.strip().lower(),
            email_confirmed_at=now if email_confirm else None,
            metadata=metadata or {},
            created_at=now,
        )
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO auth_users (
                    id, email, password_hash, email_confirmed_at,
                    metadata_json, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(identity.id),
                    identity.email,
                    get_password_hash(password),
                    format_dt(identity.email_confirmed_at),
                    json.dumps(identity.metadata),
                    format_dt(now),
                    format_dt(now),
                ),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise UpstreamError(
                "A user with this email address has already been registered"
            ) from e
        except sqlite3.Error as e:
            conn.rollback()
            raise UpstreamError(str(e)) from e
        finally:
            if self._should_close():
                conn.close()
        return identity

    def delete_user(self, user_id: UUID) -> None:
        deleted = self._write("DELETE FROM auth_users WHERE id = ?", (str(user_id),))
        if deleted == 0:
            raise UpstreamError("User not found")

    def update_user(
        self,
        user_id: UUID,
        password: str | None = None,
        email_confirm: bool = False,
    ) -> Identity:
        current = self.get_by_id(user_id)
        if current is None:
            raise UpstreamError("User not found")

        now = datetime.now(UTC)
        assignments = ["updated_at = ?"]
        params: list[Any] = [format_dt(now)]
        if password is not None:
            assignments.append("password_hash = ?")
            params.append(get_password_hash(password))
        if email_confirm and current.email_confirmed_at is None:
            assignments.append("email_confirmed_at = ?")
            params.append(format_dt(now))
        params.append(str(user_id))

        self._write(f"UPDATE auth_users SET {', '.join(assignments)} WHERE id = ?", tuple(params))
        updated = self.get_by_id(user_id)
        if updated is None:
            raise UpstreamError("User not found")
        return updated

    def sign_in_with_password(self, email: str, password: str) -> str | None:
        """Verify credentials and issue a bearer token, or None on mismatch."""
        row = self._fetch_one(
            "SELECT id, password_hash FROM auth_users WHERE email = ?",
            (email.strip().lower(),),
        )
        if row is None or not verify_password(password, row["password_hash"]):
            logger.info("Failed sign-in attempt for %s", email)
            return None
        return create_access_token(row["id"], extra_claims={"email": email.strip().lower()})

    def _map_row(self, row: dict[str, Any]) -> Identity:
        return Identity(
            id=UUID(row["id"]),
            email=row["email"],
            email_confirmed_at=parse_dt(row["email_confirmed_at"]),
            metadata=json.loads(row["metadata_json"] or "{}"),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
