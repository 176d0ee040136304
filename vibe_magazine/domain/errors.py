"""
Error taxonomy shared by components, adapters and the HTTP layer.

Each error carries the HTTP status it maps to. Components report failures
through their output models using ``error_code``; routes convert those back
into these exceptions via ``error_for_code``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

ErrorCode = Literal["validation", "auth", "permission", "not_found", "conflict", "upstream"]


class VibeError(Exception):
    """Base class for application errors."""

    status_code: int = 500
    code: ErrorCode = "upstream"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(VibeError):
    """Missing or invalid request fields."""

    status_code = 400
    code: ErrorCode = "validation"


class AuthError(VibeError):
    """Missing or invalid bearer credential."""

    status_code = 401
    code: ErrorCode = "auth"


class PermissionDenied(VibeError):
    """Caller role insufficient, or the target is protected."""

    status_code = 403
    code: ErrorCode = "permission"


class NotFoundError(VibeError):
    """Target identity or profile is absent."""

    status_code = 404
    code: ErrorCode = "not_found"


class ConflictError(VibeError):
    """The target is no longer in a state that allows the change."""

    status_code = 409
    code: ErrorCode = "conflict"


class UpstreamError(VibeError):
    """Datastore or auth-provider failure."""

    status_code = 500
    code: ErrorCode = "upstream"


@dataclass(frozen=True)
class PartialFailure:
    """
    One of two dependent writes succeeded and the other failed.

    Surfaced to callers as a warning payload rather than an error body.
    """

    warning: str
    details: str
    status_code: int = 500

    def to_payload(self) -> dict[str, Any]:
        return {"warning": self.warning, "details": self.details}


_ERRORS_BY_CODE: dict[str, type[VibeError]] = {
    "validation": ValidationError,
    "auth": AuthError,
    "permission": PermissionDenied,
    "not_found": NotFoundError,
    "conflict": ConflictError,
    "upstream": UpstreamError,
}


def error_for_code(code: str | None, message: str) -> VibeError:
    """Build the exception matching a component error code."""
    error_cls = _ERRORS_BY_CODE.get(code or "upstream", UpstreamError)
    return error_cls(message)
