"""
Serverless-style function endpoints.

POST-only JSON handlers for user administration and submission
notifications. Any other method gets 405 with an error body.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from vibe_magazine.api.deps import get_caller, get_context
from vibe_magazine.components.notifications import (
    SendNotificationInput,
    run_send_notification,
)
from vibe_magazine.components.users import (
    CreateUserInput,
    DeleteUserInput,
    ResetPasswordInput,
    UserAdminOutput,
    run_create_user,
    run_delete_user,
    run_reset_password,
)
from vibe_magazine.context import ServiceContext
from vibe_magazine.domain.entities import Identity
from vibe_magazine.domain.errors import error_for_code

router = APIRouter()

FUNCTION_NAMES = (
    "create-admin-user",
    "delete-user",
    "reset-user-password",
    "send-notification",
)


# --- Request Models ---


class CreateUserRequest(BaseModel):
    email: str | None = None
    password: str | None = None
    username: str | None = None
    role: str | None = None
    display_name: str | None = None


class DeleteUserRequest(BaseModel):
    user_id: str | None = None


class ResetPasswordRequest(BaseModel):
    user_id: str | None = None
    new_password: str | None = None


class SendNotificationRequest(BaseModel):
    to: str | None = None
    subject: str | None = None
    body: str | None = None
    submission_id: str | None = None
    status: str | None = None


# --- Helpers ---


def _raise_for(out: UserAdminOutput) -> None:
    if not out.success:
        raise error_for_code(out.error_code, out.error or "Request failed")


def _user_payload(out: UserAdminOutput) -> dict[str, Any] | None:
    if out.user is None:
        return None
    payload: dict[str, Any] = {"id": str(out.user.id), "email": out.user.email}
    if out.user.username is not None:
        payload["username"] = out.user.username
    if out.user.role is not None:
        payload["role"] = out.user.role
    return payload


# --- Routes ---


@router.post("/create-admin-user")
def create_admin_user(
    request: CreateUserRequest | None = None,
    caller: Identity = Depends(get_caller),
    ctx: ServiceContext = Depends(get_context),
) -> dict[str, Any]:
    request = request or CreateUserRequest()
    out = run_create_user(
        CreateUserInput(
            caller=caller,
            email=request.email,
            password=request.password,
            username=request.username,
            role=request.role,
            display_name=request.display_name,
        ),
        ctx.profile_repo,
        ctx.identity_provider,
        ctx.policy,
        ctx.clock,
        ctx.activity_log,
    )
    _raise_for(out)
    return {"message": out.message, "user": _user_payload(out)}


@router.post("/delete-user", response_model=None)
def delete_user(
    request: DeleteUserRequest | None = None,
    caller: Identity = Depends(get_caller),
    ctx: ServiceContext = Depends(get_context),
) -> dict[str, Any] | JSONResponse:
    request = request or DeleteUserRequest()
    out = run_delete_user(
        DeleteUserInput(caller=caller, user_id=request.user_id),
        ctx.profile_repo,
        ctx.identity_provider,
        ctx.policy,
        ctx.clock,
        ctx.activity_log,
    )
    if out.partial_failure is not None:
        return JSONResponse(
            out.partial_failure.to_payload(),
            status_code=out.partial_failure.status_code,
        )
    _raise_for(out)
    return {"success": True, "message": out.message}


@router.post("/reset-user-password")
def reset_user_password(
    request: ResetPasswordRequest | None = None,
    caller: Identity = Depends(get_caller),
    ctx: ServiceContext = Depends(get_context),
) -> dict[str, Any]:
    request = request or ResetPasswordRequest()
    out = run_reset_password(
        ResetPasswordInput(
            caller=caller,
            user_id=request.user_id,
            new_password=request.new_password,
        ),
        ctx.profile_repo,
        ctx.identity_provider,
        ctx.policy,
        ctx.clock,
    )
    _raise_for(out)
    return {"success": True, "message": out.message, "user": _user_payload(out)}


@router.post("/send-notification")
def send_notification(
    request: SendNotificationRequest | None = None,
    ctx: ServiceContext = Depends(get_context),
) -> dict[str, Any]:
    request = request or SendNotificationRequest()
    out = run_send_notification(
        SendNotificationInput(
            to=request.to,
            subject=request.subject,
            body=request.body,
            submission_id=request.submission_id,
            status=request.status,
        ),
        email=ctx.email,
        time=ctx.clock,
        notification_log=ctx.notification_log,
    )
    if not out.success:
        raise error_for_code(out.error_code, out.error or "Failed to send notification")

    return {
        "success": True,
        "message": out.message,
        "delivery_status": out.delivery_status,
        "timestamp": out.timestamp.isoformat() if out.timestamp else None,
    }


def _method_not_allowed() -> None:
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed. Use POST.",
        headers={"Allow": "POST, OPTIONS"},
    )


for _name in FUNCTION_NAMES:
    router.add_api_route(
        f"/{_name}",
        _method_not_allowed,
        methods=["GET", "PUT", "PATCH", "DELETE"],
        include_in_schema=False,
    )
