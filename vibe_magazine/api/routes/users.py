from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from vibe_magazine.api.deps import get_caller, get_context
from vibe_magazine.components.users import ListProfilesInput, run_list_profiles
from vibe_magazine.context import ServiceContext
from vibe_magazine.domain.entities import Identity
from vibe_magazine.domain.errors import error_for_code

router = APIRouter()


class ProfileResponse(BaseModel):
    id: str
    username: str
    email: str
    display_name: str
    role: str
    is_active: bool
    created_at: datetime
    password_reset_at: datetime | None = None


@router.get("", response_model=list[ProfileResponse])
def list_users(
    caller: Identity = Depends(get_caller),
    ctx: ServiceContext = Depends(get_context),
) -> list[ProfileResponse]:
    """List all user profiles (admin only)."""
    out = run_list_profiles(ListProfilesInput(caller=caller), ctx.profile_repo, ctx.policy)
    if not out.success:
        raise error_for_code(out.error_code, out.error or "Failed to list users")

    return [
        ProfileResponse(
            id=str(p.id),
            username=p.username,
            email=p.email,
            display_name=p.display_name,
            role=p.role,
            is_active=p.is_active,
            created_at=p.created_at,
            password_reset_at=p.password_reset_at,
        )
        for p in out.profiles
    ]
