from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel

from vibe_magazine.api.deps import get_caller, get_context
from vibe_magazine.context import ServiceContext
from vibe_magazine.domain.entities import Identity
from vibe_magazine.domain.errors import AuthError

router = APIRouter()


class Token(BaseModel):
    access_token: str
    token_type: str


class MeResponse(BaseModel):
    id: str
    email: str
    role: str | None = None
    username: str | None = None


@router.post("/login", response_model=Token)
def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    ctx: ServiceContext = Depends(get_context),
) -> Token:
    """Authenticate an admin by email and password and return a bearer token."""
    token = ctx.identity_provider.sign_in_with_password(form_data.username, form_data.password)
    if token is None:
        raise AuthError("Incorrect username or password")
    return Token(access_token=token, token_type="bearer")


@router.get("/me", response_model=MeResponse)
def read_me(
    caller: Identity = Depends(get_caller),
    ctx: ServiceContext = Depends(get_context),
) -> MeResponse:
    profile = ctx.profile_repo.get(caller.id)
    return MeResponse(
        id=str(caller.id),
        email=caller.email,
        role=profile.role if profile else None,
        username=profile.username if profile else None,
    )
