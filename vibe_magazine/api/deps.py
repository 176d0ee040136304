import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from vibe_magazine.context import ServiceContext
from vibe_magazine.domain.entities import Identity
from vibe_magazine.domain.errors import AuthError, UpstreamError
from vibe_magazine.rules.loader import load_rules
from vibe_magazine.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("VIBE_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "vibe.db")
        self.rules_path = Path(os.environ.get("VIBE_RULES_PATH", self.base_dir / "vibe_rules.yaml"))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


# --- Context ---
_context_instance: ServiceContext | None = None


def get_context() -> ServiceContext:
    """Get the service context singleton, built on first use."""
    global _context_instance
    if _context_instance is None:
        _context_instance = ServiceContext.create(get_settings().db_path, get_rules())
    return _context_instance


def reset_context() -> None:
    """Drop the cached context (for testing)."""
    global _context_instance
    _context_instance = None
    get_rules.cache_clear()
    get_settings.cache_clear()


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_caller(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    ctx: ServiceContext = Depends(get_context),
) -> Identity:
    """Resolve the bearer token to the calling identity."""
    if not token:
        raise AuthError("Missing authorization header")

    try:
        caller = ctx.identity_provider.get_user(token)
    except UpstreamError as e:
        raise AuthError("Invalid or expired token") from e
    if caller is None:
        raise AuthError("Invalid or expired token")
    return caller
