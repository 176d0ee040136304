from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from vibe_magazine.api.deps import get_context
from vibe_magazine.api.main import create_app
from vibe_magazine.context import ServiceContext
from vibe_magazine.domain.entities import UserProfile


@dataclass
class SeededUser:
    id: UUID
    email: str
    password: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def app(test_ctx: ServiceContext) -> FastAPI:
    """Full app wired to the temp-DB context. Lifespan is not run."""
    app = create_app()
    app.dependency_overrides[get_context] = lambda: test_ctx
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def seed_user(test_ctx: ServiceContext) -> Callable[..., SeededUser]:
    """Create an identity plus profile and sign it in."""

    def _seed(role: str, email: str | None = None, password: str = "pass-1234") -> SeededUser:
        email = email or f"{role}@vibe.test"
        identity = test_ctx.identity_provider.create_user(email, password, email_confirm=True)
        test_ctx.profile_repo.insert(
            UserProfile(
                id=identity.id,
                username=email.split("@")[0],
                email=email,
                display_name=role.title(),
                role=role,  # type: ignore[arg-type]
            )
        )
        token = test_ctx.identity_provider.sign_in_with_password(email, password)
        assert token is not None
        return SeededUser(id=identity.id, email=email, password=password, token=token)

    return _seed
