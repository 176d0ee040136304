import os
from pathlib import Path

import pytest

from vibe_magazine.adapters.sqlite.migrator import SQLiteMigrator
from vibe_magazine.context import ServiceContext
from vibe_magazine.domain.policy import PolicyEngine
from vibe_magazine.rules.loader import load_rules
from vibe_magazine.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent

PROTECTED_SUPERADMIN_ID = "cf6f292d-9800-49d6-b7ff-bc733067ca99"


@pytest.fixture
def rules() -> Rules:
    """The real rules file from the project root."""
    return load_rules(PROJECT_ROOT / "vibe_rules.yaml")


@pytest.fixture
def policy(rules: Rules) -> PolicyEngine:
    return PolicyEngine(rules)


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """A migrated SQLite database in a temp dir."""
    path = os.path.join(tmp_path, "vibe.db")
    SQLiteMigrator(path).run_migrations()
    return path


@pytest.fixture
def test_ctx(db_path: str, rules: Rules) -> ServiceContext:
    """
    Creates a full ServiceContext backed by a temporary SQLite DB.
    """
    return ServiceContext.create(db_path, rules)
