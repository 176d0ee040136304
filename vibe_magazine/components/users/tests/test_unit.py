"""
Users component unit tests.

Tests for staff account creation, deletion, password reset and profile
listing, including the role rules and protected accounts.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

import pytest

from vibe_magazine.components.users import (
    CreateUserInput,
    DeleteUserInput,
    ListProfilesInput,
    ResetPasswordInput,
    run,
    run_create_user,
    run_delete_user,
    run_list_profiles,
    run_reset_password,
)
from vibe_magazine.domain.entities import ActivityLogEntry, Identity, UserProfile
from vibe_magazine.domain.errors import UpstreamError
from vibe_magazine.domain.policy import PolicyEngine
from vibe_magazine.rules.models import (
    AnalyticsRules,
    ProjectRules,
    RolesRules,
    Rules,
    UsersRules,
)

PROTECTED_ID = "cf6f292d-9800-49d6-b7ff-bc733067ca99"
NOW = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)

# --- Mock Implementations ---


class MockProfileRepo:
    def __init__(self) -> None:
        self.profiles: dict[UUID, UserProfile] = {}
        self.fail_insert = False
        self.fail_reset_log = False
        self.reset_log: list[tuple[UUID, UUID, datetime]] = []

    def get(self, user_id: UUID) -> UserProfile | None:
        return self.profiles.get(user_id)

    def insert(self, profile: UserProfile) -> UserProfile:
        if self.fail_insert:
            raise UpstreamError("duplicate key value")
        self.profiles[profile.id] = profile
        return profile

    def delete(self, user_id: UUID) -> None:
        self.profiles.pop(user_id, None)

    def record_password_reset(self, user_id: UUID, reset_by: UUID, at: datetime) -> None:
        if self.fail_reset_log:
            raise UpstreamError("column does not exist")
        self.reset_log.append((user_id, reset_by, at))

    def list_all(self) -> list[UserProfile]:
        return list(self.profiles.values())


class MockIdentityProvider:
    def __init__(self) -> None:
        self.identities: dict[UUID, Identity] = {}
        self.passwords: dict[UUID, str] = {}
        self.fail_create: str | None = None
        self.fail_delete: str | None = None

    def get_user(self, token: str) -> Identity | None:
        return None

    def get_by_id(self, user_id: UUID) -> Identity | None:
        return self.identities.get(user_id)

    def create_user(
        self,
        email: str,
        password: str,
        email_confirm: bool = False,
        metadata: dict[str, Any] | None = None,
    ) -> Identity:
        if self.fail_create:
            raise UpstreamError(self.fail_create)
        identity = Identity(
            email=email,
            email_confirmed_at=NOW if email_confirm else None,
            metadata=metadata or {},
        )
        self.identities[identity.id] = identity
        self.passwords[identity.id] = password
        return identity

    def delete_user(self, user_id: UUID) -> None:
        if self.fail_delete:
            raise UpstreamError(self.fail_delete)
        self.identities.pop(user_id, None)

    def update_user(
        self,
        user_id: UUID,
        password: str | None = None,
        email_confirm: bool = False,
    ) -> Identity:
        identity = self.identities[user_id]
        if password is not None:
            self.passwords[user_id] = password
        if email_confirm:
            identity = identity.model_copy(update={"email_confirmed_at": NOW})
            self.identities[user_id] = identity
        return identity

    def sign_in_with_password(self, email: str, password: str) -> str | None:
        return None


class MockActivityLog:
    def __init__(self, fail: bool = False) -> None:
        self.entries: list[ActivityLogEntry] = []
        self.fail = fail

    def insert(self, entry: ActivityLogEntry) -> None:
        if self.fail:
            raise UpstreamError("activity log unavailable")
        self.entries.append(entry)


class MockTimePort:
    def now_utc(self) -> datetime:
        return NOW


# --- Fixtures ---


@pytest.fixture
def policy() -> PolicyEngine:
    rules = Rules(
        project=ProjectRules(slug="vibe-magazine", rules_version="1"),
        roles=RolesRules(
            ranked=["faculty", "admin", "superadmin"],
            staff=["faculty", "admin", "superadmin"],
        ),
        users=UsersRules(protected_ids=[PROTECTED_ID], password_min_length=6),
        analytics=AnalyticsRules(windows={"7d": 7}, default_window="7d"),
    )
    return PolicyEngine(rules)


@pytest.fixture
def profiles() -> MockProfileRepo:
    return MockProfileRepo()


@pytest.fixture
def idp() -> MockIdentityProvider:
    return MockIdentityProvider()


@pytest.fixture
def activity() -> MockActivityLog:
    return MockActivityLog()


def add_account(
    profiles: MockProfileRepo,
    idp: MockIdentityProvider,
    role: str,
    user_id: UUID | None = None,
) -> Identity:
    identity = Identity(id=user_id or uuid4(), email=f"{role}-{uuid4().hex[:6]}@vibe.test")
    idp.identities[identity.id] = identity
    profiles.profiles[identity.id] = UserProfile(
        id=identity.id,
        username=role,
        email=identity.email,
        display_name=role.title(),
        role=role,  # type: ignore[arg-type]
        created_at=NOW,
        updated_at=NOW,
    )
    return identity


def create_input(caller: Identity, role: str = "faculty", **overrides: Any) -> CreateUserInput:
    fields: dict[str, Any] = {
        "email": "new.staff@vibe.test",
        "password": "s3cret-pass",
        "username": "newstaff",
        "role": role,
    }
    fields.update(overrides)
    return CreateUserInput(caller=caller, **fields)


# --- Create ---


class TestCreateUser:
    def test_admin_creates_faculty(self, profiles, idp, policy, activity) -> None:
        admin = add_account(profiles, idp, "admin")

        out = run_create_user(
            create_input(admin), profiles, idp, policy, MockTimePort(), activity
        )

        assert out.success is True
        assert out.message == "User created successfully"
        assert out.user is not None
        assert out.user.role == "faculty"
        profile = profiles.get(out.user.id)
        assert profile is not None
        assert profile.created_by == admin.id
        assert profile.display_name == "newstaff"
        created = idp.get_by_id(out.user.id)
        assert created is not None
        assert created.email_confirmed_at is not None
        assert created.metadata == {
            "username": "newstaff",
            "display_name": "newstaff",
            "role": "faculty",
        }

    def test_email_normalised_for_both_stores(self, profiles, idp, policy, activity) -> None:
        admin = add_account(profiles, idp, "admin")

        out = run_create_user(
            create_input(admin, email="  New.Staff@Vibe.TEST "),
            profiles,
            idp,
            policy,
            MockTimePort(),
            activity,
        )

        assert out.user.email == "new.staff@vibe.test"
        assert idp.get_by_id(out.user.id).email == "new.staff@vibe.test"
        assert profiles.get(out.user.id).email == "new.staff@vibe.test"
        assert activity.entries[0].details["created_user_email"] == "new.staff@vibe.test"

    def test_activity_logged(self, profiles, idp, policy, activity) -> None:
        admin = add_account(profiles, idp, "admin")

        out = run_create_user(
            create_input(admin), profiles, idp, policy, MockTimePort(), activity
        )

        assert [e.action for e in activity.entries] == ["create_user"]
        assert activity.entries[0].details["created_user_id"] == str(out.user.id)

    def test_admin_cannot_create_superadmin(self, profiles, idp, policy) -> None:
        admin = add_account(profiles, idp, "admin")

        out = run_create_user(
            create_input(admin, role="superadmin"), profiles, idp, policy, MockTimePort()
        )

        assert out.success is False
        assert out.error_code == "permission"
        assert out.error == "Only superadmins can create other superadmins."
        assert len(idp.identities) == 1

    def test_superadmin_can_create_superadmin(self, profiles, idp, policy) -> None:
        boss = add_account(profiles, idp, "superadmin")

        out = run_create_user(
            create_input(boss, role="superadmin"), profiles, idp, policy, MockTimePort()
        )

        assert out.success is True

    def test_faculty_cannot_create_users(self, profiles, idp, policy) -> None:
        faculty = add_account(profiles, idp, "faculty")

        out = run_create_user(create_input(faculty), profiles, idp, policy, MockTimePort())

        assert out.error_code == "permission"
        assert out.error == "Only admins and superadmins can create users."

    def test_caller_without_profile_denied(self, profiles, idp, policy) -> None:
        stranger = Identity(email="someone@vibe.test")

        out = run_create_user(create_input(stranger), profiles, idp, policy, MockTimePort())

        assert out.error_code == "permission"
        assert out.error == "Could not verify admin permissions."

    @pytest.mark.parametrize("missing", ["email", "password", "username", "role"])
    def test_missing_fields(self, profiles, idp, policy, missing: str) -> None:
        admin = add_account(profiles, idp, "admin")

        out = run_create_user(
            create_input(admin, **{missing: None}), profiles, idp, policy, MockTimePort()
        )

        assert out.error_code == "validation"
        assert out.error.startswith("Missing required fields")

    def test_invalid_role(self, profiles, idp, policy) -> None:
        admin = add_account(profiles, idp, "admin")

        out = run_create_user(
            create_input(admin, role="editor"), profiles, idp, policy, MockTimePort()
        )

        assert out.error_code == "validation"
        assert out.error == "Invalid role. Must be one of: faculty, admin, superadmin"

    def test_identity_failure_is_upstream(self, profiles, idp, policy) -> None:
        admin = add_account(profiles, idp, "admin")
        idp.fail_create = "User already registered"

        out = run_create_user(create_input(admin), profiles, idp, policy, MockTimePort())

        assert out.error_code == "upstream"
        assert out.error == "Failed to create user: User already registered"

    def test_profile_failure_rolls_back_identity(self, profiles, idp, policy) -> None:
        admin = add_account(profiles, idp, "admin")
        profiles.fail_insert = True

        out = run_create_user(create_input(admin), profiles, idp, policy, MockTimePort())

        assert out.error_code == "upstream"
        assert out.error.startswith("Failed to create user profile:")
        assert list(idp.identities) == [admin.id]

    def test_activity_log_failure_does_not_fail(self, profiles, idp, policy) -> None:
        admin = add_account(profiles, idp, "admin")

        out = run_create_user(
            create_input(admin), profiles, idp, policy, MockTimePort(), MockActivityLog(fail=True)
        )

        assert out.success is True


# --- Delete ---


class TestDeleteUser:
    def test_superadmin_deletes_faculty(self, profiles, idp, policy, activity) -> None:
        boss = add_account(profiles, idp, "superadmin")
        target = add_account(profiles, idp, "faculty")

        out = run_delete_user(
            DeleteUserInput(caller=boss, user_id=str(target.id)),
            profiles,
            idp,
            policy,
            MockTimePort(),
            activity,
        )

        assert out.success is True
        assert out.message == "User deleted successfully"
        assert profiles.get(target.id) is None
        assert idp.get_by_id(target.id) is None
        assert activity.entries[0].details == {"deleted_user_id": str(target.id)}

    @pytest.mark.parametrize("role", ["faculty", "admin", "superadmin"])
    def test_protected_account_refused_for_any_caller(
        self, profiles, idp, policy, role: str
    ) -> None:
        caller = add_account(profiles, idp, role)
        add_account(profiles, idp, "faculty", user_id=UUID(PROTECTED_ID))

        out = run_delete_user(
            DeleteUserInput(caller=caller, user_id=PROTECTED_ID),
            profiles,
            idp,
            policy,
            MockTimePort(),
        )

        assert out.error_code == "permission"
        assert out.error == "Cannot delete superadmins or protected accounts."
        assert profiles.get(UUID(PROTECTED_ID)) is not None

    @pytest.mark.parametrize(
        "spelling",
        [
            PROTECTED_ID.upper(),
            PROTECTED_ID.replace("-", ""),
            "{" + PROTECTED_ID + "}",
            "urn:uuid:" + PROTECTED_ID,
        ],
    )
    def test_protected_account_refused_in_any_spelling(
        self, profiles, idp, policy, spelling: str
    ) -> None:
        boss = add_account(profiles, idp, "superadmin")
        add_account(profiles, idp, "admin", user_id=UUID(PROTECTED_ID))

        out = run_delete_user(
            DeleteUserInput(caller=boss, user_id=spelling),
            profiles,
            idp,
            policy,
            MockTimePort(),
        )

        assert out.error_code == "permission"
        assert out.error == "Cannot delete superadmins or protected accounts."
        assert out.partial_failure is None
        assert profiles.get(UUID(PROTECTED_ID)) is not None
        assert idp.get_by_id(UUID(PROTECTED_ID)) is not None

    def test_admin_cannot_delete(self, profiles, idp, policy) -> None:
        admin = add_account(profiles, idp, "admin")
        target = add_account(profiles, idp, "faculty")

        out = run_delete_user(
            DeleteUserInput(caller=admin, user_id=str(target.id)),
            profiles,
            idp,
            policy,
            MockTimePort(),
        )

        assert out.error_code == "permission"
        assert out.error == "Only superadmins can delete users."

    def test_superadmin_target_refused(self, profiles, idp, policy) -> None:
        boss = add_account(profiles, idp, "superadmin")
        other = add_account(profiles, idp, "superadmin")

        out = run_delete_user(
            DeleteUserInput(caller=boss, user_id=str(other.id)),
            profiles,
            idp,
            policy,
            MockTimePort(),
        )

        assert out.error_code == "permission"
        assert profiles.get(other.id) is not None

    def test_missing_user_id(self, profiles, idp, policy) -> None:
        boss = add_account(profiles, idp, "superadmin")

        out = run_delete_user(
            DeleteUserInput(caller=boss, user_id=None), profiles, idp, policy, MockTimePort()
        )

        assert out.error_code == "validation"
        assert out.error == "Missing required field: user_id is required."

    def test_malformed_user_id(self, profiles, idp, policy) -> None:
        boss = add_account(profiles, idp, "superadmin")

        out = run_delete_user(
            DeleteUserInput(caller=boss, user_id="not-a-uuid"),
            profiles,
            idp,
            policy,
            MockTimePort(),
        )

        assert out.error_code == "validation"

    def test_unknown_target(self, profiles, idp, policy) -> None:
        boss = add_account(profiles, idp, "superadmin")

        out = run_delete_user(
            DeleteUserInput(caller=boss, user_id=str(uuid4())),
            profiles,
            idp,
            policy,
            MockTimePort(),
        )

        assert out.error_code == "not_found"
        assert out.error == "User not found."

    def test_identity_delete_failure_is_partial(self, profiles, idp, policy, activity) -> None:
        boss = add_account(profiles, idp, "superadmin")
        target = add_account(profiles, idp, "faculty")
        idp.fail_delete = "auth service unavailable"

        out = run_delete_user(
            DeleteUserInput(caller=boss, user_id=str(target.id)),
            profiles,
            idp,
            policy,
            MockTimePort(),
            activity,
        )

        assert out.success is False
        assert out.partial_failure is not None
        assert out.partial_failure.to_payload() == {
            "warning": (
                "User profile deleted but auth record deletion failed. "
                "Manual cleanup may be required."
            ),
            "details": "auth service unavailable",
        }
        assert profiles.get(target.id) is None
        assert idp.get_by_id(target.id) is not None
        assert activity.entries == []


# --- Reset Password ---


class TestResetPassword:
    def test_admin_resets_password(self, profiles, idp, policy) -> None:
        admin = add_account(profiles, idp, "admin")
        target = add_account(profiles, idp, "faculty")

        out = run_reset_password(
            ResetPasswordInput(caller=admin, user_id=str(target.id), new_password="fresh-pass"),
            profiles,
            idp,
            policy,
            MockTimePort(),
        )

        assert out.success is True
        assert out.message == "Password reset successfully"
        assert out.user is not None
        assert (out.user.id, out.user.email) == (target.id, target.email)
        assert idp.passwords[target.id] == "fresh-pass"
        assert idp.identities[target.id].email_confirmed_at == NOW
        assert profiles.reset_log == [(target.id, admin.id, NOW)]

    def test_faculty_denied(self, profiles, idp, policy) -> None:
        faculty = add_account(profiles, idp, "faculty")
        target = add_account(profiles, idp, "faculty")

        out = run_reset_password(
            ResetPasswordInput(caller=faculty, user_id=str(target.id), new_password="fresh-pass"),
            profiles,
            idp,
            policy,
            MockTimePort(),
        )

        assert out.error_code == "permission"
        assert out.error == "Insufficient permissions - admin or superadmin role required"

    def test_unverified_caller(self, profiles, idp, policy) -> None:
        out = run_reset_password(
            ResetPasswordInput(
                caller=Identity(email="ghost@vibe.test"),
                user_id=str(uuid4()),
                new_password="fresh-pass",
            ),
            profiles,
            idp,
            policy,
            MockTimePort(),
        )

        assert out.error_code == "permission"
        assert out.error == "Could not verify user permissions"

    def test_missing_parameters(self, profiles, idp, policy) -> None:
        admin = add_account(profiles, idp, "admin")

        out = run_reset_password(
            ResetPasswordInput(caller=admin, user_id=None, new_password=None),
            profiles,
            idp,
            policy,
            MockTimePort(),
        )

        assert out.error_code == "validation"
        assert out.error == "Missing required parameters: user_id and new_password"

    def test_short_password(self, profiles, idp, policy) -> None:
        admin = add_account(profiles, idp, "admin")
        target = add_account(profiles, idp, "faculty")

        out = run_reset_password(
            ResetPasswordInput(caller=admin, user_id=str(target.id), new_password="12345"),
            profiles,
            idp,
            policy,
            MockTimePort(),
        )

        assert out.error_code == "validation"
        assert out.error == "Password must be at least 6 characters long"

    def test_unknown_target(self, profiles, idp, policy) -> None:
        admin = add_account(profiles, idp, "admin")

        out = run_reset_password(
            ResetPasswordInput(caller=admin, user_id=str(uuid4()), new_password="fresh-pass"),
            profiles,
            idp,
            policy,
            MockTimePort(),
        )

        assert out.error_code == "not_found"

    def test_reset_log_failure_is_ignored(self, profiles, idp, policy) -> None:
        admin = add_account(profiles, idp, "admin")
        target = add_account(profiles, idp, "faculty")
        profiles.fail_reset_log = True

        out = run_reset_password(
            ResetPasswordInput(caller=admin, user_id=str(target.id), new_password="fresh-pass"),
            profiles,
            idp,
            policy,
            MockTimePort(),
        )

        assert out.success is True


# --- List ---


class TestListProfiles:
    def test_admin_lists_profiles(self, profiles, idp, policy) -> None:
        admin = add_account(profiles, idp, "admin")
        add_account(profiles, idp, "faculty")

        out = run_list_profiles(ListProfilesInput(caller=admin), profiles, policy)

        assert out.success is True
        assert len(out.profiles) == 2

    def test_faculty_denied(self, profiles, idp, policy) -> None:
        faculty = add_account(profiles, idp, "faculty")

        out = run_list_profiles(ListProfilesInput(caller=faculty), profiles, policy)

        assert out.success is False
        assert out.error_code == "permission"


class TestDispatch:
    def test_dispatch_create(self, profiles, idp, policy) -> None:
        admin = add_account(profiles, idp, "admin")

        out = run(
            create_input(admin),
            profile_repo=profiles,
            policy=policy,
            identity_provider=idp,
            time=MockTimePort(),
        )

        assert out.success is True

    def test_dispatch_list(self, profiles, idp, policy) -> None:
        admin = add_account(profiles, idp, "admin")

        out = run(ListProfilesInput(caller=admin), profile_repo=profiles, policy=policy)

        assert out.success is True
