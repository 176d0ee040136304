import logging
from uuid import UUID

from vibe_magazine.domain.entities import ActivityLogEntry, Identity, UserProfile
from vibe_magazine.domain.errors import PartialFailure, UpstreamError
from vibe_magazine.domain.policy import PolicyEngine

from .models import (
    CreateUserInput,
    DeleteUserInput,
    ListProfilesInput,
    ProfileListOutput,
    ResetPasswordInput,
    UserAdminOutput,
    UserSummary,
)
from .ports import ActivityLogPort, IdentityProviderPort, ProfileRepoPort, TimePort

logger = logging.getLogger(__name__)

CALLER_UNVERIFIED = "Could not verify admin permissions."
PROTECTED_ACCOUNT = "Cannot delete superadmins or protected accounts."


def _denied(message: str) -> UserAdminOutput:
    return UserAdminOutput(success=False, error=message, error_code="permission")


def _invalid(message: str) -> UserAdminOutput:
    return UserAdminOutput(success=False, error=message, error_code="validation")


def _parse_id(raw: str) -> UUID | None:
    try:
        return UUID(str(raw))
    except (ValueError, TypeError):
        return None


def _caller_role(caller: Identity, profile_repo: ProfileRepoPort) -> str | None:
    try:
        profile = profile_repo.get(caller.id)
    except UpstreamError as e:
        logger.warning("Profile lookup failed for caller %s: %s", caller.id, e)
        return None
    return profile.role if profile else None


def _log_activity(
    activity_log: ActivityLogPort | None,
    entry: ActivityLogEntry,
) -> None:
    """Best effort; a failed log write never fails the operation."""
    if activity_log is None:
        return
    try:
        activity_log.insert(entry)
    except UpstreamError as e:
        logger.error("Failed to log %s activity: %s", entry.action, e)


def run_create_user(
    inp: CreateUserInput,
    profile_repo: ProfileRepoPort,
    identity_provider: IdentityProviderPort,
    policy: PolicyEngine,
    time: TimePort,
    activity_log: ActivityLogPort | None = None,
) -> UserAdminOutput:
    if not (inp.email and inp.password and inp.username and inp.role):
        return _invalid(
            "Missing required fields: email, password, username, and role are required."
        )

    if inp.role not in policy.known_roles:
        return _invalid(f"Invalid role. Must be one of: {', '.join(policy.known_roles)}")

    # Identity and profile must agree on the address
    email = inp.email.strip().lower()

    caller_role = _caller_role(inp.caller, profile_repo)
    if caller_role is None:
        return _denied(CALLER_UNVERIFIED)

    decision = policy.authorize(caller_role, "users:create", inp.role)
    if not decision:
        return _denied(decision.reason)

    display_name = inp.display_name or inp.username
    try:
        identity = identity_provider.create_user(
            email=email,
            password=inp.password,
            email_confirm=True,
            metadata={"username": inp.username, "display_name": display_name, "role": inp.role},
        )
    except UpstreamError as e:
        return UserAdminOutput(
            success=False, error=f"Failed to create user: {e.message}", error_code="upstream"
        )

    now = time.now_utc()
    profile = UserProfile(
        id=identity.id,
        username=inp.username,
        email=email,
        display_name=display_name,
        role=inp.role,  # type: ignore[arg-type]
        is_active=True,
        created_by=inp.caller.id,
        created_at=now,
        updated_at=now,
    )
    try:
        profile_repo.insert(profile)
    except UpstreamError as e:
        logger.warning("Profile insert failed for %s, removing auth identity", identity.id)
        try:
            identity_provider.delete_user(identity.id)
        except UpstreamError as rollback_error:
            logger.error("Rollback of auth identity %s failed: %s", identity.id, rollback_error)
        return UserAdminOutput(
            success=False,
            error=f"Failed to create user profile: {e.message}",
            error_code="upstream",
        )

    _log_activity(
        activity_log,
        ActivityLogEntry(
            user_id=inp.caller.id,
            action="create_user",
            details={
                "created_user_id": str(identity.id),
                "created_user_email": email,
                "created_user_role": inp.role,
            },
            created_at=now,
        ),
    )
    logger.info("User %s created with role %s by %s", identity.id, inp.role, inp.caller.id)

    return UserAdminOutput(
        success=True,
        message="User created successfully",
        user=UserSummary(id=identity.id, email=email, username=inp.username, role=inp.role),
    )


def run_delete_user(
    inp: DeleteUserInput,
    profile_repo: ProfileRepoPort,
    identity_provider: IdentityProviderPort,
    policy: PolicyEngine,
    time: TimePort,
    activity_log: ActivityLogPort | None = None,
) -> UserAdminOutput:
    if not inp.user_id:
        return _invalid("Missing required field: user_id is required.")

    target_id = _parse_id(inp.user_id)
    if target_id is None:
        return _invalid("Invalid user ID format")

    # Reserved accounts are refused whoever asks
    if policy.is_protected(target_id):
        return _denied(PROTECTED_ACCOUNT)

    caller_role = _caller_role(inp.caller, profile_repo)
    if caller_role is None:
        return _denied(CALLER_UNVERIFIED)

    decision = policy.authorize(caller_role, "users:delete")
    if not decision:
        return _denied(decision.reason)

    try:
        target = profile_repo.get(target_id)
    except UpstreamError as e:
        return UserAdminOutput(success=False, error=e.message, error_code="upstream")
    if target is None:
        return UserAdminOutput(success=False, error="User not found.", error_code="not_found")

    decision = policy.authorize(caller_role, "users:delete", target.role)
    if not decision:
        return _denied(decision.reason)

    try:
        profile_repo.delete(target_id)
    except UpstreamError as e:
        return UserAdminOutput(
            success=False,
            error=f"Failed to delete user profile: {e.message}",
            error_code="upstream",
        )

    try:
        identity_provider.delete_user(target_id)
    except UpstreamError as e:
        # No reconciliation: the orphaned identity needs manual cleanup.
        logger.error("Failed to delete auth user %s: %s", target_id, e.message)
        return UserAdminOutput(
            success=False,
            partial_failure=PartialFailure(
                warning=(
                    "User profile deleted but auth record deletion failed. "
                    "Manual cleanup may be required."
                ),
                details=e.message,
            ),
        )

    _log_activity(
        activity_log,
        ActivityLogEntry(
            user_id=inp.caller.id,
            action="delete_user",
            details={"deleted_user_id": str(target_id)},
            created_at=time.now_utc(),
        ),
    )
    logger.info("User %s deleted by %s", target_id, inp.caller.id)

    return UserAdminOutput(success=True, message="User deleted successfully")


def run_reset_password(
    inp: ResetPasswordInput,
    profile_repo: ProfileRepoPort,
    identity_provider: IdentityProviderPort,
    policy: PolicyEngine,
    time: TimePort,
) -> UserAdminOutput:
    caller_role = _caller_role(inp.caller, profile_repo)
    if caller_role is None:
        return _denied("Could not verify user permissions")

    decision = policy.authorize(caller_role, "users:reset_password")
    if not decision:
        return _denied(decision.reason)

    if not inp.user_id or not inp.new_password:
        return _invalid("Missing required parameters: user_id and new_password")

    min_length = policy.rules.users.password_min_length
    if len(inp.new_password) < min_length:
        return _invalid(f"Password must be at least {min_length} characters long")

    target_id = _parse_id(inp.user_id)
    if target_id is None:
        return _invalid("Invalid user ID format")

    try:
        target = identity_provider.get_by_id(target_id)
    except UpstreamError as e:
        return UserAdminOutput(success=False, error=e.message, error_code="upstream")
    if target is None:
        return UserAdminOutput(success=False, error="User not found.", error_code="not_found")

    logger.info(
        "Admin user %s (%s) is resetting password for user %s",
        inp.caller.id,
        inp.caller.email,
        target_id,
    )

    try:
        updated = identity_provider.update_user(
            target_id, password=inp.new_password, email_confirm=True
        )
    except UpstreamError as e:
        logger.error("Password reset error for %s: %s", target_id, e.message)
        return UserAdminOutput(
            success=False,
            error=f"Failed to reset password: {e.message}",
            error_code="upstream",
        )

    try:
        profile_repo.record_password_reset(target_id, inp.caller.id, time.now_utc())
    except UpstreamError as e:
        logger.warning("Could not log password reset action: %s", e)

    logger.info("Password reset successful for user %s", target_id)
    return UserAdminOutput(
        success=True,
        message="Password reset successfully",
        user=UserSummary(id=updated.id, email=updated.email),
    )


def run_list_profiles(
    inp: ListProfilesInput,
    profile_repo: ProfileRepoPort,
    policy: PolicyEngine,
) -> ProfileListOutput:
    caller_role = _caller_role(inp.caller, profile_repo)
    if caller_role is None:
        return ProfileListOutput(success=False, error=CALLER_UNVERIFIED, error_code="permission")

    decision = policy.authorize(caller_role, "users:list")
    if not decision:
        return ProfileListOutput(success=False, error=decision.reason, error_code="permission")

    try:
        profiles = profile_repo.list_all()
    except UpstreamError as e:
        return ProfileListOutput(success=False, error=e.message, error_code="upstream")

    return ProfileListOutput(
        profiles=sorted(profiles, key=lambda p: p.created_at),
        success=True,
    )


def run(
    inp: CreateUserInput | DeleteUserInput | ResetPasswordInput | ListProfilesInput,
    *,
    profile_repo: ProfileRepoPort,
    policy: PolicyEngine,
    identity_provider: IdentityProviderPort | None = None,
    time: TimePort | None = None,
    activity_log: ActivityLogPort | None = None,
) -> UserAdminOutput | ProfileListOutput:
    if isinstance(inp, CreateUserInput):
        assert identity_provider and time
        return run_create_user(inp, profile_repo, identity_provider, policy, time, activity_log)

    elif isinstance(inp, DeleteUserInput):
        assert identity_provider and time
        return run_delete_user(inp, profile_repo, identity_provider, policy, time, activity_log)

    elif isinstance(inp, ResetPasswordInput):
        assert identity_provider and time
        return run_reset_password(inp, profile_repo, identity_provider, policy, time)

    elif isinstance(inp, ListProfilesInput):
        return run_list_profiles(inp, profile_repo, policy)

    raise ValueError(f"Unknown input type: {type(inp)}")
