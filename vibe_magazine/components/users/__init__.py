"""
Users component - administration of staff accounts.

Creates, deletes and resets staff accounts against the hosted auth
service and the profile store, with role checks routed through the
authorization policy.
"""

from .component import (
    run,
    run_create_user,
    run_delete_user,
    run_list_profiles,
    run_reset_password,
)
from .models import (
    CreateUserInput,
    DeleteUserInput,
    ListProfilesInput,
    ProfileListOutput,
    ResetPasswordInput,
    UserAdminOutput,
    UserSummary,
)
from .ports import (
    ActivityLogPort,
    IdentityProviderPort,
    ProfileRepoPort,
    TimePort,
)

__all__ = [
    # Entry points
    "run",
    "run_create_user",
    "run_delete_user",
    "run_list_profiles",
    "run_reset_password",
    # Models
    "CreateUserInput",
    "DeleteUserInput",
    "ListProfilesInput",
    "ProfileListOutput",
    "ResetPasswordInput",
    "UserAdminOutput",
    "UserSummary",
    # Ports
    "ActivityLogPort",
    "IdentityProviderPort",
    "ProfileRepoPort",
    "TimePort",
]
