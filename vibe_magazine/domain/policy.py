from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from vibe_magazine.rules.models import Rules, RolesRules

DEFAULT_ROLES = RolesRules(
    ranked=["faculty", "admin", "superadmin"],
    staff=["faculty", "admin", "superadmin"],
)

# Minimum caller role per action. None means top tier only.
ACTION_MIN_ROLE: dict[str, str | None] = {
    "users:create": "admin",
    "users:delete": None,
    "users:reset_password": "admin",
    "users:list": "admin",
    "submissions:delete": "admin",
}

# Open to every staff role
STAFF_ACTIONS = {
    "analytics:view": "Staff role required to view analytics.",
    "submissions:review": "Staff role required to review submissions.",
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def _rank(roles: RolesRules, role: str | None) -> int:
    if role is None or role not in roles.ranked:
        return -1
    return roles.ranked.index(role)


def authorize(
    caller_role: str | None,
    action: str,
    target_role: str | None = None,
    roles: RolesRules | None = None,
) -> Decision:
    """
    Decide whether a caller with ``caller_role`` may perform ``action``.

    ``target_role`` is the role being granted (create) or held by the
    affected account (delete). Unknown caller roles and unknown actions
    are denied.
    """
    roles = roles or DEFAULT_ROLES
    caller_rank = _rank(roles, caller_role)
    if caller_rank < 0:
        return Decision(False, "Could not verify admin permissions.")

    top = roles.top_tier
    is_top = caller_role == top

    if action in STAFF_ACTIONS:
        if caller_role in roles.staff:
            return ALLOW
        return Decision(False, STAFF_ACTIONS[action])

    if action not in ACTION_MIN_ROLE:
        return Decision(False, f"Unknown action: {action}")

    if action == "users:create":
        if target_role == top and not is_top:
            return Decision(False, f"Only {top}s can create other {top}s.")
        if caller_rank < _rank(roles, ACTION_MIN_ROLE[action]):
            return Decision(False, f"Only admins and {top}s can create users.")
        return ALLOW

    if action == "users:delete":
        if not is_top:
            return Decision(False, f"Only {top}s can delete users.")
        if target_role == top:
            return Decision(False, f"Cannot delete {top}s or protected accounts.")
        return ALLOW

    min_role = ACTION_MIN_ROLE[action]
    if caller_rank < _rank(roles, min_role):
        return Decision(False, f"Insufficient permissions - {min_role} or {top} role required")
    return ALLOW


class PolicyEngine:
    """Binds ``authorize`` to the loaded rules."""

    def __init__(self, rules: Rules):
        self.rules = rules

    @property
    def top_tier(self) -> str:
        return self.rules.roles.top_tier

    @property
    def known_roles(self) -> list[str]:
        return list(self.rules.roles.ranked)

    def authorize(
        self, caller_role: str | None, action: str, target_role: str | None = None
    ) -> Decision:
        return authorize(caller_role, action, target_role, roles=self.rules.roles)

    def is_protected(self, user_id: UUID | str) -> bool:
        """Compare as UUIDs so case, braces and hyphens don't matter."""
        if not isinstance(user_id, UUID):
            try:
                user_id = UUID(str(user_id))
            except ValueError:
                return False
        return user_id in set(self.rules.users.protected_ids)
