from __future__ import annotations

import logging
from dataclasses import dataclass

from vibe_magazine.adapters.auth.identity import SQLiteIdentityProvider
from vibe_magazine.adapters.clock import SystemClock
from vibe_magazine.adapters.dev_email import DevEmailAdapter
from vibe_magazine.adapters.sqlite.repos import (
    SQLiteActivityLogRepo,
    SQLiteEngagementRepo,
    SQLiteMagazineRepo,
    SQLiteNotificationRepo,
    SQLiteProfileRepo,
    SQLiteSubmissionRepo,
)
from vibe_magazine.components.analytics.ports import (
    EngagementEventRepoPort,
    MagazineRepoPort,
    TimePort,
)
from vibe_magazine.components.notifications.ports import EmailPort, NotificationLogPort
from vibe_magazine.components.submissions.ports import SubmissionRepoPort
from vibe_magazine.components.users.ports import (
    ActivityLogPort,
    IdentityProviderPort,
    ProfileRepoPort,
)
from vibe_magazine.domain.policy import PolicyEngine
from vibe_magazine.rules.models import Rules


@dataclass
class ServiceContext:
    """Adapters and policy shared by every request. Built once at startup."""

    event_repo: EngagementEventRepoPort
    magazine_repo: MagazineRepoPort
    profile_repo: ProfileRepoPort
    activity_log: ActivityLogPort
    notification_log: NotificationLogPort
    submission_repo: SubmissionRepoPort
    identity_provider: IdentityProviderPort
    email: EmailPort
    policy: PolicyEngine
    rules: Rules
    clock: TimePort

    @classmethod
    def create(cls, db_path: str, rules: Rules) -> ServiceContext:
        email = DevEmailAdapter(
            log_body=rules.notifications.log_body,
            log_level=logging.INFO,
        )
        return cls(
            event_repo=SQLiteEngagementRepo(db_path),
            magazine_repo=SQLiteMagazineRepo(db_path),
            profile_repo=SQLiteProfileRepo(db_path),
            activity_log=SQLiteActivityLogRepo(db_path),
            notification_log=SQLiteNotificationRepo(db_path),
            submission_repo=SQLiteSubmissionRepo(db_path),
            identity_provider=SQLiteIdentityProvider(db_path),
            email=email,
            policy=PolicyEngine(rules),
            rules=rules,
            clock=SystemClock(),
        )
