from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class RolesRules(BaseModel):
    # Lowest rank first; the last entry is the top tier.
    ranked: list[str]
    staff: list[str]

    @model_validator(mode="after")
    def _staff_roles_are_ranked(self) -> "RolesRules":
        if not self.ranked:
            raise ValueError("roles.ranked must not be empty")
        unknown = [r for r in self.staff if r not in self.ranked]
        if unknown:
            raise ValueError(f"staff roles not ranked: {', '.join(unknown)}")
        return self

    @property
    def top_tier(self) -> str:
        return self.ranked[-1]


class UsersRules(BaseModel):
    protected_ids: list[UUID] = Field(default_factory=list)
    password_min_length: int = 6


class AnalyticsRules(BaseModel):
    windows: dict[str, int]
    default_window: str
    title_max_length: int = 20
    top_magazines_limit: int = 10

    @model_validator(mode="after")
    def _default_window_known(self) -> "AnalyticsRules":
        if self.default_window not in self.windows:
            raise ValueError(f"default_window '{self.default_window}' is not a configured window")
        if any(days <= 0 for days in self.windows.values()):
            raise ValueError("analytics windows must be positive day counts")
        return self


class NotificationsRules(BaseModel):
    delivery_mode: str = "simulated"
    log_body: bool = True


class SubmissionsRules(BaseModel):
    categories: list[str] = Field(
        default_factory=lambda: ["Design Project", "Literary Work", "Data Visualization", "Other"]
    )
    signature: str = "The Vibe Magazine Editorial Team"


class Rules(BaseModel):
    project: ProjectRules
    roles: RolesRules
    users: UsersRules
    analytics: AnalyticsRules
    notifications: NotificationsRules = Field(default_factory=NotificationsRules)
    submissions: SubmissionsRules = Field(default_factory=SubmissionsRules)
