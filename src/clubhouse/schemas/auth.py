"""Role, scope and authorization decision schemas."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field, model_validator


class RoleKind(StrEnum):
    USER = "user"
    TEAM_ADMIN = "team_admin"
    ORG_ADMIN = "org_admin"
    PLATFORM_ADMIN = "platform_admin"
    SUPER_ADMIN = "super_admin"

    @property
    def is_platform_wide(self) -> bool:
        return self in PLATFORM_ROLES


PLATFORM_ROLES: frozenset[RoleKind] = frozenset({RoleKind.PLATFORM_ADMIN, RoleKind.SUPER_ADMIN})

# Numeric levels carried over from the legacy role hierarchy. authorize() does
# not consult these; they only order roles for display.
ROLE_LEVELS: dict[RoleKind, int] = {
    RoleKind.USER: 1,
    RoleKind.TEAM_ADMIN: 2,
    RoleKind.ORG_ADMIN: 2,
    RoleKind.PLATFORM_ADMIN: 3,
    RoleKind.SUPER_ADMIN: 4,
}


def has_minimum_role(role: str, required: str) -> bool:
    """True if `role` sits at or above `required` in the legacy level table.

    Unknown roles rank below everything; an unknown requirement is unreachable.
    """
    try:
        level = ROLE_LEVELS[RoleKind(role)]
    except ValueError:
        level = 0
    try:
        required_level = ROLE_LEVELS[RoleKind(required)]
    except ValueError:
        required_level = 999
    return level >= required_level


class RoleAssignment(BaseModel):
    """One granted role, optionally scoped to an organization or team."""

    assignment_id: str | None = None
    subject_id: str = Field(..., min_length=1)
    role_kind: RoleKind
    organization_scope: str | None = None
    team_scope: str | None = None
    active: bool = True

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_scope(self) -> RoleAssignment:
        if self.role_kind == RoleKind.ORG_ADMIN and not self.organization_scope:
            raise ValueError("org_admin assignments require an organization scope")
        if self.role_kind == RoleKind.TEAM_ADMIN and not self.team_scope:
            raise ValueError("team_admin assignments require a team scope")
        return self


class Scope(BaseModel):
    """The organization and/or team an action targets."""

    organization_id: str | None = None
    team_id: str | None = None

    model_config = {"frozen": True}


class AuthorizationDecision(BaseModel):
    """Ephemeral permit/deny result. Never persisted."""

    permitted: bool
    matched_assignment: RoleAssignment | None = None
    reason: str | None = Field(
        default=None,
        description="Internal denial reason code. Not shown to end users.",
    )

    @classmethod
    def permit(cls, assignment: RoleAssignment) -> AuthorizationDecision:
        return cls(permitted=True, matched_assignment=assignment)

    @classmethod
    def deny(cls, reason: str) -> AuthorizationDecision:
        return cls(permitted=False, reason=reason)


class Identity(BaseModel):
    """Claims decoded from a verified bearer token."""

    subject_id: str
    email: str = ""
    role: str = RoleKind.USER.value


class VisibleScope(BaseModel):
    """What a subject can see: everything, some organizations, or some teams."""

    platform: bool = False
    organization_ids: list[str] = Field(default_factory=list)
    team_ids: list[str] = Field(default_factory=list)


class AuthzCheckRequest(BaseModel):
    required_roles: list[RoleKind] = Field(..., min_length=1)
    organization_id: str | None = None
    team_id: str | None = None


class AuthzCheckResponse(BaseModel):
    permitted: bool
    reason: str | None = None


class WhoAmIResponse(BaseModel):
    identity: Identity
    visible_scope: VisibleScope
