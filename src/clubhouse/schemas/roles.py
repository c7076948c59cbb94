"""Pydantic models for the role administration endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from clubhouse.schemas.auth import RoleKind


class RoleGrantRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    role_type: RoleKind
    organization_id: str | None = None
    team_id: str | None = None


class RoleActiveUpdate(BaseModel):
    is_active: bool


class RoleAssignmentEntry(BaseModel):
    """Read-only view of an admin_roles row."""

    id: int
    user_id: str
    role_type: str  # raw column value; legacy rows may predate RoleKind
    organization_id: str | None
    team_id: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
