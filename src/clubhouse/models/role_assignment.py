"""Admin role assignments. One row per granted role."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from clubhouse.models.base import Base


class AdminRole(Base):
    __tablename__ = "admin_roles"
    # Same constraints as migration 001
    __table_args__ = (
        CheckConstraint(
            "role_type IN ('user', 'team_admin', 'org_admin', 'platform_admin', 'super_admin')",
            name="ck_admin_roles_role_type",
        ),
        CheckConstraint(
            "role_type != 'org_admin' OR organization_id IS NOT NULL",
            name="ck_admin_roles_org_scope",
        ),
        CheckConstraint(
            "role_type != 'team_admin' OR team_id IS NOT NULL",
            name="ck_admin_roles_team_scope",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    role_type: Mapped[str] = mapped_column(String(32), index=True)
    # org_admin rows carry organization_id; team_admin rows carry both
    organization_id: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    team_id: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(timezone.utc)
    )
