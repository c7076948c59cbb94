"""Repository for admin role assignments. Implements RoleAssignmentStore."""

from __future__ import annotations

import logging

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clubhouse.errors import StoreUnavailable
from clubhouse.models.role_assignment import AdminRole
from clubhouse.models.team import Team
from clubhouse.schemas.auth import RoleAssignment, RoleKind

logger = logging.getLogger("clubhouse")


def to_assignment(row: AdminRole) -> RoleAssignment:
    return RoleAssignment(
        assignment_id=str(row.id),
        subject_id=row.user_id,
        role_kind=RoleKind(row.role_type),
        organization_scope=row.organization_id,
        team_scope=row.team_id,
        active=row.is_active,
    )


class RoleRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def load_active_assignments(self, subject_id: str) -> list[RoleAssignment]:
        """Active assignments for a subject. Unknown subjects simply have none."""
        stmt = select(AdminRole).where(
            AdminRole.user_id == subject_id,
            AdminRole.is_active.is_(True),
        )
        try:
            result = await self._session.execute(stmt)
        except (SQLAlchemyError, OSError) as exc:
            raise StoreUnavailable("role assignment store unreachable") from exc

        assignments = []
        for row in result.scalars().all():
            try:
                assignments.append(to_assignment(row))
            except (ValueError, ValidationError):
                # Unknown role_type or missing scope: the row can never grant access.
                logger.warning("skipping malformed admin_roles row id=%s", row.id)
        return assignments

    async def team_organization(self, team_id: str) -> str | None:
        stmt = select(Team.organization_id).where(Team.id == team_id)
        try:
            result = await self._session.execute(stmt)
        except (SQLAlchemyError, OSError) as exc:
            raise StoreUnavailable("team store unreachable") from exc
        return result.scalar_one_or_none()

    async def list_all(self) -> list[AdminRole]:
        stmt = select(AdminRole).order_by(AdminRole.created_at.desc(), AdminRole.id.desc())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, role_id: int) -> AdminRole | None:
        return await self._session.get(AdminRole, role_id)

    async def grant(
        self,
        user_id: str,
        role_type: RoleKind,
        organization_id: str | None = None,
        team_id: str | None = None,
    ) -> AdminRole:
        """Insert a role row. Returns the existing row if an identical grant exists."""
        stmt = select(AdminRole).where(
            AdminRole.user_id == user_id,
            AdminRole.role_type == role_type.value,
            AdminRole.organization_id.is_(None)
            if organization_id is None
            else AdminRole.organization_id == organization_id,
            AdminRole.team_id.is_(None) if team_id is None else AdminRole.team_id == team_id,
        )
        # No unique index backs this check; concurrent grants can leave duplicates
        existing = (await self._session.execute(stmt.order_by(AdminRole.id))).scalars().first()
        if existing is not None:
            if not existing.is_active:
                existing.is_active = True
                await self._session.commit()
            return existing

        row = AdminRole(
            user_id=user_id,
            role_type=role_type.value,
            organization_id=organization_id,
            team_id=team_id,
            is_active=True,
        )
        self._session.add(row)
        await self._session.commit()
        await self._session.refresh(row)
        return row

    async def set_active(self, role_id: int, active: bool) -> AdminRole | None:
        row = await self.get(role_id)
        if row is None:
            return None
        row.is_active = active
        await self._session.commit()
        return row

    async def revoke(self, role_id: int) -> bool:
        result = await self._session.execute(delete(AdminRole).where(AdminRole.id == role_id))
        await self._session.commit()
        return result.rowcount > 0
