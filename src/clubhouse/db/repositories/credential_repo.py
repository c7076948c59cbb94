"""Column-level access to encrypted credentials on the organizations table.

Implements CredentialStore. Only columns named in the credential registry
(plus their `_updated_at` companions) can be read or written.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clubhouse.errors import StoreUnavailable
from clubhouse.models.organization import Organization
from clubhouse.schemas.credentials import CREDENTIAL_FIELDS, CredentialName

_FIELD_TO_NAME = {field: name for name, field in CREDENTIAL_FIELDS.items()}
_READABLE = set(CREDENTIAL_FIELDS.values()) | {n.updated_at_field for n in CredentialName}


class OrganizationNotFound(LookupError):
    pass


def _column(field_name: str):
    if field_name not in _READABLE:
        raise KeyError(f"{field_name} is not a registered credential column")
    return getattr(Organization, field_name)


class CredentialRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def organization_exists(self, tenant_id: str) -> bool:
        stmt = select(Organization.id).where(Organization.id == tenant_id)
        try:
            result = await self._session.execute(stmt)
        except (SQLAlchemyError, OSError) as exc:
            raise StoreUnavailable("credential store unreachable") from exc
        return result.scalar_one_or_none() is not None

    async def read_encrypted_field(self, tenant_id: str, field_name: str) -> str | None:
        stmt = select(_column(field_name)).where(Organization.id == tenant_id)
        try:
            result = await self._session.execute(stmt)
        except (SQLAlchemyError, OSError) as exc:
            raise StoreUnavailable("credential store unreachable") from exc
        return result.scalar_one_or_none()

    async def read_fields(self, tenant_id: str, field_names: list[str]) -> dict[str, object]:
        if not field_names:
            return {}
        stmt = select(*[_column(f) for f in field_names]).where(Organization.id == tenant_id)
        try:
            result = await self._session.execute(stmt)
        except (SQLAlchemyError, OSError) as exc:
            raise StoreUnavailable("credential store unreachable") from exc
        row = result.one_or_none()
        if row is None:
            return {}
        return dict(zip(field_names, row, strict=True))

    async def write_encrypted_field(
        self,
        tenant_id: str,
        field_name: str,
        value: str | None,
        updated_at: datetime | None = None,
    ) -> None:
        name = _FIELD_TO_NAME.get(field_name)
        if name is None:
            raise KeyError(f"{field_name} is not a registered credential column")
        stmt = (
            update(Organization)
            .where(Organization.id == tenant_id)
            .values({field_name: value, name.updated_at_field: updated_at})
        )
        try:
            result = await self._session.execute(stmt)
            if result.rowcount == 0:
                await self._session.rollback()
                raise OrganizationNotFound(tenant_id)
            await self._session.commit()
        except (SQLAlchemyError, OSError) as exc:
            raise StoreUnavailable("credential store unreachable") from exc
