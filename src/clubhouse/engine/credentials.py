"""Tenant credential access: registry lookup, storage I/O, and the field cipher."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Protocol

from clubhouse.engine.cipher import FieldCipher
from clubhouse.errors import CredentialError, StoreUnavailable
from clubhouse.schemas.credentials import (
    CREDENTIAL_PREFIXES,
    CredentialName,
    CredentialStatus,
)

logger = logging.getLogger("clubhouse")


class CredentialStore(Protocol):
    async def read_encrypted_field(self, tenant_id: str, field_name: str) -> str | None: ...

    async def write_encrypted_field(
        self,
        tenant_id: str,
        field_name: str,
        value: str | None,
        updated_at: datetime | None = None,
    ) -> None: ...

    async def read_fields(self, tenant_id: str, field_names: list[str]) -> dict[str, object]: ...


class InvalidCredentialValue(ValueError):
    """A submitted credential fails its format check. Raised before encryption."""


def validate_credential_value(name: CredentialName, value: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise InvalidCredentialValue(f"{name.value} must be a non-empty string")
    prefix = CREDENTIAL_PREFIXES.get(name)
    if prefix and not value.startswith(prefix):
        raise InvalidCredentialValue(f'Invalid {name.value} format. Value should start with "{prefix}"')


class CredentialService:
    def __init__(self, store: CredentialStore, cipher: FieldCipher):
        self._store = store
        self._cipher = cipher

    async def _read(self, tenant_id: str, name: CredentialName, timeout: float | None) -> str | None:
        try:
            return await asyncio.wait_for(
                self._store.read_encrypted_field(tenant_id, name.storage_field), timeout
            )
        except TimeoutError as exc:
            logger.warning(
                "credential read timed out tenant=%s name=%s timeout=%s", tenant_id, name.value, timeout
            )
            raise StoreUnavailable(f"credential read timed out after {timeout}s") from exc

    async def get_credential(
        self, tenant_id: str, name: CredentialName, *, timeout: float | None = None
    ) -> str | None:
        """Decrypted value, or None if nothing was ever stored.

        Decryption errors propagate so callers can tell "never configured"
        from "configured but unreadable". A read slower than ``timeout``
        seconds raises StoreUnavailable.
        """
        encrypted = await self._read(tenant_id, name, timeout)
        if not encrypted:
            return None
        try:
            return self._cipher.decrypt(encrypted)
        except CredentialError:
            logger.error("credential unreadable tenant=%s name=%s", tenant_id, name.value)
            raise

    async def has_credential(
        self, tenant_id: str, name: CredentialName, *, timeout: float | None = None
    ) -> bool:
        return bool(await self._read(tenant_id, name, timeout))

    async def set_credential(self, tenant_id: str, name: CredentialName, plaintext: str) -> None:
        validate_credential_value(name, plaintext)
        encrypted = self._cipher.encrypt(plaintext)
        await self._store.write_encrypted_field(
            tenant_id, name.storage_field, encrypted, datetime.now(timezone.utc)
        )
        logger.info("credential stored tenant=%s name=%s", tenant_id, name.value)

    async def clear_credential(self, tenant_id: str, name: CredentialName) -> None:
        await self._store.write_encrypted_field(tenant_id, name.storage_field, None, None)
        logger.info("credential cleared tenant=%s name=%s", tenant_id, name.value)

    async def get_credentials(
        self, tenant_id: str, names: Iterable[CredentialName]
    ) -> dict[CredentialName, str | None]:
        """Bulk read. Unreadable values come back as None rather than failing the batch."""
        names = list(names)
        row = await self._store.read_fields(tenant_id, [n.storage_field for n in names])
        result: dict[CredentialName, str | None] = {}
        for name in names:
            encrypted = row.get(name.storage_field)
            if not encrypted:
                result[name] = None
                continue
            try:
                result[name] = self._cipher.decrypt(str(encrypted))
            except CredentialError:
                logger.warning("credential unreadable tenant=%s name=%s", tenant_id, name.value)
                result[name] = None
        return result

    async def check_credentials(
        self, tenant_id: str, names: Iterable[CredentialName]
    ) -> dict[CredentialName, bool]:
        names = list(names)
        row = await self._store.read_fields(tenant_id, [n.storage_field for n in names])
        return {name: bool(row.get(name.storage_field)) for name in names}

    async def credential_status(self, tenant_id: str) -> list[CredentialStatus]:
        names = list(CredentialName)
        fields: list[str] = []
        for name in names:
            fields.extend([name.storage_field, name.updated_at_field])
        row = await self._store.read_fields(tenant_id, fields)
        return [
            CredentialStatus(
                name=name,
                configured=bool(row.get(name.storage_field)),
                updated_at=row.get(name.updated_at_field),
            )
            for name in names
        ]
