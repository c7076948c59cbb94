"""FastAPI dependency injection."""

from __future__ import annotations

from collections.abc import Iterable
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubhouse.config import settings
from clubhouse.db.repositories.credential_repo import CredentialRepository
from clubhouse.db.repositories.role_repo import RoleRepository
from clubhouse.db.session import get_db
from clubhouse.engine.authorizer import AuthorizationResolver
from clubhouse.engine.cipher import FieldCipher
from clubhouse.engine.credentials import CredentialService
from clubhouse.errors import AuthorizationDenied
from clubhouse.schemas.auth import Identity, RoleKind, Scope
from clubhouse.security.tokens import InvalidToken, decode_access_token, extract_bearer


@lru_cache
def get_cipher() -> FieldCipher:
    """Build the process-wide cipher. Raises ConfigurationError on a bad key."""
    return FieldCipher.from_base64(settings.encryption_key)


async def get_role_repo(session: AsyncSession = Depends(get_db)) -> RoleRepository:
    return RoleRepository(session)


async def get_credential_repo(session: AsyncSession = Depends(get_db)) -> CredentialRepository:
    return CredentialRepository(session)


async def get_resolver(repo: RoleRepository = Depends(get_role_repo)) -> AuthorizationResolver:
    return AuthorizationResolver(repo, timeout=settings.authz_timeout_seconds)


async def get_credential_service(
    repo: CredentialRepository = Depends(get_credential_repo),
    cipher: FieldCipher = Depends(get_cipher),
) -> CredentialService:
    return CredentialService(repo, cipher)


async def get_current_identity(authorization: str | None = Header(default=None)) -> Identity:
    """Decode the bearer token into an identity. 401 on anything unusable."""
    token = extract_bearer(authorization)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    try:
        return decode_access_token(token)
    except InvalidToken:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


async def ensure_authorized(
    resolver: AuthorizationResolver,
    identity: Identity,
    required_roles: Iterable[RoleKind],
    scope: Scope | None = None,
) -> None:
    """Raise AuthorizationDenied (rendered as 403) unless the resolver permits."""
    decision = await resolver.authorize(identity.subject_id, required_roles, scope)
    if not decision.permitted:
        raise AuthorizationDenied(decision)


async def require_platform_admin(
    identity: Identity = Depends(get_current_identity),
    resolver: AuthorizationResolver = Depends(get_resolver),
) -> Identity:
    await ensure_authorized(resolver, identity, {RoleKind.PLATFORM_ADMIN, RoleKind.SUPER_ADMIN})
    return identity


async def require_org_admin(
    org_id: str,
    identity: Identity = Depends(get_current_identity),
    resolver: AuthorizationResolver = Depends(get_resolver),
) -> Identity:
    """Platform admin, or org admin of the `org_id` path parameter."""
    await ensure_authorized(resolver, identity, {RoleKind.ORG_ADMIN}, Scope(organization_id=org_id))
    return identity
