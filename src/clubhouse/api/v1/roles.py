"""Admin role management endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from clubhouse.db.repositories.role_repo import RoleRepository
from clubhouse.dependencies import (
    ensure_authorized,
    get_current_identity,
    get_resolver,
    get_role_repo,
    require_platform_admin,
)
from clubhouse.engine.authorizer import AuthorizationResolver
from clubhouse.models.role_assignment import AdminRole
from clubhouse.schemas.auth import Identity, RoleKind, Scope
from clubhouse.schemas.roles import RoleActiveUpdate, RoleAssignmentEntry, RoleGrantRequest

logger = logging.getLogger("clubhouse")

router = APIRouter(
    prefix="/v1/admin/roles",
    tags=["roles"],
    dependencies=[Depends(get_current_identity)],
)


async def _ensure_can_manage(
    resolver: AuthorizationResolver,
    identity: Identity,
    role_type: str,
    organization_id: str | None,
) -> None:
    """Platform admins manage every role; org admins manage admin roles in their org.

    A stored role type outside RoleKind is left to platform admins.
    """
    if role_type in (RoleKind.ORG_ADMIN, RoleKind.TEAM_ADMIN) and organization_id:
        await ensure_authorized(
            resolver, identity, {RoleKind.ORG_ADMIN}, Scope(organization_id=organization_id)
        )
    else:
        await ensure_authorized(resolver, identity, {RoleKind.PLATFORM_ADMIN})


async def _get_row_or_404(repo: RoleRepository, role_id: int) -> AdminRole:
    row = await repo.get(role_id)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Role assignment not found.",
        )
    return row


@router.get(
    "",
    response_model=list[RoleAssignmentEntry],
    summary="List every role assignment (platform admins only)",
    dependencies=[Depends(require_platform_admin)],
)
async def list_roles(repo: RoleRepository = Depends(get_role_repo)) -> list[RoleAssignmentEntry]:
    rows = await repo.list_all()
    return [RoleAssignmentEntry.model_validate(row) for row in rows]


@router.post(
    "",
    response_model=RoleAssignmentEntry,
    status_code=status.HTTP_201_CREATED,
    summary="Grant a role",
)
async def grant_role(
    grant: RoleGrantRequest,
    identity: Identity = Depends(get_current_identity),
    resolver: AuthorizationResolver = Depends(get_resolver),
    repo: RoleRepository = Depends(get_role_repo),
) -> RoleAssignmentEntry:
    organization_id = grant.organization_id
    team_id = grant.team_id

    if grant.role_type == RoleKind.ORG_ADMIN:
        if not organization_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="org_admin requires organization_id.",
            )
        team_id = None
    elif grant.role_type == RoleKind.TEAM_ADMIN:
        if not team_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="team_admin requires team_id.",
            )
        team_org = await repo.team_organization(team_id)
        if team_org is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found.")
        if organization_id and organization_id != team_org:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Team does not belong to organization_id.",
            )
        organization_id = team_org
    else:
        # Platform-wide and plain user roles are unscoped
        organization_id = None
        team_id = None

    await _ensure_can_manage(resolver, identity, grant.role_type, organization_id)
    row = await repo.grant(grant.user_id, grant.role_type, organization_id, team_id)
    logger.info(
        "role granted by=%s user=%s role=%s org=%s team=%s",
        identity.subject_id,
        row.user_id,
        row.role_type,
        row.organization_id,
        row.team_id,
    )
    return RoleAssignmentEntry.model_validate(row)


@router.patch(
    "/{role_id}",
    response_model=RoleAssignmentEntry,
    summary="Activate or deactivate a role assignment",
)
async def set_role_active(
    role_id: int,
    update: RoleActiveUpdate,
    identity: Identity = Depends(get_current_identity),
    resolver: AuthorizationResolver = Depends(get_resolver),
    repo: RoleRepository = Depends(get_role_repo),
) -> RoleAssignmentEntry:
    row = await _get_row_or_404(repo, role_id)
    await _ensure_can_manage(resolver, identity, row.role_type, row.organization_id)
    row = await repo.set_active(role_id, update.is_active)
    logger.info("role active=%s id=%s by=%s", update.is_active, role_id, identity.subject_id)
    return RoleAssignmentEntry.model_validate(row)


@router.delete(
    "/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke a role assignment",
)
async def revoke_role(
    role_id: int,
    identity: Identity = Depends(get_current_identity),
    resolver: AuthorizationResolver = Depends(get_resolver),
    repo: RoleRepository = Depends(get_role_repo),
) -> None:
    row = await _get_row_or_404(repo, role_id)
    await _ensure_can_manage(resolver, identity, row.role_type, row.organization_id)
    await repo.revoke(role_id)
    logger.info("role revoked id=%s by=%s", role_id, identity.subject_id)
