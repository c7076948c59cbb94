"""Organization credential endpoints. Values are write-only over the API."""

from fastapi import APIRouter, Depends, HTTPException, status

from clubhouse.db.repositories.credential_repo import CredentialRepository
from clubhouse.dependencies import get_credential_repo, get_credential_service, require_org_admin
from clubhouse.engine.credentials import CredentialService, InvalidCredentialValue
from clubhouse.schemas.credentials import (
    CredentialName,
    CredentialStatus,
    CredentialStatusResponse,
    CredentialWrite,
)

router = APIRouter(
    prefix="/v1/organizations/{org_id}/credentials",
    tags=["credentials"],
    dependencies=[Depends(require_org_admin)],
)


async def _ensure_organization(org_id: str, repo: CredentialRepository) -> None:
    if not await repo.organization_exists(org_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found")


@router.get(
    "",
    response_model=CredentialStatusResponse,
    summary="Which credentials are configured (never returns values)",
)
async def credential_status(
    org_id: str,
    repo: CredentialRepository = Depends(get_credential_repo),
    service: CredentialService = Depends(get_credential_service),
) -> CredentialStatusResponse:
    await _ensure_organization(org_id, repo)
    statuses = await service.credential_status(org_id)
    return CredentialStatusResponse(organization_id=org_id, credentials=statuses)


@router.put(
    "/{name}",
    response_model=CredentialStatus,
    summary="Encrypt and store a credential, replacing any previous value",
)
async def store_credential(
    org_id: str,
    name: CredentialName,
    body: CredentialWrite,
    repo: CredentialRepository = Depends(get_credential_repo),
    service: CredentialService = Depends(get_credential_service),
) -> CredentialStatus:
    await _ensure_organization(org_id, repo)
    try:
        await service.set_credential(org_id, name, body.value)
    except InvalidCredentialValue as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    statuses = await service.credential_status(org_id)
    return next(s for s in statuses if s.name == name)


@router.delete(
    "/{name}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a stored credential",
)
async def remove_credential(
    org_id: str,
    name: CredentialName,
    repo: CredentialRepository = Depends(get_credential_repo),
    service: CredentialService = Depends(get_credential_service),
) -> None:
    await _ensure_organization(org_id, repo)
    await service.clear_credential(org_id, name)
