"""Authorization introspection endpoints for the calling identity."""

from fastapi import APIRouter, Depends

from clubhouse.dependencies import get_current_identity, get_resolver
from clubhouse.engine.authorizer import AuthorizationResolver
from clubhouse.schemas.auth import (
    AuthzCheckRequest,
    AuthzCheckResponse,
    Identity,
    Scope,
    WhoAmIResponse,
)

router = APIRouter(
    prefix="/v1/authz",
    tags=["authz"],
    dependencies=[Depends(get_current_identity)],
)


@router.post(
    "/check",
    response_model=AuthzCheckResponse,
    summary="Check whether the caller holds one of the given roles in a scope",
)
async def check(
    request: AuthzCheckRequest,
    identity: Identity = Depends(get_current_identity),
    resolver: AuthorizationResolver = Depends(get_resolver),
) -> AuthzCheckResponse:
    decision = await resolver.authorize(
        identity.subject_id,
        request.required_roles,
        Scope(organization_id=request.organization_id, team_id=request.team_id),
    )
    if decision.permitted:
        return AuthzCheckResponse(permitted=True)
    # Internal reason codes stay in the logs
    return AuthzCheckResponse(permitted=False, reason="insufficient permissions")


@router.get(
    "/me",
    response_model=WhoAmIResponse,
    summary="Describe the caller and what they administer",
)
async def whoami(
    identity: Identity = Depends(get_current_identity),
    resolver: AuthorizationResolver = Depends(get_resolver),
) -> WhoAmIResponse:
    view = await resolver.visible_scope(identity.subject_id)
    return WhoAmIResponse(identity=identity, visible_scope=view)
