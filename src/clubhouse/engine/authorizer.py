"""Role-assignment authorization. Permit-if-any-match over a subject's active roles.

Decision flow:
  subject_id + required roles + scope
         |
  [1] store.load_active_assignments(subject_id)
         |       (unreachable / timeout -> DENY, fail closed)
         |
  [2] team-scoped request with an org-wide assignment?
         |  YES -> store.team_organization(team_id)
         |
  [3] any assignment matches? -> PERMIT (first match reported)
         |
         NO -> DENY
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Protocol

from clubhouse.errors import StoreUnavailable
from clubhouse.schemas.auth import (
    AuthorizationDecision,
    RoleAssignment,
    RoleKind,
    Scope,
    VisibleScope,
)

logger = logging.getLogger("clubhouse")

# Internal reason codes; end users only ever see "Insufficient permissions".
REASON_NO_MATCH = "no_matching_assignment"
REASON_NO_ASSIGNMENTS = "no_assignments"
REASON_STORE_UNAVAILABLE = "store_unavailable"
REASON_TIMEOUT = "timeout"
REASON_INVALID_REQUEST = "invalid_request"


class RoleAssignmentStore(Protocol):
    async def load_active_assignments(self, subject_id: str) -> list[RoleAssignment]: ...

    async def team_organization(self, team_id: str) -> str | None: ...


def assignment_matches(
    assignment: RoleAssignment,
    required_roles: frozenset[RoleKind],
    scope: Scope,
    team_organization_id: str | None = None,
) -> bool:
    """Pure predicate for a single assignment.

    `team_organization_id` is the owning organization of `scope.team_id`; an
    org-wide assignment satisfies a team-scoped check only through it.
    """
    if not assignment.active:
        return False
    if assignment.role_kind.is_platform_wide:
        return True
    if assignment.role_kind not in required_roles:
        return False
    if scope.organization_id is not None and assignment.organization_scope != scope.organization_id:
        return False
    if scope.team_id is not None:
        if assignment.team_scope is not None:
            return assignment.team_scope == scope.team_id
        return (
            assignment.organization_scope is not None
            and team_organization_id is not None
            and assignment.organization_scope == team_organization_id
        )
    return True


def evaluate(
    assignments: Iterable[RoleAssignment],
    required_roles: Iterable[RoleKind],
    scope: Scope | None = None,
    team_organization_id: str | None = None,
) -> AuthorizationDecision:
    """Decide over already-loaded assignments. No I/O."""
    required = frozenset(required_roles)
    if not required:
        return AuthorizationDecision.deny(REASON_INVALID_REQUEST)
    scope = scope or Scope()

    seen_any = False
    for assignment in assignments:
        seen_any = True
        if assignment_matches(assignment, required, scope, team_organization_id):
            return AuthorizationDecision.permit(assignment)
    return AuthorizationDecision.deny(REASON_NO_MATCH if seen_any else REASON_NO_ASSIGNMENTS)


class AuthorizationResolver:
    """Stateless resolver bound to a role-assignment store."""

    def __init__(self, store: RoleAssignmentStore, timeout: float | None = None):
        self._store = store
        self._timeout = timeout

    async def authorize(
        self,
        subject_id: str,
        required_roles: Iterable[RoleKind],
        scope: Scope | None = None,
        *,
        timeout: float | None = None,
    ) -> AuthorizationDecision:
        required = frozenset(required_roles)
        if not subject_id or not required:
            return AuthorizationDecision.deny(REASON_INVALID_REQUEST)
        scope = scope or Scope()
        limit = timeout if timeout is not None else self._timeout

        try:
            decision = await asyncio.wait_for(self._decide(subject_id, required, scope), limit)
        except TimeoutError:
            logger.warning("authorization timed out subject=%s", subject_id)
            return AuthorizationDecision.deny(REASON_TIMEOUT)
        except StoreUnavailable:
            logger.warning("authorization store unavailable subject=%s", subject_id)
            return AuthorizationDecision.deny(REASON_STORE_UNAVAILABLE)

        if decision.permitted:
            matched = decision.matched_assignment
            logger.debug(
                "authorization permitted subject=%s role=%s",
                subject_id,
                matched.role_kind if matched else None,
            )
        else:
            logger.info(
                "authorization denied subject=%s required=%s org=%s team=%s reason=%s",
                subject_id,
                ",".join(sorted(required)),
                scope.organization_id,
                scope.team_id,
                decision.reason,
            )
        return decision

    async def visible_scope(self, subject_id: str) -> VisibleScope:
        """Summarize which organizations/teams the subject administers.

        A platform-wide role short-circuits to everything. Store failures
        propagate: an empty view would be indistinguishable from no access.
        """
        assignments = await self._store.load_active_assignments(subject_id)
        view = VisibleScope()
        for assignment in assignments:
            if not assignment.active:
                continue
            if assignment.role_kind.is_platform_wide:
                return VisibleScope(platform=True)
            if assignment.role_kind == RoleKind.ORG_ADMIN and assignment.organization_scope:
                if assignment.organization_scope not in view.organization_ids:
                    view.organization_ids.append(assignment.organization_scope)
            elif assignment.role_kind == RoleKind.TEAM_ADMIN and assignment.team_scope:
                if assignment.team_scope not in view.team_ids:
                    view.team_ids.append(assignment.team_scope)
        return view

    async def _decide(
        self,
        subject_id: str,
        required: frozenset[RoleKind],
        scope: Scope,
    ) -> AuthorizationDecision:
        assignments = await self._store.load_active_assignments(subject_id)

        team_org: str | None = None
        if scope.team_id is not None and any(
            a.team_scope is None and a.role_kind in required and not a.role_kind.is_platform_wide
            for a in assignments
        ):
            team_org = await self._store.team_organization(scope.team_id)

        return evaluate(assignments, required, scope, team_org)
