"""Shared test fixtures."""

import base64
import os

# Set env vars before any clubhouse imports so Settings picks them up
TEST_ENCRYPTION_KEY = base64.b64encode(b"k" * 32).decode()
TEST_JWT_SECRET = "test-secret-" + "x" * 64
os.environ.setdefault("CLUBHOUSE_ENCRYPTION_KEY", TEST_ENCRYPTION_KEY)
os.environ.setdefault("CLUBHOUSE_JWT_SECRET", TEST_JWT_SECRET)
os.environ.setdefault("CLUBHOUSE_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("CLUBHOUSE_RATE_LIMIT_RPM", "0")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from clubhouse.engine.cipher import FieldCipher
from clubhouse.models.base import Base
from clubhouse.models.organization import Organization
from clubhouse.models.role_assignment import AdminRole
from clubhouse.models.team import Team
from clubhouse.schemas.auth import RoleAssignment, RoleKind
from clubhouse.security.tokens import create_access_token

# In-memory async SQLite engine for tests
_test_engine = create_async_engine("sqlite+aiosqlite://", echo=False)
_test_session_factory = async_sessionmaker(
    _test_engine, class_=AsyncSession, expire_on_commit=False
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create tables before each test, drop after."""
    async with _test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with _test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _override_get_db():
    async with _test_session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def _override_db_dependency():
    """Override the get_db dependency to use the test database."""
    from clubhouse.db.session import get_db
    from clubhouse.main import app

    app.dependency_overrides[get_db] = _override_get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
async def session():
    async with _test_session_factory() as s:
        yield s


@pytest.fixture
async def client():
    from clubhouse.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
def cipher() -> FieldCipher:
    return FieldCipher.from_base64(TEST_ENCRYPTION_KEY)


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a subject."""

    def _headers(subject_id: str, email: str = "") -> dict[str, str]:
        token = create_access_token(subject_id, email or f"{subject_id}@example.com")
        return {"Authorization": f"Bearer {token}"}

    return _headers


class Seeder:
    """Insert rows directly, bypassing the API."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def organization(self, org_id: str, name: str | None = None) -> Organization:
        row = Organization(id=org_id, name=name or org_id.title(), slug=org_id)
        self._session.add(row)
        await self._session.commit()
        return row

    async def team(self, team_id: str, organization_id: str) -> Team:
        row = Team(id=team_id, organization_id=organization_id, name=team_id, slug=team_id)
        self._session.add(row)
        await self._session.commit()
        return row

    async def role(
        self,
        user_id: str,
        role_type: RoleKind,
        organization_id: str | None = None,
        team_id: str | None = None,
        is_active: bool = True,
    ) -> AdminRole:
        row = AdminRole(
            user_id=user_id,
            role_type=role_type.value,
            organization_id=organization_id,
            team_id=team_id,
            is_active=is_active,
        )
        self._session.add(row)
        await self._session.commit()
        await self._session.refresh(row)
        return row

    async def legacy_role(self, user_id: str, role_type: str, organization_id: str | None = None) -> int:
        """Insert a row the CHECK constraints would reject, as an older schema allowed."""
        await self._session.execute(text("PRAGMA ignore_check_constraints = ON"))
        try:
            result = await self._session.execute(
                text(
                    "INSERT INTO admin_roles (user_id, role_type, organization_id, is_active, created_at) "
                    "VALUES (:user_id, :role_type, :organization_id, 1, CURRENT_TIMESTAMP)"
                ),
                {"user_id": user_id, "role_type": role_type, "organization_id": organization_id},
            )
            await self._session.commit()
        finally:
            await self._session.execute(text("PRAGMA ignore_check_constraints = OFF"))
            await self._session.commit()
        return result.lastrowid


@pytest.fixture
async def seed(session) -> Seeder:
    return Seeder(session)


class InMemoryRoleStore:
    """RoleAssignmentStore backed by a list; records calls for assertions."""

    def __init__(self):
        self.assignments: list[RoleAssignment] = []
        self.teams: dict[str, str] = {}
        self.team_lookups: list[str] = []

    def add(self, subject_id: str, role_kind: RoleKind, org: str | None = None, team: str | None = None):
        self.assignments.append(
            RoleAssignment(
                subject_id=subject_id,
                role_kind=role_kind,
                organization_scope=org,
                team_scope=team,
            )
        )

    async def load_active_assignments(self, subject_id: str) -> list[RoleAssignment]:
        return [a for a in self.assignments if a.subject_id == subject_id and a.active]

    async def team_organization(self, team_id: str) -> str | None:
        self.team_lookups.append(team_id)
        return self.teams.get(team_id)


class InMemoryCredentialStore:
    """CredentialStore keyed by (tenant_id, field)."""

    def __init__(self):
        self.values: dict[tuple[str, str], object] = {}

    async def read_encrypted_field(self, tenant_id: str, field_name: str) -> str | None:
        return self.values.get((tenant_id, field_name))

    async def write_encrypted_field(self, tenant_id, field_name, value, updated_at=None) -> None:
        self.values[(tenant_id, field_name)] = value
        self.values[(tenant_id, field_name.removesuffix("_encrypted") + "_updated_at")] = updated_at

    async def read_fields(self, tenant_id: str, field_names: list[str]) -> dict[str, object]:
        return {f: self.values.get((tenant_id, f)) for f in field_names}


@pytest.fixture
def role_store() -> InMemoryRoleStore:
    return InMemoryRoleStore()


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()
