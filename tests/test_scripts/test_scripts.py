"""Tests for the operator scripts."""

import base64

import pytest

from clubhouse.config import Settings
from clubhouse.errors import ConfigurationError
from clubhouse.schemas.auth import RoleKind
from clubhouse.schemas.credentials import CredentialName
from clubhouse.scripts import generate_key, generate_token
from clubhouse.security.tokens import decode_access_token


class TestGenerateKey:
    def test_prints_usable_key(self, capsys):
        generate_key.main()
        key = capsys.readouterr().out.strip()
        assert len(base64.b64decode(key)) == 32


class TestGenerateToken:
    def test_token_decodes(self, capsys):
        generate_token.main(["--user-id", "u1", "--email", "u1@club.test", "--minutes", "5"])
        identity = decode_access_token(capsys.readouterr().out.strip())
        assert identity.subject_id == "u1"
        assert identity.email == "u1@club.test"

    def test_user_id_required(self):
        with pytest.raises(SystemExit):
            generate_token.main([])


class TestSecretValidation:
    def test_missing_jwt_secret(self):
        with pytest.raises(ConfigurationError, match="required"):
            Settings(jwt_secret="").validate_secrets()

    def test_short_jwt_secret(self):
        with pytest.raises(ConfigurationError, match="at least 64"):
            Settings(jwt_secret="short").validate_secrets()

    def test_long_enough_secret(self):
        Settings(jwt_secret="s" * 64).validate_secrets()


class TestDatabaseScripts:
    """These run against the app's own engine, not the per-test one."""

    async def test_create_platform_admin(self, capsys):
        from clubhouse.db.repositories.role_repo import RoleRepository
        from clubhouse.db.session import async_session_factory
        from clubhouse.scripts.create_platform_admin import create_platform_admin

        row = await create_platform_admin("ops-1", RoleKind.SUPER_ADMIN)
        assert row.role_type == "super_admin"
        assert "ops-1 now holds super_admin" in capsys.readouterr().out

        async with async_session_factory() as session:
            assignments = await RoleRepository(session).load_active_assignments("ops-1")
        assert [a.role_kind for a in assignments] == [RoleKind.SUPER_ADMIN]

    async def test_check_credential(self, capsys):
        from clubhouse.db.repositories.credential_repo import CredentialRepository
        from clubhouse.db.session import async_session_factory, engine
        from clubhouse.dependencies import get_cipher
        from clubhouse.engine.credentials import CredentialService
        from clubhouse.models.base import Base
        from clubhouse.models.organization import Organization
        from clubhouse.scripts.check_credential import check_credential

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async with async_session_factory() as session:
            session.add(Organization(id="org-script", name="Script FC", slug="org-script"))
            await session.commit()
            await CredentialService(CredentialRepository(session), get_cipher()).set_credential(
                "org-script", CredentialName.STRIPE_SECRET_KEY, "rk_live_hidden"
            )

        assert await check_credential("org-script", CredentialName.STRIPE_SECRET_KEY) is True
        out = capsys.readouterr().out
        assert "Configured:   yes" in out
        assert "ok (14 chars)" in out
        assert "rk_live_hidden" not in out

        assert await check_credential("org-script", CredentialName.OPENAI_API_KEY) is False
        assert await check_credential("missing-org", CredentialName.OPENAI_API_KEY) is False
        assert "missing-org not found" in capsys.readouterr().out
