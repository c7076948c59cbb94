"""
Report whether an organization's credential is stored and decryptable.

    python -m clubhouse.scripts.check_credential --org-id <id> [--name openai_api_key]

Never prints the credential itself.
"""

import argparse
import asyncio

from clubhouse.db.repositories.credential_repo import CredentialRepository
from clubhouse.db.session import async_session_factory
from clubhouse.dependencies import get_cipher
from clubhouse.engine.credentials import CredentialService
from clubhouse.errors import CredentialError
from clubhouse.schemas.credentials import CredentialName


async def check_credential(org_id: str, name: CredentialName) -> bool:
    """Print a status report. Returns True if the credential decrypts."""
    async with async_session_factory() as session:
        repo = CredentialRepository(session)
        if not await repo.organization_exists(org_id):
            print(f"Organization {org_id} not found.")
            return False
        service = CredentialService(repo, get_cipher())
        statuses = {s.name: s for s in await service.credential_status(org_id)}
        status = statuses[name]

        print(f"Organization: {org_id}")
        print(f"Credential:   {name.value}")
        print(f"Configured:   {'yes' if status.configured else 'no'}")
        print(f"Last updated: {status.updated_at or 'never'}")
        if not status.configured:
            return False

        try:
            value = await service.get_credential(org_id, name)
        except CredentialError as exc:
            print(f"Decryption:   FAILED ({type(exc).__name__})")
            return False
        print(f"Decryption:   ok ({len(value or '')} chars)")
        return True


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Check a stored organization credential.")
    parser.add_argument("--org-id", required=True, help="Organization id")
    parser.add_argument(
        "--name",
        default=CredentialName.OPENAI_API_KEY.value,
        choices=[n.value for n in CredentialName],
        help="Credential to check",
    )
    args = parser.parse_args(argv)
    ok = asyncio.run(check_credential(args.org_id, CredentialName(args.name)))
    raise SystemExit(0 if ok else 1)


if __name__ == "__main__":
    main()
