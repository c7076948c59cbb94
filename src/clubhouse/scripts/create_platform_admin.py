"""
Grant a platform-wide role to a user.

    python -m clubhouse.scripts.create_platform_admin --user-id <id> [--role super_admin]
"""

import argparse
import asyncio

from clubhouse.db.repositories.role_repo import RoleRepository
from clubhouse.db.session import async_session_factory, engine
from clubhouse.models.base import Base
from clubhouse.models.role_assignment import AdminRole  # noqa: F401 - register model
from clubhouse.schemas.auth import PLATFORM_ROLES, RoleKind


async def create_platform_admin(user_id: str, role: RoleKind) -> AdminRole:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        row = await RoleRepository(session).grant(user_id, role)
    print(f"{user_id} now holds {row.role_type} (admin_roles.id={row.id}).")
    return row


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Grant platform_admin or super_admin to a user.")
    parser.add_argument("--user-id", required=True, help="Subject id of the user")
    parser.add_argument(
        "--role",
        default=RoleKind.PLATFORM_ADMIN.value,
        choices=sorted(r.value for r in PLATFORM_ROLES),
        help="Platform-wide role to grant",
    )
    args = parser.parse_args(argv)
    asyncio.run(create_platform_admin(args.user_id, RoleKind(args.role)))


if __name__ == "__main__":
    main()
