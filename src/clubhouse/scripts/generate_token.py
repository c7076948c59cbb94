"""
Mint a bearer token for local testing.

    python -m clubhouse.scripts.generate_token --user-id <id> [--email a@b.c] [--minutes 60]
"""

import argparse
from datetime import timedelta

from clubhouse.config import settings
from clubhouse.security.tokens import create_access_token


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Generate a signed bearer token.")
    parser.add_argument("--user-id", required=True, help="Token subject")
    parser.add_argument("--email", default="", help="Email claim")
    parser.add_argument("--role", default="user", help="Role claim (informational only)")
    parser.add_argument("--minutes", type=int, default=None, help="Lifetime in minutes")
    args = parser.parse_args(argv)

    settings.validate_secrets()
    expires = timedelta(minutes=args.minutes) if args.minutes else None
    print(create_access_token(args.user_id, args.email, args.role, expires_delta=expires))


if __name__ == "__main__":
    main()
