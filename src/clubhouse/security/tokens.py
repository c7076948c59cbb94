"""Bearer JWT encoding/decoding."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt

from clubhouse.config import settings
from clubhouse.schemas.auth import Identity, RoleKind


class InvalidToken(Exception):
    pass


def create_access_token(
    subject_id: str,
    email: str = "",
    role: str = RoleKind.USER.value,
    *,
    expires_delta: timedelta | None = None,
) -> str:
    """Mint a signed token. Used by dev tooling and tests; login lives elsewhere."""
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": subject_id,
        "email": email,
        "role": role,
        "iat": now,
        "exp": exp,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Identity:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as exc:
        raise InvalidToken(str(exc)) from exc
    subject = payload.get("sub")
    if not subject:
        raise InvalidToken("token has no subject")
    return Identity(
        subject_id=str(subject),
        email=payload.get("email", ""),
        role=payload.get("role", RoleKind.USER.value),
    )


def extract_bearer(header: str | None) -> str | None:
    if not header:
        return None
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        return None
    return parts[1]
