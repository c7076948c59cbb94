"""Exception hierarchy shared by the authorization and credential services."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clubhouse.schemas.auth import AuthorizationDecision


class ClubhouseError(Exception):
    """Base exception for all Clubhouse errors."""


class ConfigurationError(ClubhouseError):
    """Raised at startup when a required secret is missing or malformed."""


class StoreUnavailable(ClubhouseError):
    """Raised when the role-assignment or credential store cannot be reached."""


class AuthorizationDenied(ClubhouseError):
    """Raised by route guards when the resolver denies a request."""

    def __init__(self, decision: AuthorizationDecision) -> None:
        self.decision = decision
        super().__init__(f"Authorization denied: {decision.reason or 'no matching role'}")


class CredentialError(ClubhouseError):
    """Base for credential failures. Callers only ever see a generic message."""

    public_message = "Credential operation failed"


class EncryptionFailure(CredentialError):
    """The cipher primitive failed while encrypting."""


class DecryptionFailure(CredentialError):
    """Wrong key, tampered ciphertext or bad padding. Deliberately undifferentiated."""


class MalformedCredentialFormat(CredentialError):
    """Stored value is not `iv_hex:ciphertext_hex`."""
