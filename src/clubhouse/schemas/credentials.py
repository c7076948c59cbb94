"""Credential names, their storage columns, and credential API models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from types import MappingProxyType

from pydantic import BaseModel, Field


class CredentialName(StrEnum):
    OPENAI_API_KEY = "openai_api_key"
    STRIPE_SECRET_KEY = "stripe_secret_key"
    STRIPE_PUBLISHABLE_KEY = "stripe_publishable_key"
    GOOGLE_CLIENT_ID = "google_client_id"
    GOOGLE_CLIENT_SECRET = "google_client_secret"
    ZOOM_CLIENT_ID = "zoom_client_id"
    ZOOM_CLIENT_SECRET = "zoom_client_secret"
    TWILIO_ACCOUNT_SID = "twilio_account_sid"
    TWILIO_AUTH_TOKEN = "twilio_auth_token"
    SENDGRID_API_KEY = "sendgrid_api_key"
    SLACK_WEBHOOK_URL = "slack_webhook_url"
    GHL_CLIENT_ID = "ghl_client_id"
    GHL_CLIENT_SECRET = "ghl_client_secret"
    GHL_API_KEY = "ghl_api_key"

    @property
    def storage_field(self) -> str:
        return CREDENTIAL_FIELDS[self]

    @property
    def updated_at_field(self) -> str:
        return f"{self.value}_updated_at"


# Read-only after import; every CredentialName must have exactly one column.
CREDENTIAL_FIELDS: MappingProxyType[CredentialName, str] = MappingProxyType(
    {name: f"{name.value}_encrypted" for name in CredentialName}
)

# Prefix checks applied before a value is encrypted and stored.
CREDENTIAL_PREFIXES: MappingProxyType[CredentialName, str] = MappingProxyType(
    {CredentialName.OPENAI_API_KEY: "sk-"}
)


class CredentialWrite(BaseModel):
    value: str = Field(..., min_length=1)


class CredentialStatus(BaseModel):
    """Whether a credential is configured. Never carries the value itself."""

    name: CredentialName
    configured: bool
    updated_at: datetime | None = None


class CredentialStatusResponse(BaseModel):
    organization_id: str
    credentials: list[CredentialStatus]
