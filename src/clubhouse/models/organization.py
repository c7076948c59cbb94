"""Organization (tenant) ORM model, including encrypted third-party credentials.

Each credential occupies one `<name>_encrypted` column holding
`iv_hex:ciphertext_hex`, plus a `<name>_updated_at` timestamp.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from clubhouse.models.base import Base


class Organization(Base):
    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(256))
    slug: Mapped[str] = mapped_column(String(256), unique=True, index=True)

    # OpenAI
    openai_api_key_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    openai_api_key_updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Stripe
    stripe_secret_key_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    stripe_secret_key_updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    stripe_publishable_key_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    stripe_publishable_key_updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Google
    google_client_id_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    google_client_id_updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    google_client_secret_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    google_client_secret_updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Zoom
    zoom_client_id_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    zoom_client_id_updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    zoom_client_secret_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    zoom_client_secret_updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Twilio
    twilio_account_sid_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    twilio_account_sid_updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    twilio_auth_token_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    twilio_auth_token_updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # SendGrid
    sendgrid_api_key_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    sendgrid_api_key_updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Slack
    slack_webhook_url_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    slack_webhook_url_updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # GoHighLevel
    ghl_client_id_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    ghl_client_id_updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    ghl_client_secret_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    ghl_client_secret_updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    ghl_api_key_encrypted: Mapped[str | None] = mapped_column(Text, nullable=True)
    ghl_api_key_updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(timezone.utc)
    )
