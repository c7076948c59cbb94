"""Initial schema: organizations with encrypted credentials, teams, admin roles.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CREDENTIALS = (
    "openai_api_key",
    "stripe_secret_key",
    "stripe_publishable_key",
    "google_client_id",
    "google_client_secret",
    "zoom_client_id",
    "zoom_client_secret",
    "twilio_account_sid",
    "twilio_auth_token",
    "sendgrid_api_key",
    "slack_webhook_url",
    "ghl_client_id",
    "ghl_client_secret",
    "ghl_api_key",
)


def upgrade() -> None:
    credential_columns = []
    for name in CREDENTIALS:
        # iv_hex:ciphertext_hex
        credential_columns.append(sa.Column(f"{name}_encrypted", sa.Text(), nullable=True))
        credential_columns.append(sa.Column(f"{name}_updated_at", sa.DateTime(), nullable=True))

    op.create_table(
        "organizations",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("slug", sa.String(256), unique=True, index=True, nullable=False),
        *credential_columns,
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "teams",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "organization_id",
            sa.String(64),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            index=True,
            nullable=False,
        ),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("slug", sa.String(256), index=True, nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "admin_roles",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("user_id", sa.String(64), index=True, nullable=False),
        sa.Column("role_type", sa.String(32), index=True, nullable=False),
        sa.Column("organization_id", sa.String(64), index=True, nullable=True),
        sa.Column("team_id", sa.String(64), index=True, nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "role_type IN ('user', 'team_admin', 'org_admin', 'platform_admin', 'super_admin')",
            name="ck_admin_roles_role_type",
        ),
        sa.CheckConstraint(
            "role_type != 'org_admin' OR organization_id IS NOT NULL",
            name="ck_admin_roles_org_scope",
        ),
        sa.CheckConstraint(
            "role_type != 'team_admin' OR team_id IS NOT NULL",
            name="ck_admin_roles_team_scope",
        ),
    )


def downgrade() -> None:
    op.drop_table("admin_roles")
    op.drop_table("teams")
    op.drop_table("organizations")
