from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_created_at", "users", ["created_at"])

    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=180), nullable=True),
        sa.Column("role", sa.String(length=16), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"])
    op.create_index("ix_profiles_role", "profiles", ["role"])

    op.create_table(
        "invitations",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("token", sa.String(length=128), nullable=False),
        sa.Column("invited_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("used_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_invitations_email", "invitations", ["email"])
    op.create_index("ix_invitations_token", "invitations", ["token"], unique=True)

    op.create_table(
        "clients",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("coach_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("full_name", sa.String(length=180), nullable=False),
        sa.Column("uci_number", sa.String(length=64), nullable=True),
        sa.Column("employer_worksite", sa.String(length=255), nullable=True),
        sa.Column("job_title", sa.String(length=180), nullable=True),
        sa.Column("job_site", sa.String(length=255), nullable=True),
        sa.Column("vendor", sa.String(length=180), nullable=True),
        sa.Column("se_service_provider", sa.String(length=180), nullable=True),
        sa.Column("counselor_name", sa.String(length=180), nullable=True),
        sa.Column("hourly_wage", sa.Float(), nullable=True),
        sa.Column("goals", sa.Text(), nullable=True),
        sa.Column("ipe_goal", sa.Text(), nullable=True),
        sa.Column("emergency_contact_name", sa.String(length=180), nullable=True),
        sa.Column("emergency_contact_phone", sa.String(length=32), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_clients_coach_id", "clients", ["coach_id"])
    op.create_index("ix_clients_full_name", "clients", ["full_name"])

    op.create_table(
        "client_safety_tokens",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("client_id", sa.Uuid(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("token", sa.String(length=128), nullable=False),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("revoked_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_client_safety_tokens_token", "client_safety_tokens", ["token"], unique=True)
    op.create_index("ix_client_safety_tokens_client_id", "client_safety_tokens", ["client_id"])
    op.create_index(
        "uq_client_safety_tokens_live_client",
        "client_safety_tokens",
        ["client_id"],
        unique=True,
        sqlite_where=sa.text("revoked_at IS NULL"),
        postgresql_where=sa.text("revoked_at IS NULL"),
    )

    op.create_table(
        "shifts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("worker_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("clock_in_at", sa.DateTime(), nullable=False),
        sa.Column("clock_in_lat", sa.Float(), nullable=True),
        sa.Column("clock_in_lng", sa.Float(), nullable=True),
        sa.Column("clock_out_at", sa.DateTime(), nullable=True),
        sa.Column("clock_out_lat", sa.Float(), nullable=True),
        sa.Column("clock_out_lng", sa.Float(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_shifts_worker_id", "shifts", ["worker_id"])
    op.create_index("ix_shifts_clock_in_at", "shifts", ["clock_in_at"])

    op.create_table(
        "entries",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("worker_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("shift_id", sa.Uuid(), sa.ForeignKey("shifts.id"), nullable=True),
        sa.Column("client_name", sa.String(length=180), nullable=True),
        sa.Column("status", sa.Enum("GREEN", "YELLOW", "RED", name="sitestatus"), nullable=False),
        sa.Column("raw_transcript", sa.Text(), nullable=True),
        sa.Column("formatted_note", sa.Text(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("consumer_hours", sa.Float(), nullable=True),
        sa.Column("gps_lat", sa.Float(), nullable=True),
        sa.Column("gps_lng", sa.Float(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_entries_worker_id", "entries", ["worker_id"])
    op.create_index("ix_entries_client_name", "entries", ["client_name"])
    op.create_index("ix_entries_created_at", "entries", ["created_at"])

    op.create_table(
        "emergency_logs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("coach_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("client_id", sa.Uuid(), sa.ForeignKey("clients.id"), nullable=True),
        sa.Column("source", sa.String(length=32), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("message_sent", sa.Text(), nullable=False),
        sa.Column("recipients_count", sa.Integer(), nullable=False),
        sa.Column("sent_count", sa.Integer(), nullable=False),
        sa.Column("failed_count", sa.Integer(), nullable=False),
        sa.Column("outcome", sa.String(length=16), nullable=False),
        sa.Column("details", sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_emergency_logs_coach_id", "emergency_logs", ["coach_id"])
    op.create_index("ix_emergency_logs_client_id", "emergency_logs", ["client_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("actor_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("actor_role", sa.String(), nullable=True),
        sa.Column("entity_type", sa.String(length=64), nullable=True),
        sa.Column("entity_id", sa.Uuid(), nullable=True),
        sa.Column("ip_address", sa.String(), nullable=True),
        sa.Column("user_agent", sa.String(), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_audit_logs_event_type", "audit_logs", ["event_type"])
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"])

    op.create_table(
        "auth_logs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("ip_address", sa.String(), nullable=True),
        sa.Column("user_agent", sa.String(), nullable=True),
        sa.Column("success", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_auth_logs_user_id", "auth_logs", ["user_id"])


def downgrade() -> None:
    for table in (
        "auth_logs",
        "audit_logs",
        "emergency_logs",
        "entries",
        "shifts",
        "client_safety_tokens",
        "clients",
        "invitations",
        "profiles",
        "users",
    ):
        op.drop_table(table)
    sa.Enum(name="sitestatus").drop(op.get_bind(), checkfirst=True)
