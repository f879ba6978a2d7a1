"""commitment_engine_core_schema

Revision ID: 3b9e1f7a2c40
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "3b9e1f7a2c40"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("business_name", sa.Text(), nullable=True),
        sa.Column("role", sa.String(16), nullable=False, server_default=sa.text("'member'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("role IN ('member','distributor','admin')", name="ck_users_role"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("idx_users_role", "users", ["role"])

    op.create_table(
        "deals",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("distributor_id", sa.BigInteger(), nullable=False),
        sa.Column("sizes", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("min_qty_for_discount", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("commitment_start_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("commitment_ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default=sa.text("'active'")),
        sa.Column("total_sold", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_revenue", sa.Numeric(14, 2), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "notification_history",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("status IN ('active','inactive')", name="ck_deals_status"),
        sa.CheckConstraint("total_sold >= 0", name="ck_deals_total_sold_non_negative"),
        sa.CheckConstraint("total_revenue >= 0", name="ck_deals_total_revenue_non_negative"),
        sa.ForeignKeyConstraint(["distributor_id"], ["users.id"]),
    )
    op.create_index("idx_deals_distributor", "deals", ["distributor_id"])
    op.create_index("idx_deals_commitment_window", "deals", ["commitment_start_at", "commitment_ends_at"])

    op.create_table(
        "commitments",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("deal_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("size_commitments", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("total_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("distributor_response", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("modified_by_distributor", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "modified_size_commitments",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("modified_total_price", sa.Numeric(14, 2), nullable=True),
        sa.Column("settled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "status IN ('pending','approved','declined','cancelled')",
            name="ck_commitments_status",
        ),
        sa.CheckConstraint("total_price >= 0", name="ck_commitments_total_price_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["deal_id"], ["deals.id"]),
    )
    op.create_index("idx_commitments_deal_status", "commitments", ["deal_id", "status"])
    op.create_index("idx_commitments_user_created", "commitments", ["user_id", "created_at"])
    op.create_index(
        "uq_commitments_active_user_deal",
        "commitments",
        ["user_id", "deal_id"],
        unique=True,
        postgresql_where=sa.text("status <> 'cancelled'"),
    )

    op.create_table(
        "daily_commitment_summaries",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("summary_date", sa.Date(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("distributor_id", sa.BigInteger(), nullable=False),
        sa.Column(
            "commitments",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("total_commitments", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_amount", sa.Numeric(14, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("email_sent", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "total_commitments >= 0",
            name="ck_daily_commitment_summaries_total_commitments_non_negative",
        ),
        sa.CheckConstraint(
            "total_quantity >= 0",
            name="ck_daily_commitment_summaries_total_quantity_non_negative",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["distributor_id"], ["users.id"]),
        sa.UniqueConstraint(
            "summary_date",
            "user_id",
            "distributor_id",
            name="uq_daily_commitment_summaries_day_user_distributor",
        ),
    )
    op.create_index(
        "idx_daily_commitment_summaries_unsent",
        "daily_commitment_summaries",
        ["summary_date", "email_sent"],
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("recipient_id", sa.BigInteger(), nullable=False),
        sa.Column("sender_id", sa.BigInteger(), nullable=True),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("sub_type", sa.String(64), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("related_id", sa.String(64), nullable=True),
        sa.Column("related_kind", sa.String(32), nullable=True),
        sa.Column("priority", sa.String(8), nullable=False, server_default=sa.text("'medium'")),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("priority IN ('low','medium','high')", name="ck_notifications_priority"),
        sa.ForeignKeyConstraint(["recipient_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["sender_id"], ["users.id"]),
    )
    op.create_index("idx_notifications_recipient_created", "notifications", ["recipient_id", "created_at"])
    op.create_index(
        "idx_notifications_recipient_unread",
        "notifications",
        ["recipient_id"],
        postgresql_where=sa.text("is_read = false"),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("severity", sa.String(16), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("severity IN ('info','success','warning','error')", name="ck_audit_logs_severity"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
    )
    op.create_index("idx_audit_logs_user_created", "audit_logs", ["user_id", "created_at"])

    op.create_table(
        "outbox_events",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("event_type", sa.String(64), nullable=False),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default=sa.text("'PENDING'")),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('PENDING','SENT','FAILED')", name="ck_outbox_events_status"),
    )
    op.create_index(
        "idx_outbox_events_pending_created",
        "outbox_events",
        ["created_at"],
        postgresql_where=sa.text("status = 'PENDING'"),
    )


def downgrade() -> None:
    op.drop_index("idx_outbox_events_pending_created", table_name="outbox_events")
    op.drop_table("outbox_events")
    op.drop_index("idx_audit_logs_user_created", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("idx_notifications_recipient_unread", table_name="notifications")
    op.drop_index("idx_notifications_recipient_created", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("idx_daily_commitment_summaries_unsent", table_name="daily_commitment_summaries")
    op.drop_table("daily_commitment_summaries")
    op.drop_index("uq_commitments_active_user_deal", table_name="commitments")
    op.drop_index("idx_commitments_user_created", table_name="commitments")
    op.drop_index("idx_commitments_deal_status", table_name="commitments")
    op.drop_table("commitments")
    op.drop_index("idx_deals_commitment_window", table_name="deals")
    op.drop_index("idx_deals_distributor", table_name="deals")
    op.drop_table("deals")
    op.drop_index("idx_users_role", table_name="users")
    op.drop_table("users")
