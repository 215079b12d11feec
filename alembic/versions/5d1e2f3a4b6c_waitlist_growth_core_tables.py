"""waitlist_growth_core_tables

Revision ID: 5d1e2f3a4b6c
Revises:
Create Date: 2026-09-02 09:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "5d1e2f3a4b6c"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "waitlist_signups",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("referral_code", sa.String(16), nullable=True),
        sa.Column("primary_wallet", sa.Text(), nullable=True),
        sa.Column("embedded_wallet", sa.Text(), nullable=True),
        sa.Column("persona", sa.String(32), nullable=True),
        sa.Column("has_creator_coin", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("profile_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("email", name="uq_waitlist_signups_email"),
    )
    op.create_index(
        "uq_waitlist_signups_referral_code",
        "waitlist_signups",
        ["referral_code"],
        unique=True,
        postgresql_where=sa.text("referral_code IS NOT NULL"),
    )
    op.create_index("idx_waitlist_signups_primary_wallet", "waitlist_signups", ["primary_wallet"])
    op.create_index("idx_waitlist_signups_embedded_wallet", "waitlist_signups", ["embedded_wallet"])
    op.create_index(
        "idx_waitlist_signups_persona_coin",
        "waitlist_signups",
        ["persona", "has_creator_coin"],
    )

    op.create_table(
        "waitlist_points_ledger",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("signup_id", sa.BigInteger(), nullable=False),
        sa.Column("source", sa.String(48), nullable=False),
        sa.Column("source_id", sa.Text(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_waitlist_points_ledger_amount_positive"),
        sa.CheckConstraint("length(source_id) > 0", name="ck_waitlist_points_ledger_source_id"),
        sa.ForeignKeyConstraint(["signup_id"], ["waitlist_signups.id"]),
        sa.UniqueConstraint(
            "signup_id",
            "source",
            "source_id",
            name="uq_waitlist_points_ledger_signup_source",
        ),
    )
    op.create_index(
        "idx_waitlist_points_ledger_signup_created",
        "waitlist_points_ledger",
        ["signup_id", "created_at"],
    )
    op.create_index("idx_waitlist_points_ledger_source", "waitlist_points_ledger", ["source"])

    # status stays free-form here; legacy rows are normalised in the next revision
    op.create_table(
        "referral_conversions",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("referral_code", sa.String(16), nullable=False),
        sa.Column("referrer_signup_id", sa.BigInteger(), nullable=False),
        sa.Column("invitee_signup_id", sa.BigInteger(), nullable=False),
        sa.Column("is_valid", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("invalid_reason", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=True, server_default=sa.text("'pending'")),
        sa.Column("qualified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "referrer_signup_id <> invitee_signup_id",
            name="ck_referral_conversions_no_self_referral",
        ),
        sa.ForeignKeyConstraint(["referrer_signup_id"], ["waitlist_signups.id"]),
        sa.ForeignKeyConstraint(["invitee_signup_id"], ["waitlist_signups.id"]),
        sa.UniqueConstraint("invitee_signup_id", name="uq_referral_conversions_invitee"),
    )
    op.create_index(
        "idx_referral_conversions_referrer_created",
        "referral_conversions",
        ["referrer_signup_id", "created_at"],
    )
    op.create_index(
        "idx_referral_conversions_code_created",
        "referral_conversions",
        ["referral_code", "created_at"],
    )

    op.create_table(
        "referral_clicks",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("referral_code", sa.String(16), nullable=False),
        sa.Column("referrer_signup_id", sa.BigInteger(), nullable=False),
        sa.Column("ip_hash", sa.String(64), nullable=True),
        sa.Column("ua_hash", sa.String(64), nullable=True),
        sa.Column("session_id", sa.Text(), nullable=True),
        sa.Column("landing_url", sa.Text(), nullable=True),
        sa.Column("is_bot_suspected", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["referrer_signup_id"], ["waitlist_signups.id"]),
    )
    op.create_index(
        "idx_referral_clicks_referrer_created",
        "referral_clicks",
        ["referrer_signup_id", "created_at"],
    )
    op.create_index(
        "idx_referral_clicks_code_session_created",
        "referral_clicks",
        ["referral_code", "session_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_referral_clicks_code_session_created", table_name="referral_clicks")
    op.drop_index("idx_referral_clicks_referrer_created", table_name="referral_clicks")
    op.drop_table("referral_clicks")

    op.drop_index("idx_referral_conversions_code_created", table_name="referral_conversions")
    op.drop_index("idx_referral_conversions_referrer_created", table_name="referral_conversions")
    op.drop_table("referral_conversions")

    op.drop_index("idx_waitlist_points_ledger_source", table_name="waitlist_points_ledger")
    op.drop_index("idx_waitlist_points_ledger_signup_created", table_name="waitlist_points_ledger")
    op.drop_table("waitlist_points_ledger")

    op.drop_index("idx_waitlist_signups_persona_coin", table_name="waitlist_signups")
    op.drop_index("idx_waitlist_signups_embedded_wallet", table_name="waitlist_signups")
    op.drop_index("idx_waitlist_signups_primary_wallet", table_name="waitlist_signups")
    op.drop_index("uq_waitlist_signups_referral_code", table_name="waitlist_signups")
    op.drop_table("waitlist_signups")
