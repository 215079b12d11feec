"""conversion_status_and_append_only

Revision ID: 7e8f9a0b1c2d
Revises: 5d1e2f3a4b6c
Create Date: 2026-09-09 09:00:00.000000
"""
from collections.abc import Sequence

from alembic import op

revision: str = "7e8f9a0b1c2d"
down_revision: str | None = "5d1e2f3a4b6c"
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None

APPEND_ONLY_TABLES = ("waitlist_points_ledger", "referral_clicks")


def upgrade() -> None:
    # Legacy rows: 'csw_linked', NULL, or qualified_at set without the status.
    op.execute(
        """
        UPDATE referral_conversions
        SET status = 'qualified'
        WHERE qualified_at IS NOT NULL AND status IS DISTINCT FROM 'qualified';
        """
    )
    op.execute(
        """
        UPDATE referral_conversions
        SET qualified_at = created_at
        WHERE status = 'qualified' AND qualified_at IS NULL;
        """
    )
    op.execute(
        """
        UPDATE referral_conversions
        SET status = 'pending'
        WHERE status IS NULL OR status NOT IN ('pending', 'qualified');
        """
    )
    op.alter_column("referral_conversions", "status", nullable=False)
    op.create_check_constraint(
        "ck_referral_conversions_status",
        "referral_conversions",
        "status IN ('pending','qualified')",
    )
    op.create_check_constraint(
        "ck_referral_conversions_qualified_at",
        "referral_conversions",
        "(status = 'qualified') = (qualified_at IS NOT NULL)",
    )

    for table_name in APPEND_ONLY_TABLES:
        op.execute(
            f"""
            CREATE OR REPLACE FUNCTION fn_{table_name}_append_only()
            RETURNS trigger
            LANGUAGE plpgsql
            AS $$
            BEGIN
                RAISE EXCEPTION '{table_name} is append-only';
            END;
            $$;
            """
        )
        op.execute(
            f"""
            CREATE TRIGGER trg_{table_name}_append_only
            BEFORE UPDATE OR DELETE ON {table_name}
            FOR EACH ROW
            EXECUTE FUNCTION fn_{table_name}_append_only();
            """
        )


def downgrade() -> None:
    for table_name in APPEND_ONLY_TABLES:
        op.execute(f"DROP TRIGGER IF EXISTS trg_{table_name}_append_only ON {table_name};")
        op.execute(f"DROP FUNCTION IF EXISTS fn_{table_name}_append_only();")

    op.drop_constraint("ck_referral_conversions_qualified_at", "referral_conversions", type_="check")
    op.drop_constraint("ck_referral_conversions_status", "referral_conversions", type_="check")
    op.alter_column("referral_conversions", "status", nullable=True)
