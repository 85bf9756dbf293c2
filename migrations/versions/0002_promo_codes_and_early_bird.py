"""promo codes, early-bird pricing, linked companion restore

Revision ID: 0002_promo_codes_and_early_bird
Revises: 0001_initial_schema
Create Date: 2026-10-17 15:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0002_promo_codes_and_early_bird"
down_revision: Union[str, None] = "0001_initial_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "promo_codes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("discount_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "restriction_type",
            sa.String(length=20),
            nullable=False,
            server_default="none",
        ),
        sa.Column("allowed_emails", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_promo_codes_id", "promo_codes", ["id"])
    op.create_index("ix_promo_codes_code", "promo_codes", ["code"], unique=True)

    for table in ("in_person_courses", "online_live_courses"):
        op.add_column(table, sa.Column("early_bird_price", sa.Numeric(10, 2), nullable=True))
        op.add_column(table, sa.Column("early_bird_days", sa.Integer(), nullable=True))

    op.add_column(
        "enrollments", sa.Column("pre_linked_status", sa.String(length=20), nullable=True)
    )

    op.add_column(
        "payment_transactions",
        sa.Column(
            "early_bird_savings", sa.Numeric(10, 2), nullable=False, server_default="0"
        ),
    )
    op.add_column(
        "payment_transactions",
        sa.Column("promo_code", sa.String(length=50), nullable=True),
    )
    op.add_column(
        "payment_transactions",
        sa.Column(
            "promo_discount", sa.Numeric(10, 2), nullable=False, server_default="0"
        ),
    )


def downgrade() -> None:
    op.drop_column("payment_transactions", "promo_discount")
    op.drop_column("payment_transactions", "promo_code")
    op.drop_column("payment_transactions", "early_bird_savings")
    op.drop_column("enrollments", "pre_linked_status")

    for table in ("online_live_courses", "in_person_courses"):
        op.drop_column(table, "early_bird_days")
        op.drop_column(table, "early_bird_price")

    op.drop_index("ix_promo_codes_code", table_name="promo_codes")
    op.drop_index("ix_promo_codes_id", table_name="promo_codes")
    op.drop_table("promo_codes")
