"""code_pool_and_cooldowns

Revision ID: 5c1e8a2b7d40
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "5c1e8a2b7d40"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "codes",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("value", sa.String(64), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("claimed_by", sa.String(160), nullable=True),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("status IN ('AVAILABLE','CLAIMED')", name="ck_codes_status"),
        sa.CheckConstraint(
            "(status = 'CLAIMED' AND claimed_at IS NOT NULL AND claimed_by IS NOT NULL) "
            "OR (status = 'AVAILABLE' AND claimed_at IS NULL AND claimed_by IS NULL)",
            name="ck_codes_claim_fields_match_status",
        ),
        sa.UniqueConstraint("value", name="uq_codes_value"),
    )
    op.create_index("idx_codes_status_id", "codes", ["status", "id"])
    op.create_index("idx_codes_claimed_at", "codes", ["claimed_at"])

    op.create_table(
        "cooldowns",
        sa.Column("key", sa.String(160), nullable=False),
        sa.Column("last_claim_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("key", name="pk_cooldowns"),
    )


def downgrade() -> None:
    op.drop_table("cooldowns")
    op.drop_index("idx_codes_claimed_at", table_name="codes")
    op.drop_index("idx_codes_status_id", table_name="codes")
    op.drop_table("codes")
