from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from coupon_drop.db.models.base import Base

CODE_STATUS_AVAILABLE = "AVAILABLE"
CODE_STATUS_CLAIMED = "CLAIMED"


class Code(Base):
    __tablename__ = "codes"
    __table_args__ = (
        CheckConstraint("status IN ('AVAILABLE','CLAIMED')", name="status"),
        CheckConstraint(
            "(status = 'CLAIMED' AND claimed_at IS NOT NULL AND claimed_by IS NOT NULL) "
            "OR (status = 'AVAILABLE' AND claimed_at IS NULL AND claimed_by IS NULL)",
            name="claim_fields_match_status",
        ),
        Index("idx_codes_status_id", "status", "id"),
        Index("idx_codes_claimed_at", "claimed_at"),
    )

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    value: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=CODE_STATUS_AVAILABLE
    )
    claimed_by: Mapped[str | None] = mapped_column(String(160), nullable=True)
    claimed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
