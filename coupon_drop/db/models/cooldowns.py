from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from coupon_drop.db.models.base import Base


class CooldownEntry(Base):
    __tablename__ = "cooldowns"

    key: Mapped[str] = mapped_column(String(160), primary_key=True)
    last_claim_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
