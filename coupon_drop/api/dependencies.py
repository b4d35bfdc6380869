from __future__ import annotations

from datetime import timedelta

from coupon_drop.claims.admin import CodePoolAdmin
from coupon_drop.claims.service import ClaimService
from coupon_drop.core.config import get_settings
from coupon_drop.db.session import SessionLocal


def get_claim_service() -> ClaimService:
    settings = get_settings()
    return ClaimService(
        SessionLocal,
        cooldown_window=timedelta(seconds=settings.cooldown_seconds),
        recycle_policy=settings.pool_recycle_policy,
    )


def get_pool_admin() -> CodePoolAdmin:
    return CodePoolAdmin(SessionLocal)
