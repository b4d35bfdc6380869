from __future__ import annotations

from datetime import datetime, timedelta

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from coupon_drop.claims import pool
from coupon_drop.core.config import RECYCLE_POLICY_EXPIRY, get_settings
from coupon_drop.core.timeutils import utc_now
from coupon_drop.db.session import SessionLocal
from coupon_drop.workers.asyncio_runner import run_async_job
from coupon_drop.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)


async def run_release_expired_codes_async(
    *,
    session_factory: async_sessionmaker[AsyncSession] = SessionLocal,
    now_utc: datetime | None = None,
) -> dict[str, int]:
    settings = get_settings()
    if settings.pool_recycle_policy != RECYCLE_POLICY_EXPIRY:
        result = {"released_codes": 0, "skipped": 1}
        logger.debug("expired_codes_release_skipped", policy=settings.pool_recycle_policy)
        return result

    now_utc = now_utc or utc_now()
    older_than = now_utc - timedelta(seconds=settings.cooldown_seconds)
    try:
        async with session_factory.begin() as session:
            released = await pool.release_expired(session, older_than=older_than)
    except SQLAlchemyError:
        logger.exception("expired_codes_release_failed", older_than=older_than.isoformat())
        return {"released_codes": 0, "failed": 1}

    result = {"released_codes": released}
    logger.info("expired_codes_released", older_than=older_than.isoformat(), **result)
    return result


@celery_app.task(name="coupon_drop.workers.tasks.pool_maintenance.run_release_expired_codes")
def run_release_expired_codes() -> dict[str, int]:
    return run_async_job(run_release_expired_codes_async)


celery_app.conf.beat_schedule = celery_app.conf.beat_schedule or {}
celery_app.conf.beat_schedule.update(
    {
        "release-expired-codes": {
            "task": "coupon_drop.workers.tasks.pool_maintenance.run_release_expired_codes",
            "schedule": float(get_settings().sweep_interval_seconds),
            "options": {"queue": "q_maintenance"},
        },
    }
)
