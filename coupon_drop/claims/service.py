from __future__ import annotations

from datetime import datetime, timedelta

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from coupon_drop.claims import cooldown, pool
from coupon_drop.claims.errors import ClaimBlockedError, PoolExhaustedError, StoreUnavailableError
from coupon_drop.claims.types import ClaimIdentity, ClaimResult
from coupon_drop.core.config import RECYCLE_POLICY_EXPIRY, RECYCLE_POLICY_RESET_ON_EXHAUSTION
from coupon_drop.core.timeutils import utc_now
from coupon_drop.db.models.codes import Code

logger = structlog.get_logger(__name__)


class ClaimService:
    """Hands one available code to a requester whose keys are all out of cooldown.

    The cooldown check, the allocation and the cooldown record share one
    transaction: a failure anywhere rolls back all three, so an allocated code
    is never lost and a failed claim never starts a cooldown.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        cooldown_window: timedelta,
        recycle_policy: str = RECYCLE_POLICY_EXPIRY,
    ) -> None:
        self._session_factory = session_factory
        self.cooldown_window = cooldown_window
        self.recycle_policy = recycle_policy

    async def claim(
        self,
        identity: ClaimIdentity,
        *,
        now_utc: datetime | None = None,
    ) -> ClaimResult:
        now_utc = now_utc or utc_now()
        try:
            async with self._session_factory.begin() as session:
                return await self._claim_in_session(session, identity=identity, now_utc=now_utc)
        except SQLAlchemyError as exc:
            logger.exception("claim_store_unavailable", audit_key=identity.audit_key)
            raise StoreUnavailableError from exc

    async def _claim_in_session(
        self,
        session: AsyncSession,
        *,
        identity: ClaimIdentity,
        now_utc: datetime,
    ) -> ClaimResult:
        verdict = await cooldown.is_blocked(
            session,
            identity.keys,
            now_utc=now_utc,
            window=self.cooldown_window,
        )
        if verdict.blocked:
            logger.info(
                "claim_blocked",
                audit_key=identity.audit_key,
                blocking_keys=len(verdict.blocking_keys),
                remaining_seconds=verdict.remaining_seconds,
            )
            raise ClaimBlockedError(verdict.remaining_seconds)

        code = await pool.claim_one(session, claimed_by=identity.audit_key, now_utc=now_utc)
        pool_was_reset = False
        if code is None and self.recycle_policy == RECYCLE_POLICY_RESET_ON_EXHAUSTION:
            code = await self._reset_and_retry(session, identity=identity, now_utc=now_utc)
            pool_was_reset = code is not None

        if code is None:
            logger.info("claim_pool_exhausted", audit_key=identity.audit_key)
            raise PoolExhaustedError

        await cooldown.record_claim(session, identity.keys, claimed_at=now_utc)
        logger.info(
            "claim_succeeded",
            audit_key=identity.audit_key,
            code_id=code.id,
            pool_was_reset=pool_was_reset,
        )
        return ClaimResult(code_value=code.value, claimed_at=now_utc, pool_was_reset=pool_was_reset)

    async def _reset_and_retry(
        self,
        session: AsyncSession,
        *,
        identity: ClaimIdentity,
        now_utc: datetime,
    ) -> Code | None:
        stats = await pool.pool_stats(session)
        if stats.available > 0 or stats.claimed == 0:
            return None

        released = await pool.reset_all(session)
        logger.info("pool_reset_on_exhaustion", released_codes=released)
        return await pool.claim_one(session, claimed_by=identity.audit_key, now_utc=now_utc)
