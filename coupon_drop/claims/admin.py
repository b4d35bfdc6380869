from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from typing import TypeVar

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from coupon_drop.claims import cooldown, pool
from coupon_drop.claims.errors import InvalidInputError, StoreUnavailableError
from coupon_drop.claims.types import BulkAddResult, PoolStats
from coupon_drop.core.timeutils import utc_now
from coupon_drop.db.models.codes import Code

logger = structlog.get_logger(__name__)
T = TypeVar("T")

MAX_CODE_LENGTH = 64


def validate_code_value(value: object) -> str:
    if not isinstance(value, str):
        raise InvalidInputError("code must be a string")
    if not value.strip():
        raise InvalidInputError("code must not be empty")
    if len(value) > MAX_CODE_LENGTH:
        raise InvalidInputError(f"code must be at most {MAX_CODE_LENGTH} characters")
    return value


class CodePoolAdmin:
    """Administrative operations on the code pool and the cooldown ledger."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def _run(self, operation: str, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        try:
            async with self._session_factory.begin() as session:
                return await work(session)
        except SQLAlchemyError as exc:
            logger.exception("pool_admin_store_unavailable", operation=operation)
            raise StoreUnavailableError from exc

    async def add_code(self, value: object, *, now_utc: datetime | None = None) -> Code:
        code_value = validate_code_value(value)
        now_utc = now_utc or utc_now()
        code = await self._run(
            "add_code",
            lambda session: pool.add(session, code_value, now_utc=now_utc),
        )
        logger.info("code_added", code_id=code.id)
        return code

    async def add_codes(
        self,
        values: Sequence[object],
        *,
        now_utc: datetime | None = None,
    ) -> BulkAddResult:
        code_values = [validate_code_value(value) for value in values]
        now_utc = now_utc or utc_now()
        result = await self._run(
            "add_codes",
            lambda session: pool.add_many(session, code_values, now_utc=now_utc),
        )
        logger.info("codes_bulk_added", added=len(result.added), skipped=len(result.skipped))
        return result

    async def seed_if_empty(
        self,
        values: Sequence[str],
        *,
        now_utc: datetime | None = None,
    ) -> int:
        now_utc = now_utc or utc_now()
        seeded = await self._run(
            "seed_if_empty",
            lambda session: pool.seed_if_empty(session, values, now_utc=now_utc),
        )
        if seeded:
            logger.info("code_pool_seeded", seeded_codes=seeded)
        return seeded

    async def reset_cooldowns(self) -> int:
        deleted = await self._run("reset_cooldowns", cooldown.clear_all)
        logger.info("cooldowns_reset", deleted_entries=deleted)
        return deleted

    async def stats(self) -> PoolStats:
        return await self._run("stats", pool.pool_stats)
