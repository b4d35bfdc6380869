from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from coupon_drop.db.models.codes import CODE_STATUS_AVAILABLE, CODE_STATUS_CLAIMED, Code


class CodesRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, code_id: int) -> Code | None:
        return await session.get(Code, code_id, populate_existing=True)

    @staticmethod
    async def get_by_value(session: AsyncSession, value: str) -> Code | None:
        stmt = select(Code).where(Code.value == value)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_existing_values(session: AsyncSession, values: Iterable[str]) -> set[str]:
        candidates = tuple(values)
        if not candidates:
            return set()
        stmt = select(Code.value).where(Code.value.in_(candidates))
        result = await session.execute(stmt)
        return set(result.scalars().all())

    @staticmethod
    async def get_first_available_id(session: AsyncSession) -> int | None:
        stmt = (
            select(Code.id)
            .where(Code.status == CODE_STATUS_AVAILABLE)
            .order_by(Code.id.asc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def mark_claimed_if_available(
        session: AsyncSession,
        *,
        code_id: int,
        claimed_by: str,
        now_utc: datetime,
    ) -> bool:
        stmt = (
            update(Code)
            .where(
                Code.id == code_id,
                Code.status == CODE_STATUS_AVAILABLE,
            )
            .values(status=CODE_STATUS_CLAIMED, claimed_by=claimed_by, claimed_at=now_utc)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0) == 1

    @staticmethod
    async def create(session: AsyncSession, *, code: Code) -> Code:
        session.add(code)
        await session.flush()
        return code

    @staticmethod
    async def count_all(session: AsyncSession) -> int:
        stmt = select(func.count(Code.id))
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_by_status(session: AsyncSession) -> dict[str, int]:
        stmt = select(Code.status, func.count(Code.id)).group_by(Code.status)
        result = await session.execute(stmt)
        return {str(status): int(count) for status, count in result.all()}

    @staticmethod
    async def release_claimed_before(session: AsyncSession, *, older_than: datetime) -> int:
        stmt = (
            update(Code)
            .where(
                Code.status == CODE_STATUS_CLAIMED,
                Code.claimed_at < older_than,
            )
            .values(status=CODE_STATUS_AVAILABLE, claimed_by=None, claimed_at=None)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)

    @staticmethod
    async def release_all_claimed(session: AsyncSession) -> int:
        stmt = (
            update(Code)
            .where(Code.status == CODE_STATUS_CLAIMED)
            .values(status=CODE_STATUS_AVAILABLE, claimed_by=None, claimed_at=None)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
