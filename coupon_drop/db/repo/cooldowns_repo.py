from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from coupon_drop.db.models.cooldowns import CooldownEntry


def _insert_for(session: AsyncSession):
    dialect_name = session.get_bind().dialect.name
    if dialect_name == "postgresql":
        return pg_insert
    if dialect_name == "sqlite":
        return sqlite_insert
    raise RuntimeError(f"cooldown upsert is not supported on dialect {dialect_name!r}")


class CooldownsRepo:
    @staticmethod
    async def list_by_keys(session: AsyncSession, keys: Sequence[str]) -> list[CooldownEntry]:
        if not keys:
            return []
        stmt = select(CooldownEntry).where(CooldownEntry.key.in_(tuple(keys)))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def upsert_last_claim(
        session: AsyncSession,
        *,
        keys: Sequence[str],
        claimed_at: datetime,
    ) -> None:
        if not keys:
            return
        insert = _insert_for(session)
        values = [{"key": key, "last_claim_at": claimed_at} for key in dict.fromkeys(keys)]
        stmt = insert(CooldownEntry).values(values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CooldownEntry.key],
            set_={"last_claim_at": stmt.excluded.last_claim_at},
        )
        await session.execute(stmt)

    @staticmethod
    async def delete_all(session: AsyncSession) -> int:
        result = await session.execute(delete(CooldownEntry))
        return int(result.rowcount or 0)
