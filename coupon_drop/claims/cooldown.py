from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from coupon_drop.claims.types import CooldownVerdict
from coupon_drop.core.timeutils import ensure_utc
from coupon_drop.db.repo.cooldowns_repo import CooldownsRepo


async def is_blocked(
    session: AsyncSession,
    keys: Sequence[str],
    *,
    now_utc: datetime,
    window: timedelta,
) -> CooldownVerdict:
    entries = await CooldownsRepo.list_by_keys(session, keys)

    remaining = timedelta(0)
    blocking_keys: list[str] = []
    for entry in entries:
        elapsed = now_utc - ensure_utc(entry.last_claim_at)
        if elapsed >= window:
            continue
        blocking_keys.append(entry.key)
        remaining = max(remaining, window - elapsed)

    if not blocking_keys:
        return CooldownVerdict(blocked=False)

    return CooldownVerdict(
        blocked=True,
        remaining_seconds=max(1, math.ceil(remaining.total_seconds())),
        blocking_keys=tuple(blocking_keys),
    )


async def record_claim(
    session: AsyncSession,
    keys: Sequence[str],
    *,
    claimed_at: datetime,
) -> None:
    await CooldownsRepo.upsert_last_claim(session, keys=keys, claimed_at=claimed_at)


async def clear_all(session: AsyncSession) -> int:
    return await CooldownsRepo.delete_all(session)
