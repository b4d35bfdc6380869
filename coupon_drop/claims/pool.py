from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coupon_drop.claims.errors import DuplicateCodeError
from coupon_drop.claims.types import BulkAddResult, PoolStats
from coupon_drop.db.models.codes import CODE_STATUS_AVAILABLE, CODE_STATUS_CLAIMED, Code
from coupon_drop.db.repo.codes_repo import CodesRepo


async def claim_one(
    session: AsyncSession,
    *,
    claimed_by: str,
    now_utc: datetime,
) -> Code | None:
    """Flip the oldest available code to claimed, or return None when none is left.

    The flip is a conditional update keyed on the row still being available,
    so of two racing claimants exactly one sees a changed row; the loser moves
    on to the next candidate.
    """
    while True:
        candidate_id = await CodesRepo.get_first_available_id(session)
        if candidate_id is None:
            return None

        won = await CodesRepo.mark_claimed_if_available(
            session,
            code_id=candidate_id,
            claimed_by=claimed_by,
            now_utc=now_utc,
        )
        if not won:
            continue

        return await CodesRepo.get_by_id(session, candidate_id)


async def add(session: AsyncSession, value: str, *, now_utc: datetime) -> Code:
    if await CodesRepo.get_by_value(session, value) is not None:
        raise DuplicateCodeError(value)

    code = Code(value=value, status=CODE_STATUS_AVAILABLE, created_at=now_utc)
    try:
        async with session.begin_nested():
            await CodesRepo.create(session, code=code)
    except IntegrityError as exc:
        raise DuplicateCodeError(value) from exc
    return code


async def add_many(
    session: AsyncSession,
    values: Iterable[str],
    *,
    now_utc: datetime,
) -> BulkAddResult:
    result = BulkAddResult()
    ordered = list(values)
    existing = await CodesRepo.list_existing_values(session, ordered)

    seen: set[str] = set()
    for value in ordered:
        if value in existing or value in seen:
            result.skipped.append(value)
            continue
        seen.add(value)
        try:
            async with session.begin_nested():
                await CodesRepo.create(
                    session,
                    code=Code(value=value, status=CODE_STATUS_AVAILABLE, created_at=now_utc),
                )
        except IntegrityError:
            result.skipped.append(value)
            continue
        result.added.append(value)
    return result


async def release_expired(session: AsyncSession, *, older_than: datetime) -> int:
    return await CodesRepo.release_claimed_before(session, older_than=older_than)


async def reset_all(session: AsyncSession) -> int:
    return await CodesRepo.release_all_claimed(session)


async def seed_if_empty(
    session: AsyncSession,
    values: Iterable[str],
    *,
    now_utc: datetime,
) -> int:
    if await CodesRepo.count_all(session) > 0:
        return 0
    seeded = await add_many(session, values, now_utc=now_utc)
    return len(seeded.added)


async def pool_stats(session: AsyncSession) -> PoolStats:
    counts = await CodesRepo.count_by_status(session)
    available = counts.get(CODE_STATUS_AVAILABLE, 0)
    claimed = counts.get(CODE_STATUS_CLAIMED, 0)
    return PoolStats(total=available + claimed, available=available, claimed=claimed)
