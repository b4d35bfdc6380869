from __future__ import annotations

from datetime import timedelta

from coupon_drop.claims import cooldown
from coupon_drop.db.session import SessionLocal
from tests.claims.code_fixtures import T0, fetch_cooldown_keys

WINDOW = timedelta(seconds=60)


async def test_unknown_keys_are_not_blocked() -> None:
    async with SessionLocal() as session:
        verdict = await cooldown.is_blocked(
            session,
            ("ip:unknown", "cookie:unknown"),
            now_utc=T0,
            window=WINDOW,
        )

    assert verdict.blocked is False
    assert verdict.remaining_seconds == 0


async def test_any_recent_key_blocks_and_reports_longest_remaining_wait() -> None:
    async with SessionLocal.begin() as session:
        await cooldown.record_claim(session, ("ip:a",), claimed_at=T0)
        await cooldown.record_claim(session, ("cookie:b",), claimed_at=T0 + timedelta(seconds=20))

    async with SessionLocal() as session:
        verdict = await cooldown.is_blocked(
            session,
            ("ip:a", "cookie:b", "cookie:never-seen"),
            now_utc=T0 + timedelta(seconds=30),
            window=WINDOW,
        )

    assert verdict.blocked is True
    assert verdict.remaining_seconds == 50
    assert set(verdict.blocking_keys) == {"ip:a", "cookie:b"}


async def test_entry_stops_blocking_once_window_has_elapsed() -> None:
    async with SessionLocal.begin() as session:
        await cooldown.record_claim(session, ("ip:a",), claimed_at=T0)

    async with SessionLocal() as session:
        almost = await cooldown.is_blocked(
            session,
            ("ip:a",),
            now_utc=T0 + timedelta(seconds=59, milliseconds=500),
            window=WINDOW,
        )
        elapsed = await cooldown.is_blocked(
            session,
            ("ip:a",),
            now_utc=T0 + WINDOW,
            window=WINDOW,
        )

    assert almost.blocked is True
    assert almost.remaining_seconds == 1
    assert elapsed.blocked is False


async def test_record_claim_overwrites_previous_timestamp() -> None:
    async with SessionLocal.begin() as session:
        await cooldown.record_claim(session, ("ip:a",), claimed_at=T0)
    async with SessionLocal.begin() as session:
        await cooldown.record_claim(session, ("ip:a", "ip:a"), claimed_at=T0 + timedelta(seconds=100))

    async with SessionLocal() as session:
        verdict = await cooldown.is_blocked(
            session,
            ("ip:a",),
            now_utc=T0 + timedelta(seconds=110),
            window=WINDOW,
        )

    assert verdict.blocked is True
    assert verdict.remaining_seconds == 50
    assert await fetch_cooldown_keys() == {"ip:a"}


async def test_clear_all_removes_every_entry() -> None:
    async with SessionLocal.begin() as session:
        await cooldown.record_claim(session, ("ip:a", "cookie:b"), claimed_at=T0)

    async with SessionLocal.begin() as session:
        removed = await cooldown.clear_all(session)

    assert removed == 2
    assert await fetch_cooldown_keys() == set()
