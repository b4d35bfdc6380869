from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from coupon_drop.db.session import dispose_engine

T = TypeVar("T")


async def _run_with_fresh_db_pool(job: Callable[[], Awaitable[T]]) -> T:
    # Pooled connections belong to the loop that opened them; each task run gets its own loop.
    await dispose_engine()
    try:
        return await job()
    finally:
        await dispose_engine()


def run_async_job(job: Callable[[], Awaitable[T]]) -> T:
    return asyncio.run(_run_with_fresh_db_pool(job))
