from __future__ import annotations

from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from coupon_drop.core.config import get_settings


def _is_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite")


def _engine_kwargs(database_url: str) -> dict[str, Any]:
    if _is_sqlite(database_url):
        return {"poolclass": NullPool}
    return {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}


def _serialize_sqlite_writers(async_engine: AsyncEngine) -> None:
    # The driver's deferred BEGIN lets two writers deadlock on lock upgrade;
    # take the write lock up front and let the busy timeout queue them.
    @event.listens_for(async_engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection: Any, _connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(async_engine.sync_engine, "begin")
    def _begin_immediate(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str) -> AsyncEngine:
    async_engine = create_async_engine(database_url, **_engine_kwargs(database_url))
    if _is_sqlite(database_url):
        _serialize_sqlite_writers(async_engine)
    return async_engine


engine = build_engine(get_settings().database_url)
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def dispose_engine() -> None:
    await engine.dispose()
