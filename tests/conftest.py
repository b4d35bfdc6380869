from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator
from pathlib import Path

_TEST_DB_PATH = Path(tempfile.mkdtemp(prefix="coupon_drop_tests_")) / "coupon_drop.db"

os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_PATH}"
os.environ["COOLDOWN_SECONDS"] = "60"
os.environ["POOL_RECYCLE_POLICY"] = "expiry"
os.environ["ADMIN_API_TOKEN"] = ""
os.environ["IDENTITY_PEPPER"] = "test-pepper"
os.environ["COMPOSITE_IDENTITY_ENABLED"] = "false"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"

from collections.abc import Callable  # noqa: E402
from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine, insert  # noqa: E402

from coupon_drop.db import models  # noqa: E402,F401
from coupon_drop.db.models.base import Base  # noqa: E402
from coupon_drop.db.models.codes import CODE_STATUS_AVAILABLE, Code  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_schema() -> Iterator[None]:
    sync_engine = create_engine(f"sqlite:///{_TEST_DB_PATH}")
    try:
        Base.metadata.drop_all(sync_engine)
        Base.metadata.create_all(sync_engine)
    finally:
        sync_engine.dispose()
    yield


@pytest.fixture
def insert_codes() -> Callable[..., None]:
    """Insert available codes from synchronous tests that drive the app via TestClient."""

    def _insert(*values: str) -> None:
        sync_engine = create_engine(f"sqlite:///{_TEST_DB_PATH}")
        created_at = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
        try:
            with sync_engine.begin() as conn:
                for value in values:
                    conn.execute(
                        insert(Code).values(
                            value=value,
                            status=CODE_STATUS_AVAILABLE,
                            created_at=created_at,
                        )
                    )
        finally:
            sync_engine.dispose()

    return _insert
