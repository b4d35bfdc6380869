from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True, frozen=True)
class ClaimIdentity:
    keys: tuple[str, ...]
    cookie_id: str
    cookie_issued: bool

    @property
    def audit_key(self) -> str:
        return self.keys[0]


@dataclass(slots=True, frozen=True)
class CooldownVerdict:
    blocked: bool
    remaining_seconds: int = 0
    blocking_keys: tuple[str, ...] = ()


@dataclass(slots=True)
class ClaimResult:
    code_value: str
    claimed_at: datetime
    pool_was_reset: bool = False


@dataclass(slots=True)
class BulkAddResult:
    added: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class PoolStats:
    total: int
    available: int
    claimed: int
