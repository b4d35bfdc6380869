"""Derivation of throttling keys from the signals a claim request carries.

Raw client IPs never leave this module: they are peppered and hashed before
they become keys, so neither the cooldown ledger nor the audit column on a
claimed code retains them.
"""

from __future__ import annotations

import hashlib
import hmac
from uuid import UUID, uuid4

from coupon_drop.claims.types import ClaimIdentity

IDENTITY_COOKIE_NAME = "coupon_session"
IDENTITY_COOKIE_MAX_AGE_SECONDS = 365 * 24 * 60 * 60

IP_KEY_PREFIX = "ip:"
COOKIE_KEY_PREFIX = "cookie:"
DEVICE_KEY_PREFIX = "device:"


def _peppered_digest(*, value: str, pepper: str) -> str:
    digest = hmac.new(
        pepper.encode("utf-8"),
        value.encode("utf-8"),
        hashlib.sha256,
    )
    return digest.hexdigest()


def hash_client_ip(*, client_ip: str, pepper: str) -> str:
    return _peppered_digest(value=client_ip.strip(), pepper=pepper)


def new_cookie_id() -> str:
    return str(uuid4())


def parse_cookie_id(raw_value: str | None) -> str | None:
    if raw_value is None:
        return None
    candidate = raw_value.strip()
    if not candidate:
        return None
    try:
        return str(UUID(candidate))
    except ValueError:
        return None


def resolve_identity(
    *,
    client_ip: str | None,
    cookie_value: str | None,
    user_agent: str | None,
    pepper: str,
    composite_enabled: bool = False,
) -> ClaimIdentity:
    """Return the ordered throttling keys for one request.

    Order is IP key, cookie key, then the optional composite device key. A
    missing or malformed cookie is replaced with a freshly minted id, which
    the caller must send back to the browser.
    """
    cookie_id = parse_cookie_id(cookie_value)
    cookie_issued = cookie_id is None
    if cookie_id is None:
        cookie_id = new_cookie_id()

    keys: list[str] = []
    ip_hash: str | None = None
    if client_ip:
        ip_hash = hash_client_ip(client_ip=client_ip, pepper=pepper)
        keys.append(f"{IP_KEY_PREFIX}{ip_hash}")

    keys.append(f"{COOKIE_KEY_PREFIX}{cookie_id}")

    if composite_enabled and ip_hash is not None:
        device = (user_agent or "").strip()
        fingerprint = f"{ip_hash}|{device}"
        keys.append(f"{DEVICE_KEY_PREFIX}{_peppered_digest(value=fingerprint, pepper=pepper)}")

    return ClaimIdentity(keys=tuple(keys), cookie_id=cookie_id, cookie_issued=cookie_issued)
