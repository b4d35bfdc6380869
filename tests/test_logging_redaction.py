from __future__ import annotations

from coupon_drop.core.logging import drop_raw_identity_fields


def test_raw_visitor_signals_are_redacted() -> None:
    event = {
        "event": "claim_blocked",
        "client_ip": "203.0.113.7",
        "user_agent": "Mozilla/5.0",
        "audit_key": "ip:abc123",
    }

    result = drop_raw_identity_fields(None, "info", event)

    assert result["client_ip"] == "[redacted]"
    assert result["user_agent"] == "[redacted]"
    assert result["audit_key"] == "ip:abc123"
