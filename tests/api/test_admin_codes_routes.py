from __future__ import annotations

from types import SimpleNamespace

from fastapi.testclient import TestClient

from coupon_drop.api.routes import admin_codes
from coupon_drop.main import app


def _settings(*, admin_api_token: str = "", app_env: str = "test") -> SimpleNamespace:
    return SimpleNamespace(admin_api_token=admin_api_token, app_env=app_env)


def test_add_code_creates_available_code() -> None:
    client = TestClient(app)
    response = client.post("/api/codes", json={"code": "WELCOME5"})

    assert response.status_code == 201
    payload = response.json()
    assert payload["success"] is True
    assert payload["coupon"]["value"] == "WELCOME5"
    assert payload["coupon"]["status"] == "AVAILABLE"


def test_add_code_rejects_duplicate() -> None:
    client = TestClient(app)
    assert client.post("/api/codes", json={"code": "WELCOME5"}).status_code == 201

    response = client.post("/api/codes", json={"code": "WELCOME5"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Coupon code already exists"}


def test_add_code_rejects_non_string_and_blank_values() -> None:
    client = TestClient(app)

    non_string = client.post("/api/codes", json={"code": 123})
    blank = client.post("/api/codes", json={"code": "   "})
    missing = client.post("/api/codes", json={})

    assert non_string.status_code == 400
    assert non_string.json()["message"].startswith("Invalid request payload")
    assert blank.status_code == 400
    assert blank.json()["success"] is False
    assert missing.status_code == 400


def test_bulk_add_reports_added_and_skipped(insert_codes) -> None:
    insert_codes("OLD")

    client = TestClient(app)
    response = client.post("/api/codes/bulk", json={"codes": ["NEW1", "OLD", "NEW2"]})

    assert response.status_code == 201
    payload = response.json()
    assert payload["added"] == ["NEW1", "NEW2"]
    assert payload["skipped"] == ["OLD"]


def test_bulk_add_rejects_payload_that_is_not_a_list_of_strings() -> None:
    client = TestClient(app)

    for body in ({"codes": "abc"}, {"codes": [1, 2]}, {}):
        response = client.post("/api/codes/bulk", json=body)

        assert response.status_code == 400
        payload = response.json()
        assert payload["success"] is False
        assert payload["message"].startswith("Invalid request payload")

    assert client.get("/api/codes/stats").json()["total"] == 0


def test_stats_reflect_claims(insert_codes) -> None:
    insert_codes("A", "B")

    client = TestClient(app)
    assert client.get("/api/claim-coupon").status_code == 200
    response = client.get("/api/codes/stats")

    assert response.status_code == 200
    payload = response.json()
    assert (payload["total"], payload["available"], payload["claimed"]) == (2, 1, 1)


def test_admin_routes_require_token_when_configured(monkeypatch) -> None:
    monkeypatch.setattr(admin_codes, "get_settings", lambda: _settings(admin_api_token="admin-secret"))

    client = TestClient(app)
    rejected = client.post("/api/codes", json={"code": "WELCOME5"})
    wrong = client.get("/api/codes/stats", headers={"X-Admin-Token": "nope"})
    accepted = client.post(
        "/api/codes",
        json={"code": "WELCOME5"},
        headers={"X-Admin-Token": "admin-secret"},
    )

    assert rejected.status_code == 403
    assert rejected.json() == {"success": False, "message": "Forbidden"}
    assert wrong.status_code == 403
    assert accepted.status_code == 201


def test_cooldown_reset_unblocks_visitor(insert_codes) -> None:
    insert_codes("A", "B")

    client = TestClient(app)
    assert client.get("/api/claim-coupon").status_code == 200
    assert client.get("/api/claim-coupon").status_code == 429

    reset = client.delete("/api/cooldowns")

    assert reset.status_code == 200
    assert reset.json()["deleted"] >= 1
    assert client.get("/api/claim-coupon").status_code == 200


def test_cooldown_reset_is_disabled_in_production(monkeypatch) -> None:
    monkeypatch.setattr(admin_codes, "get_settings", lambda: _settings(app_env="prod"))

    client = TestClient(app)
    response = client.delete("/api/cooldowns")

    assert response.status_code == 403
    assert response.json()["success"] is False
