import pytest
from fastapi.testclient import TestClient

from wallet_api.main import app


@pytest.mark.parametrize("path", [
    "/accounts/",
    "/budgets/",
    "/categories/",
    "/transactions/",
    "/transactions/export",
    "/user-settings/",
    "/reports/monthly",
    "/stats/",
])
def test_missing_identity_is_unauthorized(client, path):
    anonymous = TestClient(app)
    res = anonymous.get(path)
    assert res.status_code == 401
    assert res.json() == {"error": "Unauthorized"}


def test_blank_identity_is_unauthorized(client):
    anonymous = TestClient(app, headers={"X-User-Id": "   "})
    res = anonymous.post("/accounts/", json={"name": "Cash", "type": "cash"})
    assert res.status_code == 401
    assert "error" in res.json()


def test_unauthorized_request_does_not_write(client):
    anonymous = TestClient(app)
    res = anonymous.post("/accounts/", json={"name": "Cash", "type": "cash"})
    assert res.status_code == 401
    assert client.get("/accounts/").json() == []


def test_health_check_is_public(client):
    res = TestClient(app).get("/")
    assert res.status_code == 200
