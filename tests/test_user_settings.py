from wallet_api.db.core import UserSettingsDB
from tests.helpers import USER_ID


def test_settings_created_lazily(client, db_session):
    assert db_session.query(UserSettingsDB).count() == 0

    res = client.get("/user-settings/")
    assert res.status_code == 200
    assert res.json() == {"user_id": USER_ID, "currency": "USD", "language": "en", "budget_alerts": []}
    assert db_session.query(UserSettingsDB).count() == 1

    client.get("/user-settings/")
    assert db_session.query(UserSettingsDB).count() == 1


def test_update_settings(client):
    res = client.put("/user-settings/", json={
        "currency": "kes",
        "budgetAlerts": [{"category": "Food", "limit": "200", "period": "weekly"}],
    })
    assert res.status_code == 200
    body = res.json()
    assert body["currency"] == "KES"
    assert body["language"] == "en"
    assert body["budget_alerts"][0]["category"] == "Food"
    assert body["budget_alerts"][0]["period"] == "weekly"

    assert client.get("/user-settings/").json()["currency"] == "KES"


def test_invalid_settings_rejected(client):
    assert client.put("/user-settings/", json={"currency": "US1"}).status_code == 400
    assert client.put("/user-settings/", json={
        "budget_alerts": [{"category": "Food", "limit": "-1"}]
    }).status_code == 400


def test_settings_are_per_user(client, other_client):
    client.put("/user-settings/", json={"language": "fr"})
    assert other_client.get("/user-settings/").json()["language"] == "en"
