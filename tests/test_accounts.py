from decimal import Decimal

from tests.helpers import make_transaction


def test_create_account(client):
    res = client.post("/accounts/", json={"name": "  Savings ", "type": "bank", "balance": "250.5", "currency": "eur"})
    assert res.status_code == 201
    body = res.json()
    assert body["name"] == "Savings"
    assert body["type"] == "bank"
    assert body["currency"] == "EUR"
    assert Decimal(body["balance"]) == Decimal("250.50")
    assert body["user_id"] == "user_123"


def test_duplicate_account_name_rejected(client, account):
    res = client.post("/accounts/", json={"name": "Checking", "type": "cash"})
    assert res.status_code == 400
    assert "already exists" in res.json()["error"]


def test_invalid_account_type_is_bad_request(client):
    res = client.post("/accounts/", json={"name": "Piggy", "type": "piggy_bank"})
    assert res.status_code == 400
    assert "error" in res.json()


def test_accounts_are_scoped_to_owner(client, other_client, account):
    assert [a["id"] for a in client.get("/accounts/").json()] == [account["id"]]
    assert other_client.get("/accounts/").json() == []
    assert other_client.get(f"/accounts/{account['id']}").status_code == 404


def test_filter_accounts_by_type(client, account):
    client.post("/accounts/", json={"name": "M-Pesa", "type": "mobile_money"})
    res = client.get("/accounts/", params={"account_type": "mobile_money"})
    assert [a["name"] for a in res.json()] == ["M-Pesa"]


def test_update_account_does_not_touch_balance(client, account):
    res = client.put("/accounts/", json={"id": account["id"], "name": "Everyday", "balance": "9999"})
    assert res.status_code == 200
    body = res.json()
    assert body["name"] == "Everyday"
    assert Decimal(body["balance"]) == Decimal("100.00")


def test_update_missing_account(client):
    res = client.put("/accounts/", json={"id": 999, "name": "Ghost"})
    assert res.status_code == 404


def test_delete_account(client, account):
    res = client.request("DELETE", "/accounts/", json={"id": account["id"]})
    assert res.status_code == 200
    assert client.get(f"/accounts/{account['id']}").status_code == 404


def test_delete_account_in_use_is_conflict(client, account):
    make_transaction(client, account["id"])
    res = client.request("DELETE", "/accounts/", json={"id": account["id"]})
    assert res.status_code == 409
    assert client.get(f"/accounts/{account['id']}").status_code == 200


def test_account_summary(client, account):
    client.post("/accounts/", json={"name": "Cash", "type": "cash", "balance": "20.25"})
    client.post("/accounts/", json={"name": "Euro", "type": "bank", "balance": "10", "currency": "EUR"})

    summary = client.get("/accounts/summary").json()
    assert summary["total_accounts"] == 3
    assert summary["accounts_by_type"] == {"bank": 2, "cash": 1}
    assert Decimal(summary["balance_by_currency"]["USD"]) == Decimal("120.25")
    assert Decimal(summary["balance_by_currency"]["EUR"]) == Decimal("10.00")
