from datetime import date, timedelta
from decimal import Decimal

import pytest

from tests.helpers import make_transaction


def test_create_budget_starts_empty(client, budget, account):
    assert Decimal(budget["current_amount"]) == Decimal("0")
    assert Decimal(budget["remaining_amount"]) == Decimal("500")
    assert budget["percentage_used"] == 0.0
    assert budget["is_active"] is True
    assert budget["account"] == {"id": account["id"], "name": "Checking", "type": "bank"}


def test_budget_end_date_must_follow_start(client, account):
    res = client.post("/budgets/", json={
        "name": "Backwards",
        "amount": "100",
        "start_date": "2024-05-31",
        "end_date": "2024-05-01",
        "account_id": account["id"],
    })
    assert res.status_code == 400
    assert "end_date" in res.json()["error"]


@pytest.mark.parametrize("amount", ["0", "0.001"])
def test_budget_amount_must_be_positive(client, account, amount):
    res = client.post("/budgets/", json={
        "name": "Nothing",
        "amount": amount,
        "start_date": "2024-05-01",
        "end_date": "2024-05-31",
        "account_id": account["id"],
    })
    assert res.status_code == 400


def test_budget_requires_owned_account(client, other_client, account):
    res = other_client.post("/budgets/", json={
        "name": "Not mine",
        "amount": "100",
        "start_date": "2024-05-01",
        "end_date": "2024-05-31",
        "account_id": account["id"],
    })
    assert res.status_code == 404


def test_filter_budgets_by_month(client, account, budget):
    client.post("/budgets/", json={
        "name": "January 2020",
        "amount": "100",
        "start_date": "2020-01-01",
        "end_date": "2020-01-31",
        "account_id": account["id"],
    })

    january = client.get("/budgets/", params={"month": 1, "year": 2020}).json()
    assert [b["name"] for b in january] == ["January 2020"]
    assert client.get("/budgets/", params={"month": 3, "year": 2020}).json() == []

    active = client.get("/budgets/", params={"active_only": True}).json()
    assert [b["id"] for b in active] == [budget["id"]]


def test_update_budget_keeps_running_total(client, account, budget):
    make_transaction(client, account["id"], amount="50.00", budget_id=budget["id"])

    res = client.put("/budgets/", json={"id": budget["id"], "amount": "200", "current_amount": "0"})
    assert res.status_code == 200
    body = res.json()
    assert Decimal(body["amount"]) == Decimal("200")
    assert Decimal(body["current_amount"]) == Decimal("50")
    assert body["percentage_used"] == 25.0


def test_update_budget_rejects_inverted_dates(client, budget):
    today = date.today()
    res = client.put("/budgets/", json={"id": budget["id"], "end_date": (today - timedelta(days=30)).isoformat()})
    assert res.status_code == 400


def test_delete_budget_detaches_transactions(client, account, budget):
    tx = make_transaction(client, account["id"], amount="40.00", budget_id=budget["id"]).json()

    res = client.request("DELETE", "/budgets/", json={"id": budget["id"]})
    assert res.status_code == 200
    assert client.get(f"/budgets/{budget['id']}").status_code == 404

    kept = client.get(f"/transactions/{tx['id']}").json()
    assert kept["budget_id"] is None
    assert Decimal(client.get(f"/accounts/{account['id']}").json()["balance"]) == Decimal("60.00")

    # Deleting the transaction afterwards only reverses the account effect
    client.request("DELETE", "/transactions/", json={"id": tx["id"]})
    assert Decimal(client.get(f"/accounts/{account['id']}").json()["balance"]) == Decimal("100.00")


def test_delete_missing_budget(client):
    res = client.request("DELETE", "/budgets/", json={"id": 12345})
    assert res.status_code == 404
    assert "error" in res.json()
