from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from wallet_api.crud import crud_transaction
from wallet_api.routers import transactions as transactions_router
from tests.helpers import make_transaction


def balance_of(client, account_id):
    return Decimal(client.get(f"/accounts/{account_id}").json()["balance"])


def current_amount_of(client, budget_id):
    return Decimal(client.get(f"/budgets/{budget_id}").json()["current_amount"])


def test_expense_then_delete_restores_balance(client, account):
    res = make_transaction(client, account["id"], amount="30.00")
    assert res.status_code == 201
    assert balance_of(client, account["id"]) == Decimal("70.00")

    res = client.request("DELETE", "/transactions/", json={"id": res.json()["id"]})
    assert res.status_code == 200
    assert balance_of(client, account["id"]) == Decimal("100.00")


def test_income_increases_balance(client, account):
    make_transaction(client, account["id"], transaction_type="income", amount="45.50", category="Salary")
    assert balance_of(client, account["id"]) == Decimal("145.50")


def test_budget_running_total_follows_signed_amounts(client, account, budget):
    make_transaction(client, account["id"], amount="120", budget_id=budget["id"])
    assert current_amount_of(client, budget["id"]) == Decimal("120")

    make_transaction(client, account["id"], transaction_type="income", amount="20", budget_id=budget["id"])
    assert current_amount_of(client, budget["id"]) == Decimal("100")
    assert balance_of(client, account["id"]) == Decimal("0.00")


def test_create_then_delete_restores_budget(client, account, budget):
    tx = make_transaction(client, account["id"], amount="75.25", budget_id=budget["id"]).json()
    client.request("DELETE", "/transactions/", json={"id": tx["id"]})
    assert current_amount_of(client, budget["id"]) == Decimal("0")
    assert balance_of(client, account["id"]) == Decimal("100.00")


def test_response_shape(client, account, budget):
    res = make_transaction(client, account["id"], amount="12.5", budget_id=budget["id"],
                           category="Food", description="Lunch", notes="with team")
    body = res.json()
    assert body["type"] == "expense"
    assert Decimal(body["amount"]) == Decimal("12.50")
    assert body["date"] == date.today().isoformat()
    assert body["category"] == {"name": "Food", "type": "expense", "sub_category": None}
    assert body["account"]["name"] == "Checking"
    assert body["budget"]["id"] == budget["id"]
    assert body["status"] == "completed"
    assert body["budget_alerts"] == []


def test_category_type_follows_transaction_type(client, account):
    res = client.post("/transactions/", json={
        "type": "income",
        "amount": "10",
        "account_id": account["id"],
        "category": {"name": "Gift", "type": "expense", "subCategory": "Birthday"},
    })
    assert res.status_code == 201
    assert res.json()["category"] == {"name": "Gift", "type": "income", "sub_category": "Birthday"}


def test_unknown_account_rejected_without_writes(client, account):
    res = make_transaction(client, 999)
    assert res.status_code == 404
    assert "error" in res.json()
    assert client.get("/transactions/").json() == []


def test_foreign_account_rejected(client, other_client, account):
    res = make_transaction(other_client, account["id"])
    assert res.status_code == 404
    assert balance_of(client, account["id"]) == Decimal("100.00")


def test_unknown_budget_rejected_without_writes(client, account):
    res = make_transaction(client, account["id"], budget_id=4242)
    assert res.status_code == 404
    assert balance_of(client, account["id"]) == Decimal("100.00")
    assert client.get("/transactions/").json() == []


@pytest.mark.parametrize("amount", ["0", "-5", "0.001"])
def test_amount_must_be_positive(client, account, amount):
    res = make_transaction(client, account["id"], amount=amount)
    assert res.status_code == 400


def test_failure_mid_create_rolls_back_everything(client, account, budget, monkeypatch):
    def failing_account_effect(*args, **kwargs):
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(crud_transaction, "_apply_account_effect", failing_account_effect)

    res = make_transaction(client, account["id"], amount="30", budget_id=budget["id"])
    assert res.status_code == 500
    assert res.json() == {"error": "Failed to create transaction"}

    monkeypatch.undo()
    assert client.get("/transactions/").json() == []
    assert current_amount_of(client, budget["id"]) == Decimal("0")
    assert balance_of(client, account["id"]) == Decimal("100.00")


def test_failure_mid_delete_rolls_back_everything(client, account, budget, monkeypatch):
    tx = make_transaction(client, account["id"], amount="30", budget_id=budget["id"]).json()

    def failing_account_effect(*args, **kwargs):
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(crud_transaction, "_apply_account_effect", failing_account_effect)
    res = client.request("DELETE", "/transactions/", json={"id": tx["id"]})
    assert res.status_code == 500

    monkeypatch.undo()
    assert client.get(f"/transactions/{tx['id']}").status_code == 200
    assert current_amount_of(client, budget["id"]) == Decimal("30")
    assert balance_of(client, account["id"]) == Decimal("70.00")


def test_delete_missing_transaction(client, account):
    make_transaction(client, account["id"])
    res = client.request("DELETE", "/transactions/", json={"id": 999})
    assert res.status_code == 404
    assert balance_of(client, account["id"]) == Decimal("70.00")


def test_delete_other_users_transaction(client, other_client, account):
    tx = make_transaction(client, account["id"]).json()
    res = other_client.request("DELETE", "/transactions/", json={"id": tx["id"]})
    assert res.status_code == 404
    assert client.get(f"/transactions/{tx['id']}").status_code == 200


def test_update_amount_and_type(client, account, budget):
    tx = make_transaction(client, account["id"], amount="30", budget_id=budget["id"]).json()

    res = client.put("/transactions/", json={"id": tx["id"], "amount": "50"})
    assert res.status_code == 200
    assert balance_of(client, account["id"]) == Decimal("50.00")
    assert current_amount_of(client, budget["id"]) == Decimal("50")

    res = client.put("/transactions/", json={"id": tx["id"], "type": "income"})
    assert res.json()["category"]["type"] == "income"
    assert balance_of(client, account["id"]) == Decimal("150.00")
    assert current_amount_of(client, budget["id"]) == Decimal("-50")


def test_update_moves_between_accounts_and_budgets(client, account, budget):
    savings = client.post("/accounts/", json={"name": "Savings", "type": "bank", "balance": "10"}).json()
    tx = make_transaction(client, account["id"], amount="30", budget_id=budget["id"]).json()

    res = client.put("/transactions/", json={"id": tx["id"], "account_id": savings["id"], "budget_id": None})
    assert res.status_code == 200
    assert res.json()["budget_id"] is None
    assert balance_of(client, account["id"]) == Decimal("100.00")
    assert balance_of(client, savings["id"]) == Decimal("-20.00")
    assert current_amount_of(client, budget["id"]) == Decimal("0")


def test_update_rejects_unknown_account(client, account):
    tx = make_transaction(client, account["id"], amount="30").json()
    res = client.put("/transactions/", json={"id": tx["id"], "account_id": 999, "amount": "80"})
    assert res.status_code == 404
    assert balance_of(client, account["id"]) == Decimal("70.00")


def test_list_is_newest_first_with_filters(client, account, budget):
    today = date.today()
    old = make_transaction(client, account["id"], amount="5", on=today - timedelta(days=40), category="Rent").json()
    mid = make_transaction(client, account["id"], transaction_type="income", amount="50",
                           on=today - timedelta(days=3), category="Salary").json()
    new = make_transaction(client, account["id"], amount="7", budget_id=budget["id"], on=today).json()

    ids = [t["id"] for t in client.get("/transactions/").json()]
    assert ids == [new["id"], mid["id"], old["id"]]

    assert [t["id"] for t in client.get("/transactions/", params={"type": "income"}).json()] == [mid["id"]]
    assert len(client.get("/transactions/", params={"type": "all"}).json()) == 3
    assert [t["id"] for t in client.get("/transactions/", params={"category.name": "Rent"}).json()] == [old["id"]]
    assert [t["id"] for t in client.get("/transactions/", params={"category": "Rent"}).json()] == [old["id"]]
    assert [t["id"] for t in client.get("/transactions/", params={"budget_id": budget["id"]}).json()] == [new["id"]]
    assert len(client.get("/transactions/", params={"account_id": "all-accounts"}).json()) == 3
    assert len(client.get("/transactions/", params={"account_id": account["id"]}).json()) == 3

    window = client.get("/transactions/", params={
        "start_date": (today - timedelta(days=3)).isoformat(),
        "end_date": today.isoformat(),
    }).json()
    assert [t["id"] for t in window] == [new["id"], mid["id"]]

    page = client.get("/transactions/", params={"skip": 1, "limit": 1}).json()
    assert [t["id"] for t in page] == [mid["id"]]


def test_list_rejects_bad_filters(client):
    assert client.get("/transactions/", params={"type": "transfer"}).status_code == 400
    assert client.get("/transactions/", params={"account_id": "abc"}).status_code == 400


def test_update_rejects_amount_that_rounds_to_zero(client, account):
    tx = make_transaction(client, account["id"], amount="10").json()
    res = client.put("/transactions/", json={"id": tx["id"], "amount": "0.004"})
    assert res.status_code == 400
    assert balance_of(client, account["id"]) == Decimal("90.00")


def test_alert_check_failure_keeps_committed_expense(client, account, monkeypatch):
    def failing_alert_check(*args, **kwargs):
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(transactions_router, "check_budget_alerts", failing_alert_check)

    res = make_transaction(client, account["id"], amount="30")
    assert res.status_code == 201
    assert res.json()["budget_alerts"] == []

    monkeypatch.undo()
    assert len(client.get("/transactions/").json()) == 1
    assert balance_of(client, account["id"]) == Decimal("70.00")
