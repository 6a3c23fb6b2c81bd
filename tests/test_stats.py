from datetime import date, timedelta
from decimal import Decimal

from wallet_api.services.stats import get_dashboard_stats
from tests.helpers import USER_ID, make_transaction


def test_stats_for_empty_user(client):
    body = client.get("/stats/").json()
    assert Decimal(body["income"]) == 0
    assert Decimal(body["expense"]) == 0
    assert Decimal(body["balance"]) == 0
    assert body["accounts_count"] == 0
    assert body["budgets_count"] == 0
    assert body["transactions_count"] == 0


def test_balance_is_income_minus_expense(client, account, budget):
    today = date.today()
    make_transaction(client, account["id"], transaction_type="income", amount="300.00", category="Salary")
    make_transaction(client, account["id"], amount="45.10")
    make_transaction(client, account["id"], amount="4.90", budget_id=budget["id"])
    # Outside the current month: counted in transactions_count only
    make_transaction(client, account["id"], amount="1000.00", on=today.replace(day=1) - timedelta(days=1))

    body = client.get("/stats/").json()
    assert Decimal(body["income"]) == Decimal("300.00")
    assert Decimal(body["expense"]) == Decimal("50.00")
    assert Decimal(body["balance"]) == Decimal(body["income"]) - Decimal(body["expense"])
    assert body["accounts_count"] == 1
    assert body["budgets_count"] == 1
    assert body["transactions_count"] == 4


def test_only_active_budgets_are_counted(client, account, db_session):
    client.post("/budgets/", json={
        "name": "Old",
        "amount": "100",
        "start_date": "2020-01-01",
        "end_date": "2020-01-31",
        "account_id": account["id"],
    })
    stats = get_dashboard_stats(db_session, USER_ID)
    assert stats.budgets_count == 0
    assert stats.accounts_count == 1
