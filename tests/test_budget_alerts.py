from datetime import date
from decimal import Decimal

from wallet_api.crud import crud_account, crud_transaction, crud_user_settings
from wallet_api.db.core import AccountType, TransactionType
from wallet_api.models.account import AccountCreate
from wallet_api.models.transaction import TransactionCreate, TransactionCategory
from wallet_api.models.user_settings import AlertPeriodEnum, BudgetAlert, UserSettingsUpdate
from wallet_api.services.budget_alerts import check_budget_alerts, period_start
from tests.helpers import USER_ID, make_transaction


def test_period_start():
    wednesday = date(2024, 5, 15)
    assert period_start(AlertPeriodEnum.DAILY, wednesday) == wednesday
    assert period_start(AlertPeriodEnum.WEEKLY, wednesday) == date(2024, 5, 13)
    assert period_start(AlertPeriodEnum.MONTHLY, wednesday) == date(2024, 5, 1)
    assert period_start(AlertPeriodEnum.YEARLY, wednesday) == date(2024, 1, 1)


def test_alert_triggers_only_above_limit(db_session):
    account = crud_account.create_db_account(db_session, USER_ID, AccountCreate(
        name="Main", account_type=AccountType.BANK, balance=Decimal("500")))
    settings = crud_user_settings.update_user_settings(db_session, USER_ID, UserSettingsUpdate(
        budget_alerts=[
            BudgetAlert(category="Food", limit=Decimal("100"), period=AlertPeriodEnum.MONTHLY),
            BudgetAlert(category="Food", limit=Decimal("50"), period=AlertPeriodEnum.DAILY),
            BudgetAlert(category="Fuel", limit=Decimal("1"), period=AlertPeriodEnum.MONTHLY),
        ]
    ))

    def spend(amount, on):
        crud_transaction.create_db_transaction(db_session, USER_ID, TransactionCreate(
            transaction_type=TransactionType.EXPENSE,
            amount=Decimal(amount),
            account_id=account.id,
            category=TransactionCategory(name="Food"),
            transaction_date=on,
        ))

    spend("60", date(2024, 5, 2))
    spend("30", date(2024, 5, 20))
    assert check_budget_alerts(db_session, USER_ID, settings, "Food", today=date(2024, 5, 20)) == []

    spend("25", date(2024, 5, 20))
    triggered = check_budget_alerts(db_session, USER_ID, settings, "Food", today=date(2024, 5, 20))
    assert [(a.period, a.total) for a in triggered] == [
        (AlertPeriodEnum.MONTHLY, Decimal("115.00")),
        (AlertPeriodEnum.DAILY, Decimal("55.00")),
    ]
    assert triggered[0].period_start == date(2024, 5, 1)


def test_no_settings_means_no_alerts(db_session):
    assert check_budget_alerts(db_session, USER_ID, None, "Food") == []


def test_expense_response_carries_triggered_alerts(client, account):
    client.put("/user-settings/", json={"budgetAlerts": [{"category": "Food", "limit": "40", "period": "monthly"}]})

    first = make_transaction(client, account["id"], amount="30").json()
    assert first["budget_alerts"] == []

    second = make_transaction(client, account["id"], amount="20").json()
    assert len(second["budget_alerts"]) == 1
    alert = second["budget_alerts"][0]
    assert alert["category"] == "Food"
    assert Decimal(alert["total"]) == Decimal("50.00")

    income = make_transaction(client, account["id"], transaction_type="income", amount="5", category="Food").json()
    assert income["budget_alerts"] == []
