from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from wallet_api.db.core import TransactionDB, TransactionType, UserSettingsDB
from wallet_api.models.user_settings import AlertPeriodEnum, BudgetAlert, TriggeredBudgetAlert
from wallet_api.services.notifications import send_budget_alert


def period_start(period: AlertPeriodEnum, today: Optional[date] = None) -> date:
    """First day of the alert period containing today (weeks start on Monday)"""
    today = today or date.today()
    if period == AlertPeriodEnum.DAILY:
        return today
    if period == AlertPeriodEnum.WEEKLY:
        return today - timedelta(days=today.weekday())
    if period == AlertPeriodEnum.MONTHLY:
        return today.replace(day=1)
    return date(today.year, 1, 1)


def category_spending_since(db: Session, user_id: str, category_name: str, start_date: date) -> Decimal:
    total = db.query(func.sum(TransactionDB.amount)).filter(
        TransactionDB.user_id == user_id,
        TransactionDB.transaction_type == TransactionType.EXPENSE,
        TransactionDB.category_name == category_name,
        TransactionDB.transaction_date >= start_date
    ).scalar()
    return round(Decimal(str(total or 0)), 2)


def check_budget_alerts(db: Session, user_id: str, settings: Optional[UserSettingsDB], category_name: str,
                        today: Optional[date] = None) -> List[TriggeredBudgetAlert]:
    """
    Evaluate the user's alert thresholds for one category.

    Each alert configured for the category sums the user's expenses in that
    category since the start of the alert's period. Alerts whose total exceeds
    the limit are sent through the notifications service and returned.
    """
    if not settings or not settings.budget_alerts:
        return []

    triggered = []
    for raw_alert in settings.budget_alerts:
        alert = BudgetAlert.model_validate(raw_alert)
        if alert.category != category_name:
            continue

        start_date = period_start(alert.period, today)
        total = category_spending_since(db, user_id, category_name, start_date)

        if total > alert.limit:
            send_budget_alert(user_id, category_name, total, alert.limit)
            triggered.append(TriggeredBudgetAlert(
                category=alert.category,
                limit=alert.limit,
                period=alert.period,
                total=total,
                period_start=start_date,
            ))

    return triggered
