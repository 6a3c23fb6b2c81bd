from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import date
from decimal import Decimal
from typing import Optional
import calendar

from wallet_api.db.core import AccountDB, TransactionDB, TransactionType
from wallet_api.crud.crud_budget import count_active_budgets
from wallet_api.crud.crud_transaction import get_transactions_count
from wallet_api.models.report import DashboardStats


def get_dashboard_stats(db: Session, user_id: str, today: Optional[date] = None) -> DashboardStats:
    """Current-month income and expense plus record counts for the dashboard"""
    today = today or date.today()
    start_of_month = date(today.year, today.month, 1)
    end_of_month = date(today.year, today.month, calendar.monthrange(today.year, today.month)[1])

    monthly_totals = db.query(
        TransactionDB.transaction_type,
        func.sum(TransactionDB.amount)
    ).filter(
        TransactionDB.user_id == user_id,
        TransactionDB.transaction_date >= start_of_month,
        TransactionDB.transaction_date <= end_of_month
    ).group_by(TransactionDB.transaction_type).all()

    totals = {transaction_type: round(Decimal(str(total or 0)), 2) for transaction_type, total in monthly_totals}
    income = totals.get(TransactionType.INCOME, Decimal('0.00'))
    expense = totals.get(TransactionType.EXPENSE, Decimal('0.00'))

    return DashboardStats(
        income=income,
        expense=expense,
        balance=income - expense,
        accounts_count=db.query(AccountDB).filter(AccountDB.user_id == user_id).count(),
        budgets_count=count_active_budgets(db, user_id, today),
        transactions_count=get_transactions_count(db, user_id),
    )
