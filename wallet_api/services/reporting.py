"""
Reporting Service

Expense aggregations over calendar months: the trailing-window spending chart,
the per-month report and per-category spending trends.
"""
from sqlalchemy.orm import Session
from sqlalchemy import func, extract
from datetime import date
from decimal import Decimal
from typing import List, Optional, Dict, Tuple
import calendar

from wallet_api.db.core import AccountDB, TransactionDB, TransactionType
from wallet_api.models.report import (
    MonthlySpending,
    MonthlyReport,
    CategoryAmount,
    AccountBalance,
    SpendingTrend,
)


def _to_decimal(value) -> Decimal:
    if value is None:
        return Decimal('0.00')
    return round(Decimal(str(value)), 2)


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move a (year, month) pair by delta months"""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_window(months: int, today: Optional[date] = None) -> List[Tuple[int, int]]:
    """The last `months` calendar months ending with the current one, oldest first"""
    today = today or date.today()
    return [shift_month(today.year, today.month, -offset) for offset in range(months - 1, -1, -1)]


def _expense_totals_by_month(db: Session, user_id: str, start: date, end: date) -> Dict[Tuple[int, int], Decimal]:
    year_col = extract('year', TransactionDB.transaction_date)
    month_col = extract('month', TransactionDB.transaction_date)

    rows = db.query(
        year_col.label('year'),
        month_col.label('month'),
        func.sum(TransactionDB.amount).label('total')
    ).filter(
        TransactionDB.user_id == user_id,
        TransactionDB.transaction_type == TransactionType.EXPENSE,
        TransactionDB.transaction_date >= start,
        TransactionDB.transaction_date <= end
    ).group_by(year_col, month_col).all()

    return {(int(row.year), int(row.month)): _to_decimal(row.total) for row in rows}


def get_monthly_spending(db: Session, user_id: str, months: int = 6,
                         today: Optional[date] = None) -> List[MonthlySpending]:
    """
    Expense total per month for the trailing window, each next to the same
    calendar month one year earlier.

    A single grouped query covers the whole range, from the oldest comparison
    month to the end of the current month. Months with no expenses report 0.
    """
    if months < 1:
        raise ValueError("months must be at least 1")

    window = month_window(months, today)
    first_year, first_month = window[0]
    last_year, last_month = window[-1]

    range_start = date(first_year - 1, first_month, 1)
    range_end = date(last_year, last_month, calendar.monthrange(last_year, last_month)[1])

    totals = _expense_totals_by_month(db, user_id, range_start, range_end)
    zero = Decimal('0.00')

    return [
        MonthlySpending(
            date=calendar.month_abbr[month],
            year=year,
            month=month,
            amount=totals.get((year, month), zero),
            previous=totals.get((year - 1, month), zero),
        )
        for year, month in window
    ]


def generate_monthly_report(db: Session, user_id: str, year: int, month: int) -> MonthlyReport:
    """Income, expense and category totals for one calendar month plus current account balances"""
    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")

    start_date = date(year, month, 1)
    end_date = date(year, month, calendar.monthrange(year, month)[1])

    in_month = (
        TransactionDB.user_id == user_id,
        TransactionDB.transaction_date >= start_date,
        TransactionDB.transaction_date <= end_date,
    )

    type_totals = db.query(
        TransactionDB.transaction_type,
        func.sum(TransactionDB.amount)
    ).filter(*in_month).group_by(TransactionDB.transaction_type).all()
    totals = {transaction_type: _to_decimal(total) for transaction_type, total in type_totals}

    category_rows = db.query(
        TransactionDB.category_name,
        func.sum(TransactionDB.amount)
    ).filter(*in_month).group_by(TransactionDB.category_name).order_by(TransactionDB.category_name).all()

    accounts = db.query(AccountDB).filter(AccountDB.user_id == user_id).order_by(AccountDB.id).all()

    return MonthlyReport(
        user_id=user_id,
        year=year,
        month=month,
        total_income=totals.get(TransactionType.INCOME, Decimal('0.00')),
        total_expense=totals.get(TransactionType.EXPENSE, Decimal('0.00')),
        category_breakdown=[
            CategoryAmount(category=name, amount=_to_decimal(total)) for name, total in category_rows
        ],
        account_breakdown=[
            AccountBalance(account_id=account.id, name=account.name, balance=account.balance)
            for account in accounts
        ],
    )


def get_spending_trends(db: Session, user_id: str, months: int = 6,
                        today: Optional[date] = None) -> List[SpendingTrend]:
    """Expense totals grouped by (year, month, category) over the trailing window"""
    if months < 1:
        raise ValueError("months must be at least 1")

    first_year, first_month = month_window(months, today)[0]
    start_date = date(first_year, first_month, 1)

    year_col = extract('year', TransactionDB.transaction_date)
    month_col = extract('month', TransactionDB.transaction_date)

    rows = db.query(
        year_col.label('year'),
        month_col.label('month'),
        TransactionDB.category_name.label('category'),
        func.sum(TransactionDB.amount).label('total')
    ).filter(
        TransactionDB.user_id == user_id,
        TransactionDB.transaction_type == TransactionType.EXPENSE,
        TransactionDB.transaction_date >= start_date
    ).group_by(year_col, month_col, TransactionDB.category_name).all()

    trends = [
        SpendingTrend(year=int(row.year), month=int(row.month), category=row.category, total=_to_decimal(row.total))
        for row in rows
    ]
    trends.sort(key=lambda trend: (trend.year, trend.month, trend.category))
    return trends
