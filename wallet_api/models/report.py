from pydantic import BaseModel
from typing import List
from decimal import Decimal

# ===== REPORTING PYDANTIC MODELS =====

class MonthlySpending(BaseModel):
    """Expense total for one calendar month next to the same month a year earlier"""
    date: str  # short month label, e.g. "Jan"
    year: int
    month: int
    amount: Decimal
    previous: Decimal


class CategoryAmount(BaseModel):
    category: str
    amount: Decimal


class AccountBalance(BaseModel):
    account_id: int
    name: str
    balance: Decimal


class MonthlyReport(BaseModel):
    user_id: str
    year: int
    month: int
    total_income: Decimal
    total_expense: Decimal
    category_breakdown: List[CategoryAmount]
    account_breakdown: List[AccountBalance]


class SpendingTrend(BaseModel):
    year: int
    month: int
    category: str
    total: Decimal


class DashboardStats(BaseModel):
    income: Decimal
    expense: Decimal
    balance: Decimal
    accounts_count: int
    budgets_count: int
    transactions_count: int
