from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import IntegrityError
from sqlalchemy import desc
from typing import Optional, List
from datetime import date
from decimal import Decimal
import calendar

from wallet_api.db.core import BudgetDB, AccountDB, TransactionDB, NotFoundError, utcnow
from wallet_api.models.budget import BudgetCreate, BudgetUpdate
from wallet_api.logging_config import get_logger

logger = get_logger(__name__)


# ===== UTILITY FUNCTIONS =====

def month_bounds(year: int, month: int) -> tuple:
    """First and last day of a calendar month"""
    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def annotate_budget(budget: BudgetDB, today: Optional[date] = None) -> BudgetDB:
    """Attach derived progress fields used by the budget response"""
    today = today or date.today()
    current = budget.current_amount or Decimal("0.00")
    budget.remaining_amount = budget.amount - current
    if budget.amount > 0:
        budget.percentage_used = float(current / budget.amount * 100)
    else:
        budget.percentage_used = 0.0
    budget.is_active = budget.start_date <= today <= budget.end_date
    return budget


def _get_owned_account(db: Session, account_id: int, user_id: str) -> AccountDB:
    account = db.query(AccountDB).filter(
        AccountDB.id == account_id,
        AccountDB.user_id == user_id
    ).first()
    if not account:
        raise NotFoundError(f"Account with id {account_id} not found")
    return account


# ===== DATABASE OPERATIONS =====

def create_db_budget(db: Session, user_id: str, budget_data: BudgetCreate) -> BudgetDB:
    """Create a new budget with an empty running total"""

    _get_owned_account(db, budget_data.account_id, user_id)

    db_budget = BudgetDB(
        user_id=user_id,
        name=budget_data.name,
        amount=budget_data.amount,
        current_amount=Decimal("0.00"),
        period=budget_data.period,
        start_date=budget_data.start_date,
        end_date=budget_data.end_date,
        account_id=budget_data.account_id,
    )

    try:
        db.add(db_budget)
        db.commit()
        db.refresh(db_budget)
        return annotate_budget(db_budget)
    except IntegrityError:
        db.rollback()
        raise ValueError("Budget creation failed due to database constraint")


def read_db_budget(db: Session, budget_id: int, user_id: str) -> Optional[BudgetDB]:
    """Read one of the user's budgets by ID"""

    budget = db.query(BudgetDB).filter(
        BudgetDB.id == budget_id,
        BudgetDB.user_id == user_id
    ).options(joinedload(BudgetDB.account)).first()

    return annotate_budget(budget) if budget else None


def read_db_budgets(db: Session, user_id: str, month: Optional[int] = None, year: Optional[int] = None,
                    active_only: bool = False, skip: int = 0, limit: int = 100) -> List[BudgetDB]:
    """Read budgets for a user, optionally only those overlapping a calendar month"""

    query = db.query(BudgetDB).filter(BudgetDB.user_id == user_id)

    if month and year:
        period_start, period_end = month_bounds(year, month)
        query = query.filter(
            BudgetDB.start_date <= period_end,
            BudgetDB.end_date >= period_start
        )

    if active_only:
        current_date = date.today()
        query = query.filter(
            BudgetDB.start_date <= current_date,
            BudgetDB.end_date >= current_date
        )

    query = query.order_by(desc(BudgetDB.start_date), BudgetDB.id)
    budgets = query.options(joinedload(BudgetDB.account)).offset(skip).limit(limit).all()

    return [annotate_budget(budget) for budget in budgets]


def update_db_budget(db: Session, user_id: str, budget_updates: BudgetUpdate) -> BudgetDB:
    """Update an existing budget. The running total is owned by transactions."""

    db_budget = db.query(BudgetDB).filter(
        BudgetDB.id == budget_updates.id,
        BudgetDB.user_id == user_id
    ).first()

    if not db_budget:
        raise NotFoundError(f"Budget with id {budget_updates.id} not found")

    update_data = budget_updates.model_dump(exclude_unset=True, exclude={"id"})
    update_data = {field: value for field, value in update_data.items() if value is not None}

    if "account_id" in update_data:
        _get_owned_account(db, update_data["account_id"], user_id)

    start_date = update_data.get("start_date", db_budget.start_date)
    end_date = update_data.get("end_date", db_budget.end_date)
    if end_date <= start_date:
        raise ValueError("end_date must be after start_date")

    for field, value in update_data.items():
        setattr(db_budget, field, value)

    db_budget.updated_at = utcnow()

    try:
        db.commit()
        db.refresh(db_budget)
        return annotate_budget(db_budget)
    except IntegrityError:
        db.rollback()
        raise ValueError("Budget update failed due to database constraint")


def delete_db_budget(db: Session, budget_id: int, user_id: str) -> bool:
    """Delete a budget and detach the transactions that counted toward it"""

    db_budget = db.query(BudgetDB).filter(
        BudgetDB.id == budget_id,
        BudgetDB.user_id == user_id
    ).first()

    if not db_budget:
        raise NotFoundError(f"Budget with id {budget_id} not found")

    try:
        detached = db.query(TransactionDB).filter(
            TransactionDB.budget_id == budget_id,
            TransactionDB.user_id == user_id
        ).update({"budget_id": None}, synchronize_session=False)

        db.delete(db_budget)
        db.commit()
        logger.info(f"Deleted budget {budget_id}, detached {detached} transactions")
        return True
    except Exception:
        db.rollback()
        raise


def count_active_budgets(db: Session, user_id: str, on_date: date) -> int:
    """Count budgets whose date range contains the given day"""
    return db.query(BudgetDB).filter(
        BudgetDB.user_id == user_id,
        BudgetDB.start_date <= on_date,
        BudgetDB.end_date >= on_date
    ).count()
