from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import desc
from typing import Optional, List
from decimal import Decimal

from wallet_api.db.core import TransactionDB, AccountDB, BudgetDB, NotFoundError, TransactionType, utcnow
from wallet_api.models.transaction import TransactionCreate, TransactionUpdate, TransactionFilter
from wallet_api.logging_config import get_logger

logger = get_logger(__name__)


# ===== BALANCE RULES =====

def account_effect(transaction_type: TransactionType, amount: Decimal) -> Decimal:
    """Signed change a transaction makes to its account balance"""
    return amount if transaction_type == TransactionType.INCOME else -amount


def budget_effect(transaction_type: TransactionType, amount: Decimal) -> Decimal:
    """Signed change a transaction makes to its budget's running total"""
    return amount if transaction_type == TransactionType.EXPENSE else -amount


def _get_owned_account(db: Session, account_id: int, user_id: str) -> AccountDB:
    account = db.query(AccountDB).filter(
        AccountDB.id == account_id,
        AccountDB.user_id == user_id
    ).first()
    if not account:
        raise NotFoundError(f"Account with id {account_id} not found")
    return account


def _get_owned_budget(db: Session, budget_id: int, user_id: str) -> BudgetDB:
    budget = db.query(BudgetDB).filter(
        BudgetDB.id == budget_id,
        BudgetDB.user_id == user_id
    ).first()
    if not budget:
        raise NotFoundError(f"Budget with id {budget_id} not found")
    return budget


def _apply_budget_effect(db: Session, user_id: str, budget_id: Optional[int], delta: Decimal) -> None:
    if budget_id is None:
        return
    budget = db.query(BudgetDB).filter(
        BudgetDB.id == budget_id,
        BudgetDB.user_id == user_id
    ).first()
    if not budget:
        logger.warning(f"Budget {budget_id} no longer exists, running total not adjusted")
        return
    budget.current_amount = (budget.current_amount or Decimal("0.00")) + delta
    budget.updated_at = utcnow()
    db.flush()


def _apply_account_effect(db: Session, user_id: str, account_id: Optional[int], delta: Decimal) -> None:
    if account_id is None:
        return
    account = db.query(AccountDB).filter(
        AccountDB.id == account_id,
        AccountDB.user_id == user_id
    ).first()
    if not account:
        logger.warning(f"Account {account_id} no longer exists, balance not adjusted")
        return
    account.balance = (account.balance or Decimal("0.00")) + delta
    account.updated_at = utcnow()
    db.flush()


def _apply_effects(db: Session, transaction: TransactionDB, reverse: bool = False) -> None:
    """Book (or un-book) a transaction against its budget and account, in that order"""
    sign = -1 if reverse else 1
    _apply_budget_effect(
        db, transaction.user_id, transaction.budget_id,
        sign * budget_effect(transaction.transaction_type, transaction.amount)
    )
    _apply_account_effect(
        db, transaction.user_id, transaction.account_id,
        sign * account_effect(transaction.transaction_type, transaction.amount)
    )


# ===== DATABASE OPERATIONS =====

def create_db_transaction(db: Session, user_id: str, transaction_data: TransactionCreate) -> TransactionDB:
    """
    Create a transaction and book it against its account and budget.

    The insert, the budget running total and the account balance are written in
    one session transaction: either all three are committed or none are.
    """

    # Verify references before any write
    _get_owned_account(db, transaction_data.account_id, user_id)
    if transaction_data.budget_id is not None:
        _get_owned_budget(db, transaction_data.budget_id, user_id)

    db_transaction = TransactionDB(
        user_id=user_id,
        transaction_type=transaction_data.transaction_type,
        amount=transaction_data.amount,
        transaction_date=transaction_data.transaction_date,
        status=transaction_data.status,
        category_name=transaction_data.category.name,
        category_type=transaction_data.transaction_type,
        sub_category=transaction_data.category.sub_category,
        description=transaction_data.description,
        notes=transaction_data.notes,
        account_id=transaction_data.account_id,
        budget_id=transaction_data.budget_id,
    )

    try:
        db.add(db_transaction)
        db.flush()
        _apply_effects(db, db_transaction)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(db_transaction)
    logger.info(
        f"Created {db_transaction.transaction_type.value} transaction {db_transaction.id} "
        f"of {db_transaction.amount} on account {db_transaction.account_id}"
    )
    return db_transaction


def read_db_transaction(db: Session, transaction_id: int, user_id: str) -> Optional[TransactionDB]:
    """Read a transaction by ID"""
    return db.query(TransactionDB).filter(
        TransactionDB.id == transaction_id,
        TransactionDB.user_id == user_id
    ).options(joinedload(TransactionDB.account), joinedload(TransactionDB.budget)).first()


def read_db_transactions(db: Session, user_id: str, filters: Optional[TransactionFilter] = None,
                         skip: int = 0, limit: Optional[int] = 100) -> List[TransactionDB]:
    """Read transactions, newest first, with filtering and pagination"""

    query = db.query(TransactionDB).filter(TransactionDB.user_id == user_id)

    if filters:
        if filters.transaction_type:
            query = query.filter(TransactionDB.transaction_type == filters.transaction_type)

        if filters.category_name:
            query = query.filter(TransactionDB.category_name == filters.category_name)

        if filters.account_id:
            query = query.filter(TransactionDB.account_id == filters.account_id)

        if filters.budget_id:
            query = query.filter(TransactionDB.budget_id == filters.budget_id)

        if filters.date_from:
            query = query.filter(TransactionDB.transaction_date >= filters.date_from)

        if filters.date_to:
            query = query.filter(TransactionDB.transaction_date <= filters.date_to)

    query = query.order_by(desc(TransactionDB.transaction_date), desc(TransactionDB.created_at), desc(TransactionDB.id))

    return query.options(
        joinedload(TransactionDB.account), joinedload(TransactionDB.budget)
    ).offset(skip).limit(limit).all()


def update_db_transaction(db: Session, user_id: str, transaction_updates: TransactionUpdate) -> TransactionDB:
    """
    Update a transaction and keep balances consistent.

    The old effects are reversed, the changes applied and the new effects booked,
    all inside one session transaction.
    """

    db_transaction = db.query(TransactionDB).filter(
        TransactionDB.id == transaction_updates.id,
        TransactionDB.user_id == user_id
    ).first()

    if not db_transaction:
        raise NotFoundError(f"Transaction with id {transaction_updates.id} not found")

    update_data = transaction_updates.model_dump(exclude_unset=True, exclude={"id", "category"})

    for field in ("transaction_type", "amount", "account_id", "transaction_date", "status"):
        if field in update_data and update_data[field] is None:
            raise ValueError(f"{field} cannot be cleared")

    if update_data.get("account_id") is not None:
        _get_owned_account(db, update_data["account_id"], user_id)
    if update_data.get("budget_id") is not None:
        _get_owned_budget(db, update_data["budget_id"], user_id)

    try:
        _apply_effects(db, db_transaction, reverse=True)

        for field, value in update_data.items():
            setattr(db_transaction, field, value)

        if transaction_updates.category is not None:
            db_transaction.category_name = transaction_updates.category.name
            db_transaction.sub_category = transaction_updates.category.sub_category
        db_transaction.category_type = db_transaction.transaction_type
        db_transaction.updated_at = utcnow()

        db.flush()
        _apply_effects(db, db_transaction)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(db_transaction)
    return db_transaction


def delete_db_transaction(db: Session, transaction_id: int, user_id: str) -> bool:
    """
    Delete a transaction and reverse its effect on its budget and account.

    Lookup happens first; a missing or foreign transaction aborts before any
    write. The reversal and the delete are committed together.
    """

    db_transaction = db.query(TransactionDB).filter(
        TransactionDB.id == transaction_id,
        TransactionDB.user_id == user_id
    ).first()

    if not db_transaction:
        raise NotFoundError(f"Transaction with id {transaction_id} not found")

    try:
        _apply_effects(db, db_transaction, reverse=True)
        db.delete(db_transaction)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(f"Deleted transaction {transaction_id}")
    return True


def get_transactions_count(db: Session, user_id: str) -> int:
    """All-time transaction count for a user"""
    return db.query(TransactionDB).filter(TransactionDB.user_id == user_id).count()
