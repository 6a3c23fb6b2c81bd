from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func
from typing import Optional, List
from decimal import Decimal

from wallet_api.db.core import AccountDB, BudgetDB, TransactionDB, NotFoundError, AccountType, utcnow
from wallet_api.models.account import AccountCreate, AccountUpdate, AccountSummary


class AccountInUseError(ValueError):
    pass


# ===== DATABASE OPERATIONS =====

def create_db_account(db: Session, user_id: str, account_data: AccountCreate) -> AccountDB:
    """Create a new account for a user"""

    existing_account = get_account_by_name(db, user_id, account_data.name)
    if existing_account:
        raise ValueError(f"Account name '{account_data.name}' already exists")

    db_account = AccountDB(
        user_id=user_id,
        name=account_data.name,
        account_type=account_data.account_type,
        balance=account_data.balance,
        currency=account_data.currency,
        is_default=account_data.is_default,
    )

    try:
        db.add(db_account)
        db.commit()
        db.refresh(db_account)
        return db_account
    except IntegrityError:
        db.rollback()
        raise ValueError("Account creation failed due to database constraint")


def read_db_account(db: Session, account_id: int, user_id: str) -> Optional[AccountDB]:
    """Read one of the user's accounts by ID"""
    return db.query(AccountDB).filter(
        AccountDB.id == account_id,
        AccountDB.user_id == user_id
    ).first()


def read_db_accounts(db: Session, user_id: str, account_type: Optional[AccountType] = None,
                     skip: int = 0, limit: int = 100) -> List[AccountDB]:
    """Read accounts for a user, optionally filtered by account type"""

    query = db.query(AccountDB).filter(AccountDB.user_id == user_id)

    if account_type:
        query = query.filter(AccountDB.account_type == account_type)

    return query.order_by(AccountDB.created_at, AccountDB.id).offset(skip).limit(limit).all()


def update_db_account(db: Session, user_id: str, account_updates: AccountUpdate) -> AccountDB:
    """Update an existing account. The balance is owned by transactions and is not editable here."""

    db_account = read_db_account(db, account_updates.id, user_id)
    if not db_account:
        raise NotFoundError(f"Account with id {account_updates.id} not found")

    if account_updates.name and account_updates.name != db_account.name:
        existing_name = db.query(AccountDB).filter(
            AccountDB.user_id == user_id,
            AccountDB.name == account_updates.name,
            AccountDB.id != account_updates.id
        ).first()
        if existing_name:
            raise ValueError(f"Account name '{account_updates.name}' already exists")

    update_data = account_updates.model_dump(exclude_unset=True, exclude={"id"})
    for field, value in update_data.items():
        if value is not None:
            setattr(db_account, field, value)

    db_account.updated_at = utcnow()

    try:
        db.commit()
        db.refresh(db_account)
        return db_account
    except IntegrityError:
        db.rollback()
        raise ValueError("Account update failed due to database constraint")


def delete_db_account(db: Session, account_id: int, user_id: str) -> bool:
    """Delete an account (only if no transactions or budgets reference it)"""

    db_account = read_db_account(db, account_id, user_id)
    if not db_account:
        raise NotFoundError(f"Account with id {account_id} not found")

    has_transactions = db.query(TransactionDB.id).filter(TransactionDB.account_id == account_id).first()
    if has_transactions:
        raise AccountInUseError("Cannot delete account with existing transactions")

    has_budgets = db.query(BudgetDB.id).filter(BudgetDB.account_id == account_id).first()
    if has_budgets:
        raise AccountInUseError("Cannot delete account with existing budgets")

    try:
        db.delete(db_account)
        db.commit()
        return True
    except Exception:
        db.rollback()
        raise


def get_account_summary(db: Session, user_id: str) -> AccountSummary:
    """Get account totals for a user"""

    by_type = (
        db.query(AccountDB.account_type, func.count(AccountDB.id))
        .filter(AccountDB.user_id == user_id)
        .group_by(AccountDB.account_type)
        .all()
    )
    by_currency = (
        db.query(AccountDB.currency, func.coalesce(func.sum(AccountDB.balance), 0))
        .filter(AccountDB.user_id == user_id)
        .group_by(AccountDB.currency)
        .all()
    )

    accounts_by_type = {account_type.value: count for account_type, count in by_type}

    return AccountSummary(
        total_accounts=sum(accounts_by_type.values()),
        accounts_by_type=accounts_by_type,
        balance_by_currency={currency: round(Decimal(str(total)), 2) for currency, total in by_currency},
    )


def get_account_by_name(db: Session, user_id: str, name: str) -> Optional[AccountDB]:
    """Get account by name for a specific user"""
    return db.query(AccountDB).filter(
        AccountDB.user_id == user_id,
        AccountDB.name == name
    ).first()
