import sys
import os
import random
from sqlalchemy.orm import Session
from datetime import date, timedelta
from decimal import Decimal
from faker import Faker

# Add the project root to the Python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from wallet_api.db.core import (
    session_local,
    init_db,
    AccountDB,
    AccountType,
    TransactionType,
    BudgetPeriod,
)
from wallet_api.crud import crud_account, crud_budget, crud_category, crud_transaction, crud_user_settings
from wallet_api.crud.crud_budget import month_bounds
from wallet_api.models.account import AccountCreate
from wallet_api.models.budget import BudgetCreate
from wallet_api.models.category import CategoryCreate, SubCategory
from wallet_api.models.transaction import TransactionCreate, TransactionCategory
from wallet_api.models.user_settings import UserSettingsUpdate, BudgetAlert
from wallet_api.logging_config import setup_logging, get_logger

fake = Faker()
logger = get_logger(__name__)

DEMO_USER_ID = os.getenv("SEED_USER_ID", "demo_user")

CATEGORIES = {
    TransactionType.INCOME: {
        "Salary": ["Paycheck", "Bonus"],
        "Freelance": ["Consulting", "Side Project"],
    },
    TransactionType.EXPENSE: {
        "Housing": ["Rent", "Utilities", "Home Repair"],
        "Transportation": ["Fuel", "Public Transit", "Ride Share"],
        "Food": ["Groceries", "Restaurants", "Coffee Shops"],
        "Entertainment": ["Movies", "Concerts", "Streaming Services"],
        "Shopping": ["Clothing", "Electronics", "Home Goods"],
    },
}


def seed_database(user_id: str = DEMO_USER_ID, months: int = 14):
    """
    Fills the database with sample data for one user. Everything is written
    through the CRUD layer so balances and budget totals stay consistent.
    """
    init_db()
    db: Session = session_local()

    try:
        if db.query(AccountDB).filter(AccountDB.user_id == user_id).count() > 0:
            logger.info(f"User {user_id} already has data. Exiting.")
            return

        logger.info(f"Seeding sample data for user {user_id}...")

        # 1. Categories
        for category_type, structure in CATEGORIES.items():
            for name, sub_names in structure.items():
                crud_category.create_db_category(db, user_id, CategoryCreate(
                    name=name,
                    category_type=category_type,
                    sub_categories=[SubCategory(name=sub) for sub in sub_names],
                ))

        # 2. Accounts
        accounts = [
            crud_account.create_db_account(db, user_id, AccountCreate(
                name="Main Bank", account_type=AccountType.BANK,
                balance=Decimal("2500.00"), is_default=True)),
            crud_account.create_db_account(db, user_id, AccountCreate(
                name="Wallet Cash", account_type=AccountType.CASH, balance=Decimal("150.00"))),
            crud_account.create_db_account(db, user_id, AccountCreate(
                name="Mobile Money", account_type=AccountType.MOBILE_MONEY, balance=Decimal("300.00"))),
        ]

        # 3. Budget for the current month
        today = date.today()
        start, end = month_bounds(today.year, today.month)
        budget = crud_budget.create_db_budget(db, user_id, BudgetCreate(
            name=f"{today:%B} Spending",
            amount=Decimal("1800.00"),
            period=BudgetPeriod.MONTHLY,
            start_date=start,
            end_date=end,
            account_id=accounts[0].id,
        ))

        # 4. Transactions spread over the trailing months
        first_day = today - timedelta(days=months * 30)
        count = 0
        for _ in range(months * 12):
            transaction_type = random.choices(
                [TransactionType.EXPENSE, TransactionType.INCOME], weights=[5, 1])[0]
            category_name = random.choice(list(CATEGORIES[transaction_type]))
            sub_category = random.choice(CATEGORIES[transaction_type][category_name])
            transaction_date = fake.date_between(start_date=first_day, end_date=today)

            if transaction_type == TransactionType.INCOME:
                amount = Decimal(random.uniform(400.0, 2500.0)).quantize(Decimal("0.01"))
            else:
                amount = Decimal(random.uniform(5.0, 250.0)).quantize(Decimal("0.01"))

            in_budget = transaction_type == TransactionType.EXPENSE and start <= transaction_date <= end

            crud_transaction.create_db_transaction(db, user_id, TransactionCreate(
                transaction_type=transaction_type,
                amount=amount,
                account_id=accounts[0].id if in_budget else random.choice(accounts).id,
                budget_id=budget.id if in_budget else None,
                category=TransactionCategory(name=category_name, sub_category=sub_category),
                transaction_date=transaction_date,
                description=fake.catch_phrase(),
            ))
            count += 1

        # 5. Settings with a spending alert
        crud_user_settings.update_user_settings(db, user_id, UserSettingsUpdate(
            currency="USD",
            language="en",
            budget_alerts=[BudgetAlert(category="Food", limit=Decimal("400.00"))],
        ))

        logger.info(f"Seeding complete: {len(accounts)} accounts, 1 budget, {count} transactions.")

    except Exception:
        logger.exception("An error occurred during seeding")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    seed_database()
