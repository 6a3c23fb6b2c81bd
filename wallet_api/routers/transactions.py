import csv
import io
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from wallet_api.db.core import NotFoundError, TransactionType, UserSettingsDB, get_db
from wallet_api.models.transaction import (
    TransactionCreate,
    TransactionCreateResponse,
    TransactionDelete,
    TransactionFilter,
    TransactionResponse,
    TransactionUpdate,
)
from wallet_api.crud.crud_transaction import (
    account_effect,
    create_db_transaction,
    read_db_transaction,
    read_db_transactions,
    update_db_transaction,
    delete_db_transaction,
)
from wallet_api.services.budget_alerts import check_budget_alerts
from wallet_api.dependencies import get_current_user_id, get_user_settings
from wallet_api.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
)

ALL_ACCOUNTS = "all-accounts"
EXPORT_COLUMNS = ["Date", "Type", "Description", "Category", "Subcategory", "Amount"]


def get_transaction_filter(
    transaction_type: Optional[str] = Query(None, alias="type", description="income, expense or all"),
    category_name: Optional[str] = Query(None, alias="category.name", description="Category name"),
    category: Optional[str] = Query(None, description="Shorthand for category.name"),
    account_id: Optional[str] = Query(None, description=f"Account id or '{ALL_ACCOUNTS}'"),
    budget_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> TransactionFilter:
    """Translate list query parameters into a TransactionFilter"""
    filters = TransactionFilter(category_name=category_name or category or None, budget_id=budget_id,
                                date_from=start_date, date_to=end_date)

    if transaction_type and transaction_type != "all":
        try:
            filters.transaction_type = TransactionType(transaction_type)
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                                detail=f"Invalid transaction type '{transaction_type}'")

    if account_id and account_id != ALL_ACCOUNTS:
        try:
            filters.account_id = int(account_id)
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid account id '{account_id}'")

    return filters


@router.get("/", response_model=List[TransactionResponse])
def read_transactions(
    skip: int = 0,
    limit: int = Query(100, ge=1, le=1000),
    filters: TransactionFilter = Depends(get_transaction_filter),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    List the current user's transactions, newest first.
    """
    db_transactions = read_db_transactions(db, user_id, filters=filters, skip=skip, limit=limit)
    return [TransactionResponse.from_db(t) for t in db_transactions]


@router.get("/export")
def export_transactions(
    filters: TransactionFilter = Depends(get_transaction_filter),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
) -> Response:
    """
    Export the filtered transaction list as CSV. Expenses are written as negative amounts.
    """
    db_transactions = read_db_transactions(db, user_id, filters=filters, skip=0, limit=None)

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_COLUMNS)
    for t in db_transactions:
        writer.writerow([
            t.transaction_date.isoformat(),
            t.transaction_type.value,
            t.description or "Untitled Transaction",
            t.category_name or "Uncategorized",
            t.sub_category or "",
            str(account_effect(t.transaction_type, t.amount)),
        ])

    filename = f"transactions-{date.today().isoformat()}.csv"
    return Response(
        content=output.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{transaction_id}", response_model=TransactionResponse)
def read_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    db_transaction = read_db_transaction(db, transaction_id=transaction_id, user_id=user_id)
    if not db_transaction:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return TransactionResponse.from_db(db_transaction)


@router.post("/", response_model=TransactionCreateResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction: TransactionCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    settings: UserSettingsDB = Depends(get_user_settings)
):
    """
    Record a transaction and book it against its account and optional budget.
    """
    try:
        db_transaction = create_db_transaction(db, user_id, transaction)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Error creating transaction")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create transaction")

    response = TransactionCreateResponse.from_db(db_transaction)
    if db_transaction.transaction_type == TransactionType.EXPENSE:
        try:
            response.budget_alerts = check_budget_alerts(db, user_id, settings, db_transaction.category_name)
        except SQLAlchemyError:
            # The transaction is already committed
            logger.exception(f"Error checking budget alerts for transaction {response.id}")
            db.rollback()
    return response


@router.put("/", response_model=TransactionResponse)
def update_transaction(
    transaction: TransactionUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Update a transaction. Account balance and budget total follow the change.
    """
    try:
        db_transaction = update_db_transaction(db, user_id, transaction)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Error updating transaction")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update transaction")
    return TransactionResponse.from_db(db_transaction)


@router.delete("/")
def delete_transaction(
    transaction: TransactionDelete,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Delete a transaction and reverse its effect on account and budget.
    """
    try:
        delete_db_transaction(db, transaction_id=transaction.id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Error deleting transaction")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete transaction")
    return {"message": "Transaction deleted successfully"}
