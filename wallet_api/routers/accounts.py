from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional

from wallet_api.crud import crud_account
from wallet_api.models import account as account_models
from wallet_api.db.core import get_db, NotFoundError, AccountType
from wallet_api.dependencies import get_current_user_id
from wallet_api.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/accounts",
    tags=["accounts"],
)


@router.get("/", response_model=List[account_models.AccountResponse])
def read_accounts(
    account_type: Optional[AccountType] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Retrieve the current user's accounts.
    """
    return crud_account.read_db_accounts(db=db, user_id=user_id, account_type=account_type, skip=skip, limit=limit)


@router.get("/summary", response_model=account_models.AccountSummary)
def read_account_summary(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Account count, count per type and total balance per currency.
    """
    return crud_account.get_account_summary(db=db, user_id=user_id)


@router.get("/{account_id}", response_model=account_models.AccountResponse)
def read_account(
    account_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    db_account = crud_account.read_db_account(db=db, account_id=account_id, user_id=user_id)
    if db_account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found")
    return db_account


@router.post("/", response_model=account_models.AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    account: account_models.AccountCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Create a new account, optionally with an opening balance.
    """
    try:
        return crud_account.create_db_account(db=db, user_id=user_id, account_data=account)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Error creating account")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create account")


@router.put("/", response_model=account_models.AccountResponse)
def update_account(
    account: account_models.AccountUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Update an account's name, type, currency or default flag.
    """
    try:
        return crud_account.update_db_account(db=db, user_id=user_id, account_updates=account)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Error updating account")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update account")


@router.delete("/")
def delete_account(
    account: account_models.AccountDelete,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Delete an account. Refused while transactions or budgets still reference it.
    """
    try:
        crud_account.delete_db_account(db=db, account_id=account.id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except crud_account.AccountInUseError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Error deleting account")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete account")
    return {"message": "Account deleted successfully"}
