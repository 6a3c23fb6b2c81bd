from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional

from wallet_api.crud import crud_budget
from wallet_api.models import budget as budget_models
from wallet_api.db.core import get_db, NotFoundError
from wallet_api.dependencies import get_current_user_id
from wallet_api.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/budgets",
    tags=["budgets"],
)


@router.get("/", response_model=List[budget_models.BudgetResponse])
def read_budgets(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=9999),
    active_only: bool = False,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Retrieve budgets for the current user. With month and year, only budgets
    overlapping that calendar month are returned.
    """
    return crud_budget.read_db_budgets(
        db=db, user_id=user_id, month=month, year=year,
        active_only=active_only, skip=skip, limit=limit
    )


@router.get("/{budget_id}", response_model=budget_models.BudgetResponse)
def read_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    db_budget = crud_budget.read_db_budget(db=db, budget_id=budget_id, user_id=user_id)
    if db_budget is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")
    return db_budget


@router.post("/", response_model=budget_models.BudgetResponse, status_code=status.HTTP_201_CREATED)
def create_budget(
    budget: budget_models.BudgetCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Create a new budget. Its running total starts at zero.
    """
    try:
        return crud_budget.create_db_budget(db=db, user_id=user_id, budget_data=budget)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Error creating budget")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create budget")


@router.put("/", response_model=budget_models.BudgetResponse)
def update_budget(
    budget: budget_models.BudgetUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Update a budget's name, amount, period, date range or account.
    """
    try:
        return crud_budget.update_db_budget(db=db, user_id=user_id, budget_updates=budget)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Error updating budget")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update budget")


@router.delete("/")
def delete_budget(
    budget: budget_models.BudgetDelete,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Delete a budget. Its transactions are kept and detached from it.
    """
    try:
        crud_budget.delete_db_budget(db=db, budget_id=budget.id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Error deleting budget")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete budget")
    return {"message": "Budget deleted successfully"}
