from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List

from wallet_api.services import reporting
from wallet_api.models import report as report_models
from wallet_api.db.core import get_db
from wallet_api.dependencies import get_current_user_id
from wallet_api.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
)


@router.get("/monthly", response_model=List[report_models.MonthlySpending])
def read_monthly_spending(
    months: int = Query(6, ge=1, le=24),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Expense totals for the trailing months, oldest first, with the same month of the prior year.
    """
    try:
        return reporting.get_monthly_spending(db, user_id, months=months)
    except SQLAlchemyError:
        logger.exception("Error fetching monthly spending")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch monthly spending")


@router.get("/monthly/{year}/{month}", response_model=report_models.MonthlyReport)
def read_monthly_report(
    year: int = Path(..., ge=1900, le=9999),
    month: int = Path(..., ge=1, le=12),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    try:
        return reporting.generate_monthly_report(db, user_id, year=year, month=month)
    except SQLAlchemyError:
        logger.exception("Error generating monthly report")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to generate monthly report")


@router.get("/trends", response_model=List[report_models.SpendingTrend])
def read_spending_trends(
    months: int = Query(6, ge=1, le=24),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    try:
        return reporting.get_spending_trends(db, user_id, months=months)
    except SQLAlchemyError:
        logger.exception("Error fetching spending trends")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch spending trends")
