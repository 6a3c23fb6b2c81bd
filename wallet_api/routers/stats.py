from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from wallet_api.services.stats import get_dashboard_stats
from wallet_api.models.report import DashboardStats
from wallet_api.db.core import get_db
from wallet_api.dependencies import get_current_user_id
from wallet_api.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/stats",
    tags=["stats"],
)


@router.get("/", response_model=DashboardStats)
def read_dashboard_stats(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Current month's income, expense and balance plus account, active budget and transaction counts.
    """
    try:
        return get_dashboard_stats(db, user_id)
    except SQLAlchemyError:
        logger.exception("Error fetching dashboard stats")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch dashboard stats")
