from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from wallet_api.crud import crud_user_settings
from wallet_api.models import user_settings as settings_models
from wallet_api.db.core import get_db, UserSettingsDB
from wallet_api.dependencies import get_current_user_id, get_user_settings

router = APIRouter(
    prefix="/user-settings",
    tags=["user-settings"],
)


@router.get("/", response_model=settings_models.UserSettingsResponse)
def read_user_settings(settings: UserSettingsDB = Depends(get_user_settings)):
    """
    Current user's settings. Created with defaults on first access.
    """
    return settings


@router.put("/", response_model=settings_models.UserSettingsResponse)
def update_user_settings(
    settings: settings_models.UserSettingsUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    try:
        return crud_user_settings.update_user_settings(db=db, user_id=user_id, settings_updates=settings)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
