import os

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from wallet_api.db.core import get_db, UserSettingsDB
from wallet_api.crud import crud_user_settings

USER_ID_HEADER = os.getenv("USER_ID_HEADER", "X-User-Id")


def get_current_user_id(request: Request) -> str:
    """Identity asserted by the upstream identity provider"""
    user_id = request.headers.get(USER_ID_HEADER, "").strip()
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user_id


def get_user_settings(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
) -> UserSettingsDB:
    """Load (or lazily create) the caller's settings once per request"""
    return crud_user_settings.get_or_create_user_settings(db, user_id)
