from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from wallet_api.db.core import UserSettingsDB, utcnow
from wallet_api.models.user_settings import UserSettingsUpdate


def read_db_user_settings(db: Session, user_id: str):
    return db.query(UserSettingsDB).filter(UserSettingsDB.user_id == user_id).first()


def get_or_create_user_settings(db: Session, user_id: str) -> UserSettingsDB:
    """Return the user's settings, creating them with defaults on first access"""

    db_settings = read_db_user_settings(db, user_id)
    if db_settings:
        return db_settings

    db_settings = UserSettingsDB(user_id=user_id, currency="USD", language="en", budget_alerts=[])
    try:
        db.add(db_settings)
        db.commit()
    except IntegrityError:
        # Created by a concurrent request for the same user
        db.rollback()
        return read_db_user_settings(db, user_id)

    db.refresh(db_settings)
    return db_settings


def update_user_settings(db: Session, user_id: str, settings_updates: UserSettingsUpdate) -> UserSettingsDB:
    """Upsert the user's settings"""

    db_settings = get_or_create_user_settings(db, user_id)

    if settings_updates.currency is not None:
        db_settings.currency = settings_updates.currency
    if settings_updates.language is not None:
        db_settings.language = settings_updates.language
    if settings_updates.budget_alerts is not None:
        db_settings.budget_alerts = [alert.model_dump(mode="json") for alert in settings_updates.budget_alerts]

    db_settings.updated_at = utcnow()

    try:
        db.commit()
        db.refresh(db_settings)
        return db_settings
    except IntegrityError:
        db.rollback()
        raise ValueError("Settings update failed due to database constraint")
