"""User settings API endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from datetime import datetime
import logging

from app.database.session import get_db
from app.models.settings import UserSettings
from app.models.user import User
from app.schemas.settings import SettingsOut, SettingsUpdate
from app.security.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_or_create_settings(db: Session, user: User) -> UserSettings:
    user_settings = db.query(UserSettings).filter(UserSettings.user_id == user.id).first()
    if user_settings is None:
        user_settings = UserSettings(user_id=user.id)
        db.add(user_settings)
        db.commit()
        db.refresh(user_settings)
    return user_settings


@router.get("/settings", response_model=SettingsOut)
def get_settings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get the current user's assistant settings
    """
    return SettingsOut.model_validate(_get_or_create_settings(db, current_user))


@router.put("/settings", response_model=SettingsOut)
def update_settings(
    update: SettingsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Update the default AI provider and/or voice output flag
    """
    user_settings = _get_or_create_settings(db, current_user)

    if update.default_ai_provider is not None:
        user_settings.default_ai_provider = update.default_ai_provider
    if update.voice_output is not None:
        user_settings.voice_output = update.voice_output
    user_settings.updated_at = datetime.utcnow()

    db.commit()
    db.refresh(user_settings)

    logger.info(
        f"Settings updated for user {current_user.id}: "
        f"provider={user_settings.default_ai_provider} voice={user_settings.voice_output}"
    )
    return SettingsOut.model_validate(user_settings)
