"""
User settings endpoints.
"""
from fastapi import APIRouter, Depends
from sqlmodel import Session
import logging

from lexis.core.database import get_session
from lexis.models.models import User
from lexis.schemas.user import UserSettingsResponse, UpdateUserSettingsRequest
from lexis.services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _settings_response(user: User) -> UserSettingsResponse:
    return UserSettingsResponse(
        user_id=user.id,
        daily_new_limit=user.daily_new_limit,
        daily_review_limit=user.daily_review_limit,
        learning_strategy=user.learning_strategy,
    )


@router.get("/{user_id}/settings", response_model=UserSettingsResponse)
async def get_user_settings(
    user_id: int,
    session: Session = Depends(get_session)
):
    user = user_service.get_user(session, user_id)
    return _settings_response(user)


@router.put("/{user_id}/settings", response_model=UserSettingsResponse)
async def update_user_settings(
    user_id: int,
    request: UpdateUserSettingsRequest,
    session: Session = Depends(get_session)
):
    """Update daily limits and the word selection strategy. Omitted fields are kept."""
    user = user_service.update_user_settings(
        session,
        user_id,
        daily_new_limit=request.daily_new_limit,
        daily_review_limit=request.daily_review_limit,
        learning_strategy=request.learning_strategy,
    )
    return _settings_response(user)
