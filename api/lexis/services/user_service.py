"""
User service for business logic related to user settings.
"""
import logging
from dataclasses import dataclass
from typing import Optional
from sqlmodel import Session

from lexis.core.config import settings
from lexis.core.exceptions import NotFoundError, ValidationError
from lexis.models.models import User

logger = logging.getLogger(__name__)

MAX_DAILY_NEW_LIMIT = 100
MAX_DAILY_REVIEW_LIMIT = 500


@dataclass(frozen=True)
class UserLimits:
    """Daily flashcard limits of a user."""
    daily_review: int
    daily_new: int


def get_user(session: Session, user_id: int) -> User:
    """Get a user or raise NotFoundError."""
    user = session.get(User, user_id)
    if not user:
        raise NotFoundError(f"User with id {user_id} not found")
    return user


def get_user_limits(session: Session, user_id: int) -> UserLimits:
    """
    Get the daily review/new limits of a user.

    Falls back to the configured defaults when the user or a value is missing.
    """
    user = session.get(User, user_id)
    if not user:
        logger.warning(f"User {user_id} not found, using default daily limits")
        return UserLimits(
            daily_review=settings.default_daily_review_limit,
            daily_new=settings.default_daily_new_limit,
        )

    return UserLimits(
        daily_review=(
            user.daily_review_limit
            if user.daily_review_limit is not None
            else settings.default_daily_review_limit
        ),
        daily_new=(
            user.daily_new_limit
            if user.daily_new_limit is not None
            else settings.default_daily_new_limit
        ),
    )


def get_learning_strategy(session: Session, user_id: int) -> str:
    """Get the user's word selection strategy name, 'random' by default."""
    user = session.get(User, user_id)
    if not user or not user.learning_strategy:
        return "random"
    return user.learning_strategy


def update_user_settings(
    session: Session,
    user_id: int,
    daily_new_limit: Optional[int] = None,
    daily_review_limit: Optional[int] = None,
    learning_strategy: Optional[str] = None,
) -> User:
    """
    Update flashcard settings of a user. Only provided values change.

    Raises:
        NotFoundError: If user not found
        ValidationError: If a limit is out of range or the strategy is blank
    """
    user = get_user(session, user_id)

    if daily_new_limit is not None:
        if not 0 <= daily_new_limit <= MAX_DAILY_NEW_LIMIT:
            raise ValidationError(f"daily_new_limit must be between 0 and {MAX_DAILY_NEW_LIMIT}")
        user.daily_new_limit = daily_new_limit

    if daily_review_limit is not None:
        if not 0 <= daily_review_limit <= MAX_DAILY_REVIEW_LIMIT:
            raise ValidationError(f"daily_review_limit must be between 0 and {MAX_DAILY_REVIEW_LIMIT}")
        user.daily_review_limit = daily_review_limit

    if learning_strategy is not None:
        if not learning_strategy.strip():
            raise ValidationError("learning_strategy cannot be empty")
        user.learning_strategy = learning_strategy.strip().lower()

    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info(f"Updated settings for user {user_id}")
    return user
