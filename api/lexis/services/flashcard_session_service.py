"""
Flashcard session service.

Manages daily flashcard sessions: creation and population with due reviews and
new words, SM-2 scoring of items and session completion.
"""
import logging
from typing import List, Optional, Dict
from sqlmodel import Session, select

from lexis.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from lexis.models.models import (
    FlashcardSession,
    FlashcardItem,
    Repetition,
    SessionStatus,
    FlashcardItemStatus,
    FlashcardItemStage,
)
from lexis.services import repetition_service, user_service
from lexis.services.sm2_service import SM2State, compute_next, MIN_SCORE, MAX_SCORE
from lexis.services.word_selection_service import get_strategy, RANDOM_STRATEGY
from lexis.utils.time_utils import utc_now, is_same_day

logger = logging.getLogger(__name__)


def calculate_session_stats(items: List[FlashcardItem]) -> Dict[str, int]:
    """
    Count items of a session by status and stage.

    Returns:
        Dict with new_cards, review_cards, repeat_cards (stage learning),
        mastered_cards (stage passed) and total_cards
    """
    return {
        'new_cards': sum(1 for item in items if item.status == FlashcardItemStatus.NEW),
        'review_cards': sum(1 for item in items if item.status == FlashcardItemStatus.REVIEW),
        'repeat_cards': sum(1 for item in items if item.stage == FlashcardItemStage.LEARNING),
        'mastered_cards': sum(1 for item in items if item.stage == FlashcardItemStage.PASSED),
        'total_cards': len(items),
    }


def get_latest_session(session: Session, user_id: int) -> Optional[FlashcardSession]:
    """Most recently started session of the user (ties broken by id)."""
    return session.exec(
        select(FlashcardSession)
        .where(FlashcardSession.user_id == user_id)
        .order_by(FlashcardSession.started_at.desc(), FlashcardSession.id.desc())  # type: ignore
    ).first()


def list_sessions(session: Session, user_id: int) -> List[FlashcardSession]:
    """All sessions of the user, newest first."""
    return list(session.exec(
        select(FlashcardSession)
        .where(FlashcardSession.user_id == user_id)
        .order_by(FlashcardSession.started_at.desc(), FlashcardSession.id.desc())  # type: ignore
    ).all())


def get_session(session: Session, session_id: int, user_id: int) -> FlashcardSession:
    """Get a session of the user or raise NotFoundError."""
    flashcard_session = session.get(FlashcardSession, session_id)
    if not flashcard_session or flashcard_session.user_id != user_id:
        raise NotFoundError(f"Flashcard session with id {session_id} not found")
    return flashcard_session


def delete_session(session: Session, session_id: int, user_id: int) -> None:
    """Delete a session of the user together with its items."""
    flashcard_session = get_session(session, session_id, user_id)
    session.delete(flashcard_session)
    session.commit()
    logger.info(f"Deleted flashcard session {session_id} of user {user_id}")


def _populate_session(session: Session, flashcard_session: FlashcardSession) -> List[FlashcardItem]:
    """
    Fill a session with due reviews first, then new words up to the limits.

    Due repetitions take up to `daily_review` slots. The remaining capacity,
    capped by `daily_new`, is filled with words chosen by the session's
    strategy; a fresh repetition is created for each of them.
    """
    user_id = flashcard_session.user_id
    limits = user_service.get_user_limits(session, user_id)

    due_repetitions = repetition_service.get_due_repetitions(session, user_id, limits.daily_review)
    items = [
        FlashcardItem(
            session_id=flashcard_session.id,
            repetition_id=repetition.id,
            status=FlashcardItemStatus.REVIEW,
            stage=FlashcardItemStage.REVIEW,
        )
        for repetition in due_repetitions
    ]

    new_count = min(limits.daily_review - len(items), limits.daily_new)
    if new_count > 0:
        session_type = flashcard_session.type or RANDOM_STRATEGY
        strategy = get_strategy(session_type)
        words = strategy.select_new_words(session, user_id, new_count, session_type)
        new_repetitions = repetition_service.create_for_words(session, user_id, words)
        items.extend(
            FlashcardItem(
                session_id=flashcard_session.id,
                repetition_id=repetition.id,
                status=FlashcardItemStatus.NEW,
                stage=FlashcardItemStage.REVIEW,
            )
            for repetition in new_repetitions
        )

    if items:
        session.add_all(items)

    logger.info(
        f"Populated flashcard session {flashcard_session.id}: "
        f"{len(due_repetitions)} review, {len(items) - len(due_repetitions)} new"
    )
    return items


def create_session(
    session: Session,
    user_id: int,
    session_type: Optional[str] = None,
    status: SessionStatus = SessionStatus.ACTIVE,
) -> FlashcardSession:
    """
    Create a flashcard session and populate it with items.

    Args:
        session: Database session
        user_id: User ID
        session_type: Word selection strategy name ('random', 'level_a1_a2', ...)
        status: Initial session status

    Returns:
        The created session with its items
    """
    flashcard_session = FlashcardSession(user_id=user_id, type=session_type, status=status)
    session.add(flashcard_session)
    session.flush()

    try:
        _populate_session(session, flashcard_session)
        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(flashcard_session)
    logger.info(f"Created flashcard session {flashcard_session.id} for user {user_id} ({session_type})")
    return flashcard_session


def start_session(session: Session, user_id: int) -> FlashcardSession:
    """
    Return today's session or start a new one.

    A session started today is returned unchanged, whatever its status. An
    older active session is completed before a new session is created with
    the user's learning strategy.
    """
    latest = get_latest_session(session, user_id)
    now = utc_now()

    if latest and is_same_day(latest.started_at, now):
        return latest

    if latest and latest.status == SessionStatus.ACTIVE:
        latest.status = SessionStatus.COMPLETED
        latest.ended_at = now
        session.add(latest)
        session.commit()
        logger.info(f"Closed stale flashcard session {latest.id} of user {user_id}")

    strategy_name = user_service.get_learning_strategy(session, user_id)
    return create_session(session, user_id, strategy_name)


def send_score(
    session: Session,
    item_id: int,
    score: int,
    user_id: Optional[int] = None,
    flashcard_session_id: Optional[int] = None,
) -> FlashcardItem:
    """
    Grade a flashcard item and reschedule its repetition with SM-2.

    Args:
        session: Database session
        item_id: Flashcard item ID
        score: Recall quality, 0..5
        user_id: When given, the item's session must belong to this user
        flashcard_session_id: When given, the item must be part of this session

    Returns:
        The updated item (stage 'passed' or 'learning')

    Raises:
        ValidationError: If the score is out of range
        NotFoundError: If the item or its repetition does not exist
        AuthorizationError: If the item belongs to another user's session
    """
    if not isinstance(score, int) or isinstance(score, bool) or not MIN_SCORE <= score <= MAX_SCORE:
        raise ValidationError(f"Score must be an integer between {MIN_SCORE} and {MAX_SCORE}")

    item = session.get(FlashcardItem, item_id)
    if not item or (flashcard_session_id is not None and item.session_id != flashcard_session_id):
        raise NotFoundError(f"Flashcard item with id {item_id} not found")

    if user_id is not None and item.session.user_id != user_id:
        raise AuthorizationError(f"Flashcard item {item_id} does not belong to user {user_id}")

    repetition = session.get(Repetition, item.repetition_id)
    if not repetition:
        raise NotFoundError(f"Repetition with id {item.repetition_id} not found")

    result = compute_next(
        SM2State(
            easiness_factor=repetition.easiness_factor,
            repetitions=repetition.repetitions,
            next_interval=repetition.next_interval,
        ),
        score,
    )

    repetition.easiness_factor = result.easiness_factor
    repetition.repetitions = result.repetitions
    repetition.next_interval = result.next_interval
    repetition.date_last_rep = result.date_last_rep
    repetition.date_next_rep = result.date_next_rep
    item.stage = result.stage

    session.add(repetition)
    session.add(item)
    session.commit()
    session.refresh(item)

    logger.debug(
        f"Scored item {item_id} with {score}: EF={result.easiness_factor:.2f}, "
        f"interval={result.next_interval}, stage={result.stage.value}"
    )
    return item


def finish_session(session: Session, user_id: int) -> FlashcardSession:
    """
    Complete the user's latest session once every item is passed.

    Raises:
        NotFoundError: If the user has no session
        ValidationError: If some item is not passed yet
    """
    flashcard_session = get_latest_session(session, user_id)
    if not flashcard_session:
        raise NotFoundError(f"No flashcard session found for user {user_id}")

    if flashcard_session.status == SessionStatus.COMPLETED:
        return flashcard_session

    if any(item.stage != FlashcardItemStage.PASSED for item in flashcard_session.items):
        raise ValidationError("Cannot finish session. Not all items are passed.")

    flashcard_session.status = SessionStatus.COMPLETED
    flashcard_session.ended_at = utc_now()
    session.add(flashcard_session)
    session.commit()
    session.refresh(flashcard_session)

    logger.info(f"Finished flashcard session {flashcard_session.id} of user {user_id}")
    return flashcard_session
