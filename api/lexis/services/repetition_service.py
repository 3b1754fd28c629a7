"""
Repetition scheduling service.

Due-item queries, creation of repetition records for newly learned words and
per-level learning statistics.
"""
import logging
from datetime import datetime
from typing import List, Optional, Dict
from sqlmodel import Session, select
from sqlalchemy import func, case

from lexis.core.exceptions import NotFoundError
from lexis.models.models import Repetition, Word, CEFRLevel
from lexis.utils.time_utils import utc_now, start_of_day

logger = logging.getLogger(__name__)

# Easiness factor from which a word counts as mastered in statistics
MASTERED_EASINESS_FACTOR = 2.8


def get_due_repetitions(
    session: Session,
    user_id: int,
    limit: int,
    now: Optional[datetime] = None,
) -> List[Repetition]:
    """
    Get repetitions whose next review date has arrived.

    Args:
        session: Database session
        user_id: User ID
        limit: Maximum number of repetitions to return
        now: Reference time (defaults to current UTC time)

    Returns:
        Most overdue repetitions first, ties broken by id
    """
    if limit <= 0:
        return []

    now = now or utc_now()
    query = (
        select(Repetition)
        .where(
            Repetition.user_id == user_id,
            Repetition.date_next_rep <= now
        )
        .order_by(Repetition.date_next_rep, Repetition.id)  # type: ignore
        .limit(limit)
    )
    return list(session.exec(query).all())


def create_for_words(session: Session, user_id: int, words: List[Word]) -> List[Repetition]:
    """
    Create a default repetition record for each word.

    Records start with EF 2.5, no repetitions, a zero interval and are due
    from the start of today. The session is flushed so the returned records
    carry their IDs; committing is left to the caller.

    Args:
        session: Database session
        user_id: User ID
        words: Words entering the user's learning set

    Returns:
        The created repetitions, in the order of `words`
    """
    today = start_of_day()
    repetitions = [
        Repetition(user_id=user_id, word_id=word.id, date_next_rep=today)
        for word in words
    ]
    if not repetitions:
        return []

    session.add_all(repetitions)
    session.flush()

    logger.info(f"Created {len(repetitions)} repetition(s) for user {user_id}")
    return repetitions


def list_repetitions(session: Session, user_id: int, word_id: Optional[int] = None) -> List[Repetition]:
    """List a user's repetitions, optionally for a single word."""
    query = select(Repetition).where(Repetition.user_id == user_id)
    if word_id is not None:
        query = query.where(Repetition.word_id == word_id)
    return list(session.exec(query.order_by(Repetition.id)).all())  # type: ignore


def get_repetition(session: Session, repetition_id: int, user_id: int) -> Repetition:
    """Get a user's repetition or raise NotFoundError."""
    repetition = session.get(Repetition, repetition_id)
    if not repetition or repetition.user_id != user_id:
        raise NotFoundError(f"Repetition with id {repetition_id} not found")
    return repetition


def get_repetition_stats(session: Session, user_id: int) -> Dict[str, Dict[str, int]]:
    """
    Compute learning statistics per CEFR level.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        Dict keyed by level code with:
        {
            'level': str,
            'total': int,        # words in the catalog
            'total_user': int,   # words the user has started
            'learning': int,     # started, EF below the mastered threshold
            'mastered': int      # EF at or above the mastered threshold
        }
    """
    total_rows = session.exec(
        select(Word.level, func.count(Word.id)).group_by(Word.level)
    ).all()
    total_by_level = {level: count for level, count in total_rows}

    mastered_case = case(
        (Repetition.easiness_factor >= MASTERED_EASINESS_FACTOR, 1),
        else_=0,
    )
    user_rows = session.exec(
        select(Word.level, func.count(Repetition.id), func.sum(mastered_case))
        .select_from(Repetition)
        .join(Word, Word.id == Repetition.word_id)
        .where(Repetition.user_id == user_id)
        .group_by(Word.level)
    ).all()
    user_by_level = {level: (count, mastered or 0) for level, count, mastered in user_rows}

    stats = {}
    for level in CEFRLevel:
        total_user, mastered = user_by_level.get(level, (0, 0))
        stats[level.value] = {
            'level': level.value,
            'total': total_by_level.get(level, 0),
            'total_user': total_user,
            'learning': total_user - mastered,
            'mastered': mastered,
        }
    return stats
