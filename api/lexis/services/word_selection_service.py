"""
Word selection strategies for new flashcard items.

A strategy picks words the user has never started (no repetition row yet).
Strategies are resolved by name from the user's `learning_strategy` setting.
"""
import logging
from typing import List, Optional
from sqlmodel import Session, select
from sqlalchemy import func

from lexis.models.models import Word, Repetition, CEFRLevel

logger = logging.getLogger(__name__)

RANDOM_STRATEGY = "random"
LEVEL_STRATEGY_PREFIX = "level_"

_VALID_LEVELS = {level.value for level in CEFRLevel}


def parse_levels(session_type: Optional[str]) -> List[str]:
    """
    Parse CEFR level codes from a strategy name.

    'level_a1_b2' -> ['A1', 'B2']. Codes are case-insensitive, unknown codes
    are dropped and a name without the 'level_' prefix yields no levels.
    """
    if not session_type:
        return []

    normalized = session_type.strip().lower()
    if not normalized.startswith(LEVEL_STRATEGY_PREFIX):
        return []

    levels = []
    for code in normalized[len(LEVEL_STRATEGY_PREFIX):].split("_"):
        code = code.upper()
        if code in _VALID_LEVELS:
            levels.append(code)
    return levels


def _unlearned_words_query(user_id: int):
    """Words without a repetition for the user (outer join, repetition id IS NULL)."""
    return (
        select(Word)
        .outerjoin(
            Repetition,
            (Repetition.word_id == Word.id) & (Repetition.user_id == user_id)
        )
        .where(Repetition.id == None)  # noqa: E711
    )


class WordsStrategy:
    """Base strategy: choose up to `limit` words the user has not started."""

    name = "base"

    def select_new_words(
        self,
        session: Session,
        user_id: int,
        limit: int,
        session_type: Optional[str] = None,
    ) -> List[Word]:
        raise NotImplementedError


class RandomWordsStrategy(WordsStrategy):
    """Random unlearned words from the whole catalog."""

    name = RANDOM_STRATEGY

    def select_new_words(
        self,
        session: Session,
        user_id: int,
        limit: int,
        session_type: Optional[str] = None,
    ) -> List[Word]:
        if limit <= 0:
            return []

        query = _unlearned_words_query(user_id).order_by(func.random()).limit(limit)
        return list(session.exec(query).all())


class LevelWordsStrategy(WordsStrategy):
    """Random unlearned words restricted to the levels named in the session type."""

    name = "level"

    def select_new_words(
        self,
        session: Session,
        user_id: int,
        limit: int,
        session_type: Optional[str] = None,
    ) -> List[Word]:
        if limit <= 0:
            return []

        levels = parse_levels(session_type)
        if not levels:
            logger.warning(f"No valid levels in strategy '{session_type}', selecting no new words")
            return []

        query = (
            _unlearned_words_query(user_id)
            .where(Word.level.in_([CEFRLevel(level) for level in levels]))  # type: ignore
            .order_by(func.random())
            .limit(limit)
        )
        return list(session.exec(query).all())


def get_strategy(name: Optional[str]) -> WordsStrategy:
    """
    Resolve a strategy by name. Never raises.

    'random' -> RandomWordsStrategy, 'level_*' -> LevelWordsStrategy, anything
    else falls back to RandomWordsStrategy.
    """
    if not name or not name.strip():
        logger.debug("No learning strategy configured, using random")
        return RandomWordsStrategy()

    normalized = name.strip().lower()
    if normalized == RANDOM_STRATEGY:
        return RandomWordsStrategy()
    if normalized.startswith(LEVEL_STRATEGY_PREFIX):
        logger.debug(f"Using level strategy for '{normalized}'")
        return LevelWordsStrategy()

    logger.warning(f"Unknown learning strategy '{name}', falling back to random")
    return RandomWordsStrategy()
