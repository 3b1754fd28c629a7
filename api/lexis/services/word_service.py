"""
Word catalog service.
"""
import logging
from typing import List, Optional
from sqlmodel import Session, select

from lexis.core.exceptions import ConflictError, NotFoundError, ValidationError
from lexis.models.models import Word, Meaning, CEFRLevel

logger = logging.getLogger(__name__)


def list_words(session: Session, level: Optional[CEFRLevel] = None) -> List[Word]:
    """List catalog words, optionally for one CEFR level, ordered by text."""
    query = select(Word)
    if level is not None:
        query = query.where(Word.level == level)
    return list(session.exec(query.order_by(Word.text)).all())  # type: ignore


def get_word(session: Session, word_id: int) -> Word:
    """Get a word or raise NotFoundError."""
    word = session.get(Word, word_id)
    if not word:
        raise NotFoundError(f"Word with id {word_id} not found")
    return word


def create_word(
    session: Session,
    text: str,
    level: CEFRLevel,
    pronunciation: str,
    part_of_speech: Optional[List[str]] = None,
    meanings: Optional[List[str]] = None,
) -> Word:
    """
    Add a word with its meanings to the catalog.

    Raises:
        ValidationError: If the text is empty
        ConflictError: If a word with the same text already exists
    """
    text = text.strip()
    if not text:
        raise ValidationError("Word text cannot be empty")

    existing = session.exec(select(Word).where(Word.text == text)).first()
    if existing:
        raise ConflictError(f"Word '{text}' already exists")

    word = Word(
        text=text,
        level=level,
        pronunciation=pronunciation,
        part_of_speech=list(part_of_speech or []),
    )
    word.meanings = [Meaning(meaning=meaning) for meaning in (meanings or []) if meaning.strip()]

    session.add(word)
    session.commit()
    session.refresh(word)

    logger.info(f"Created word '{text}' ({level.value}) with {len(word.meanings)} meaning(s)")
    return word
