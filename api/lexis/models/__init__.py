"""
Models package - imports all models so they are registered with SQLModel.
"""
# Import enums first
from lexis.models.enums import (
    CEFRLevel,
    SessionStatus,
    FlashcardItemStatus,
    FlashcardItemStage,
    QuizQuestionType,
    QuizAnswer,
)

# Import all models
from lexis.models.word import Word, Meaning
from lexis.models.user import User
from lexis.models.repetition import Repetition
from lexis.models.flashcard import FlashcardSession, FlashcardItem
from lexis.models.quiz import QuizSession, QuizPackage, QuizItem

__all__ = [
    'CEFRLevel',
    'SessionStatus',
    'FlashcardItemStatus',
    'FlashcardItemStage',
    'QuizQuestionType',
    'QuizAnswer',
    'Word',
    'Meaning',
    'User',
    'Repetition',
    'FlashcardSession',
    'FlashcardItem',
    'QuizSession',
    'QuizPackage',
    'QuizItem',
]
