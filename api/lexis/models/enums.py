"""
Model enums.
"""
from enum import Enum


class CEFRLevel(str, Enum):
    """CEFR language proficiency levels."""
    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"
    C2 = "C2"


class SessionStatus(str, Enum):
    """Status of a flashcard or quiz session."""
    ACTIVE = "active"
    COMPLETED = "completed"


class FlashcardItemStatus(str, Enum):
    """Why an item is in a session: a brand-new word or a due review."""
    NEW = "new"
    REVIEW = "review"


class FlashcardItemStage(str, Enum):
    """Progress of an item within its session."""
    REVIEW = "review"
    LEARNING = "learning"
    PASSED = "passed"


class QuizQuestionType(str, Enum):
    """Kinds of AI-generated quiz questions."""
    MATCHING = "matching"
    SYNONYM_OR_ANTONYM = "synonymOrAntonym"
    CLOZE = "cloze"


class QuizAnswer(str, Enum):
    """Multiple-choice answer letters."""
    A = "A"
    B = "B"
    C = "C"
