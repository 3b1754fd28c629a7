"""
Quiz session schemas.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from lexis.models.enums import SessionStatus, QuizQuestionType, QuizAnswer


class QuizItemResponse(BaseModel):
    """One generated question."""
    id: int
    package_id: int
    word_id: int
    type: QuizQuestionType
    question: str
    correct_answer: str
    answer_a: str
    answer_b: str
    answer_c: str
    user_answer: Optional[str] = None

    class Config:
        from_attributes = True


class QuizPackageResponse(BaseModel):
    """A package of questions at one level."""
    id: int
    session_id: int
    package: str
    sequence: int
    level: Optional[str] = None
    created_at: datetime
    items: List[QuizItemResponse] = []

    class Config:
        from_attributes = True


class QuizSessionResponse(BaseModel):
    """A quiz session with its packages."""
    id: int
    user_id: int
    type: Optional[str] = None
    status: SessionStatus
    started_at: datetime
    ended_at: Optional[datetime] = None
    packages: List[QuizPackageResponse] = []

    class Config:
        from_attributes = True


class PackageAnswer(BaseModel):
    """A learner's answer to one question."""
    item_id: int
    answer: str = Field(..., description="Chosen letter: 'A', 'B' or 'C'")

    @field_validator('answer')
    @classmethod
    def validate_answer(cls, v):
        """Normalize the letter and reject anything but A, B or C."""
        letter = v.strip().upper()
        if letter not in {answer.value for answer in QuizAnswer}:
            raise ValueError("answer must be one of A, B or C")
        return letter


class SubmitPackageRequest(BaseModel):
    """Request schema for submitting answers of a package."""
    package_id: int
    answers: List[PackageAnswer]


class SubmitPackageResult(BaseModel):
    """Score of a submitted package."""
    package_id: int
    correct_count: int
    total: int
    score_percentage: float


class CreateQuizSessionRequest(BaseModel):
    """Request schema for creating a quiz session explicitly."""
    type: str = "default"
    status: SessionStatus = SessionStatus.ACTIVE
