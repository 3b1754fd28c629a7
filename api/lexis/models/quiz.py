"""
Quiz session, package and item models.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List
from datetime import datetime
from lexis.models.enums import SessionStatus, QuizQuestionType
from lexis.utils.time_utils import utc_now


class QuizSession(SQLModel, table=True):
    """QuizSession table - a quiz made of up to three adaptive packages."""
    __tablename__ = "quiz_session"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    type: Optional[str] = None
    status: SessionStatus = Field(default=SessionStatus.ACTIVE)
    started_at: datetime = Field(default_factory=utc_now, index=True)
    ended_at: Optional[datetime] = None

    # Relationships
    user: "User" = Relationship(back_populates="quiz_sessions")
    packages: List["QuizPackage"] = Relationship(
        back_populates="session",
        sa_relationship_kwargs={"cascade": "all", "order_by": "QuizPackage.sequence"},
    )


class QuizPackage(SQLModel, table=True):
    """QuizPackage table - a batch of generated questions at one level."""
    __tablename__ = "quiz_package"

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="quiz_session.id", index=True)
    package: str  # Ordinal name: 'package-1', 'package-2', ...
    sequence: int  # Numeric ordinal, used for ordering
    level: Optional[str] = None  # CEFR range: 'A1-A2', 'B1-B2' or 'C1-C2'
    created_at: datetime = Field(default_factory=utc_now)

    # Relationships
    session: "QuizSession" = Relationship(back_populates="packages")
    items: List["QuizItem"] = Relationship(
        back_populates="package",
        sa_relationship_kwargs={"cascade": "all", "order_by": "QuizItem.id"},
    )


class QuizItem(SQLModel, table=True):
    """QuizItem table - one multiple-choice question."""
    __tablename__ = "quiz_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    package_id: int = Field(foreign_key="quiz_package.id", index=True)
    word_id: int = Field(foreign_key="word.id")
    type: QuizQuestionType
    question: str
    correct_answer: str  # 'A', 'B' or 'C'
    answer_a: str
    answer_b: str
    answer_c: str
    user_answer: Optional[str] = None  # Set when the learner submits the package
    created_at: datetime = Field(default_factory=utc_now)

    # Relationships
    package: "QuizPackage" = Relationship(back_populates="items")
