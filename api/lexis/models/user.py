"""
User model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List
from datetime import datetime
from lexis.utils.time_utils import utc_now


class User(SQLModel, table=True):
    """User table - learner profile and learning preferences.

    Credentials live with the identity provider; this row only holds what the
    learning engine needs.
    """
    __tablename__ = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    surname: str
    email: str = Field(unique=True, index=True)  # Email address
    created_at: datetime = Field(default_factory=utc_now)

    # Flashcard configuration
    daily_new_limit: int = Field(default=10)  # New words per daily session
    daily_review_limit: int = Field(default=50)  # Total items per daily session
    learning_strategy: str = Field(default="random")  # 'random' or 'level_<codes>', e.g. 'level_a1_a2'

    # Relationships
    repetitions: List["Repetition"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all"},
    )
    flashcard_sessions: List["FlashcardSession"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all"},
    )
    quiz_sessions: List["QuizSession"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all"},
    )
