"""
Repetition model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List
from datetime import datetime
from lexis.utils.time_utils import start_of_day


class Repetition(SQLModel, table=True):
    """Repetition table - SM-2 state of one word for one user."""
    __tablename__ = "repetition"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    word_id: int = Field(foreign_key="word.id", index=True)
    easiness_factor: float = Field(default=2.5)  # Never below 1.31
    repetitions: int = Field(default=0)  # Consecutive successful recalls
    next_interval: int = Field(default=0)  # Days until next review
    date_next_rep: datetime = Field(default_factory=start_of_day, index=True)
    date_last_rep: Optional[datetime] = None

    # Relationships
    user: "User" = Relationship(back_populates="repetitions")
    word: "Word" = Relationship(back_populates="repetitions")
    items: List["FlashcardItem"] = Relationship(
        back_populates="repetition",
        sa_relationship_kwargs={"cascade": "all"},
    )
