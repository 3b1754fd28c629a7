"""
Word and Meaning models.
"""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import Optional, List
from datetime import datetime
from lexis.models.enums import CEFRLevel
from lexis.utils.time_utils import utc_now


class Word(SQLModel, table=True):
    """Word table - reference vocabulary shared by all users."""
    __tablename__ = "word"

    id: Optional[int] = Field(default=None, primary_key=True)
    level: CEFRLevel = Field(index=True)  # CEFR language proficiency level (A1-C2)
    part_of_speech: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    text: str = Field(unique=True, index=True)  # The word itself
    pronunciation: str  # IPA pronunciation
    created_at: datetime = Field(default_factory=utc_now)

    # Relationships
    meanings: List["Meaning"] = Relationship(
        back_populates="word",
        sa_relationship_kwargs={"cascade": "all"},
    )
    repetitions: List["Repetition"] = Relationship(
        back_populates="word",
        sa_relationship_kwargs={"cascade": "all"},
    )


class Meaning(SQLModel, table=True):
    """Meaning table - translations/definitions of a word."""
    __tablename__ = "meaning"

    id: Optional[int] = Field(default=None, primary_key=True)
    word_id: int = Field(foreign_key="word.id", index=True)
    meaning: str

    # Relationships
    word: "Word" = Relationship(back_populates="meanings")
