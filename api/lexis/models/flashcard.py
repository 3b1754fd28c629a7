"""
Flashcard session and item models.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List
from datetime import datetime
from lexis.models.enums import SessionStatus, FlashcardItemStatus, FlashcardItemStage
from lexis.utils.time_utils import utc_now


class FlashcardSession(SQLModel, table=True):
    """FlashcardSession table - one daily flashcard session."""
    __tablename__ = "flashcard_session"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    type: Optional[str] = None  # Word selection strategy, e.g. 'random' or 'level_a1_a2'
    status: SessionStatus = Field(default=SessionStatus.ACTIVE)
    started_at: datetime = Field(default_factory=utc_now, index=True)
    ended_at: Optional[datetime] = None

    # Relationships
    user: "User" = Relationship(back_populates="flashcard_sessions")
    items: List["FlashcardItem"] = Relationship(
        back_populates="session",
        sa_relationship_kwargs={"cascade": "all", "order_by": "FlashcardItem.id"},
    )


class FlashcardItem(SQLModel, table=True):
    """FlashcardItem table - one card of a session, backed by a repetition."""
    __tablename__ = "flashcard_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="flashcard_session.id", index=True)
    repetition_id: int = Field(foreign_key="repetition.id", index=True)
    status: FlashcardItemStatus
    stage: FlashcardItemStage = Field(default=FlashcardItemStage.REVIEW)

    # Relationships
    session: "FlashcardSession" = Relationship(back_populates="items")
    repetition: "Repetition" = Relationship(back_populates="items")
