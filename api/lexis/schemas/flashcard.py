"""
Flashcard session schemas.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from lexis.models.enums import SessionStatus, FlashcardItemStatus, FlashcardItemStage
from lexis.schemas.repetition import RepetitionResponse
from lexis.schemas.word import WordResponse


class FlashcardItemResponse(BaseModel):
    """One card of a session with its repetition state and word."""
    id: int
    session_id: int
    repetition_id: int
    status: FlashcardItemStatus
    stage: FlashcardItemStage
    repetition: Optional[RepetitionResponse] = None
    word: Optional[WordResponse] = None


class FlashcardSessionStats(BaseModel):
    """Item counts of a session."""
    new_cards: int
    review_cards: int
    repeat_cards: int  # Items in stage 'learning'
    mastered_cards: int  # Items in stage 'passed'
    total_cards: int


class FlashcardSessionSummary(BaseModel):
    """Session without items, with derived stats."""
    id: int
    user_id: int
    type: Optional[str] = None
    status: SessionStatus
    started_at: datetime
    ended_at: Optional[datetime] = None
    stats: FlashcardSessionStats


class FlashcardSessionResponse(FlashcardSessionSummary):
    """Session with its items."""
    items: List[FlashcardItemResponse] = []


class CreateFlashcardSessionRequest(BaseModel):
    """Request schema for creating a session explicitly."""
    type: Optional[str] = Field(None, description="Word selection strategy, e.g. 'random' or 'level_a1_a2'")
    status: SessionStatus = SessionStatus.ACTIVE


class SendScoreRequest(BaseModel):
    """Request schema for grading a card."""
    score: int = Field(..., description="Recall quality from 0 (blackout) to 5 (perfect)")
