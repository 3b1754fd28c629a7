"""
Repetition schemas.
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class RepetitionResponse(BaseModel):
    """SM-2 state of one word for one user."""
    id: int
    user_id: int
    word_id: int
    easiness_factor: float
    repetitions: int
    next_interval: int
    date_next_rep: datetime
    date_last_rep: Optional[datetime] = None

    class Config:
        from_attributes = True


class LevelStats(BaseModel):
    """Learning progress for a single CEFR level."""
    level: str
    total: int  # Words in the catalog
    total_user: int  # Words the user has started
    learning: int
    mastered: int


class RepetitionStatsResponse(BaseModel):
    """Per-level learning progress of a user."""
    user_id: int
    levels: List[LevelStats]
