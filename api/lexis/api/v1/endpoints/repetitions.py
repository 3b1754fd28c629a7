"""
Repetition endpoints.
"""
from fastapi import APIRouter, Depends
from sqlmodel import Session
from typing import List, Optional
import logging

from lexis.core.database import get_session
from lexis.schemas.repetition import RepetitionResponse, RepetitionStatsResponse, LevelStats
from lexis.services import repetition_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users/{user_id}/repetitions", tags=["repetitions"])


@router.get("", response_model=List[RepetitionResponse])
async def list_repetitions(
    user_id: int,
    word_id: Optional[int] = None,
    session: Session = Depends(get_session)
):
    """List the user's repetitions, optionally for one word."""
    repetitions = repetition_service.list_repetitions(session, user_id, word_id=word_id)
    return [RepetitionResponse.model_validate(r) for r in repetitions]


@router.get("/stats", response_model=RepetitionStatsResponse)
async def get_repetition_stats(
    user_id: int,
    session: Session = Depends(get_session)
):
    """
    Learning progress per CEFR level.

    For each level: words in the catalog, words started by the user, and how
    many of those are still being learned or already mastered (EF >= 2.8).
    """
    stats = repetition_service.get_repetition_stats(session, user_id)
    return RepetitionStatsResponse(
        user_id=user_id,
        levels=[LevelStats(**level_stats) for level_stats in stats.values()],
    )


@router.get("/{repetition_id}", response_model=RepetitionResponse)
async def get_repetition(
    user_id: int,
    repetition_id: int,
    session: Session = Depends(get_session)
):
    repetition = repetition_service.get_repetition(session, repetition_id, user_id)
    return RepetitionResponse.model_validate(repetition)
