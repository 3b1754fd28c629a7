"""
Flashcard session endpoints.
"""
from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List
import logging

from lexis.core.database import get_session
from lexis.models.models import FlashcardSession, FlashcardItem
from lexis.schemas.flashcard import (
    FlashcardItemResponse,
    FlashcardSessionResponse,
    FlashcardSessionSummary,
    FlashcardSessionStats,
    CreateFlashcardSessionRequest,
    SendScoreRequest,
)
from lexis.schemas.repetition import RepetitionResponse
from lexis.schemas.word import WordResponse
from lexis.services import flashcard_session_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users/{user_id}/flashcards-sessions", tags=["flashcards"])


def item_to_response(item: FlashcardItem) -> FlashcardItemResponse:
    repetition = item.repetition
    return FlashcardItemResponse(
        id=item.id,
        session_id=item.session_id,
        repetition_id=item.repetition_id,
        status=item.status,
        stage=item.stage,
        repetition=RepetitionResponse.model_validate(repetition) if repetition else None,
        word=WordResponse.model_validate(repetition.word) if repetition else None,
    )


def session_to_summary(flashcard_session: FlashcardSession) -> FlashcardSessionSummary:
    return FlashcardSessionSummary(
        id=flashcard_session.id,
        user_id=flashcard_session.user_id,
        type=flashcard_session.type,
        status=flashcard_session.status,
        started_at=flashcard_session.started_at,
        ended_at=flashcard_session.ended_at,
        stats=FlashcardSessionStats(
            **flashcard_session_service.calculate_session_stats(flashcard_session.items)
        ),
    )


def session_to_response(flashcard_session: FlashcardSession) -> FlashcardSessionResponse:
    summary = session_to_summary(flashcard_session)
    return FlashcardSessionResponse(
        **summary.model_dump(),
        items=[item_to_response(item) for item in flashcard_session.items],
    )


@router.get("", response_model=List[FlashcardSessionSummary])
async def list_flashcard_sessions(
    user_id: int,
    session: Session = Depends(get_session)
):
    """List the user's flashcard sessions, newest first, with item stats."""
    sessions = flashcard_session_service.list_sessions(session, user_id)
    return [session_to_summary(s) for s in sessions]


@router.post("", response_model=FlashcardSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_flashcard_session(
    user_id: int,
    request: CreateFlashcardSessionRequest,
    session: Session = Depends(get_session)
):
    """Create a flashcard session with an explicit strategy, bypassing the daily check."""
    flashcard_session = flashcard_session_service.create_session(
        session, user_id, request.type, request.status
    )
    return session_to_response(flashcard_session)


@router.post("/start", response_model=FlashcardSessionResponse)
async def start_flashcard_session(
    user_id: int,
    session: Session = Depends(get_session)
):
    """
    Start today's flashcard session.

    Returns today's session if it exists. Otherwise any earlier active session
    is completed and a new one is populated with due reviews and new words.
    """
    flashcard_session = flashcard_session_service.start_session(session, user_id)
    return session_to_response(flashcard_session)


@router.post("/finish", response_model=FlashcardSessionResponse)
async def finish_flashcard_session(
    user_id: int,
    session: Session = Depends(get_session)
):
    """Finish the latest session. Every item must be passed."""
    flashcard_session = flashcard_session_service.finish_session(session, user_id)
    return session_to_response(flashcard_session)


@router.get("/{session_id}", response_model=FlashcardSessionResponse)
async def get_flashcard_session(
    user_id: int,
    session_id: int,
    session: Session = Depends(get_session)
):
    flashcard_session = flashcard_session_service.get_session(session, session_id, user_id)
    return session_to_response(flashcard_session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_flashcard_session(
    user_id: int,
    session_id: int,
    session: Session = Depends(get_session)
):
    flashcard_session_service.delete_session(session, session_id, user_id)


@router.post("/{session_id}/items/{item_id}/send-score", response_model=FlashcardItemResponse)
async def send_item_score(
    user_id: int,
    session_id: int,
    item_id: int,
    request: SendScoreRequest,
    session: Session = Depends(get_session)
):
    """
    Grade a card (0-5) and reschedule its word with SM-2.

    Scores of 3 and above pass the card; lower scores put it back in learning.
    """
    item = flashcard_session_service.send_score(
        session,
        item_id,
        request.score,
        user_id=user_id,
        flashcard_session_id=session_id,
    )
    return item_to_response(item)
