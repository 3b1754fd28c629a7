"""
Word catalog endpoints.
"""
from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List, Optional
import logging

from lexis.core.database import get_session
from lexis.models.enums import CEFRLevel
from lexis.schemas.word import WordResponse, WordCreateRequest
from lexis.services import word_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/words", tags=["words"])


@router.get("", response_model=List[WordResponse])
async def list_words(
    level: Optional[CEFRLevel] = None,
    session: Session = Depends(get_session)
):
    words = word_service.list_words(session, level=level)
    return [WordResponse.model_validate(w) for w in words]


@router.post("", response_model=WordResponse, status_code=status.HTTP_201_CREATED)
async def create_word(
    request: WordCreateRequest,
    session: Session = Depends(get_session)
):
    """Add a word with its meanings to the catalog. Duplicate text returns 409."""
    word = word_service.create_word(
        session,
        text=request.text,
        level=request.level,
        pronunciation=request.pronunciation,
        part_of_speech=request.part_of_speech,
        meanings=request.meanings,
    )
    return WordResponse.model_validate(word)


@router.get("/{word_id}", response_model=WordResponse)
async def get_word(
    word_id: int,
    session: Session = Depends(get_session)
):
    word = word_service.get_word(session, word_id)
    return WordResponse.model_validate(word)
