"""
Quiz session endpoints.
"""
from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List
import logging

from lexis.core.config import settings
from lexis.core.database import get_session
from lexis.schemas.quiz import (
    QuizSessionResponse,
    QuizPackageResponse,
    SubmitPackageRequest,
    SubmitPackageResult,
    CreateQuizSessionRequest,
)
from lexis.services.quiz_generator_service import XaiQuestionGenerator
from lexis.services.quiz_session_service import QuizSessionService, QuizConfig

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users/{user_id}/quizzes-sessions", tags=["quizzes"])


def get_quiz_service() -> QuizSessionService:
    """Dependency providing the quiz engine with the xAI generator."""
    return QuizSessionService(XaiQuestionGenerator(), QuizConfig.from_settings(settings))


@router.get("", response_model=List[QuizSessionResponse])
def list_quiz_sessions(
    user_id: int,
    session: Session = Depends(get_session),
    quiz_service: QuizSessionService = Depends(get_quiz_service)
):
    """List the user's quiz sessions with packages and items, newest first."""
    sessions = quiz_service.list_sessions(session, user_id)
    return [QuizSessionResponse.model_validate(s) for s in sessions]


@router.post("", response_model=QuizSessionResponse, status_code=status.HTTP_201_CREATED)
def create_quiz_session(
    user_id: int,
    request: CreateQuizSessionRequest,
    session: Session = Depends(get_session),
    quiz_service: QuizSessionService = Depends(get_quiz_service)
):
    """Create a quiz session with its first package."""
    quiz_session = quiz_service.create_session(session, user_id, request.type, request.status)
    return QuizSessionResponse.model_validate(quiz_session)


@router.post("/start", response_model=QuizSessionResponse)
def start_quiz_session(
    user_id: int,
    session: Session = Depends(get_session),
    quiz_service: QuizSessionService = Depends(get_quiz_service)
):
    """
    Resume today's active quiz session or start a new one.

    A new session comes with its first package at the default level.
    """
    quiz_session = quiz_service.start_session(session, user_id)
    return QuizSessionResponse.model_validate(quiz_session)


@router.post("/next-package", response_model=QuizPackageResponse, status_code=status.HTTP_201_CREATED)
def generate_next_package(
    user_id: int,
    session: Session = Depends(get_session),
    quiz_service: QuizSessionService = Depends(get_quiz_service)
):
    """
    Generate the next package of the active session.

    The level goes up after a score above 75% and down after a score
    below 50% on the previous package.
    """
    package = quiz_service.generate_next_package(session, user_id)
    return QuizPackageResponse.model_validate(package)


@router.post("/submit-package", response_model=SubmitPackageResult)
def submit_package(
    user_id: int,
    request: SubmitPackageRequest,
    session: Session = Depends(get_session),
    quiz_service: QuizSessionService = Depends(get_quiz_service)
):
    """Record answers for a package and return its score."""
    result = quiz_service.submit_package(session, user_id, request.package_id, request.answers)
    return SubmitPackageResult(**result)


@router.post("/finish", response_model=QuizSessionResponse)
def finish_quiz_session(
    user_id: int,
    session: Session = Depends(get_session),
    quiz_service: QuizSessionService = Depends(get_quiz_service)
):
    """Finish the active session once all packages are answered."""
    quiz_session = quiz_service.finish_session(session, user_id)
    return QuizSessionResponse.model_validate(quiz_session)


@router.get("/{session_id}", response_model=QuizSessionResponse)
def get_quiz_session(
    user_id: int,
    session_id: int,
    session: Session = Depends(get_session),
    quiz_service: QuizSessionService = Depends(get_quiz_service)
):
    quiz_session = quiz_service.get_session(session, session_id, user_id)
    return QuizSessionResponse.model_validate(quiz_session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_quiz_session(
    user_id: int,
    session_id: int,
    session: Session = Depends(get_session),
    quiz_service: QuizSessionService = Depends(get_quiz_service)
):
    quiz_service.delete_session(session, session_id, user_id)
