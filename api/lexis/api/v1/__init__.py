"""
API v1 router aggregation.
"""
from fastapi import APIRouter
from lexis.api.v1.endpoints import (
    flashcard_sessions, quiz_sessions, repetitions, users, words
)

api_router = APIRouter()

# Include all endpoint routers
# Note: Each router already defines its own prefix, so we don't add another one here
api_router.include_router(words.router)
api_router.include_router(users.router)
api_router.include_router(repetitions.router)
api_router.include_router(flashcard_sessions.router)
api_router.include_router(quiz_sessions.router)
