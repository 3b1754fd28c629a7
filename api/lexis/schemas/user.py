"""
User settings schemas.
"""
from pydantic import BaseModel, Field
from typing import Optional


class UserSettingsResponse(BaseModel):
    """Flashcard settings of a user."""
    user_id: int
    daily_new_limit: int
    daily_review_limit: int
    learning_strategy: str


class UpdateUserSettingsRequest(BaseModel):
    """Request schema for updating flashcard settings. Omitted fields are left unchanged."""
    daily_new_limit: Optional[int] = Field(None, ge=0, le=100, description="New words per daily session")
    daily_review_limit: Optional[int] = Field(None, ge=0, le=500, description="Total items per daily session")
    learning_strategy: Optional[str] = Field(
        None, min_length=1, description="'random' or 'level_<codes>', e.g. 'level_a1_a2'"
    )
