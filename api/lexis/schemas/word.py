"""
Word catalog schemas.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from lexis.models.enums import CEFRLevel
from lexis.schemas.utils import normalize_part_of_speech


class MeaningResponse(BaseModel):
    """Meaning response schema."""
    id: int
    meaning: str

    class Config:
        from_attributes = True


class WordResponse(BaseModel):
    """Word response schema."""
    id: int
    text: str
    level: CEFRLevel
    pronunciation: str
    part_of_speech: List[str] = []
    meanings: List[MeaningResponse] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WordCreateRequest(BaseModel):
    """Request schema for adding a word to the catalog."""
    text: str = Field(..., min_length=1, description="The word itself")
    level: CEFRLevel = Field(..., description="CEFR level (A1-C2)")
    pronunciation: str = Field(..., description="IPA pronunciation")
    part_of_speech: List[str] = Field(default_factory=list, description="Parts of speech, e.g. ['noun', 'verb']")
    meanings: List[str] = Field(default_factory=list, description="Translations or definitions")

    @field_validator('text')
    @classmethod
    def validate_text(cls, v):
        """Validate text field is not empty."""
        if not v or not v.strip():
            raise ValueError("text cannot be empty")
        return v.strip()

    @field_validator('part_of_speech', mode='before')
    @classmethod
    def validate_part_of_speech(cls, v):
        return normalize_part_of_speech(v)
