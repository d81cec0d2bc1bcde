"""Pydantic schemas for API requests/responses."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.schemas.answers import StructuredAnswer


class AskRequest(BaseModel):
    """Request body for asking a question."""
    question: str = Field(..., description="Natural-language question about the guide")

    @field_validator("question")
    @classmethod
    def question_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Question is required and must be a non-empty string.")
        return v


class HistoryEntry(BaseModel):
    """One persisted question/answer exchange."""
    id: str
    user_id: str
    question: str
    response: StructuredAnswer
    timestamp: datetime


class HistoryListResponse(BaseModel):
    """A user's recent exchanges, newest first."""
    items: list[HistoryEntry]
    limit: int
