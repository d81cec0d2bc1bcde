"""Pydantic schemas for structured data.

This package contains:
- answers.py: The StructuredAnswer union (text / list / error)
- api.py: Request/response schemas for the REST API

Answers are built by src.llm.validators from raw model output and are
immutable from then on.
"""

from src.schemas.answers import (
    TextAnswer,
    ListItem,
    ListAnswer,
    ErrorAnswer,
    StructuredAnswer,
    structured_answer_adapter,
    is_persistable,
)

from src.schemas.api import (
    AskRequest,
    HistoryEntry,
    HistoryListResponse,
)

__all__ = [
    # Answers
    "TextAnswer",
    "ListItem",
    "ListAnswer",
    "ErrorAnswer",
    "StructuredAnswer",
    "structured_answer_adapter",
    "is_persistable",
    # API
    "AskRequest",
    "HistoryEntry",
    "HistoryListResponse",
]
