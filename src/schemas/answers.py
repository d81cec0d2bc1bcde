"""Pydantic schemas for structured answers.

Every answer that leaves the pipeline is one of three shapes, discriminated
by ``type``:

  text  → {"type": "text", "answer": "...", "follow_up": ...}
  list  → {"type": "list", "title": "...", "items": [{"point", "detail"}], ...}
  error → {"type": "error", "message": "...", "code": "PV01"}

The models are frozen. Once the validator has built an answer, persistence
and transport only read it.

These schemas are NOT used to parse raw LLM output directly. Model output is
coerced field by field in src.llm.validators so that one bad sub-field
degrades gracefully instead of rejecting the whole payload.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


# =============================================================================
# SHARED
# =============================================================================

class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class _AnswerBase(_FrozenModel):
    """Fields shared by the text and list variants."""

    follow_up: Optional[str] = Field(
        None, description="Optional follow-up question suggested by the model"
    )
    source_section_id: Optional[str] = Field(
        None, description="Identifier of the guide section the answer came from"
    )
    source_section_title: Optional[str] = Field(
        None, description="Title of the guide section the answer came from"
    )
    provider: Optional[str] = Field(
        None, description="Label of the provider that produced this answer"
    )


# =============================================================================
# VARIANTS
# =============================================================================

class TextAnswer(_AnswerBase):
    type: Literal["text"] = "text"
    answer: str


class ListItem(_FrozenModel):
    point: str
    detail: str


class ListAnswer(_AnswerBase):
    type: Literal["list"] = "list"
    title: str
    items: tuple[ListItem, ...] = ()


class ErrorAnswer(_FrozenModel):
    """Terminal failure, either synthesized by the pipeline or emitted by the model.

    ``code`` identifies the stage that failed (PV0x, CFG0x, F0x). It is None
    when the model itself answered with an error payload.
    """

    type: Literal["error"] = "error"
    message: str
    code: Optional[str] = None
    provider: Optional[str] = None


StructuredAnswer = Annotated[
    Union[TextAnswer, ListAnswer, ErrorAnswer],
    Field(discriminator="type"),
]

structured_answer_adapter: TypeAdapter = TypeAdapter(StructuredAnswer)


def is_persistable(answer: Union[TextAnswer, ListAnswer, ErrorAnswer]) -> bool:
    """Only real answers are stored in history, never errors."""
    return answer.type in ("text", "list")
