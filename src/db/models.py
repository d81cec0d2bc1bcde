"""SQLAlchemy models for question/answer history."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class QAHistory(Base):
    """One answered question. Written once, never updated."""
    __tablename__ = "qa_history"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(256), nullable=False, index=True)
    question = Column(Text, nullable=False)
    response = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)  # StructuredAnswer wire shape
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
