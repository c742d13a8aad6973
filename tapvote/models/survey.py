"""Survey model."""
from __future__ import annotations

import uuid
from datetime import datetime, UTC

from sqlalchemy import Boolean, Column, DateTime, JSON, String, Text, Index

from tapvote.database import Base
from tapvote.models.base import get_uuid_column


class Survey(Base):
    """Organizer-authored survey with a yes/no question and optional follow-ups."""

    __tablename__ = "surveys"

    survey_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    question = Column(Text, nullable=False)
    # Ordered list of follow-up question dicts; list order is display order
    follow_up_questions = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    owner_id = Column(String(128), nullable=True, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        index=True,
    )

    __table_args__ = (
        Index("ix_surveys_owner_created", "owner_id", "created_at"),
    )

    @property
    def has_follow_up(self) -> bool:
        return bool(self.follow_up_questions)

    def __repr__(self) -> str:
        return f"<Survey(survey_id={self.survey_id}, title={self.title!r}, is_active={self.is_active})>"
