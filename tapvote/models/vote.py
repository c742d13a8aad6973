"""Vote model."""
from __future__ import annotations

import uuid
from datetime import datetime, UTC

from sqlalchemy import CheckConstraint, Column, DateTime, String, Index

from tapvote.database import Base
from tapvote.models.base import get_uuid_column


class Vote(Base):
    """One device's answer to a survey's primary question.

    survey_id has no foreign key; votes outlive a deleted survey.
    """

    __tablename__ = "votes"

    vote_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    survey_id = get_uuid_column(nullable=False, index=True)
    response = Column(String(3), nullable=False)  # "yes" or "no"
    device_id = Column(String(128), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    __table_args__ = (
        Index("uq_votes_survey_device", "survey_id", "device_id", unique=True),
        CheckConstraint("response IN ('yes', 'no')", name="ck_votes_response"),
    )

    def __repr__(self) -> str:
        return f"<Vote(vote_id={self.vote_id}, survey_id={self.survey_id}, response={self.response})>"
