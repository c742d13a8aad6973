"""Follow-up response model."""
from __future__ import annotations

import uuid
from datetime import datetime, UTC

from sqlalchemy import Column, DateTime, JSON, String, Index, ForeignKey

from tapvote.database import Base
from tapvote.models.base import get_uuid_column


class FollowUpResponse(Base):
    """Batch of follow-up answers tied to exactly one vote."""

    __tablename__ = "follow_up_responses"

    response_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    survey_id = get_uuid_column(nullable=False, index=True)
    vote_id = get_uuid_column(ForeignKey("votes.vote_id"), nullable=False)
    answers = Column(JSON, nullable=False)
    device_id = Column(String(128), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    __table_args__ = (
        Index("uq_follow_up_responses_vote", "vote_id", unique=True),
    )

    def __repr__(self) -> str:
        return (
            f"<FollowUpResponse(response_id={self.response_id}, vote_id={self.vote_id}, "
            f"survey_id={self.survey_id})>")
