"""Follow-up answer schemas."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field, StrictFloat, StrictInt, StrictStr

from tapvote.schemas.base import BaseSchema

# Strict members keep JSON booleans from being coerced into numbers
AnswerValue = StrictStr | StrictInt | StrictFloat | list[StrictStr]


class FollowUpAnswer(BaseSchema):
    """Single answer in a follow-up batch."""

    question_id: str = Field(..., min_length=1)
    answer: AnswerValue


class FollowUpSubmission(BaseSchema):
    """Follow-up submission payload from the client."""

    vote_id: UUID
    device_id: str = Field(..., min_length=1, max_length=128)
    answers: list[FollowUpAnswer]


class FollowUpSubmissionResponse(BaseSchema):
    """Acknowledgement returned after storing a follow-up batch."""

    success: bool


class FollowUpResponseRecord(BaseSchema):
    """Representation of a stored follow-up response."""

    response_id: UUID
    survey_id: UUID
    vote_id: UUID
    answers: list[FollowUpAnswer]
    device_id: str
    created_at: datetime


class QuestionSummary(BaseSchema):
    """Answer counts for one follow-up question."""

    question: str
    type: str
    answers: dict[str, int]
