"""Vote-related Pydantic schemas."""
from uuid import UUID

from pydantic import Field

from tapvote.models.base import VoteChoice
from tapvote.schemas.base import BaseSchema


class VoteCastRequest(BaseSchema):
    """Vote submission payload."""

    response: VoteChoice
    device_id: str = Field(..., min_length=1, max_length=128)


class VoteCastResponse(BaseSchema):
    """Result of a successful vote; carries what the follow-up step needs."""

    survey_id: UUID
    vote_id: UUID
    response: VoteChoice
    has_follow_up: bool


class VoteStatusResponse(BaseSchema):
    """Whether a device already voted on a survey."""

    has_voted: bool
