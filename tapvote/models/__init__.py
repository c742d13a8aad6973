"""Database models."""
from tapvote.models.survey import Survey
from tapvote.models.vote import Vote
from tapvote.models.follow_up_response import FollowUpResponse

__all__ = [
    "Survey",
    "Vote",
    "FollowUpResponse",
]
