"""Vote intake for scanned tags and opened survey links."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tapvote.config import get_settings
from tapvote.models.base import VoteChoice
from tapvote.services.survey_service import SurveyService
from tapvote.services.vote_service import VoteService
from tapvote.utils import tag_payload
from tapvote.utils.exceptions import DuplicateVoteError, TapVoteException

logger = logging.getLogger(__name__)


class IntakeStatus(str, Enum):
    """Terminal states of one intake attempt.

    ``loading`` and ``voting`` are transient on the client and never returned.
    """
    INVALID = "invalid"
    ERROR = "error"
    ALREADY_VOTED = "already_voted"
    SUCCESS = "success"
    FOLLOW_UP = "follow_up"


@dataclass
class IntakeResult:
    status: IntakeStatus
    survey_id: str | None = None
    response: VoteChoice | None = None
    vote_id: UUID | None = None
    has_follow_up: bool = False
    message: str | None = None


class VoteIntakeService:
    """Turns a tag payload into a vote, mapping every outcome to an intake status."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()
        self.survey_service = SurveyService(db)
        self.vote_service = VoteService(db)

    async def intake(self, payload: str, device_id: str) -> IntakeResult:
        decoded = tag_payload.decode(payload, app_scheme=self.settings.app_url_scheme)
        if decoded is None:
            return IntakeResult(status=IntakeStatus.INVALID, message="Invalid survey link")

        response = VoteChoice(decoded.response)
        survey = await self.survey_service.get(decoded.survey_id)
        if not survey:
            return IntakeResult(
                status=IntakeStatus.ERROR,
                survey_id=decoded.survey_id,
                response=response,
                message="Survey not found",
            )
        if not survey.is_active:
            return IntakeResult(
                status=IntakeStatus.ERROR,
                survey_id=decoded.survey_id,
                response=response,
                message="This survey is no longer active",
            )

        if await self.vote_service.has_voted(survey.survey_id, device_id):
            return IntakeResult(
                status=IntakeStatus.ALREADY_VOTED,
                survey_id=decoded.survey_id,
                response=response,
                has_follow_up=survey.has_follow_up,
            )

        try:
            cast = await self.vote_service.cast(survey.survey_id, response, device_id)
        except DuplicateVoteError:
            # Lost a race against another scan from the same device
            return IntakeResult(
                status=IntakeStatus.ALREADY_VOTED,
                survey_id=decoded.survey_id,
                response=response,
                has_follow_up=survey.has_follow_up,
            )
        except TapVoteException as exc:
            logger.info(f"Tag intake failed for survey {decoded.survey_id}: {exc}")
            return IntakeResult(
                status=IntakeStatus.ERROR,
                survey_id=decoded.survey_id,
                response=response,
                message=str(exc),
            )

        return IntakeResult(
            status=IntakeStatus.FOLLOW_UP if cast.has_follow_up else IntakeStatus.SUCCESS,
            survey_id=str(cast.survey_id),
            response=cast.response,
            vote_id=cast.vote_id,
            has_follow_up=cast.has_follow_up,
        )
