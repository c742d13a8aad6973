"""Vote ledger: one vote per (survey, device)."""
import logging
import uuid
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tapvote.models.base import VoteChoice, parse_uuid
from tapvote.models.survey import Survey
from tapvote.models.vote import Vote
from tapvote.schemas.survey import VoteTally
from tapvote.utils.device_identity import is_valid_device_id
from tapvote.utils.exceptions import (
    DuplicateVoteError,
    InactiveSurveyError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

VOTE_UNIQUE_MARKERS = ("uq_votes_survey_device", "votes.survey_id, votes.device_id")


def is_unique_violation(exc: IntegrityError, markers: tuple[str, ...]) -> bool:
    """Tell whether an IntegrityError came from one specific unique index.

    PostgreSQL reports the constraint name, SQLite the column list.
    """
    constraint_name = getattr(getattr(exc.orig, "diag", None), "constraint_name", None)
    if constraint_name and constraint_name in markers:
        return True
    error_message = str(exc)
    return any(marker in error_message for marker in markers)


async def count_votes_by_survey(db: AsyncSession, survey_ids) -> dict[UUID, VoteTally]:
    """Tally yes/no votes for several surveys with a single grouped query."""
    survey_ids = list(survey_ids)
    tallies = {survey_id: VoteTally() for survey_id in survey_ids}
    if not survey_ids:
        return tallies

    result = await db.execute(
        select(Vote.survey_id, Vote.response, func.count())
        .where(Vote.survey_id.in_(survey_ids))
        .group_by(Vote.survey_id, Vote.response)
    )
    counts: dict[UUID, dict[str, int]] = {}
    for survey_id, response, count in result.all():
        counts.setdefault(survey_id, {})[response] = int(count)

    for survey_id, by_response in counts.items():
        tallies[survey_id] = VoteTally.from_counts(
            yes=by_response.get(VoteChoice.YES.value, 0),
            no=by_response.get(VoteChoice.NO.value, 0),
        )
    return tallies


@dataclass(frozen=True)
class CastResult:
    """Outcome of a successful vote; the follow-up step needs all of it."""
    survey_id: UUID
    vote_id: UUID
    response: VoteChoice
    has_follow_up: bool


class VoteService:
    """Service for casting votes and reading tallies."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _parse_choice(response) -> VoteChoice:
        try:
            return VoteChoice(str(getattr(response, "value", response)).strip().lower())
        except ValueError as exc:
            raise ValidationError("Response must be 'yes' or 'no'") from exc

    async def cast(self, survey_id, response, device_id: str) -> CastResult:
        """
        Record a device's answer to a survey's primary question.

        Checks, in order: survey exists, survey is active, device has not voted.
        The unique index on (survey_id, device_id) decides races between
        concurrent casts; the loser gets DuplicateVoteError.

        Raises:
            ValidationError: Response is not yes/no or device id is blank
            NotFoundError: Survey does not exist
            InactiveSurveyError: Survey is closed
            DuplicateVoteError: Device already voted on this survey
        """
        choice = self._parse_choice(response)
        if not is_valid_device_id(device_id):
            raise ValidationError("A device id is required to vote")

        parsed_id = parse_uuid(survey_id)
        survey = await self.db.get(Survey, parsed_id) if parsed_id else None
        if not survey:
            raise NotFoundError("Survey not found")
        if not survey.is_active:
            raise InactiveSurveyError("This survey is no longer active")

        if await self.has_voted(survey.survey_id, device_id):
            raise DuplicateVoteError("You have already voted on this survey")

        has_follow_up = survey.has_follow_up
        vote = Vote(
            vote_id=uuid.uuid4(),
            survey_id=survey.survey_id,
            response=choice.value,
            device_id=device_id,
        )
        self.db.add(vote)

        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            if is_unique_violation(exc, VOTE_UNIQUE_MARKERS):
                logger.info(
                    f"Concurrent duplicate vote rejected: survey={survey_id}, device={device_id}"
                )
                raise DuplicateVoteError("You have already voted on this survey") from exc
            raise

        logger.info(
            f"Vote cast: survey={vote.survey_id}, vote={vote.vote_id}, response={choice.value}"
        )
        return CastResult(
            survey_id=vote.survey_id,
            vote_id=vote.vote_id,
            response=choice,
            has_follow_up=has_follow_up,
        )

    async def has_voted(self, survey_id, device_id: str) -> bool:
        """Whether the device already has a vote on the survey."""
        parsed_id = parse_uuid(survey_id)
        if parsed_id is None or not device_id:
            return False

        result = await self.db.execute(
            select(Vote.vote_id)
            .where(Vote.survey_id == parsed_id)
            .where(Vote.device_id == device_id)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def get_results(self, survey_id) -> VoteTally:
        """Yes/no tally for a survey; an empty tally for unknown ids."""
        parsed_id = parse_uuid(survey_id)
        if parsed_id is None:
            return VoteTally()
        tallies = await count_votes_by_survey(self.db, [parsed_id])
        return tallies[parsed_id]
