"""Read-only result views composed from the vote ledger."""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from tapvote.schemas.survey import SurveyWithResults, VoteTally
from tapvote.services.survey_service import SurveyService
from tapvote.services.vote_service import count_votes_by_survey, VoteService

logger = logging.getLogger(__name__)


class ResultsService:
    """Aggregates tallies for the organizer dashboard."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.survey_service = SurveyService(db)

    async def get_results(self, survey_id) -> VoteTally:
        return await VoteService(self.db).get_results(survey_id)

    async def list_owned_with_results(self, owner_id: str) -> list[SurveyWithResults]:
        """Every survey owned by ``owner_id`` with its tally, newest first."""
        surveys = await self.survey_service.list_owned_by(owner_id)
        tallies = await count_votes_by_survey(self.db, [survey.survey_id for survey in surveys])

        logger.debug(f"Computed results for {len(surveys)} surveys owned by {owner_id}")
        return [
            SurveyWithResults(
                survey_id=survey.survey_id,
                title=survey.title,
                question=survey.question,
                follow_up_questions=survey.follow_up_questions or [],
                is_active=survey.is_active,
                owner_id=survey.owner_id,
                created_at=survey.created_at,
                results=tallies[survey.survey_id],
            )
            for survey in surveys
        ]
