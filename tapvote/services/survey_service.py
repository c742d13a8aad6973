"""Survey catalog: creation, lookup and owner-only lifecycle changes."""
from __future__ import annotations

import logging
import uuid
from uuid import UUID

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tapvote.config import get_settings
from tapvote.models.base import parse_uuid
from tapvote.models.survey import Survey
from tapvote.schemas.survey import FollowUpQuestion
from tapvote.utils.exceptions import (
    AuthError,
    AuthenticationRequiredError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_follow_up_list = TypeAdapter(list[FollowUpQuestion])


def _first_error_message(exc: PydanticValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid follow-up questions"
    message = errors[0].get("msg", "Invalid follow-up questions")
    # Errors raised from model validators are prefixed by pydantic
    return message.removeprefix("Value error, ")


class SurveyService:
    """Service for managing survey definitions."""

    def __init__(self, db: AsyncSession, *, require_owner: bool | None = None):
        self.db = db
        self.settings = get_settings()
        self.require_owner = (
            self.settings.require_survey_owner if require_owner is None else require_owner
        )

    def _normalize_follow_ups(self, follow_up_questions) -> list[dict]:
        """Validate follow-up definitions and return them as JSON-ready dicts."""
        if not follow_up_questions:
            return []

        raw = [
            question.model_dump(mode="python") if isinstance(question, FollowUpQuestion) else question
            for question in follow_up_questions
        ]
        try:
            questions = _follow_up_list.validate_python(raw)
        except PydanticValidationError as exc:
            raise ValidationError(_first_error_message(exc)) from exc

        seen_ids = set()
        for question in questions:
            if question.id in seen_ids:
                raise ValidationError(f"Duplicate follow-up question id '{question.id}'")
            seen_ids.add(question.id)

        return [
            question.model_dump(mode="json", exclude_none=True)
            for question in questions
        ]

    async def create(
        self,
        title: str,
        question: str,
        follow_up_questions=None,
        owner_id: str | None = None,
    ) -> UUID:
        """Create an active survey and return its id.

        Raises:
            ValidationError: Empty title/question or malformed follow-up questions
            AuthenticationRequiredError: Owner required by deployment policy but absent
        """
        if self.require_owner and not owner_id:
            raise AuthenticationRequiredError("Sign in to create a survey")

        title = (title or "").strip()
        question = (question or "").strip()
        if not title:
            raise ValidationError("Please enter a survey title")
        if len(title) > self.settings.max_title_length:
            raise ValidationError(
                f"Survey title must be at most {self.settings.max_title_length} characters"
            )
        if not question:
            raise ValidationError("Please enter the main survey question")

        survey = Survey(
            survey_id=uuid.uuid4(),
            title=title,
            question=question,
            follow_up_questions=self._normalize_follow_ups(follow_up_questions),
            is_active=True,
            owner_id=owner_id or None,
        )
        self.db.add(survey)
        await self.db.commit()

        logger.info(
            f"Survey created: survey={survey.survey_id}, owner={owner_id}, "
            f"follow_ups={len(survey.follow_up_questions)}"
        )
        return survey.survey_id

    async def get(self, survey_id) -> Survey | None:
        """Return the survey, or None when it does not exist or the id is malformed."""
        parsed = parse_uuid(survey_id)
        if parsed is None:
            return None
        return await self.db.get(Survey, parsed)

    async def list(self) -> list[Survey]:
        """All surveys, newest first."""
        result = await self.db.execute(
            select(Survey).order_by(Survey.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_owned_by(self, owner_id: str) -> list[Survey]:
        """Surveys owned by ``owner_id``, newest first."""
        if not owner_id:
            return []
        result = await self.db.execute(
            select(Survey)
            .where(Survey.owner_id == owner_id)
            .order_by(Survey.created_at.desc())
        )
        return list(result.scalars().all())

    async def _get_owned(self, survey_id, requester_id: str | None) -> Survey:
        survey = await self.get(survey_id)
        if not survey:
            raise NotFoundError("Survey not found")
        # Ownerless surveys come from pre-auth deployments and stay open to anyone
        if survey.owner_id is None:
            return survey
        if not requester_id:
            raise AuthenticationRequiredError("Sign in to change this survey")
        if survey.owner_id != requester_id:
            logger.warning(
                f"Requester {requester_id} attempted to modify survey {survey.survey_id} "
                f"owned by {survey.owner_id}"
            )
            raise AuthError("Only the survey owner can change this survey")
        return survey

    async def toggle_active(self, survey_id, requester_id: str | None) -> Survey:
        """Open or close a survey for voting.

        Raises:
            NotFoundError: Survey does not exist
            AuthError: Requester is not the owner
        """
        survey = await self._get_owned(survey_id, requester_id)
        survey.is_active = not survey.is_active
        await self.db.commit()
        await self.db.refresh(survey)

        logger.info(f"Survey {survey.survey_id} is_active -> {survey.is_active}")
        return survey

    async def remove(self, survey_id, requester_id: str | None) -> None:
        """Delete a survey. Its votes and follow-up responses are kept.

        Raises:
            NotFoundError: Survey does not exist
            AuthError: Requester is not the owner
        """
        survey = await self._get_owned(survey_id, requester_id)
        await self.db.delete(survey)
        await self.db.commit()

        logger.info(f"Survey {survey.survey_id} deleted by {requester_id}")
