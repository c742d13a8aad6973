"""Follow-up response store: at most one answer batch per vote."""
import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tapvote.models.base import FollowUpQuestionType, VoteChoice, parse_uuid
from tapvote.models.follow_up_response import FollowUpResponse
from tapvote.models.survey import Survey
from tapvote.models.vote import Vote
from tapvote.schemas.follow_up import FollowUpAnswer
from tapvote.services.vote_service import is_unique_violation
from tapvote.utils.exceptions import (
    AuthError,
    DuplicateSubmissionError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

FOLLOW_UP_UNIQUE_MARKERS = ("uq_follow_up_responses_vote", "follow_up_responses.vote_id")


def answer_key(answer: Any) -> str:
    """Canonical string form used to count an answer.

    Lists join with ", "; integral floats drop their fractional part.
    """
    if isinstance(answer, (list, tuple)):
        return ", ".join(str(item) for item in answer)
    if isinstance(answer, float) and answer.is_integer():
        return str(int(answer))
    return str(answer)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def check_answer_type(question: dict, answer: Any) -> None:
    """Check that an answer's shape matches the question's declared type."""
    question_id = question.get("id")
    question_type = question.get("type")

    if question_type == FollowUpQuestionType.YES_NO.value:
        if not isinstance(answer, str) or answer.lower() not in (VoteChoice.YES.value, VoteChoice.NO.value):
            raise ValidationError(f"Question '{question_id}' expects 'yes' or 'no'")
    elif question_type == FollowUpQuestionType.MULTIPLE_CHOICE.value:
        is_text_list = isinstance(answer, list) and all(isinstance(item, str) for item in answer)
        if not isinstance(answer, str) and not is_text_list:
            raise ValidationError(f"Question '{question_id}' expects one or more options")
    elif question_type == FollowUpQuestionType.RATING.value:
        if not _is_number(answer) or not float(answer).is_integer():
            raise ValidationError(f"Question '{question_id}' expects a whole-number rating")
        low, high = question.get("min"), question.get("max")
        if low is not None and high is not None and not low <= answer <= high:
            raise ValidationError(f"Question '{question_id}' rating must be between {low} and {high}")
    elif question_type == FollowUpQuestionType.TEXT.value:
        if not isinstance(answer, str):
            raise ValidationError(f"Question '{question_id}' expects text")


def _normalize_answers(answers) -> list[dict]:
    normalized = []
    for item in answers or []:
        if isinstance(item, FollowUpAnswer):
            question_id, answer = item.question_id, item.answer
        elif isinstance(item, dict):
            question_id = item.get("question_id", item.get("questionId"))
            answer = item.get("answer")
        else:
            raise ValidationError("Each answer needs a question_id and an answer")

        if not isinstance(question_id, str) or not question_id:
            raise ValidationError("Each answer needs a question_id")
        if isinstance(answer, tuple):
            answer = list(answer)
        if answer is None or isinstance(answer, bool) or not (
            isinstance(answer, (str, list)) or _is_number(answer)
        ):
            raise ValidationError(f"Answer for '{question_id}' must be text, a number or a list of text")
        normalized.append({"question_id": question_id, "answer": answer})
    return normalized


class FollowUpService:
    """Service for follow-up answer batches."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def submit(self, survey_id, vote_id, answers, device_id: str) -> bool:
        """
        Store the follow-up answers for a vote.

        Only the device that cast the vote may submit, and only once; the
        unique index on vote_id settles concurrent submissions.

        Raises:
            NotFoundError: Vote does not exist for this survey
            AuthError: Device differs from the one that cast the vote
            DuplicateSubmissionError: Answers already stored for this vote
            ValidationError: An answer does not match its question's type
        """
        normalized = _normalize_answers(answers)

        parsed_vote_id = parse_uuid(vote_id)
        parsed_survey_id = parse_uuid(survey_id)
        vote = await self.db.get(Vote, parsed_vote_id) if parsed_vote_id else None
        if not vote or (parsed_survey_id is not None and vote.survey_id != parsed_survey_id):
            raise NotFoundError("Vote not found")
        if vote.device_id != device_id:
            logger.warning(f"Device mismatch on follow-up for vote {vote.vote_id}")
            raise AuthError("This vote belongs to another device")

        existing = await self.db.execute(
            select(FollowUpResponse.response_id).where(FollowUpResponse.vote_id == vote.vote_id)
        )
        if existing.scalar_one_or_none() is not None:
            raise DuplicateSubmissionError("Follow-up already submitted for this vote")

        survey = await self.db.get(Survey, vote.survey_id)
        if survey:
            questions = {question["id"]: question for question in survey.follow_up_questions or []}
            for item in normalized:
                question = questions.get(item["question_id"])
                if question:
                    check_answer_type(question, item["answer"])
                    if question.get("type") == FollowUpQuestionType.YES_NO.value:
                        item["answer"] = item["answer"].lower()

        response = FollowUpResponse(
            response_id=uuid.uuid4(),
            survey_id=vote.survey_id,
            vote_id=vote.vote_id,
            answers=normalized,
            device_id=device_id,
        )
        self.db.add(response)

        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            if is_unique_violation(exc, FOLLOW_UP_UNIQUE_MARKERS):
                raise DuplicateSubmissionError("Follow-up already submitted for this vote") from exc
            raise

        logger.info(
            f"Follow-up stored: survey={vote.survey_id}, vote={vote.vote_id}, answers={len(normalized)}"
        )
        return True

    async def get_responses(self, survey_id) -> list[FollowUpResponse]:
        """Raw follow-up responses for a survey, oldest first."""
        parsed_id = parse_uuid(survey_id)
        if parsed_id is None:
            return []
        result = await self.db.execute(
            select(FollowUpResponse)
            .where(FollowUpResponse.survey_id == parsed_id)
            .order_by(FollowUpResponse.created_at.asc())
        )
        return list(result.scalars().all())

    async def get_summary(self, survey_id) -> dict[str, dict] | None:
        """Answer counts per follow-up question, in survey order; None for unknown surveys."""
        parsed_id = parse_uuid(survey_id)
        survey = await self.db.get(Survey, parsed_id) if parsed_id else None
        if not survey:
            return None

        responses = await self.get_responses(parsed_id)

        summary: dict[str, dict] = {}
        for question in survey.follow_up_questions or []:
            counts: dict[str, int] = {}
            for response in responses:
                match = next(
                    (a for a in response.answers or [] if a.get("question_id") == question["id"]),
                    None,
                )
                if match is None:
                    continue
                key = answer_key(match.get("answer"))
                counts[key] = counts.get(key, 0) + 1

            summary[question["id"]] = {
                "question": question["question"],
                "type": question["type"],
                "answers": counts,
            }
        return summary
