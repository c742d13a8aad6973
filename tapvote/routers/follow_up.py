"""Router handling follow-up answers."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tapvote.database import get_db
from tapvote.schemas.follow_up import (
    FollowUpResponseRecord,
    FollowUpSubmission,
    FollowUpSubmissionResponse,
    QuestionSummary,
)
from tapvote.services import FollowUpService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/{survey_id}/follow-up",
    response_model=FollowUpSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_follow_up(
    survey_id: str,
    submission: FollowUpSubmission,
    db: AsyncSession = Depends(get_db),
) -> FollowUpSubmissionResponse:
    """Store the follow-up answers for a vote cast by this device."""
    success = await FollowUpService(db).submit(
        survey_id,
        submission.vote_id,
        submission.answers,
        submission.device_id,
    )
    return FollowUpSubmissionResponse(success=success)


@router.get("/{survey_id}/follow-up", response_model=list[FollowUpResponseRecord])
async def list_follow_up_responses(survey_id: str, db: AsyncSession = Depends(get_db)):
    """Raw follow-up responses, oldest first."""
    return await FollowUpService(db).get_responses(survey_id)


@router.get("/{survey_id}/follow-up/summary", response_model=Optional[dict[str, QuestionSummary]])
async def get_follow_up_summary(survey_id: str, db: AsyncSession = Depends(get_db)):
    """Answer counts per follow-up question; null when the survey does not exist."""
    return await FollowUpService(db).get_summary(survey_id)
