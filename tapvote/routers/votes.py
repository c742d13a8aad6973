"""Router for casting votes and reading tallies."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tapvote.database import get_db
from tapvote.schemas.survey import VoteTally
from tapvote.schemas.vote import VoteCastRequest, VoteCastResponse, VoteStatusResponse
from tapvote.services import VoteService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{survey_id}/votes", response_model=VoteCastResponse, status_code=status.HTTP_201_CREATED)
async def cast_vote(
    survey_id: str,
    request: VoteCastRequest,
    db: AsyncSession = Depends(get_db),
) -> VoteCastResponse:
    """Record one device's yes/no answer."""
    result = await VoteService(db).cast(survey_id, request.response, request.device_id)
    return VoteCastResponse(
        survey_id=result.survey_id,
        vote_id=result.vote_id,
        response=result.response,
        has_follow_up=result.has_follow_up,
    )


@router.get("/{survey_id}/votes/status", response_model=VoteStatusResponse)
async def get_vote_status(
    survey_id: str,
    device_id: str = Query(..., min_length=1, max_length=128),
    db: AsyncSession = Depends(get_db),
) -> VoteStatusResponse:
    has_voted = await VoteService(db).has_voted(survey_id, device_id)
    return VoteStatusResponse(has_voted=has_voted)


@router.get("/{survey_id}/results", response_model=VoteTally)
async def get_vote_results(survey_id: str, db: AsyncSession = Depends(get_db)) -> VoteTally:
    return await VoteService(db).get_results(survey_id)
