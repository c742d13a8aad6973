"""Router for the survey catalog and organizer results."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tapvote.database import get_db
from tapvote.dependencies import get_current_owner_id, get_optional_owner_id
from tapvote.schemas.survey import (
    SurveyCreate,
    SurveyCreated,
    SurveyDetail,
    SurveyWithResults,
)
from tapvote.services import ResultsService, SurveyService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=SurveyCreated, status_code=status.HTTP_201_CREATED)
async def create_survey(
    request: SurveyCreate,
    owner_id: str | None = Depends(get_optional_owner_id),
    db: AsyncSession = Depends(get_db),
) -> SurveyCreated:
    """Create a survey owned by the signed-in organizer."""
    survey_id = await SurveyService(db).create(
        title=request.title,
        question=request.question,
        follow_up_questions=request.follow_up_questions,
        owner_id=owner_id,
    )
    return SurveyCreated(survey_id=survey_id)


@router.get("", response_model=list[SurveyDetail])
async def list_surveys(db: AsyncSession = Depends(get_db)):
    """All surveys, newest first."""
    return await SurveyService(db).list()


@router.get("/mine", response_model=list[SurveyWithResults])
async def list_owned_surveys(
    owner_id: str = Depends(get_current_owner_id),
    db: AsyncSession = Depends(get_db),
):
    """The organizer's surveys with their current tallies."""
    return await ResultsService(db).list_owned_with_results(owner_id)


@router.get("/{survey_id}", response_model=SurveyDetail)
async def get_survey(survey_id: str, db: AsyncSession = Depends(get_db)):
    survey = await SurveyService(db).get(survey_id)
    if not survey:
        raise HTTPException(status_code=404, detail={"error": "not_found", "message": "Survey not found"})
    return survey


@router.post("/{survey_id}/toggle-active", response_model=SurveyDetail)
async def toggle_survey_active(
    survey_id: str,
    owner_id: str | None = Depends(get_optional_owner_id),
    db: AsyncSession = Depends(get_db),
):
    """Open or close a survey for voting (owner only)."""
    return await SurveyService(db).toggle_active(survey_id, owner_id)


@router.delete("/{survey_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_survey(
    survey_id: str,
    owner_id: str | None = Depends(get_optional_owner_id),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Delete a survey (owner only); its votes are retained."""
    await SurveyService(db).remove(survey_id, owner_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
