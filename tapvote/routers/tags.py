"""Router for tag payloads: scanning into votes and producing URLs to write."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from tapvote.config import get_settings
from tapvote.database import get_db
from tapvote.models.base import VoteChoice
from tapvote.schemas.tag import TagPayloadResponse, TagScanRequest, TagScanResponse
from tapvote.services import SurveyService, VoteIntakeService
from tapvote.utils import tag_payload

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/scan", response_model=TagScanResponse)
async def scan_tag(request: TagScanRequest, db: AsyncSession = Depends(get_db)) -> TagScanResponse:
    """Run the vote intake flow for a scanned payload.

    Always answers 200; the outcome is in ``status``.
    """
    result = await VoteIntakeService(db).intake(request.payload, request.device_id)
    return TagScanResponse(
        status=result.status.value,
        survey_id=result.survey_id,
        response=result.response,
        vote_id=result.vote_id,
        has_follow_up=result.has_follow_up,
        message=result.message,
    )


@router.get("/{survey_id}/{response}", response_model=TagPayloadResponse)
async def get_tag_payload(
    survey_id: str,
    response: VoteChoice,
    db: AsyncSession = Depends(get_db),
) -> TagPayloadResponse:
    """URLs to write onto a tag for one survey answer."""
    survey = await SurveyService(db).get(survey_id)
    if not survey:
        raise HTTPException(status_code=404, detail={"error": "not_found", "message": "Survey not found"})

    settings = get_settings()
    return TagPayloadResponse(
        survey_id=survey.survey_id,
        response=response,
        https_url=tag_payload.encode(
            survey.survey_id, response, scheme=settings.tag_url_scheme, domain=settings.web_domain
        ),
        app_url=tag_payload.encode(survey.survey_id, response, scheme=settings.app_url_scheme),
    )
