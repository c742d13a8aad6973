"""Schemas for tag payloads and device identity."""
from uuid import UUID

from pydantic import Field

from tapvote.models.base import VoteChoice
from tapvote.schemas.base import BaseSchema


class TagScanRequest(BaseSchema):
    """Raw payload read from an NFC tag, QR code or opened link."""

    payload: str
    device_id: str = Field(..., min_length=1, max_length=128)


class TagScanResponse(BaseSchema):
    """Outcome of the vote intake flow for one scanned payload."""

    status: str
    survey_id: str | None = None
    response: VoteChoice | None = None
    vote_id: UUID | None = None
    has_follow_up: bool = False
    message: str | None = None


class TagPayloadResponse(BaseSchema):
    """URLs to write onto a tag for one survey answer."""

    survey_id: UUID
    response: VoteChoice
    https_url: str
    app_url: str


class DeviceIdResponse(BaseSchema):
    """Device identifier issued to a browser profile."""

    device_id: str
    issued: bool
