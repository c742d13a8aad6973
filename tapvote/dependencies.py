"""FastAPI dependencies."""
import logging

from fastapi import Header, HTTPException, Request

from tapvote.config import get_settings
from tapvote.services.auth_service import AuthService
from tapvote.utils.exceptions import AuthenticationRequiredError

logger = logging.getLogger(__name__)


def _mask_identifier(identifier: str) -> str:
    """Mask a sensitive identifier for logging (e.g., owner_id, token)."""
    if not identifier:
        return "<missing>"
    if len(identifier) <= 8:
        return f"{identifier[:2]}...{identifier[-2:]}"
    return f"{identifier[:4]}...{identifier[-4:]}"


async def get_optional_owner_id(
        request: Request,
        authorization: str | None = Header(default=None, alias="Authorization"),
) -> str | None:
    """Resolve the signed-in organizer, or None for anonymous callers.

    Checks for an access token in the following order:
    1. HTTP-only cookie
    2. Authorization header (API clients)
    A token that is present but invalid is rejected rather than ignored.
    """
    settings = get_settings()
    token = request.cookies.get(settings.access_token_cookie_name)

    if not token and authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token:
            raise HTTPException(status_code=401, detail="invalid_authorization_header")

    if not token:
        return None

    try:
        owner_id = AuthService(settings).decode_owner_token(token)
    except AuthenticationRequiredError as exc:
        logger.info(f"Rejected owner token {_mask_identifier(token)}: {exc}")
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    return owner_id


async def get_current_owner_id(
        request: Request,
        authorization: str | None = Header(default=None, alias="Authorization"),
) -> str:
    """Resolve the signed-in organizer; 401 when no credentials are supplied."""
    owner_id = await get_optional_owner_id(request, authorization)
    if not owner_id:
        raise HTTPException(status_code=401, detail="missing_credentials")
    return owner_id
