"""Owner token verification.

Organizers sign in with an external identity provider that issues HS-signed
JWTs whose ``sub`` claim is the opaque owner id. This module only verifies
them; ``issue_owner_token`` exists for tooling and tests.
"""
from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError

from tapvote.config import Settings, get_settings
from tapvote.utils.exceptions import AuthenticationRequiredError

logger = logging.getLogger(__name__)


class AuthService:
    """Encode and decode owner access tokens."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def issue_owner_token(self, owner_id: str, *, expires_minutes: int | None = None) -> str:
        """Create a signed access token for ``owner_id``."""
        minutes = expires_minutes or self.settings.access_token_exp_minutes
        now = datetime.now(UTC)
        payload = {
            "sub": owner_id,
            "iat": now,
            "exp": now + timedelta(minutes=minutes),
        }
        return jwt.encode(payload, self.settings.secret_key, algorithm=self.settings.jwt_algorithm)

    def decode_owner_token(self, token: str) -> str:
        """Return the owner id carried by a valid token.

        Raises:
            AuthenticationRequiredError: Token expired, malformed or without subject
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.secret_key,
                algorithms=[self.settings.jwt_algorithm],
            )
        except ExpiredSignatureError as exc:
            raise AuthenticationRequiredError("token_expired") from exc
        except InvalidTokenError as exc:
            logger.debug(f"Rejected owner token: {exc}")
            raise AuthenticationRequiredError("invalid_token") from exc

        owner_id = payload.get("sub")
        if not owner_id or not isinstance(owner_id, str):
            raise AuthenticationRequiredError("invalid_token")
        return owner_id
