"""Canonical URL codec for survey tags.

A tag (NFC, QR or plain link) carries one survey answer as a URL:

    https://<domain>/survey/<survey_id>/<yes|no>
    nfcsurvey://survey/<survey_id>/<yes|no>

Tags written by the app use one of these forms; generic readers resolve the
https form. Both the tag-scan intake and deep-link routing use ``decode``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_APP_SCHEME = "nfcsurvey"
DEFAULT_WEB_DOMAIN = "localhost:8081"
WEB_SCHEMES = ("http", "https")
RESPONSES = ("yes", "no")

_SEGMENT = re.compile(r"[^/\s?#]+")
_TAIL = r"/(yes|no)/?(?:[?#].*)?$"
_WEB_PATTERN = re.compile(r"^https?://[^/\s?#]+/survey/([^/\s?#]+)" + _TAIL, re.IGNORECASE)


@dataclass(frozen=True)
class TagPayload:
    """Decoded content of a survey tag."""
    survey_id: str
    response: str


@lru_cache(maxsize=8)
def _app_pattern(app_scheme: str) -> re.Pattern:
    return re.compile(
        r"^" + re.escape(app_scheme) + r"://survey/([^/\s?#]+)" + _TAIL,
        re.IGNORECASE,
    )


def encode(
    survey_id,
    response: str,
    *,
    scheme: str = "https",
    domain: str = DEFAULT_WEB_DOMAIN,
) -> str:
    """Build the tag URL for a survey answer.

    http(s) schemes produce the web form on ``domain``; any other scheme is
    treated as the app's custom scheme and carries no domain.
    """
    response = str(getattr(response, "value", response)).lower()
    if response not in RESPONSES:
        raise ValueError(f"response must be one of {RESPONSES}, got {response!r}")

    survey_id = str(survey_id)
    if not _SEGMENT.fullmatch(survey_id):
        raise ValueError("survey_id must be a non-empty path segment")

    scheme = scheme.lower()
    if scheme in WEB_SCHEMES:
        return f"{scheme}://{domain.rstrip('/')}/survey/{survey_id}/{response}"
    return f"{scheme}://survey/{survey_id}/{response}"


def decode(payload, *, app_scheme: str = DEFAULT_APP_SCHEME) -> TagPayload | None:
    """Parse a tag payload; returns None for anything that is not a survey tag."""
    if not isinstance(payload, str):
        return None

    candidate = payload.strip()
    for pattern in (_app_pattern(app_scheme.lower()), _WEB_PATTERN):
        match = pattern.match(candidate)
        if match:
            return TagPayload(survey_id=match.group(1), response=match.group(2).lower())
    return None
