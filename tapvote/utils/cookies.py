"""HTTP cookie helpers."""
from fastapi import Response

from tapvote.config import get_settings


def set_device_id_cookie(response: Response, device_id: str) -> None:
    """Persist the browser profile's device identifier.

    SameSite=Lax so links opened from a tag or QR code still carry it.
    """
    settings = get_settings()
    max_age = settings.device_id_cookie_days * 24 * 60 * 60
    # Secure flag: only disable for local development
    secure_value = settings.environment != "development"

    response.set_cookie(
        key=settings.device_id_cookie_name,
        value=device_id,
        httponly=True,
        secure=secure_value,
        samesite="lax",
        max_age=max_age,
        expires=max_age,
        path="/",
    )


def clear_device_id_cookie(response: Response) -> None:
    """Remove the device identifier cookie from the client."""
    settings = get_settings()
    response.delete_cookie(
        key=settings.device_id_cookie_name,
        path="/",
    )
