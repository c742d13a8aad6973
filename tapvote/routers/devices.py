"""Router issuing anonymous device identifiers to browser profiles."""
from fastapi import APIRouter, Request, Response, status

from tapvote.config import get_settings
from tapvote.schemas.tag import DeviceIdResponse
from tapvote.utils.cookies import clear_device_id_cookie, set_device_id_cookie
from tapvote.utils.device_identity import generate_device_id, is_valid_device_id

router = APIRouter()


@router.post("", response_model=DeviceIdResponse)
async def issue_device_id(request: Request, response: Response) -> DeviceIdResponse:
    """Return the profile's device id, issuing and storing one on first call."""
    settings = get_settings()
    existing = request.cookies.get(settings.device_id_cookie_name)
    if is_valid_device_id(existing):
        return DeviceIdResponse(device_id=existing, issued=False)

    device_id = generate_device_id()
    set_device_id_cookie(response, device_id)
    return DeviceIdResponse(device_id=device_id, issued=True)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def forget_device_id() -> Response:
    """Drop the stored device id; the next call to POST /devices issues a new one."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_device_id_cookie(response)
    return response
