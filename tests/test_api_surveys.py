"""Tests for survey API endpoints."""
from uuid import uuid4

from httpx import AsyncClient, ASGITransport

API_BASE_URL = "http://test"


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def create_survey(client: AsyncClient, token: str, **overrides) -> str:
    payload = {
        "title": "Team lunch",
        "question": "Should we order pizza?",
        "follow_up_questions": [],
    }
    payload.update(overrides)
    response = await client.post("/surveys", json=payload, headers=_auth(token))
    assert response.status_code == 201, response.text
    return response.json()["survey_id"]


async def test_create_and_fetch_survey(test_app, owner_token):
    owner_id, token = owner_token()
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url=API_BASE_URL) as client:
        survey_id = await create_survey(
            client,
            token,
            follow_up_questions=[
                {"id": "q1", "type": "rating", "question": "How hungry?", "min": 1, "max": 10},
            ],
        )

        response = await client.get(f"/surveys/{survey_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["survey_id"] == survey_id
    assert data["title"] == "Team lunch"
    assert data["is_active"] is True
    assert data["owner_id"] == owner_id
    assert data["follow_up_questions"][0]["type"] == "rating"
    assert data["created_at"].endswith("Z")


async def test_create_requires_owner(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url=API_BASE_URL) as client:
        response = await client.post("/surveys", json={"title": "T", "question": "Q?"})

    assert response.status_code == 401
    assert response.json()["detail"]["error"] == "unauthorized"


async def test_invalid_token_rejected(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url=API_BASE_URL) as client:
        bad_token = await client.post("/surveys", json={"title": "T", "question": "Q?"}, headers=_auth("nope"))
        bad_header = await client.post(
            "/surveys", json={"title": "T", "question": "Q?"}, headers={"Authorization": "Basic abc"}
        )

    assert bad_token.status_code == 401
    assert bad_token.json()["detail"] == "invalid_token"
    assert bad_header.status_code == 401
    assert bad_header.json()["detail"] == "invalid_authorization_header"


async def test_token_cookie_accepted(test_app, owner_token):
    from tapvote.config import get_settings

    owner_id, token = owner_token()
    cookies = {get_settings().access_token_cookie_name: token}
    async with AsyncClient(
        transport=ASGITransport(app=test_app), base_url=API_BASE_URL, cookies=cookies
    ) as client:
        response = await client.post("/surveys", json={"title": "T", "question": "Q?"})
        mine = await client.get("/surveys/mine")

    assert response.status_code == 201
    assert [item["survey_id"] for item in mine.json()] == [response.json()["survey_id"]]
    assert mine.json()[0]["owner_id"] == owner_id


async def test_blank_title_is_bad_request(test_app, owner_token):
    _, token = owner_token()
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url=API_BASE_URL) as client:
        response = await client.post("/surveys", json={"title": "  ", "question": "Q?"}, headers=_auth(token))

    assert response.status_code == 400
    assert response.json()["detail"] == {
        "error": "validation_error",
        "message": "Please enter a survey title",
    }


async def test_malformed_follow_up_is_unprocessable(test_app, owner_token):
    _, token = owner_token()
    payload = {
        "title": "T",
        "question": "Q?",
        "follow_up_questions": [{"id": "q1", "type": "multiple_choice", "question": "Pick", "options": ["one"]}],
    }
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url=API_BASE_URL) as client:
        response = await client.post("/surveys", json=payload, headers=_auth(token))

    assert response.status_code == 422
    assert response.json()["detail"] == "Request validation failed"


async def test_unknown_survey_is_404(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url=API_BASE_URL) as client:
        missing = await client.get(f"/surveys/{uuid4()}")
        malformed = await client.get("/surveys/not-a-uuid")

    assert missing.status_code == 404
    assert missing.json()["detail"]["error"] == "not_found"
    assert malformed.status_code == 404


async def test_list_surveys(test_app, owner_token):
    _, token = owner_token()
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url=API_BASE_URL) as client:
        survey_id = await create_survey(client, token)
        response = await client.get("/surveys")

    assert response.status_code == 200
    assert survey_id in [item["survey_id"] for item in response.json()]


async def test_mine_requires_credentials(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url=API_BASE_URL) as client:
        response = await client.get("/surveys/mine")

    assert response.status_code == 401
    assert response.json()["detail"] == "missing_credentials"


async def test_mine_includes_results(test_app, owner_token):
    _, token = owner_token()
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url=API_BASE_URL) as client:
        survey_id = await create_survey(client, token)
        await client.post(f"/surveys/{survey_id}/votes", json={"response": "yes", "device_id": f"d-{uuid4().hex}"})
        await client.post(f"/surveys/{survey_id}/votes", json={"response": "no", "device_id": f"d-{uuid4().hex}"})

        response = await client.get("/surveys/mine", headers=_auth(token))

    assert response.status_code == 200
    results = response.json()[0]["results"]
    assert results == {"total": 2, "yes": 1, "no": 1, "yes_percentage": 50.0, "no_percentage": 50.0}


async def test_toggle_active_owner_only(test_app, owner_token):
    _, token = owner_token()
    _, other_token = owner_token()
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url=API_BASE_URL) as client:
        survey_id = await create_survey(client, token)

        forbidden = await client.post(f"/surveys/{survey_id}/toggle-active", headers=_auth(other_token))
        anonymous = await client.post(f"/surveys/{survey_id}/toggle-active")
        toggled = await client.post(f"/surveys/{survey_id}/toggle-active", headers=_auth(token))

    assert forbidden.status_code == 403
    assert forbidden.json()["detail"]["error"] == "forbidden"
    assert anonymous.status_code == 401
    assert toggled.status_code == 200
    assert toggled.json()["is_active"] is False


async def test_delete_survey(test_app, owner_token):
    _, token = owner_token()
    _, other_token = owner_token()
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url=API_BASE_URL) as client:
        survey_id = await create_survey(client, token)
        await client.post(f"/surveys/{survey_id}/votes", json={"response": "yes", "device_id": "keep-me"})

        forbidden = await client.delete(f"/surveys/{survey_id}", headers=_auth(other_token))
        deleted = await client.delete(f"/surveys/{survey_id}", headers=_auth(token))
        after = await client.get(f"/surveys/{survey_id}")
        again = await client.delete(f"/surveys/{survey_id}", headers=_auth(token))

    assert forbidden.status_code == 403
    assert deleted.status_code == 204
    assert after.status_code == 404
    assert again.status_code == 404
