"""Tests for ResultsService."""
import uuid

from tapvote.services import ResultsService, VoteService


async def test_list_owned_with_results(survey_factory, db_session):
    owner_id = f"owner_{uuid.uuid4().hex[:8]}"
    older = await survey_factory(title="Older", owner_id=owner_id)
    newer = await survey_factory(title="Newer", owner_id=owner_id)
    await survey_factory(title="Not mine")

    votes = VoteService(db_session)
    await votes.cast(older.survey_id, "yes", f"dev-{uuid.uuid4().hex}")
    await votes.cast(older.survey_id, "no", f"dev-{uuid.uuid4().hex}")
    await votes.cast(older.survey_id, "no", f"dev-{uuid.uuid4().hex}")
    await votes.cast(older.survey_id, "no", f"dev-{uuid.uuid4().hex}")

    dashboard = await ResultsService(db_session).list_owned_with_results(owner_id)

    assert [item.title for item in dashboard] == ["Newer", "Older"]
    assert dashboard[0].survey_id == newer.survey_id
    assert dashboard[0].results.total == 0
    assert dashboard[0].results.yes_percentage == 0.0
    assert dashboard[1].results.total == 4
    assert dashboard[1].results.yes_percentage == 25.0
    assert dashboard[1].results.no_percentage == 75.0


async def test_list_owned_with_results_for_owner_without_surveys(db_session):
    assert await ResultsService(db_session).list_owned_with_results("nobody") == []


async def test_get_results_delegates_to_vote_tally(survey_factory, db_session, device_id):
    survey = await survey_factory()
    await VoteService(db_session).cast(survey.survey_id, "yes", device_id)

    tally = await ResultsService(db_session).get_results(survey.survey_id)
    assert (tally.total, tally.yes, tally.yes_percentage) == (1, 1, 100.0)
