"""Tests for VoteService and the per-survey tally."""
import asyncio
import uuid

import pytest

from tapvote.models.base import VoteChoice
from tapvote.schemas.survey import VoteTally
from tapvote.services import SurveyService, VoteService, count_votes_by_survey
from tapvote.utils.exceptions import (
    DuplicateVoteError,
    InactiveSurveyError,
    NotFoundError,
    ValidationError,
)


class TestCast:
    async def test_cast_records_vote(self, survey_factory, db_session, device_id):
        survey = await survey_factory()
        service = VoteService(db_session)

        result = await service.cast(survey.survey_id, "yes", device_id)

        assert result.survey_id == survey.survey_id
        assert result.response == VoteChoice.YES
        assert result.has_follow_up is False
        assert isinstance(result.vote_id, uuid.UUID)
        assert await service.has_voted(survey.survey_id, device_id) is True

    async def test_cast_reports_follow_up(self, survey_factory, db_session, device_id):
        survey = await survey_factory(
            follow_up_questions=[{"id": "q1", "type": "text", "question": "Why?"}],
        )
        result = await VoteService(db_session).cast(str(survey.survey_id), VoteChoice.NO, device_id)
        assert result.has_follow_up is True
        assert result.response == VoteChoice.NO

    async def test_second_vote_from_same_device_rejected(self, survey_factory, db_session, device_id):
        survey = await survey_factory()
        service = VoteService(db_session)
        await service.cast(survey.survey_id, "yes", device_id)

        with pytest.raises(DuplicateVoteError):
            await service.cast(survey.survey_id, "no", device_id)

        tally = await service.get_results(survey.survey_id)
        assert (tally.total, tally.yes, tally.no) == (1, 1, 0)

    async def test_same_device_can_vote_on_other_surveys(self, survey_factory, db_session, device_id):
        first = await survey_factory()
        second = await survey_factory()
        service = VoteService(db_session)

        await service.cast(first.survey_id, "yes", device_id)
        await service.cast(second.survey_id, "no", device_id)

        assert await service.has_voted(second.survey_id, device_id) is True

    async def test_inactive_survey_rejected(self, survey_factory, db_session, device_id):
        survey = await survey_factory()
        await SurveyService(db_session).toggle_active(survey.survey_id, survey.owner_id)

        with pytest.raises(InactiveSurveyError):
            await VoteService(db_session).cast(survey.survey_id, "yes", device_id)
        assert await VoteService(db_session).has_voted(survey.survey_id, device_id) is False

    async def test_unknown_survey_rejected(self, db_session, device_id):
        with pytest.raises(NotFoundError):
            await VoteService(db_session).cast(uuid.uuid4(), "yes", device_id)
        with pytest.raises(NotFoundError):
            await VoteService(db_session).cast("garbage", "yes", device_id)

    @pytest.mark.parametrize("response", ["maybe", "", None])
    async def test_invalid_response_rejected(self, survey_factory, db_session, device_id, response):
        survey = await survey_factory()
        with pytest.raises(ValidationError):
            await VoteService(db_session).cast(survey.survey_id, response, device_id)

    async def test_response_is_case_insensitive(self, survey_factory, db_session, device_id):
        survey = await survey_factory()
        result = await VoteService(db_session).cast(survey.survey_id, " YES ", device_id)
        assert result.response == VoteChoice.YES

    @pytest.mark.parametrize("bad_device", ["", "   "])
    async def test_blank_device_rejected(self, survey_factory, db_session, bad_device):
        survey = await survey_factory()
        with pytest.raises(ValidationError):
            await VoteService(db_session).cast(survey.survey_id, "yes", bad_device)

    async def test_concurrent_casts_from_one_device_store_one_vote(
        self, survey_factory, session_factory, db_session, device_id
    ):
        survey = await survey_factory()

        async def _cast():
            async with session_factory() as session:
                return await VoteService(session).cast(survey.survey_id, "yes", device_id)

        outcomes = await asyncio.gather(*[_cast() for _ in range(5)], return_exceptions=True)

        successes = [outcome for outcome in outcomes if not isinstance(outcome, BaseException)]
        duplicates = [outcome for outcome in outcomes if isinstance(outcome, DuplicateVoteError)]
        assert len(successes) == 1
        assert len(duplicates) == 4

        tally = await VoteService(db_session).get_results(survey.survey_id)
        assert tally.total == 1


class TestHasVoted:
    async def test_false_for_new_device(self, survey_factory, db_session, device_id):
        survey = await survey_factory()
        assert await VoteService(db_session).has_voted(survey.survey_id, device_id) is False

    async def test_false_for_malformed_ids(self, db_session, device_id):
        service = VoteService(db_session)
        assert await service.has_voted("not-a-uuid", device_id) is False
        assert await service.has_voted(uuid.uuid4(), "") is False


class TestResults:
    async def test_empty_survey_tally(self, survey_factory, db_session):
        survey = await survey_factory()
        tally = await VoteService(db_session).get_results(survey.survey_id)
        assert tally == VoteTally(total=0, yes=0, no=0, yes_percentage=0.0, no_percentage=0.0)

    async def test_unknown_survey_tally_is_empty(self, db_session):
        tally = await VoteService(db_session).get_results(uuid.uuid4())
        assert tally.total == 0

    async def test_tally_and_percentages(self, survey_factory, db_session):
        survey = await survey_factory()
        service = VoteService(db_session)
        for index, choice in enumerate(["yes", "yes", "no"]):
            await service.cast(survey.survey_id, choice, f"tally-device-{uuid.uuid4().hex}-{index}")

        tally = await service.get_results(survey.survey_id)
        assert (tally.total, tally.yes, tally.no) == (3, 2, 1)
        assert tally.yes_percentage == pytest.approx(200 / 3)
        assert tally.no_percentage == pytest.approx(100 / 3)
        assert tally.yes_percentage + tally.no_percentage == pytest.approx(100.0)

    async def test_count_votes_by_survey_groups_per_survey(self, survey_factory, db_session, device_id):
        first = await survey_factory()
        second = await survey_factory()
        empty = await survey_factory()
        service = VoteService(db_session)
        await service.cast(first.survey_id, "yes", device_id)
        await service.cast(second.survey_id, "no", device_id)
        await service.cast(second.survey_id, "no", f"{device_id}-other")

        tallies = await count_votes_by_survey(
            db_session, [first.survey_id, second.survey_id, empty.survey_id]
        )

        assert tallies[first.survey_id].yes == 1
        assert tallies[second.survey_id].no == 2
        assert tallies[second.survey_id].no_percentage == 100.0
        assert tallies[empty.survey_id].total == 0

    async def test_count_votes_by_survey_with_no_ids(self, db_session):
        assert await count_votes_by_survey(db_session, []) == {}
