from tapvote.services.auth_service import AuthService
from tapvote.services.survey_service import SurveyService
from tapvote.services.vote_service import VoteService, CastResult, count_votes_by_survey
from tapvote.services.follow_up_service import FollowUpService
from tapvote.services.results_service import ResultsService
from tapvote.services.vote_intake_service import VoteIntakeService, IntakeResult, IntakeStatus

__all__ = [
    "AuthService",
    "SurveyService",
    "VoteService",
    "CastResult",
    "count_votes_by_survey",
    "FollowUpService",
    "ResultsService",
    "VoteIntakeService",
    "IntakeResult",
    "IntakeStatus",
]
