"""Survey-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field, model_validator

from tapvote.models.base import FollowUpQuestionType
from tapvote.schemas.base import BaseSchema


class FollowUpQuestion(BaseSchema):
    """Follow-up question embedded in a survey definition."""

    id: str = Field(..., min_length=1, max_length=64)
    type: FollowUpQuestionType
    question: str
    options: list[str] | None = None
    min: int | None = None
    max: int | None = None

    @model_validator(mode="after")
    def check_type_requirements(self):
        """Enforce the per-type fields and drop the ones a type does not use."""
        self.question = self.question.strip()
        if not self.question:
            raise ValueError(f"Follow-up question '{self.id}' must have text")

        if self.type == FollowUpQuestionType.MULTIPLE_CHOICE:
            options = [option.strip() for option in (self.options or []) if option and option.strip()]
            if len(options) < 2:
                raise ValueError(f"Multiple choice question '{self.id}' needs at least two options")
            self.options = options
        else:
            self.options = None

        if self.type == FollowUpQuestionType.RATING:
            if self.min is None or self.max is None:
                raise ValueError(f"Rating question '{self.id}' needs min and max")
            if self.min >= self.max:
                raise ValueError(f"Rating question '{self.id}' needs min < max")
        else:
            self.min = None
            self.max = None

        return self


class SurveyCreate(BaseSchema):
    """Survey creation payload."""

    title: str
    question: str
    follow_up_questions: list[FollowUpQuestion] = Field(default_factory=list)


class SurveyCreated(BaseSchema):
    """Response returned after creating a survey."""

    survey_id: UUID


class SurveyDetail(BaseSchema):
    """Public survey representation."""

    survey_id: UUID
    title: str
    question: str
    follow_up_questions: list[FollowUpQuestion]
    is_active: bool
    owner_id: str | None = None
    created_at: datetime


class VoteTally(BaseSchema):
    """Aggregated yes/no counts for one survey."""

    total: int = 0
    yes: int = 0
    no: int = 0
    yes_percentage: float = 0.0
    no_percentage: float = 0.0

    @classmethod
    def from_counts(cls, yes: int, no: int) -> "VoteTally":
        """Build a tally; percentages stay 0 for an empty survey and are not rounded."""
        total = yes + no
        if total == 0:
            return cls()
        return cls(
            total=total,
            yes=yes,
            no=no,
            yes_percentage=yes / total * 100,
            no_percentage=no / total * 100,
        )


class SurveyWithResults(SurveyDetail):
    """Survey plus its current tally, used by the organizer dashboard."""

    results: VoteTally
