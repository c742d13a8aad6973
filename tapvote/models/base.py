"""Base utilities for SQLAlchemy models."""
from enum import Enum
import uuid
from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.sql import sqltypes


class VoteChoice(str, Enum):
    """Answer to a survey's primary yes/no question."""
    YES = "yes"
    NO = "no"


class FollowUpQuestionType(str, Enum):
    """Follow-up question type enumeration for type safety."""
    MULTIPLE_CHOICE = "multiple_choice"
    RATING = "rating"
    TEXT = "text"
    YES_NO = "yes_no"


class AdaptiveUUID(sqltypes.TypeDecorator):
    """UUID stored natively on PostgreSQL and as 32-char hex elsewhere."""

    impl = sqltypes.String
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PGUUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    @staticmethod
    def _coerce_uuid(value):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(str(value))

    def process_bind_param(self, value, dialect):
        value = self._coerce_uuid(value)
        if value is None:
            return None
        if dialect.name == "postgresql":
            return value
        return value.hex

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self._coerce_uuid(value)


def get_uuid_column(*args, **kwargs):
    """Get a Column configured for UUID storage on any dialect.

    Example:
        survey_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
        vote_id = get_uuid_column(ForeignKey("votes.vote_id"), nullable=False)
    """
    return Column(AdaptiveUUID(), *args, **kwargs)


def parse_uuid(value) -> uuid.UUID | None:
    """Parse an identifier coming from a URL or tag; None when it is not a UUID."""
    if isinstance(value, uuid.UUID):
        return value
    if value is None:
        return None
    try:
        return uuid.UUID(str(value).strip())
    except (ValueError, AttributeError):
        return None
