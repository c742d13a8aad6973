"""Domain exceptions raised by the survey services.

Each exception carries a stable ``kind`` used as the ``error`` field of API
error payloads and the HTTP status the API reports it with.
"""


class TapVoteException(Exception):
    """Base exception for all domain errors."""

    kind = "error"
    status_code = 400

    def __init__(self, message: str | None = None, *, status_code: int | None = None):
        super().__init__(message or self.kind)
        if status_code is not None:
            self.status_code = status_code

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(TapVoteException):
    """Raised when caller input is malformed."""
    kind = "validation_error"
    status_code = 400


class AuthError(TapVoteException):
    """Raised when the caller is unauthenticated or is not the owner."""
    kind = "forbidden"
    status_code = 403


class AuthenticationRequiredError(AuthError):
    """Raised when an operation needs an owner identity and none was supplied."""
    kind = "unauthorized"
    status_code = 401


class NotFoundError(TapVoteException):
    """Raised when a referenced survey or vote does not exist."""
    kind = "not_found"
    status_code = 404


class InactiveSurveyError(TapVoteException):
    """Raised when voting on a survey that has been closed."""
    kind = "survey_inactive"
    status_code = 409


class DuplicateVoteError(TapVoteException):
    """Raised when a device already voted on the survey."""
    kind = "already_voted"
    status_code = 409


class DuplicateSubmissionError(TapVoteException):
    """Raised when follow-up answers were already submitted for the vote."""
    kind = "already_submitted"
    status_code = 409
