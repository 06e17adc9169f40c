"""Domain errors raised by the summary lifecycle.

Each error carries the HTTP status and public ``error`` label used when it
reaches the API boundary.
"""

from typing import Any


class MeetNotesError(Exception):
    """Base class for expected, client-visible failures."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        error: str | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message or error or self.error)
        self.message = message
        self.details = details
        if error is not None:
            self.error = error

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.message is not None:
            body["message"] = self.message
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(MeetNotesError):
    """Malformed or missing input."""

    status_code = 400
    error = "Validation failed"


class NotFoundError(MeetNotesError):
    """Referenced summary does not exist."""

    status_code = 404
    error = "Summary not found"


class GenerationError(MeetNotesError):
    """The summarization collaborator failed."""

    status_code = 500
    error = "Failed to generate summary"


class DeliveryError(MeetNotesError):
    """The email collaborator failed to send."""

    status_code = 500
    error = "Failed to send email"
