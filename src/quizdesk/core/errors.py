"""Domain exceptions.

Every error raised by the core layer derives from QuizdeskError so the web
layer can translate it into an HTTP status in one place.
"""

from __future__ import annotations


class QuizdeskError(Exception):
    """Base class for domain errors."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(QuizdeskError):
    """Input failed a validation rule."""

    status_code = 400


class AuthenticationError(QuizdeskError):
    """Missing, unknown or expired credentials."""

    status_code = 401


class PermissionDeniedError(QuizdeskError):
    """Authenticated user lacks the role or ownership required."""

    status_code = 403


class NotFoundError(QuizdeskError):
    """Referenced row does not exist."""

    status_code = 404


class ConflictError(QuizdeskError):
    """Uniqueness constraint would be violated."""

    status_code = 409


class AttemptLimitError(QuizdeskError):
    """Student has used every allowed attempt for an assignment."""

    status_code = 409

    def __init__(self, max_attempts: int):
        self.max_attempts = max_attempts
        super().__init__(
            f"You have reached the maximum number of attempts ({max_attempts}) "
            "for this assignment"
        )


class UploadRejectedError(QuizdeskError):
    """Uploaded file is too large or of a disallowed type."""

    status_code = 400


class BulkParseError(QuizdeskError):
    """Bulk question text could not be parsed."""

    status_code = 422


class ASCParseError(QuizdeskError):
    """ASC answer-sheet text could not be parsed.

    Attributes:
        position: 0-based offset into the original input where the problem
            was found, or None when the error concerns the input as a whole.
    """

    status_code = 422

    def __init__(self, message: str, position: int | None = None):
        self.position = position
        super().__init__(message)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON responses."""
        return {"error": self.message, "position": self.position}


class FileTooLargeError(UploadRejectedError):
    """Uploaded file exceeds the configured size limit."""

    status_code = 413
