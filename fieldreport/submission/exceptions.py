class SubmissionError(Exception):
    """Base exception for report submission failures."""


class UserNotFoundError(SubmissionError):
    """Raised when the submitting user does not exist. No report is created."""


class InvalidInputError(SubmissionError):
    """Raised when the submission request itself is malformed."""
