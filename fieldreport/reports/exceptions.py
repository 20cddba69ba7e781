class ReportError(Exception):
    """Base exception for report lookups and status changes."""


class ReportNotFoundError(ReportError):
    """Raised when no report exists with the requested id."""


class InvalidStatusTransitionError(ReportError):
    """Raised when a status change is not PENDING -> APPROVED/REJECTED."""
