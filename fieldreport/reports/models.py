from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ReportStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# PENDING is the only non-terminal state; nothing returns to it.
ALLOWED_TRANSITIONS: dict[ReportStatus, frozenset[ReportStatus]] = {
    ReportStatus.PENDING: frozenset({ReportStatus.APPROVED, ReportStatus.REJECTED}),
    ReportStatus.APPROVED: frozenset(),
    ReportStatus.REJECTED: frozenset(),
}


def can_transition(current: ReportStatus, target: ReportStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


@dataclass(frozen=True)
class Report:
    """A submitted field report (row of the reports table)."""

    id: int
    user_id: int
    description: str
    submitted_at: datetime
    status: ReportStatus = ReportStatus.PENDING


@dataclass(frozen=True)
class ReportImage:
    """A stamped photo stored on durable storage at ``stored_path``."""

    id: int
    report_id: int
    stored_path: str


@dataclass(frozen=True)
class ReportDetails:
    """A report with the bytes of its stored images, in insertion order."""

    report: Report
    images: list[bytes] = field(default_factory=list)
