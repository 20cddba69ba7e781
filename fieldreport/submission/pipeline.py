from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from fieldreport.reports.models import Report, ReportImage
from fieldreport.submission.models import PhotoOutcome, SubmissionRequest


@dataclass(slots=True)
class SubmissionContext:
    request: SubmissionRequest
    report: Report | None = None
    stamp: bytes = b""
    outcomes: list[PhotoOutcome] = field(default_factory=list)
    images: list[ReportImage] = field(default_factory=list)
    error_message: str = ""


class SubmissionStep(ABC):
    @abstractmethod
    def run(self, context: SubmissionContext) -> SubmissionContext:
        raise NotImplementedError
