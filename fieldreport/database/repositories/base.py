from abc import ABC, abstractmethod
from datetime import datetime

from fieldreport.reports.models import Report, ReportImage, ReportStatus


class BaseUserStore(ABC):
    """Read-only user lookup used to validate submitters."""

    @abstractmethod
    def exists(self, user_id: int) -> bool:
        """Raises PersistenceError if the store cannot be queried."""


class BaseReportStore(ABC):
    """Persistence contract for reports and their images.

    Implementations raise PersistenceError when the backing store fails.
    """

    @abstractmethod
    def create(self, user_id: int, description: str) -> Report:
        """Insert a new PENDING report and return it with its id and timestamp."""

    @abstractmethod
    def add_image(self, report_id: int, stored_path: str) -> ReportImage:
        """Record a durably written artifact for an existing report."""

    @abstractmethod
    def find_by_id(self, report_id: int) -> Report | None:
        ...

    @abstractmethod
    def list_images(self, report_id: int) -> list[ReportImage]:
        """Images of a report in insertion order."""

    @abstractmethod
    def update_status(
        self,
        report_id: int,
        status: ReportStatus,
        expected: ReportStatus,
    ) -> Report | None:
        """Set ``status`` only if the current status is ``expected``.

        Returns the updated report, or None when the row was missing or its
        status had already changed.
        """

    @abstractmethod
    def find_pending_without_images(self, created_before: datetime) -> list[Report]:
        """PENDING reports with no images, created before the cutoff."""
