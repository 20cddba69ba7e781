from datetime import datetime, timedelta, timezone

from fieldreport.database.repositories.base import BaseReportStore
from fieldreport.logging.logger import Log
from fieldreport.reports.exceptions import InvalidStatusTransitionError, ReportNotFoundError
from fieldreport.reports.models import Report, ReportDetails, ReportStatus, can_transition
from fieldreport.storage.artifact_store import ArtifactStore


class ReportService:
    """Read access and admin status changes for submitted reports."""

    def __init__(self, report_store: BaseReportStore, artifact_store: ArtifactStore) -> None:
        self._report_store = report_store
        self._artifact_store = artifact_store

    def get_details(self, report_id: int) -> ReportDetails:
        """Return the report with its stamped images read back from storage.

        Raises:
            ReportNotFoundError: if the report does not exist.
            StorageError: if a recorded image file cannot be read.
        """
        report = self._require(report_id)
        images = [
            self._artifact_store.read(image.stored_path)
            for image in self._report_store.list_images(report_id)
        ]
        return ReportDetails(report=report, images=images)

    def update_status(self, report_id: int, status: ReportStatus) -> Report:
        """Approve or reject a PENDING report.

        Raises:
            ReportNotFoundError: if the report does not exist.
            InvalidStatusTransitionError: if the report is not PENDING or
                ``status`` is not a terminal status.
        """
        report = self._require(report_id)
        if not can_transition(report.status, status):
            raise InvalidStatusTransitionError(
                f"Report {report_id} cannot go from {report.status.value} to {status.value}"
            )
        updated = self._report_store.update_status(report_id, status, expected=report.status)
        if updated is None:
            raise InvalidStatusTransitionError(
                f"Report {report_id} changed status concurrently; expected {report.status.value}"
            )
        Log.info(f"Report {report_id} status {report.status.value} -> {status.value}")
        return updated

    def find_incomplete(self, older_than: timedelta, now: datetime | None = None) -> list[Report]:
        """PENDING reports still without images after ``older_than``.

        Feeds the reconciliation sweep for submissions interrupted between
        report creation and image attachment.
        """
        now = now if now is not None else datetime.now(timezone.utc)
        return self._report_store.find_pending_without_images(now - older_than)

    def _require(self, report_id: int) -> Report:
        report = self._report_store.find_by_id(report_id)
        if report is None:
            raise ReportNotFoundError(f"Report {report_id} not found")
        return report
