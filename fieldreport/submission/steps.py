from fieldreport.database.repositories.base import BaseReportStore, BaseUserStore
from fieldreport.logging.logger import Log
from fieldreport.reports.models import Report
from fieldreport.storage.artifact_store import ArtifactStore, discard_upload
from fieldreport.submission.exceptions import UserNotFoundError
from fieldreport.submission.photo_processor import PhotoProcessor
from fieldreport.submission.pipeline import SubmissionContext, SubmissionStep
from fieldreport.watermark.composer import WatermarkComposer


def deep_link(base_url: str, report_id: int) -> str:
    """URL encoded in the QR code: ``<base>/laporan/<report id>``."""
    return f"{base_url.rstrip('/')}/laporan/{report_id}"


def _require_report(context: SubmissionContext, step: str) -> Report:
    if context.report is None:
        raise ValueError(f"SubmissionContext.report must be set before {step}")
    return context.report


class EnsureUserStep(SubmissionStep):
    def __init__(self, user_store: BaseUserStore) -> None:
        self._user_store = user_store

    def run(self, context: SubmissionContext) -> SubmissionContext:
        user_id = context.request.user_id
        if not self._user_store.exists(user_id):
            raise UserNotFoundError(f"User {user_id} not found")
        return context


class CreateReportStep(SubmissionStep):
    def __init__(self, report_store: BaseReportStore) -> None:
        self._report_store = report_store

    def run(self, context: SubmissionContext) -> SubmissionContext:
        context.report = self._report_store.create(
            context.request.user_id,
            context.request.description,
        )
        Log.info(
            f"Created report {context.report.id} for user {context.request.user_id} "
            f"with status {context.report.status.value}"
        )
        return context


class ComposeStampStep(SubmissionStep):
    def __init__(self, composer: WatermarkComposer, deep_link_base_url: str) -> None:
        self._composer = composer
        self._deep_link_base_url = deep_link_base_url

    def run(self, context: SubmissionContext) -> SubmissionContext:
        report = _require_report(context, "composing the stamp")
        context.stamp = self._composer.compose(
            deep_link(self._deep_link_base_url, report.id),
            report.id,
            report.submitted_at,
            report.description,
        )
        return context


class ProcessPhotosStep(SubmissionStep):
    def __init__(self, photo_processor: PhotoProcessor) -> None:
        self._photo_processor = photo_processor

    def run(self, context: SubmissionContext) -> SubmissionContext:
        report = _require_report(context, "processing photos")
        if not context.stamp:
            raise ValueError("SubmissionContext.stamp must be set before processing photos")
        context.outcomes = self._photo_processor.process_all(context.request.files, context.stamp)
        failed = sum(1 for outcome in context.outcomes if not outcome.succeeded)
        Log.info(
            f"Processed {len(context.outcomes)} photos for report {report.id} ({failed} failed)"
        )
        return context


class AttachImagesStep(SubmissionStep):
    """Promotes staged photos to their final names and records them in upload order.

    With ``abort_on_failure`` nothing is promoted or attached when any photo
    failed and the first failure is raised instead.
    """

    def __init__(
        self,
        report_store: BaseReportStore,
        artifact_store: ArtifactStore,
        abort_on_failure: bool = True,
    ) -> None:
        self._report_store = report_store
        self._artifact_store = artifact_store
        self._abort_on_failure = abort_on_failure

    def run(self, context: SubmissionContext) -> SubmissionContext:
        report_id = _require_report(context, "attaching images").id
        if self._abort_on_failure:
            for outcome in context.outcomes:
                if outcome.error is not None:
                    raise outcome.error

        for outcome in context.outcomes:
            if outcome.staged_path is None:
                continue
            final_path = self._artifact_store.promote(
                outcome.staged_path, outcome.original_filename
            )
            context.images.append(self._report_store.add_image(report_id, str(final_path)))
        Log.info(f"Attached {len(context.images)} images to report {report_id}")
        return context


class CleanupFailedSubmissionStep(SubmissionStep):
    """Runs after any failed step.

    Deletes the remaining temporary uploads and every staged file that was
    not promoted. Final artifacts are left alone: another report's image
    record may point at the same name.
    """

    def __init__(self, artifact_store: ArtifactStore) -> None:
        self._artifact_store = artifact_store

    def run(self, context: SubmissionContext) -> SubmissionContext:
        for photo in context.request.files:
            discard_upload(photo.temp_path)

        for outcome in context.outcomes:
            if outcome.staged_path is not None:
                self._artifact_store.discard_staged(outcome.staged_path)
                Log.debug(f"Discarded staged artifact {outcome.staged_path}")

        report = f"report {context.report.id}" if context.report else "no report"
        Log.error(f"Submission failed ({report}): {context.error_message}")
        return context
