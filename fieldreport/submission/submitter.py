from collections.abc import Sequence
from pathlib import Path
from zoneinfo import ZoneInfo

from fieldreport.config.settings import Settings
from fieldreport.database.repositories.base import BaseReportStore, BaseUserStore
from fieldreport.database.repositories.report_repository import ReportRepository
from fieldreport.database.repositories.user_repository import UserRepository
from fieldreport.imaging.base import BaseImagingBackend
from fieldreport.imaging.factory import ImagingBackendFactory
from fieldreport.imaging.normalizer import ImageNormalizer
from fieldreport.imaging.overlay import StampOverlay
from fieldreport.logging.logger import Log
from fieldreport.storage.artifact_store import ArtifactStore, discard_upload
from fieldreport.submission.exceptions import InvalidInputError
from fieldreport.submission.models import PhotoFailure, SubmissionResult, UploadedPhoto
from fieldreport.submission.photo_processor import PhotoProcessor
from fieldreport.submission.pipeline import SubmissionContext, SubmissionStep
from fieldreport.submission.steps import (
    AttachImagesStep,
    CleanupFailedSubmissionStep,
    ComposeStampStep,
    CreateReportStep,
    EnsureUserStep,
    ProcessPhotosStep,
)
from fieldreport.submission.validator import validate_submission
from fieldreport.watermark.assets import WatermarkAssets, load_watermark_assets
from fieldreport.watermark.composer import WatermarkComposer
from fieldreport.watermark.qr_encoder import QrEncoder


class ReportSubmitter:
    """Runs a report submission through its steps.

    Pipeline: validate -> ensure user -> create report -> compose stamp ->
    process photos -> attach images. The report row is committed before its
    images, so readers may briefly see a report with an incomplete image set.
    """

    def __init__(
        self,
        steps: Sequence[SubmissionStep],
        failed_step: SubmissionStep,
        max_description_length: int,
    ) -> None:
        self._steps = list(steps)
        self._failed_step = failed_step
        self._max_description_length = max_description_length

    def submit(
        self,
        user_id: int | str,
        files: Sequence[UploadedPhoto],
        description: str | None,
    ) -> SubmissionResult:
        """Create a report and attach one stamped image per uploaded photo.

        Raises:
            InvalidInputError: if the request is malformed.
            UserNotFoundError: if the user does not exist (no report is created).
            PersistenceError: if the report store fails.
            ImagingError, StorageError: the first photo failure, when failures abort.
        """
        try:
            request = validate_submission(
                user_id, description, files, self._max_description_length
            )
        except InvalidInputError:
            for item in files or ():
                if isinstance(item, UploadedPhoto):
                    discard_upload(item.temp_path)
            raise
        context = SubmissionContext(request=request)
        Log.info(f"Submitting report for user {request.user_id} with {len(request.files)} photos")

        try:
            for step in self._steps:
                context = step.run(context)
        except Exception as exc:
            context.error_message = str(exc) or type(exc).__name__
            try:
                self._failed_step.run(context)
            except Exception as cleanup_exc:
                Log.error(f"Cleanup after failed submission also failed: {cleanup_exc}")
            raise

        if context.report is None:
            raise RuntimeError("Submission pipeline finished without creating a report")
        return SubmissionResult(
            report_id=context.report.id,
            image_paths=[image.stored_path for image in context.images],
            failures=[
                PhotoFailure(
                    index=outcome.index,
                    original_filename=outcome.original_filename,
                    error=outcome.error,
                )
                for outcome in context.outcomes
                if outcome.error is not None
            ],
        )


def build_composer(
    settings: Settings,
    backend: BaseImagingBackend,
    assets: WatermarkAssets,
) -> WatermarkComposer:
    return WatermarkComposer(
        backend=backend,
        qr_encoder=QrEncoder(size=settings.qr_size),
        assets=assets,
        domain=settings.watermark_domain,
        font_size=settings.font_size,
        wrap_step=settings.description_wrap_step,
        wrap_width=settings.description_wrap_width,
        timezone=ZoneInfo(settings.stamp_timezone) if settings.stamp_timezone else None,
    )


def build_submitter(
    settings: Settings,
    *,
    backend: BaseImagingBackend | None = None,
    assets: WatermarkAssets | None = None,
    report_store: BaseReportStore | None = None,
    user_store: BaseUserStore | None = None,
    reports_root: Path | None = None,
) -> ReportSubmitter:
    """Wire a ReportSubmitter from settings.

    Template assets are read here, once per process.

    Raises:
        AssetMissingError: if the template, logo or font cannot be read.
    """
    backend = backend if backend is not None else ImagingBackendFactory.create(settings)
    assets = assets if assets is not None else load_watermark_assets(settings, backend)
    report_store = report_store if report_store is not None else ReportRepository()
    user_store = user_store if user_store is not None else UserRepository()
    artifact_store = ArtifactStore(
        reports_root if reports_root is not None else Path(settings.reports_dir)
    )

    photo_processor = PhotoProcessor(
        normalizer=ImageNormalizer(
            backend,
            canonical_width=settings.canonical_width,
            canonical_height=settings.canonical_height,
        ),
        overlay=StampOverlay(backend),
        artifact_store=artifact_store,
        max_workers=settings.max_concurrent_photos,
    )
    steps: list[SubmissionStep] = [
        EnsureUserStep(user_store),
        CreateReportStep(report_store),
        ComposeStampStep(build_composer(settings, backend, assets), settings.deep_link_base_url),
        ProcessPhotosStep(photo_processor),
        AttachImagesStep(
            report_store,
            artifact_store,
            abort_on_failure=settings.photo_failure_policy == "abort",
        ),
    ]
    return ReportSubmitter(
        steps=steps,
        failed_step=CleanupFailedSubmissionStep(artifact_store),
        max_description_length=settings.max_description_length,
    )
