import io
import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image

from fieldreport.config.settings import Settings
from fieldreport.imaging.exceptions import DecodeError
from fieldreport.imaging.pillow_adapter import PillowBackend
from fieldreport.reports.models import ReportStatus
from fieldreport.storage.exceptions import StorageError
from fieldreport.submission.exceptions import InvalidInputError, UserNotFoundError
from fieldreport.submission.models import UploadedPhoto
from fieldreport.submission.pipeline import SubmissionStep
from fieldreport.submission.submitter import ReportSubmitter, build_submitter
from fieldreport.watermark.assets import WatermarkAssets


def _close(actual: tuple[int, ...], expected: tuple[int, int, int], tolerance: int = 12) -> bool:
    return all(abs(a - e) <= tolerance for a, e in zip(actual, expected))


@pytest.fixture()
def reports_root(tmp_path: Path) -> Path:
    return tmp_path / "reports"


@pytest.fixture()
def upload_dir(tmp_path: Path) -> Path:
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture()
def make_submitter(
    backend: PillowBackend,
    watermark_assets: WatermarkAssets,
    report_store,
    user_store,
    reports_root: Path,
):
    def factory(**overrides) -> ReportSubmitter:
        settings = Settings(_env_file=None, **overrides)
        return build_submitter(
            settings,
            backend=backend,
            assets=watermark_assets,
            report_store=report_store,
            user_store=user_store,
            reports_root=reports_root,
        )

    return factory


@pytest.fixture()
def upload(upload_dir: Path, make_image):
    def factory(name: str, data: bytes | None = None) -> UploadedPhoto:
        temp_path = upload_dir / f"{name}.upload"
        temp_path.write_bytes(data if data is not None else make_image(1200, 1600))
        return UploadedPhoto(original_filename=name, temp_path=temp_path)

    return factory


class TestSubmitHappyPath:
    def test_creates_report_and_stamped_artifact(
        self, make_submitter, upload, report_store, reports_root: Path, upload_dir: Path
    ) -> None:
        submitter = make_submitter()

        result = submitter.submit("42", [upload("photo.jpg")], "Spill near entrance B")

        assert result.complete
        assert result.to_response() == {"reportId": str(result.report_id)}
        report = report_store.reports[result.report_id]
        assert report.user_id == 42
        assert report.description == "Spill near entrance B"
        assert report.status == ReportStatus.PENDING
        artifact = reports_root / "photo.jpg"
        assert result.image_paths == [str(artifact)]
        assert [image.stored_path for image in report_store.list_images(report.id)] == [
            str(artifact)
        ]
        assert list(upload_dir.iterdir()) == []

        image = Image.open(io.BytesIO(artifact.read_bytes()))
        assert image.format == "JPEG"
        assert image.size == (2000, 2667)
        rgb = image.convert("RGB")
        # Stamp template is white and pinned to the bottom-left corner.
        assert _close(rgb.getpixel((700, 2660)), (255, 255, 255))
        assert _close(rgb.getpixel((900, 2660)), (60, 60, 60))
        assert _close(rgb.getpixel((700, 2300)), (60, 60, 60))

    def test_images_follow_upload_order(
        self, make_submitter, upload, report_store
    ) -> None:
        submitter = make_submitter(max_concurrent_photos=3)
        names = [f"site-{i}.jpg" for i in range(5)]

        result = submitter.submit(42, [upload(name) for name in names], "")

        assert [Path(path).name for path in result.image_paths] == names
        assert [
            Path(image.stored_path).name for image in report_store.list_images(result.report_id)
        ] == names

    def test_canonical_width_photo_is_not_resized(
        self, make_submitter, upload, make_image, reports_root: Path
    ) -> None:
        submitter = make_submitter()

        submitter.submit(42, [upload("tall.png", make_image(2000, 3000, fmt="PNG"))], "")

        image = Image.open(reports_root / "tall.png")
        assert image.format == "PNG"
        assert image.size == (2000, 3000)


class TestSubmitFailures:
    def test_unknown_user_creates_nothing(
        self, make_submitter, upload, report_store, reports_root: Path, upload_dir: Path
    ) -> None:
        submitter = make_submitter()

        with pytest.raises(UserNotFoundError):
            submitter.submit(99, [upload("photo.jpg")], "Spill")

        assert report_store.reports == {}
        assert not reports_root.exists()
        assert list(upload_dir.iterdir()) == []

    def test_invalid_input_discards_uploads(
        self, make_submitter, upload, report_store, upload_dir: Path
    ) -> None:
        submitter = make_submitter()

        with pytest.raises(InvalidInputError, match="user_id"):
            submitter.submit("abc", [upload("photo.jpg")], "Spill")

        assert report_store.reports == {}
        assert list(upload_dir.iterdir()) == []

    def test_no_files(self, make_submitter, report_store) -> None:
        with pytest.raises(InvalidInputError, match="At least one photo"):
            make_submitter().submit(42, [], "Spill")
        assert report_store.reports == {}

    def test_abort_policy_leaves_pending_report_without_images(
        self, make_submitter, upload, report_store, reports_root: Path, upload_dir: Path
    ) -> None:
        submitter = make_submitter(photo_failure_policy="abort")

        with pytest.raises(DecodeError):
            submitter.submit(42, [upload("good.jpg"), upload("bad.jpg", b"garbage")], "Spill")

        (report,) = report_store.reports.values()
        assert report.status == ReportStatus.PENDING
        assert report_store.images == []
        assert not (reports_root / "good.jpg").exists()
        assert list(upload_dir.iterdir()) == []
        assert list(reports_root.iterdir()) == []

    def test_abort_keeps_same_named_file_of_earlier_report(
        self, make_submitter, upload, report_store, reports_root: Path
    ) -> None:
        submitter = make_submitter(photo_failure_policy="abort")
        first = submitter.submit(42, [upload("IMG_0001.jpg")], "First")
        stored = reports_root / "IMG_0001.jpg"
        before = stored.read_bytes()

        with pytest.raises(DecodeError):
            submitter.submit(
                1, [upload("IMG_0001.jpg"), upload("bad.jpg", b"garbage")], "Second"
            )

        (image,) = report_store.images
        assert image.report_id == first.report_id
        assert image.stored_path == str(stored)
        assert stored.read_bytes() == before
        assert [path.name for path in reports_root.iterdir()] == ["IMG_0001.jpg"]

    def test_cleanup_failure_does_not_mask_the_original_error(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        failing_step = MagicMock(spec=SubmissionStep)
        failing_step.run.side_effect = DecodeError("Cannot decode image")
        failed_step = MagicMock(spec=SubmissionStep)
        failed_step.run.side_effect = StorageError("Cannot delete staged artifact")
        submitter = ReportSubmitter(
            steps=[failing_step], failed_step=failed_step, max_description_length=100
        )

        with caplog.at_level("ERROR", logger="fieldreport"):
            with pytest.raises(DecodeError, match="Cannot decode image"):
                submitter.submit(
                    42, [UploadedPhoto(original_filename="a.jpg", data=b"x")], "Spill"
                )

        failed_step.run.assert_called_once()
        assert "Cleanup after failed submission also failed" in caplog.text

    def test_partial_policy_reports_failures(
        self, make_submitter, upload, report_store, reports_root: Path
    ) -> None:
        submitter = make_submitter(photo_failure_policy="partial")

        result = submitter.submit(
            42, [upload("good.jpg"), upload("bad.jpg", b"garbage")], "Spill"
        )

        assert not result.complete
        assert result.image_paths == [str(reports_root / "good.jpg")]
        (failure,) = result.failures
        assert failure.index == 1
        assert failure.original_filename == "bad.jpg"
        assert isinstance(failure.error, DecodeError)
        response = result.to_response()
        assert response["reportId"] == str(result.report_id)
        assert response["failedFiles"][0]["filename"] == "bad.jpg"


class TestConcurrentSubmissions:
    def test_independent_reports(
        self, make_submitter, upload, report_store, reports_root: Path
    ) -> None:
        submitter = make_submitter()
        photos = {1: upload("one.jpg"), 2: upload("two.jpg")}
        results = {}
        errors = []

        def run(user_id: int) -> None:
            try:
                results[user_id] = submitter.submit(user_id, [photos[user_id]], "Same text")
            except Exception as exc:  # noqa: BLE001
                errors.append(exc)

        threads = [threading.Thread(target=run, args=(user_id,)) for user_id in photos]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert results[1].report_id != results[2].report_id
        assert report_store.reports[results[1].report_id].user_id == 1
        assert report_store.reports[results[2].report_id].user_id == 2
        assert (reports_root / "one.jpg").read_bytes() != (reports_root / "two.jpg").read_bytes()
