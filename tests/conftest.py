import io
import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from pathlib import Path

import pytest
from PIL import Image

from fieldreport.database.repositories.base import BaseReportStore, BaseUserStore
from fieldreport.imaging.pillow_adapter import PillowBackend
from fieldreport.reports.models import Report, ReportImage, ReportStatus
from fieldreport.watermark.assets import WatermarkAssets

TEMPLATE_SIZE = (800, 330)
LOGO_SIZE = (100, 100)
SUBMITTED_AT = datetime(2026, 10, 19, 9, 30, 15)

ImageFactory = Callable[..., bytes]


def _encode(image: Image.Image, fmt: str) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def make_image() -> ImageFactory:
    """Factory for encoded solid-colour images."""

    def factory(
        width: int,
        height: int,
        fmt: str = "JPEG",
        color: tuple[int, ...] = (60, 60, 60),
    ) -> bytes:
        mode = "RGBA" if len(color) == 4 else "RGB"
        return _encode(Image.new(mode, (width, height), color), fmt)

    return factory


@pytest.fixture()
def watermark_assets() -> WatermarkAssets:
    """A white 800x330 template and a blue 100x100 logo."""
    template = Image.new("RGBA", TEMPLATE_SIZE, (255, 255, 255, 255))
    logo = Image.new("RGBA", LOGO_SIZE, (0, 0, 255, 255))
    return WatermarkAssets(template=_encode(template, "PNG"), logo=_encode(logo, "PNG"))


@pytest.fixture()
def asset_files(tmp_path: Path, watermark_assets: WatermarkAssets) -> tuple[Path, Path]:
    template_path = tmp_path / "assets" / "base.png"
    logo_path = tmp_path / "assets" / "logo.png"
    template_path.parent.mkdir(parents=True)
    template_path.write_bytes(watermark_assets.template)
    logo_path.write_bytes(watermark_assets.logo)
    return template_path, logo_path


@pytest.fixture()
def backend() -> PillowBackend:
    return PillowBackend()


class InMemoryUserStore(BaseUserStore):
    def __init__(self, user_ids: set[int] | None = None) -> None:
        self.user_ids = user_ids if user_ids is not None else set()

    def exists(self, user_id: int) -> bool:
        return user_id in self.user_ids


class InMemoryReportStore(BaseReportStore):
    """Thread-safe stand-in for the reports tables."""

    def __init__(self, submitted_at: datetime = SUBMITTED_AT) -> None:
        self._lock = threading.Lock()
        self._submitted_at = submitted_at
        self.reports: dict[int, Report] = {}
        self.images: list[ReportImage] = []

    def create(self, user_id: int, description: str) -> Report:
        with self._lock:
            report = Report(
                id=len(self.reports) + 1,
                user_id=user_id,
                description=description,
                submitted_at=self._submitted_at,
            )
            self.reports[report.id] = report
        return report

    def add_image(self, report_id: int, stored_path: str) -> ReportImage:
        with self._lock:
            image = ReportImage(
                id=len(self.images) + 1, report_id=report_id, stored_path=stored_path
            )
            self.images.append(image)
        return image

    def find_by_id(self, report_id: int) -> Report | None:
        return self.reports.get(report_id)

    def list_images(self, report_id: int) -> list[ReportImage]:
        return [image for image in self.images if image.report_id == report_id]

    def update_status(
        self,
        report_id: int,
        status: ReportStatus,
        expected: ReportStatus,
    ) -> Report | None:
        with self._lock:
            report = self.reports.get(report_id)
            if report is None or report.status != expected:
                return None
            updated = replace(report, status=status)
            self.reports[report_id] = updated
        return updated

    def find_pending_without_images(self, created_before: datetime) -> list[Report]:
        with_images = {image.report_id for image in self.images}
        return [
            report
            for report in self.reports.values()
            if report.status == ReportStatus.PENDING
            and report.id not in with_images
            and report.submitted_at < created_before
        ]


@pytest.fixture()
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore({1, 2, 42})


@pytest.fixture()
def report_store() -> InMemoryReportStore:
    return InMemoryReportStore()
