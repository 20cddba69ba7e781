from dataclasses import dataclass
from pathlib import Path

from fieldreport.config.settings import Settings
from fieldreport.imaging.base import BaseImagingBackend
from fieldreport.imaging.exceptions import DecodeError
from fieldreport.logging.logger import Log
from fieldreport.watermark.exceptions import AssetMissingError


@dataclass(frozen=True)
class WatermarkAssets:
    """Encoded template and logo bitmaps, read once per process."""

    template: bytes
    logo: bytes


def _read_asset(kind: str, path: Path, backend: BaseImagingBackend) -> bytes:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise AssetMissingError(f"Watermark {kind} not readable at {path}: {exc}") from exc
    try:
        metadata = backend.read_metadata(data)
    except DecodeError as exc:
        raise AssetMissingError(f"Watermark {kind} at {path} is not an image: {exc}") from exc
    Log.info(f"Loaded watermark {kind} {path} ({metadata.width}x{metadata.height})")
    return data


def load_watermark_assets(settings: Settings, backend: BaseImagingBackend) -> WatermarkAssets:
    """Read and verify the template, logo and (optional) font.

    Raises:
        AssetMissingError: if any configured asset is absent or unreadable.
    """
    if settings.font_path and not Path(settings.font_path).is_file():
        raise AssetMissingError(f"Watermark font not found at {settings.font_path}")
    return WatermarkAssets(
        template=_read_asset("template", Path(settings.watermark_template_path), backend),
        logo=_read_asset("logo", Path(settings.watermark_logo_path), backend),
    )
