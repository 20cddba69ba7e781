from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from fieldreport.imaging.normalizer import ImageNormalizer
from fieldreport.imaging.overlay import StampOverlay
from fieldreport.logging.logger import Log
from fieldreport.storage.artifact_store import ArtifactStore, discard_upload, read_upload
from fieldreport.submission.models import PhotoOutcome, UploadedPhoto


class PhotoProcessor:
    """Normalizes, stamps and stores uploaded photos.

    The temporary upload of a photo is deleted once that photo has been
    handled, whether or not it succeeded.
    """

    def __init__(
        self,
        normalizer: ImageNormalizer,
        overlay: StampOverlay,
        artifact_store: ArtifactStore,
        max_workers: int = 4,
    ) -> None:
        self._normalizer = normalizer
        self._overlay = overlay
        self._artifact_store = artifact_store
        self._max_workers = max_workers

    def process(self, photo: UploadedPhoto, stamp: bytes) -> Path:
        """Stamp one photo and return the staged file it was written to."""
        try:
            data = photo.data
            if not data and photo.temp_path is not None:
                data = read_upload(photo.temp_path)
            normalized = self._normalizer.normalize(data)
            stamped = self._overlay.overlay(normalized, stamp)
            return self._artifact_store.stage(photo.original_filename, stamped)
        finally:
            discard_upload(photo.temp_path)

    def process_all(self, photos: Sequence[UploadedPhoto], stamp: bytes) -> list[PhotoOutcome]:
        """Process photos on a bounded pool; outcomes keep the upload order."""
        if not photos:
            return []
        workers = min(self._max_workers, len(photos))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="photo") as pool:
            futures = [
                pool.submit(self._process_one, index, photo, stamp)
                for index, photo in enumerate(photos)
            ]
            return [future.result() for future in futures]

    def _process_one(self, index: int, photo: UploadedPhoto, stamp: bytes) -> PhotoOutcome:
        try:
            staged_path = self.process(photo, stamp)
        except Exception as exc:
            Log.warning(f"Photo {index} ({photo.original_filename}) failed: {exc}")
            return PhotoOutcome(index=index, original_filename=photo.original_filename, error=exc)
        Log.debug(f"Photo {index} ({photo.original_filename}) staged at {staged_path}")
        return PhotoOutcome(
            index=index,
            original_filename=photo.original_filename,
            staged_path=staged_path,
        )
