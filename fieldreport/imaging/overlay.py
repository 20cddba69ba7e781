from fieldreport.imaging.base import BaseImagingBackend
from fieldreport.imaging.models import Gravity, Layer, NormalizedImage


class StampOverlay:
    """Places the report stamp in the bottom-left corner of a photo."""

    GRAVITY = Gravity.SOUTHWEST

    def __init__(self, backend: BaseImagingBackend) -> None:
        self._backend = backend

    def overlay(self, image: NormalizedImage, stamp: bytes) -> bytes:
        """Return the stamped photo encoded in the photo's own format."""
        return self._backend.composite(image.data, [Layer(data=stamp, gravity=self.GRAVITY)])
