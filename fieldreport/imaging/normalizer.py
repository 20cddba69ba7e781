from fieldreport.imaging.base import BaseImagingBackend
from fieldreport.imaging.models import NormalizedImage
from fieldreport.logging.logger import Log

CANONICAL_WIDTH = 2000
CANONICAL_HEIGHT = 2667


class ImageNormalizer:
    """Brings uploaded photos to the canonical resolution.

    Only the width is checked. A photo whose width differs is stretched to
    exactly canonical_width x canonical_height, aspect ratio is not kept.
    A photo already at the canonical width is passed through byte for byte,
    whatever its height.
    """

    def __init__(
        self,
        backend: BaseImagingBackend,
        canonical_width: int = CANONICAL_WIDTH,
        canonical_height: int = CANONICAL_HEIGHT,
    ) -> None:
        self._backend = backend
        self._canonical_width = canonical_width
        self._canonical_height = canonical_height

    def normalize(self, photo_bytes: bytes) -> NormalizedImage:
        """Raises DecodeError if the photo metadata cannot be read."""
        metadata = self._backend.read_metadata(photo_bytes)
        if metadata.width == self._canonical_width:
            return NormalizedImage(
                data=photo_bytes,
                width=metadata.width,
                height=metadata.height,
                format=metadata.format,
            )

        Log.debug(
            f"Resizing {metadata.format} photo {metadata.width}x{metadata.height} "
            f"to {self._canonical_width}x{self._canonical_height}"
        )
        resized = self._backend.resize(
            photo_bytes, self._canonical_width, self._canonical_height
        )
        return NormalizedImage(
            data=resized,
            width=self._canonical_width,
            height=self._canonical_height,
            format=metadata.format,
        )
