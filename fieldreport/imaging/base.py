from abc import ABC, abstractmethod
from collections.abc import Sequence

from fieldreport.imaging.models import ImageMetadata, Layer, TextLine


class BaseImagingBackend(ABC):
    """Contract for raster imaging adapters.

    Every operation takes and returns encoded bytes so callers never hold a
    backend-specific bitmap type.
    """

    @abstractmethod
    def read_metadata(self, data: bytes) -> ImageMetadata:
        """Read width, height and container format without a full decode.

        Raises:
            DecodeError: if the bytes are not a readable image.
        """

    @abstractmethod
    def resize(self, data: bytes, width: int, height: int) -> bytes:
        """Resize to exactly ``width`` x ``height``, keeping the container format.

        Raises:
            DecodeError: if the bytes are not a readable image.
            EncodingError: if the result cannot be encoded.
        """

    @abstractmethod
    def composite(self, base: bytes, layers: Sequence[Layer]) -> bytes:
        """Draw ``layers`` over ``base`` in order, keeping the base's format.

        Raises:
            DecodeError: if the base or a layer is not a readable image.
            CompositeError: if a gravity layer does not fit inside the base.
            EncodingError: if the result cannot be encoded.
        """

    @abstractmethod
    def render_text(
        self,
        lines: Sequence[TextLine],
        width: int,
        height: int,
        font_size: int,
    ) -> bytes:
        """Rasterize ``lines`` onto a transparent PNG of the given size."""
