import io

import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_M
from qrcode.exceptions import DataOverflowError
from qrcode.image.pil import PilImage

from fieldreport.imaging.exceptions import EncodingError


class QrEncoder:
    """Encodes a payload into a square PNG QR code of a fixed pixel size."""

    def __init__(self, size: int = 315, border: int = 4) -> None:
        self._size = size
        self._border = border

    def encode(self, payload: str) -> bytes:
        """Raises EncodingError if the payload is empty or too large for a QR code."""
        if not payload:
            raise EncodingError("QR payload must not be empty")

        qr = qrcode.QRCode(
            error_correction=ERROR_CORRECT_M,
            border=self._border,
            image_factory=PilImage,
        )
        try:
            qr.add_data(payload)
            qr.make(fit=True)
        except (DataOverflowError, ValueError) as exc:
            raise EncodingError(f"QR payload cannot be encoded: {exc}") from exc

        # Largest whole module size that fits, then scale to the exact size.
        modules = qr.modules_count + 2 * self._border
        qr.box_size = max(1, self._size // modules)
        image = qr.make_image(fill_color="black", back_color="white").get_image()
        image = image.convert("RGB").resize((self._size, self._size), Image.Resampling.NEAREST)

        buf = io.BytesIO()
        image.save(buf, format="PNG")
        return buf.getvalue()
