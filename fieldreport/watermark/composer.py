from datetime import datetime, tzinfo

from fieldreport.imaging.base import BaseImagingBackend
from fieldreport.imaging.models import Layer
from fieldreport.logging.logger import Log
from fieldreport.watermark.assets import WatermarkAssets
from fieldreport.watermark.qr_encoder import QrEncoder
from fieldreport.watermark.text_layout import (
    DESCRIPTION_WRAP_STEP,
    DESCRIPTION_WRAP_WIDTH,
    detail_lines,
    identity_lines,
)

# (top, left) offsets on the base template.
QR_POSITION = (5, 5)
LOGO_POSITION = (82, 586)
IDENTITY_BLOCK_POSITION = (217, 320)
DETAIL_BLOCK_POSITION = (5, 320)

# (width, height) of the transparent text layers.
IDENTITY_BLOCK_SIZE = (470, 93)
DETAIL_BLOCK_SIZE = (249, 211)

DEFAULT_FONT_SIZE = 20


class WatermarkComposer:
    """Builds the per-report stamp: QR code, logo and two text blocks on the template.

    Stateless apart from its immutable collaborators, so one instance can
    serve concurrent submissions. Nothing is cached between calls.
    """

    def __init__(
        self,
        *,
        backend: BaseImagingBackend,
        qr_encoder: QrEncoder,
        assets: WatermarkAssets,
        domain: str,
        font_size: int = DEFAULT_FONT_SIZE,
        wrap_step: int = DESCRIPTION_WRAP_STEP,
        wrap_width: int = DESCRIPTION_WRAP_WIDTH,
        timezone: tzinfo | None = None,
    ) -> None:
        self._backend = backend
        self._qr_encoder = qr_encoder
        self._assets = assets
        self._domain = domain
        self._font_size = font_size
        self._wrap_step = wrap_step
        self._wrap_width = wrap_width
        self._timezone = timezone

    def compose(
        self,
        qr_payload: str,
        report_id: int | str,
        submitted_at: datetime,
        description: str,
    ) -> bytes:
        """Return the flattened stamp as PNG bytes, sized like the template.

        Raises:
            EncodingError: if the QR payload cannot be encoded.
        """
        qr_code = self._qr_encoder.encode(qr_payload)
        identity_block = self._backend.render_text(
            identity_lines(report_id, self._domain),
            *IDENTITY_BLOCK_SIZE,
            font_size=self._font_size,
        )
        detail_block = self._backend.render_text(
            detail_lines(
                self._localize(submitted_at),
                description,
                self._wrap_step,
                self._wrap_width,
            ),
            *DETAIL_BLOCK_SIZE,
            font_size=self._font_size,
        )

        stamp = self._backend.composite(
            self._assets.template,
            [
                _at(qr_code, QR_POSITION),
                _at(self._assets.logo, LOGO_POSITION),
                _at(identity_block, IDENTITY_BLOCK_POSITION),
                _at(detail_block, DETAIL_BLOCK_POSITION),
            ],
        )
        Log.debug(f"Composed stamp for report {report_id} ({len(stamp)} bytes)")
        return stamp

    def _localize(self, moment: datetime) -> datetime:
        if self._timezone is None or moment.tzinfo is None:
            return moment
        return moment.astimezone(self._timezone)


def _at(data: bytes, position: tuple[int, int]) -> Layer:
    top, left = position
    return Layer(data=data, top=top, left=left)
