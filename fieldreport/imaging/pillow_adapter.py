import io
from collections.abc import Sequence

from PIL import Image, ImageDraw, ImageFont

from fieldreport.imaging.base import BaseImagingBackend
from fieldreport.imaging.exceptions import CompositeError, DecodeError, EncodingError
from fieldreport.imaging.models import ImageMetadata, Layer, TextLine, resolve_position

_TEXT_FILL = (0, 0, 0, 255)
_TRANSPARENT = (0, 0, 0, 0)
_JPEG_MODES = frozenset({"RGB", "L", "CMYK"})


class PillowBackend(BaseImagingBackend):
    """Imaging adapter built on Pillow."""

    def __init__(self, font_path: str | None = None, jpeg_quality: int = 90) -> None:
        self._font_path = font_path or None
        self._jpeg_quality = jpeg_quality

    def read_metadata(self, data: bytes) -> ImageMetadata:
        image = self._open(data, load=False)
        return ImageMetadata(width=image.width, height=image.height, format=image.format or "")

    def resize(self, data: bytes, width: int, height: int) -> bytes:
        image = self._open(data)
        fmt = image.format or "PNG"
        resized = image.resize((width, height), Image.Resampling.LANCZOS)
        return self._encode(resized, fmt)

    def composite(self, base: bytes, layers: Sequence[Layer]) -> bytes:
        base_image = self._open(base)
        fmt = base_image.format or "PNG"
        try:
            canvas = base_image.convert("RGBA")
        except Exception as exc:
            raise DecodeError(f"Pillow could not decode base image: {exc}") from exc

        for index, layer in enumerate(layers):
            overlay = self._open(layer.data).convert("RGBA")
            if layer.gravity is not None and (
                overlay.width > canvas.width or overlay.height > canvas.height
            ):
                raise CompositeError(
                    f"Layer {index} ({overlay.width}x{overlay.height}) does not fit "
                    f"base image ({canvas.width}x{canvas.height})"
                )
            left, top = resolve_position(canvas.size, overlay.size, layer)
            if left < 0 or top < 0:
                raise CompositeError(f"Layer {index} at ({left}, {top}): offsets must be >= 0")
            try:
                canvas.alpha_composite(overlay, dest=(left, top))
            except ValueError as exc:
                raise CompositeError(f"Layer {index} at ({left}, {top}): {exc}") from exc

        return self._encode(canvas, fmt)

    def render_text(
        self,
        lines: Sequence[TextLine],
        width: int,
        height: int,
        font_size: int,
    ) -> bytes:
        canvas = Image.new("RGBA", (width, height), _TRANSPARENT)
        draw = ImageDraw.Draw(canvas)
        font = self._load_font(font_size)
        for line in lines:
            if not line.text:
                continue
            if isinstance(font, ImageFont.FreeTypeFont):
                draw.text((line.x, line.y), line.text, fill=_TEXT_FILL, font=font, anchor="ls")
            else:
                draw.text((line.x, line.y - font_size), line.text, fill=_TEXT_FILL, font=font)
        return self._encode(canvas, "PNG")

    @staticmethod
    def _open(data: bytes, load: bool = True) -> Image.Image:
        try:
            image = Image.open(io.BytesIO(data))
            if load:
                image.load()
        except Exception as exc:
            raise DecodeError(f"Pillow could not decode image: {exc}") from exc
        return image

    def _encode(self, image: Image.Image, fmt: str) -> bytes:
        options: dict[str, object] = {}
        if fmt.upper() in ("JPEG", "MPO"):
            fmt = "JPEG"
            options["quality"] = self._jpeg_quality
            if image.mode not in _JPEG_MODES:
                image = image.convert("RGB")
        buf = io.BytesIO()
        try:
            image.save(buf, format=fmt, **options)
        except Exception as exc:
            raise EncodingError(f"Pillow could not encode {fmt} image: {exc}") from exc
        return buf.getvalue()

    def _load_font(self, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        # Fonts are loaded per call; FreeType faces are not shared between threads.
        if self._font_path is None:
            return ImageFont.load_default(size=size)
        try:
            return ImageFont.truetype(self._font_path, size=size)
        except OSError as exc:
            raise EncodingError(f"Cannot load font '{self._font_path}': {exc}") from exc
