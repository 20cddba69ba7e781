from dataclasses import dataclass
from enum import Enum


class Gravity(str, Enum):
    """Named anchor of a layer relative to its base image."""

    NORTHWEST = "northwest"
    NORTHEAST = "northeast"
    SOUTHWEST = "southwest"
    SOUTHEAST = "southeast"
    CENTRE = "centre"


@dataclass(frozen=True)
class ImageMetadata:
    width: int
    height: int
    format: str


@dataclass(frozen=True)
class Layer:
    """An encoded bitmap placed either at explicit offsets or by gravity."""

    data: bytes
    top: int = 0
    left: int = 0
    gravity: Gravity | None = None


@dataclass(frozen=True)
class TextLine:
    """A single line of text; ``y`` is the baseline."""

    text: str
    x: int
    y: int


@dataclass(frozen=True)
class NormalizedImage:
    """Photo bytes guaranteed to match the canonical resolution when resized."""

    data: bytes
    width: int
    height: int
    format: str


def resolve_position(
    base_size: tuple[int, int],
    layer_size: tuple[int, int],
    layer: Layer,
) -> tuple[int, int]:
    """Return the (left, top) pixel position of ``layer`` on the base.

    Explicit offsets are returned as-is. Gravity positions are computed
    from both sizes.
    """
    if layer.gravity is None:
        return layer.left, layer.top

    base_w, base_h = base_size
    layer_w, layer_h = layer_size
    right = base_w - layer_w
    bottom = base_h - layer_h
    positions = {
        Gravity.NORTHWEST: (0, 0),
        Gravity.NORTHEAST: (right, 0),
        Gravity.SOUTHWEST: (0, bottom),
        Gravity.SOUTHEAST: (right, bottom),
        Gravity.CENTRE: (right // 2, bottom // 2),
    }
    return positions[layer.gravity]
