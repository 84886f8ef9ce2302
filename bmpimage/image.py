"""In-memory RGBA image and BMP encode/decode entry points."""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple, Optional

import numpy as np

from .headers import MAX_DIMENSION, FileHeader, HeaderVariant, InfoHeader
from .pixels import decode_pixels, encode_pixels_24, encode_pixels_32

logger = logging.getLogger(__name__)

SUPPORTED_OUTPUT_BITS = (24, 32)


class Color(NamedTuple):
    r: int
    g: int
    b: int
    a: int = 255


class Point(NamedTuple):
    x: float
    y: float


def _check_dimensions(width: int, height: int) -> None:
    for name, value in (("Width", width), ("Height", height)):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise ValueError(f"{name} must be an integer, got {value!r}")
    if not 0 < width <= MAX_DIMENSION:
        raise ValueError(f"Width must be in 1..{MAX_DIMENSION}, got {width}")
    if not 0 < height <= MAX_DIMENSION:
        raise ValueError(f"Height must be in 1..{MAX_DIMENSION}, got {height}")


def _as_color(color) -> Color:
    if not 3 <= len(color) <= 4:
        raise ValueError(f"Expected an RGB or RGBA color, got {color!r}")
    color = Color(*(int(c) for c in color))
    if any(not 0 <= c <= 255 for c in color):
        raise ValueError(f"Color channels must be in 0..255, got {color!r}")
    return color


@dataclass(frozen=True)
class Image:
    """RGBA raster stored top-down with four bytes per pixel."""

    width: int
    height: int
    rgba: bytes

    def __post_init__(self) -> None:
        _check_dimensions(self.width, self.height)
        if not isinstance(self.rgba, (bytes, bytearray, memoryview)):
            raise ValueError(f"RGBA buffer must be bytes-like, got {type(self.rgba).__name__}")
        object.__setattr__(self, "width", int(self.width))
        object.__setattr__(self, "height", int(self.height))
        rgba = bytes(self.rgba)
        expected = self.width * self.height * 4
        if len(rgba) != expected:
            raise ValueError(f"RGBA buffer must hold {expected} bytes, got {len(rgba)}")
        object.__setattr__(self, "rgba", rgba)

    @classmethod
    def solid(cls, width: int, height: int, color: Color) -> "Image":
        """Create an image filled with a single colour."""

        _check_dimensions(width, height)
        color = _as_color(color)
        return cls(width, height, bytes(color) * (width * height))

    @classmethod
    def gradient(
        cls,
        width: int,
        height: int,
        start_color: Color,
        end_color: Color,
        start_point: Point,
        end_point: Point,
    ) -> "Image":
        """Create a linear gradient along the axis ``start_point -> end_point``.

        Each pixel is projected onto the axis and the clamped parameter ``t``
        blends the two colours. Channel values are truncated, not rounded.
        """

        _check_dimensions(width, height)
        start_color = _as_color(start_color)
        end_color = _as_color(end_color)

        dx = float(end_point[0] - start_point[0])
        dy = float(end_point[1] - start_point[1])
        length_squared = dx * dx + dy * dy

        px = np.arange(width, dtype=np.float64)[None, :] - float(start_point[0])
        py = np.arange(height, dtype=np.float64)[:, None] - float(start_point[1])
        if length_squared > 0:
            t = (px * dx + py * dy) / length_squared
        else:
            t = np.zeros((height, width), dtype=np.float64)
        t = np.clip(t, 0.0, 1.0)[..., None]

        start = np.asarray(start_color, dtype=np.float64)
        end = np.asarray(end_color, dtype=np.float64)
        blended = start * (1.0 - t) + end * t
        return cls(width, height, blended.astype(np.uint8).tobytes())

    @classmethod
    def from_array(cls, array: np.ndarray) -> "Image":
        """Create an image from a ``(height, width, 4)`` uint8 array."""

        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] != 4 or array.dtype != np.uint8:
            raise ValueError("Expected a uint8 array of shape (height, width, 4)")
        height, width = array.shape[:2]
        return cls(width, height, np.ascontiguousarray(array).tobytes())

    @classmethod
    def from_bmp(cls, data: bytes) -> Optional["Image"]:
        """Decode BMP file bytes, returning ``None`` if they are not usable."""

        data = bytes(data)
        file_header = FileHeader.parse(data)
        if file_header is None:
            return None
        info = InfoHeader.parse(data)
        if info is None:
            return None
        if len(data) <= file_header.offset:
            return None

        rgba = decode_pixels(info, data[file_header.offset:])
        if rgba is None:
            return None
        logger.debug(
            "Decoded %dx%d %d-bit image (%s)",
            info.width,
            info.abs_height,
            info.bit_count,
            "top-down" if info.top_down else "bottom-up",
        )
        return cls(info.width, info.abs_height, rgba)

    def as_array(self) -> np.ndarray:
        """Read-only ``(height, width, 4)`` view of the pixel buffer."""

        return np.frombuffer(self.rgba, dtype=np.uint8).reshape(self.height, self.width, 4)

    def pixel(self, x: int, y: int) -> Color:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")
        base = (y * self.width + x) * 4
        return Color(*self.rgba[base:base + 4])

    def to_bmp24(self) -> bytes:
        """Encode as a top-down 24-bit BMP; alpha is discarded."""

        pixels = encode_pixels_24(self.width, self.height, self.rgba)
        file_header = FileHeader.for_pixel_data(len(pixels), HeaderVariant.INFO)
        info = InfoHeader.for_24bit(self.width, -self.height, len(pixels))
        return file_header.to_bytes() + info.to_bytes() + pixels

    def to_bmp32(self) -> bytes:
        """Encode as a top-down 32-bit BI_BITFIELDS BMP with alpha."""

        pixels = encode_pixels_32(self.width, self.height, self.rgba)
        file_header = FileHeader.for_pixel_data(len(pixels), HeaderVariant.V3)
        info = InfoHeader.for_32bit(self.width, -self.height, len(pixels))
        return file_header.to_bytes() + info.to_bytes() + pixels


def decode(data: bytes) -> Optional[Image]:
    return Image.from_bmp(data)


def encode24(image: Image) -> bytes:
    return image.to_bmp24()


def encode32(image: Image) -> bytes:
    return image.to_bmp32()


def load(path: str | Path) -> Optional[Image]:
    """Read and decode a BMP file."""

    return Image.from_bmp(Path(path).read_bytes())


def save(image: Image, path: str | Path, bits: int = 32) -> None:
    """Write ``image`` as a 24-bit or 32-bit BMP file."""

    if bits == 24:
        data = image.to_bmp24()
    elif bits == 32:
        data = image.to_bmp32()
    else:
        raise ValueError(f"Unsupported output depth {bits}; expected 24 or 32")
    Path(path).write_bytes(data)
