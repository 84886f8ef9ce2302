"""Bridge between :class:`~bmpimage.image.Image` and premultiplied-alpha images.

Pillow's ``RGBa`` mode stores colour channels pre-scaled by alpha, the same
layout most platform graphics APIs expect. Images are kept straight
(unpremultiplied) in this package, so every crossing of the boundary goes
through :func:`premultiply` or :func:`unpremultiply`.
"""

from __future__ import annotations

import numpy as np
from PIL import Image as PILImage

from .image import Image


def _split(rgba: bytes):
    pixels = np.frombuffer(bytes(rgba), dtype=np.uint8)
    if pixels.size % 4:
        raise ValueError("RGBA buffer length must be a multiple of 4")
    pixels = pixels.reshape(-1, 4)
    return pixels[:, :3].astype(np.float64), pixels[:, 3:].astype(np.float64) / 255.0, pixels


def premultiply(rgba: bytes) -> bytes:
    """Scale each colour channel by ``alpha / 255``, truncating."""

    color, alpha, pixels = _split(rgba)
    out = pixels.copy()
    out[:, :3] = (color * alpha).astype(np.uint8)
    return out.tobytes()


def unpremultiply(rgba: bytes) -> bytes:
    """Undo :func:`premultiply`; fully transparent pixels get black colour."""

    color, alpha, pixels = _split(rgba)
    out = pixels.copy()
    with np.errstate(divide="ignore", invalid="ignore"):
        restored = np.minimum(255.0, color / alpha)
    restored = np.where(alpha > 0, restored, 0.0)
    out[:, :3] = restored.astype(np.uint8)
    return out.tobytes()


def from_pil(image: PILImage.Image) -> Image:
    """Build an :class:`Image` from any Pillow image."""

    premultiplied = image.convert("RGBA").convert("RGBa")
    return Image(image.width, image.height, unpremultiply(premultiplied.tobytes()))


def to_pil(image: Image) -> PILImage.Image:
    """Return a straight ``RGBA`` Pillow image built from premultiplied data."""

    premultiplied = PILImage.frombytes(
        "RGBa", (image.width, image.height), premultiply(image.rgba)
    )
    return premultiplied.convert("RGBA")
