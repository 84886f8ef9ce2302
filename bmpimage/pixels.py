"""Conversion between BMP pixel arrays and top-down RGBA buffers."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .headers import BI_BITFIELDS, BI_RGB, ChannelMasks, InfoHeader

logger = logging.getLogger(__name__)

OPAQUE = 255


def padded_row_size(width: int, bits: int) -> int:
    """Bytes per stored row, rounded up to a 4 byte boundary."""

    return ((width * bits + 31) // 32) * 4


def channel_shift(mask: int) -> int:
    """Number of trailing zero bits in ``mask`` (0 for an empty mask)."""

    if mask == 0:
        return 0
    return (mask & -mask).bit_length() - 1


def mask_is_byte_range(mask: int) -> bool:
    return (mask >> channel_shift(mask)) <= 0xFF


def decode_pixels(info: InfoHeader, data: bytes) -> Optional[bytes]:
    """Decode the pixel array starting at the file's pixel offset.

    Returns ``width * height * 4`` RGBA bytes in top-down row order, or
    ``None`` when the payload cannot be decoded.
    """

    width = info.width
    height = info.abs_height
    if width <= 0 or height <= 0:
        return None

    if info.bit_count == 24:
        pixels = _decode_24(width, height, data)
    elif info.bit_count == 32 and info.compression == BI_BITFIELDS:
        pixels = _decode_32_bitfields(width, height, data, info.channel_masks())
    elif info.bit_count == 32 and info.compression == BI_RGB:
        pixels = _decode_32(width, height, data)
    else:
        logger.debug(
            "No decoder for %d bpp with compression %d", info.bit_count, info.compression
        )
        return None

    if pixels is None:
        return None
    if not info.top_down:
        pixels = pixels[::-1]
    return pixels.tobytes()


def _decode_24(width: int, height: int, data: bytes) -> Optional[np.ndarray]:
    row_size = padded_row_size(width, 24)
    needed = row_size * height
    if len(data) < needed:
        logger.debug("24-bit pixel data truncated: %d < %d bytes", len(data), needed)
        return None

    rows = np.frombuffer(data, dtype=np.uint8, count=needed).reshape(height, row_size)
    bgr = rows[:, : width * 3].reshape(height, width, 3)
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[..., :3] = bgr[..., ::-1]
    rgba[..., 3] = OPAQUE
    return rgba


def _decode_32(width: int, height: int, data: bytes) -> Optional[np.ndarray]:
    needed = width * height * 4
    if len(data) < needed:
        logger.debug("32-bit pixel data truncated: %d < %d bytes", len(data), needed)
        return None

    bgra = np.frombuffer(data, dtype=np.uint8, count=needed).reshape(height, width, 4)
    rgba = np.empty_like(bgra)
    rgba[..., :3] = bgra[..., 2::-1]
    rgba[..., 3] = OPAQUE
    return rgba


def _decode_32_bitfields(
    width: int, height: int, data: bytes, masks: ChannelMasks
) -> Optional[np.ndarray]:
    for mask in masks:
        if not mask_is_byte_range(mask):
            logger.debug("Bitfield mask 0x%08X is wider than one byte", mask)
            return None

    count = width * height
    if len(data) < count * 4:
        logger.debug("32-bit pixel data truncated: %d < %d bytes", len(data), count * 4)
        return None

    words = np.frombuffer(data, dtype="<u4", count=count).reshape(height, width)
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    for channel, mask in enumerate(masks):
        if channel == 3 and mask == 0:
            rgba[..., 3] = OPAQUE
            continue
        values = (words & np.uint32(mask)) >> np.uint32(channel_shift(mask))
        rgba[..., channel] = np.minimum(values, 0xFF).astype(np.uint8)
    return rgba


def _as_pixels(width: int, height: int, rgba: bytes) -> np.ndarray:
    return np.frombuffer(rgba, dtype=np.uint8, count=width * height * 4).reshape(
        height, width, 4
    )


def encode_pixels_24(width: int, height: int, rgba: bytes) -> bytes:
    """Pack RGBA pixels as padded top-down BGR rows, dropping alpha."""

    pixels = _as_pixels(width, height, rgba)
    row_size = padded_row_size(width, 24)
    rows = np.zeros((height, row_size), dtype=np.uint8)
    rows[:, : width * 3] = pixels[..., 2::-1].reshape(height, width * 3)
    return rows.tobytes()


def encode_pixels_32(width: int, height: int, rgba: bytes) -> bytes:
    """Pack RGBA pixels as top-down BGRA rows."""

    pixels = _as_pixels(width, height, rgba)
    return pixels[..., [2, 1, 0, 3]].tobytes()
