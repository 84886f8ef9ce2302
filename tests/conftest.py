from __future__ import annotations

import struct
from typing import Optional, Sequence

import pytest


def build_bmp(
    width: int,
    height: int,
    bit_count: int,
    pixel_data: bytes,
    *,
    compression: int = 0,
    header_size: int = 40,
    masks: Optional[Sequence[int]] = None,
) -> bytes:
    """Assemble a BMP file by hand, independently of the package encoder."""

    extra = b"".join(struct.pack("<I", m) for m in masks) if masks else b""
    offset = 14 + 40 + len(extra)
    file_header = struct.pack("<2sIHHI", b"BM", offset + len(pixel_data), 0, 0, offset)
    info_header = struct.pack(
        "<IiiHHIIiiII",
        header_size,
        width,
        height,
        1,
        bit_count,
        compression,
        len(pixel_data),
        2835,
        2835,
        0,
        0,
    )
    return file_header + info_header + extra + pixel_data


@pytest.fixture
def make_bmp():
    return build_bmp
