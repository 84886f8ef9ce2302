"""BMP file and info header models."""

from __future__ import annotations

import enum
import logging
import struct
from dataclasses import dataclass
from typing import NamedTuple, Optional

from .bytecodec import decode_u32, encode_u32, unpack_exact

logger = logging.getLogger(__name__)

MAX_DIMENSION = 8192

FILE_HEADER_SIZE = 14
BITMAP_TYPE_BM = 0x4D42

BI_RGB = 0
BI_BITFIELDS = 3

SUPPORTED_BIT_COUNTS = (24, 32)
SUPPORTED_COMPRESSIONS = (BI_RGB, BI_BITFIELDS)

_FILE_HEADER_FORMAT = "<HIHHI"
_INFO_HEADER_FORMAT = "<IiiHHIIiiII"


class HeaderVariant(enum.IntEnum):
    """DIB header sizes understood by the codec."""

    INFO = 40
    V2 = 52
    V3 = 56


MIN_PIXEL_OFFSET = FILE_HEADER_SIZE + HeaderVariant.INFO


class ChannelMasks(NamedTuple):
    red: int
    green: int
    blue: int
    alpha: Optional[int] = None


STANDARD_MASKS = ChannelMasks(
    red=0x00FF0000,
    green=0x0000FF00,
    blue=0x000000FF,
    alpha=0xFF000000,
)


@dataclass(frozen=True)
class FileHeader:
    signature: int
    file_size: int
    reserved1: int
    reserved2: int
    offset: int

    @classmethod
    def parse(cls, data: bytes) -> Optional["FileHeader"]:
        if len(data) < FILE_HEADER_SIZE:
            logger.debug("Buffer too short for file header: %d bytes", len(data))
            return None
        fields = unpack_exact(_FILE_HEADER_FORMAT, data[:FILE_HEADER_SIZE])
        if fields is None:
            return None
        header = cls(*fields)
        if header.signature != BITMAP_TYPE_BM:
            logger.debug("Bad signature 0x%04X", header.signature)
            return None
        if header.offset < MIN_PIXEL_OFFSET or header.offset >= len(data):
            logger.debug(
                "Pixel offset %d outside buffer of %d bytes", header.offset, len(data)
            )
            return None
        return header

    @classmethod
    def for_pixel_data(cls, pixel_bytes: int, variant: HeaderVariant) -> "FileHeader":
        offset = FILE_HEADER_SIZE + int(variant)
        return cls(
            signature=BITMAP_TYPE_BM,
            file_size=offset + pixel_bytes,
            reserved1=0,
            reserved2=0,
            offset=offset,
        )

    def to_bytes(self) -> bytes:
        return struct.pack(
            _FILE_HEADER_FORMAT,
            self.signature,
            self.file_size,
            self.reserved1,
            self.reserved2,
            self.offset,
        )


@dataclass(frozen=True)
class InfoHeader:
    """DIB header following the file header.

    ``variant`` comes from the declared header size. ``masks`` records what
    was actually read: ``None`` when no masks were read, red, green and blue
    with ``alpha`` left as ``None`` when only the RGB masks were read, and all
    four otherwise. A BI_BITFIELDS file with a 40-byte header keeps its RGB
    masks right after the header, so it reports ``INFO`` with RGB masks.
    """

    size: int
    width: int
    height: int
    planes: int
    bit_count: int
    compression: int
    image_size: int
    x_pels_per_meter: int
    y_pels_per_meter: int
    colors_used: int
    colors_important: int
    masks: Optional[ChannelMasks] = None

    @property
    def variant(self) -> HeaderVariant:
        """Largest known header layout that fits in ``size``."""

        if self.size >= HeaderVariant.V3:
            return HeaderVariant.V3
        if self.size >= HeaderVariant.V2:
            return HeaderVariant.V2
        return HeaderVariant.INFO

    @property
    def top_down(self) -> bool:
        return self.height < 0

    @property
    def abs_height(self) -> int:
        return abs(self.height)

    def channel_masks(self) -> ChannelMasks:
        """Return all four masks with absent ones reported as zero."""

        if self.masks is None:
            return ChannelMasks(0, 0, 0, 0)
        return self.masks._replace(alpha=self.masks.alpha or 0)

    @classmethod
    def parse(cls, data: bytes) -> Optional["InfoHeader"]:
        if len(data) < MIN_PIXEL_OFFSET:
            logger.debug("Buffer too short for info header: %d bytes", len(data))
            return None
        fields = unpack_exact(
            _INFO_HEADER_FORMAT, data[FILE_HEADER_SIZE:MIN_PIXEL_OFFSET]
        )
        if fields is None:
            return None
        header = cls(*fields)
        if not header._is_supported():
            return None

        if header.compression != BI_BITFIELDS:
            return header
        v2_end = FILE_HEADER_SIZE + HeaderVariant.V2
        if len(data) < v2_end:
            return header

        red, green, blue = (
            decode_u32(data[start:start + 4])
            for start in range(MIN_PIXEL_OFFSET, v2_end, 4)
        )
        alpha = None
        v3_end = FILE_HEADER_SIZE + HeaderVariant.V3
        if header.size >= HeaderVariant.V3 and len(data) >= v3_end:
            alpha = decode_u32(data[v2_end:v3_end])
        masks = ChannelMasks(red, green, blue, alpha)
        return cls(*fields, masks=masks)

    def _is_supported(self) -> bool:
        if self.size < HeaderVariant.INFO:
            logger.debug("Info header size %d too small", self.size)
            return False
        if not 0 < self.width <= MAX_DIMENSION:
            logger.debug("Unsupported width %d", self.width)
            return False
        if self.height == 0 or abs(self.height) > MAX_DIMENSION:
            logger.debug("Unsupported height %d", self.height)
            return False
        if self.bit_count not in SUPPORTED_BIT_COUNTS:
            logger.debug("Unsupported bit count %d", self.bit_count)
            return False
        if self.compression not in SUPPORTED_COMPRESSIONS:
            logger.debug("Unsupported compression %d", self.compression)
            return False
        return True

    @classmethod
    def for_24bit(cls, width: int, height: int, image_size: int) -> "InfoHeader":
        return cls(
            size=HeaderVariant.INFO,
            width=width,
            height=height,
            planes=1,
            bit_count=24,
            compression=BI_RGB,
            image_size=image_size,
            x_pels_per_meter=0,
            y_pels_per_meter=0,
            colors_used=0,
            colors_important=0,
        )

    @classmethod
    def for_32bit(cls, width: int, height: int, image_size: int) -> "InfoHeader":
        return cls(
            size=HeaderVariant.V3,
            width=width,
            height=height,
            planes=1,
            bit_count=32,
            compression=BI_BITFIELDS,
            image_size=image_size,
            x_pels_per_meter=0,
            y_pels_per_meter=0,
            colors_used=0,
            colors_important=0,
            masks=STANDARD_MASKS,
        )

    def to_bytes(self) -> bytes:
        base = struct.pack(
            _INFO_HEADER_FORMAT,
            int(self.size),
            self.width,
            self.height,
            self.planes,
            self.bit_count,
            self.compression,
            self.image_size,
            self.x_pels_per_meter,
            self.y_pels_per_meter,
            self.colors_used,
            self.colors_important,
        )
        if self.size <= HeaderVariant.INFO:
            return base
        return base + b"".join(encode_u32(mask) for mask in self.channel_masks())
