"""Little-endian integer helpers used by the header models."""

from __future__ import annotations

import struct
from typing import Optional, Tuple

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_I32 = struct.Struct("<i")


def _decode(codec: struct.Struct, data: bytes) -> Optional[int]:
    if len(data) != codec.size:
        return None
    return codec.unpack(data)[0]


def decode_u16(data: bytes) -> Optional[int]:
    return _decode(_U16, data)


def decode_u32(data: bytes) -> Optional[int]:
    return _decode(_U32, data)


def decode_i32(data: bytes) -> Optional[int]:
    return _decode(_I32, data)


def encode_u16(value: int) -> bytes:
    return _U16.pack(value & 0xFFFF)


def encode_u32(value: int) -> bytes:
    return _U32.pack(value & 0xFFFFFFFF)


def encode_i32(value: int) -> bytes:
    return _I32.pack(value)


def unpack_exact(fmt: str, data: bytes) -> Optional[Tuple[int, ...]]:
    """Unpack ``data`` with ``fmt`` only when the length matches exactly."""

    if len(data) != struct.calcsize(fmt):
        return None
    return struct.unpack(fmt, data)
