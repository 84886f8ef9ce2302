from __future__ import annotations

import pytest

from bmpimage import decode
from bmpimage.headers import BI_BITFIELDS, STANDARD_MASKS, InfoHeader
from bmpimage.pixels import (
    channel_shift,
    decode_pixels,
    encode_pixels_24,
    encode_pixels_32,
    mask_is_byte_range,
    padded_row_size,
)


@pytest.mark.parametrize(
    "width, expected", [(1, 4), (2, 8), (3, 12), (4, 12), (5, 16)]
)
def test_padded_row_size_24bit(width, expected):
    assert padded_row_size(width, 24) == expected


def test_padded_row_size_32bit_has_no_padding():
    assert padded_row_size(7, 32) == 28


@pytest.mark.parametrize(
    "mask, shift", [(0, 0), (0xFF, 0), (0xFF00, 8), (0x00FF0000, 16), (0xFF000000, 24)]
)
def test_channel_shift(mask, shift):
    assert channel_shift(mask) == shift


@pytest.mark.parametrize("mask", [0, 0xFF, 0x0F00, 0xFF000000, 0x80000000])
def test_mask_within_byte_range(mask):
    assert mask_is_byte_range(mask)


@pytest.mark.parametrize("mask", [0x1FF, 0xFFFF0000, 0x00FFFF00, 0xFFFFFFFF])
def test_mask_wider_than_byte(mask):
    assert not mask_is_byte_range(mask)


def test_bottom_up_bitfields_scenario(make_bmp):
    bottom_row = bytes([0, 0, 255, 255, 0, 255, 0, 255])
    top_row = bytes([255, 0, 0, 255, 255, 255, 255, 128])
    data = make_bmp(
        2,
        2,
        32,
        bottom_row + top_row,
        compression=BI_BITFIELDS,
        header_size=56,
        masks=STANDARD_MASKS,
    )
    image = decode(data)
    assert image is not None
    assert (image.width, image.height) == (2, 2)
    assert image.pixel(0, 1) == (255, 0, 0, 255)
    assert image.pixel(1, 1) == (0, 255, 0, 255)
    assert image.pixel(0, 0) == (0, 0, 255, 255)
    assert image.pixel(1, 0) == (255, 255, 255, 128)


def test_24bit_bottom_up_skips_padding(make_bmp):
    # width 1 -> 3 pixel bytes + 1 padding byte per row
    bottom = bytes([1, 2, 3, 0xEE])
    top = bytes([4, 5, 6, 0xEE])
    image = decode(make_bmp(1, 2, 24, bottom + top))
    assert image.rgba == bytes([6, 5, 4, 255, 3, 2, 1, 255])


def test_24bit_top_down_keeps_row_order(make_bmp):
    rows = bytes([1, 2, 3, 4, 5, 6, 0, 0]) + bytes([7, 8, 9, 10, 11, 12, 0, 0])
    image = decode(make_bmp(2, -2, 24, rows))
    assert image.rgba == bytes(
        [3, 2, 1, 255, 6, 5, 4, 255, 9, 8, 7, 255, 12, 11, 10, 255]
    )


def test_32bit_bi_rgb_forces_opaque_alpha(make_bmp):
    image = decode(make_bmp(2, -1, 32, bytes([10, 20, 30, 0, 40, 50, 60, 7])))
    assert image.rgba == bytes([30, 20, 10, 255, 60, 50, 40, 255])


def test_bitfields_without_alpha_mask_is_opaque(make_bmp):
    data = make_bmp(
        1,
        1,
        32,
        bytes([10, 20, 30, 40]),
        compression=BI_BITFIELDS,
        header_size=52,
        masks=STANDARD_MASKS[:3],
    )
    assert decode(data).rgba == bytes([30, 20, 10, 255])


def test_bitfields_with_custom_masks(make_bmp):
    # red in the low byte, blue in the top byte, alpha in bits 8..15
    masks = (0x000000FF, 0x00FF0000, 0xFF000000, 0x0000FF00)
    data = make_bmp(
        1, -1, 32, bytes([1, 2, 3, 4]), compression=BI_BITFIELDS, header_size=56, masks=masks
    )
    assert decode(data).rgba == bytes([1, 3, 4, 2])


def test_bitfields_with_narrow_mask(make_bmp):
    masks = (0x0000000F, 0x000000F0, 0x00000F00, 0)
    data = make_bmp(
        1, 1, 32, bytes([0x21, 0x03, 0, 0]), compression=BI_BITFIELDS, header_size=56, masks=masks
    )
    assert decode(data).rgba == bytes([1, 2, 3, 255])


def test_bitfields_reject_wide_mask(make_bmp):
    masks = (0x00FFFF00, 0x0000FF00, 0x000000FF, 0xFF000000)
    data = make_bmp(
        1, 1, 32, b"\x00" * 4, compression=BI_BITFIELDS, header_size=56, masks=masks
    )
    assert decode(data) is None


def test_24bit_rejects_truncated_rows(make_bmp):
    # two rows of width 2 need 16 bytes
    assert decode(make_bmp(2, 2, 24, b"\x00" * 15)) is None


def test_32bit_rejects_truncated_data(make_bmp):
    assert decode(make_bmp(2, 2, 32, b"\x00" * 15)) is None


def test_decode_pixels_rechecks_bit_count():
    info = InfoHeader(40, 1, 1, 1, 16, 0, 0, 0, 0, 0, 0)
    assert decode_pixels(info, b"\x00" * 16) is None


def test_decode_pixels_rechecks_compression():
    info = InfoHeader(40, 1, 1, 1, 32, 1, 0, 0, 0, 0, 0)
    assert decode_pixels(info, b"\x00" * 16) is None


def test_encode_24bit_pads_rows():
    rgba = bytes([1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15, 16])
    assert encode_pixels_24(2, 2, rgba) == bytes(
        [3, 2, 1, 7, 6, 5, 0, 0, 11, 10, 9, 15, 14, 13, 0, 0]
    )


def test_encode_32bit_swaps_red_and_blue():
    rgba = bytes([1, 2, 3, 4, 5, 6, 7, 8])
    assert encode_pixels_32(2, 1, rgba) == bytes([3, 2, 1, 4, 7, 6, 5, 8])
