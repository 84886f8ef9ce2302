"""Reading and writing uncompressed 24-bit and 32-bit BMP images."""

from .headers import MAX_DIMENSION, ChannelMasks, FileHeader, HeaderVariant, InfoHeader
from .image import Color, Image, Point, decode, encode24, encode32, load, save

__all__ = [
    "MAX_DIMENSION",
    "ChannelMasks",
    "FileHeader",
    "HeaderVariant",
    "InfoHeader",
    "Color",
    "Image",
    "Point",
    "decode",
    "encode24",
    "encode32",
    "load",
    "save",
]
