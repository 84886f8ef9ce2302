"""Command line interface for the BMP codec."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from .headers import BI_BITFIELDS, FileHeader, InfoHeader
from .image import SUPPORTED_OUTPUT_BITS, Color, Image, Point, load, save
from .parameters import GradientParameters, load_parameters

logger = logging.getLogger(__name__)


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("output", type=Path, help="Path of the BMP file to write")
    parser.add_argument(
        "--bits",
        type=int,
        choices=SUPPORTED_OUTPUT_BITS,
        default=32,
        help="Output bit depth (default: 32)",
    )


def _add_size_argument(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument(
        "--size",
        type=int,
        nargs=2,
        metavar=("WIDTH", "HEIGHT"),
        required=required,
        help="Image size in pixels",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Read and write 24/32-bit BMP images")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log decoding details"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    info = commands.add_parser("info", help="Print the headers of a BMP file")
    info.add_argument("input", type=Path, help="BMP file to inspect")

    convert = commands.add_parser("convert", help="Re-encode a BMP file")
    convert.add_argument("input", type=Path, help="BMP file to read")
    _add_output_arguments(convert)

    solid = commands.add_parser("solid", help="Write a single-colour image")
    _add_output_arguments(solid)
    _add_size_argument(solid, required=True)
    solid.add_argument(
        "--color",
        type=int,
        nargs="+",
        required=True,
        metavar="C",
        help="Fill colour as R G B [A]",
    )

    gradient = commands.add_parser("gradient", help="Write a linear gradient image")
    _add_output_arguments(gradient)
    gradient.add_argument(
        "--params",
        type=Path,
        default=None,
        help="JSON file with width, height, start/end colours and points",
    )
    _add_size_argument(gradient, required=False)
    gradient.add_argument("--start-color", type=int, nargs="+", metavar="C")
    gradient.add_argument("--end-color", type=int, nargs="+", metavar="C")
    gradient.add_argument(
        "--start-point", type=float, nargs=2, metavar=("X", "Y"), default=(0.0, 0.0)
    )
    gradient.add_argument("--end-point", type=float, nargs=2, metavar=("X", "Y"))
    return parser


def describe(data: bytes) -> dict | None:
    """Summarise the headers of ``data`` or return ``None`` if unparseable."""

    file_header = FileHeader.parse(data)
    info = InfoHeader.parse(data) if file_header is not None else None
    if info is None:
        return None
    summary = {
        "file_size": file_header.file_size,
        "pixel_offset": file_header.offset,
        "header_size": info.size,
        "header_variant": info.variant.name,
        "width": info.width,
        "height": info.abs_height,
        "bit_count": info.bit_count,
        "compression": "BI_BITFIELDS" if info.compression == BI_BITFIELDS else "BI_RGB",
        "row_order": "top-down" if info.top_down else "bottom-up",
    }
    if info.masks is not None:
        summary["masks"] = {
            name: f"0x{mask:08X}" for name, mask in info.channel_masks()._asdict().items()
        }
    return summary


def _gradient_parameters(args: argparse.Namespace) -> GradientParameters:
    if args.params is not None:
        return load_parameters(args.params)
    missing = [
        flag
        for flag, value in (
            ("--size", args.size),
            ("--start-color", args.start_color),
            ("--end-color", args.end_color),
            ("--end-point", args.end_point),
        )
        if value is None
    ]
    if missing:
        raise ValueError(f"Missing {', '.join(missing)} (or pass --params)")
    width, height = args.size
    return GradientParameters(
        width=width,
        height=height,
        start_color=Color(*args.start_color),
        end_color=Color(*args.end_color),
        start_point=Point(*args.start_point),
        end_point=Point(*args.end_point),
    )


def run(args: argparse.Namespace) -> int:
    if args.command == "info":
        summary = describe(args.input.read_bytes())
        if summary is None:
            print(f"{args.input}: not a supported BMP file", file=sys.stderr)
            return 1
        print(json.dumps(summary, indent=2))
        return 0

    if args.command == "convert":
        image = load(args.input)
        if image is None:
            print(f"{args.input}: not a supported BMP file", file=sys.stderr)
            return 1
    elif args.command == "solid":
        width, height = args.size
        image = Image.solid(width, height, args.color)
    else:
        image = _gradient_parameters(args).render()

    save(image, args.output, bits=args.bits)
    logger.info("Wrote %dx%d %d-bit BMP to %s", image.width, image.height, args.bits, args.output)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return run(args)
    except (OSError, ValueError, KeyError, TypeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
