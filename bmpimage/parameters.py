"""Parameter definitions for generated images."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from .image import Color, Image, Point


@dataclass(frozen=True)
class GradientParameters:
    """Everything needed to render a linear gradient.

    Points are in pixel coordinates with the origin at the top-left corner.
    """

    width: int
    height: int
    start_color: Color
    end_color: Color
    start_point: Point
    end_point: Point

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GradientParameters":
        return cls(
            width=int(data["width"]),
            height=int(data["height"]),
            start_color=Color(*data["start_color"]),
            end_color=Color(*data["end_color"]),
            start_point=Point(*(float(v) for v in data["start_point"])),
            end_point=Point(*(float(v) for v in data["end_point"])),
        )

    def render(self) -> Image:
        return Image.gradient(
            self.width,
            self.height,
            self.start_color,
            self.end_color,
            self.start_point,
            self.end_point,
        )


def load_parameters(path: str | Path) -> GradientParameters:
    with Path(path).open("r", encoding="utf-8") as fp:
        data = json.load(fp)
    return GradientParameters.from_dict(data)
