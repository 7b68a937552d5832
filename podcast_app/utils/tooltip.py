"""Tooltip box sizing and placement inside a chart's plotting area."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

OFFSET = 12
PADDING = 12
LINE_HEIGHT = 18
CHAR_WIDTH = 6.2
MIN_WIDTH = 150


@dataclass(frozen=True)
class InnerBounds:
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


def tooltip_size(lines: Sequence[str], bounds: InnerBounds) -> tuple[float, float]:
    estimated = max([len(line) * CHAR_WIDTH for line in lines] + [MIN_WIDTH])
    width = min(estimated, bounds.width)
    height = len(lines) * LINE_HEIGHT + PADDING
    return width, height


def place(point: tuple[float, float], size: tuple[float, float], bounds: InnerBounds) -> tuple[float, float]:
    """
    Top-left corner for a tooltip box next to `point` (pixels).

    Prefers right-and-above the point, flips left if the box would overflow the
    right edge, flips below if it would cross the top edge, then clamps the
    origin so it never starts left of / above the plotting area.
    """
    px, py = point
    w, h = size

    x = px + OFFSET
    y = py - h - OFFSET

    if x + w > bounds.right:
        x = px - w - OFFSET
    if y < bounds.top:
        y = py + OFFSET

    return max(bounds.left, x), max(bounds.top, y)
