"""
Continuous scales used by every chart: data value -> pixel and back, plus
"nice" tick values for gridlines and axis labels.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np

# thresholds for picking a 10/5/2/1 multiple of the base power of ten
E10 = math.sqrt(50)
E5 = math.sqrt(10)
E2 = math.sqrt(2)


@dataclass(frozen=True)
class Domain:
    min: float
    max: float

    def __post_init__(self):
        lo, hi = float(self.min), float(self.max)
        if lo > hi:
            lo, hi = hi, lo
        object.__setattr__(self, "min", lo)
        object.__setattr__(self, "max", hi)

    @property
    def width(self) -> float:
        return self.max - self.min

    @property
    def is_degenerate(self) -> bool:
        return self.max == self.min

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def covers(self, other: "Domain", tol: float = 1e-9) -> bool:
        """True if `other` lies inside this domain (with a small float tolerance)."""
        slack = tol * max(1.0, abs(self.width))
        return other.min >= self.min - slack and other.max <= self.max + slack


@dataclass(frozen=True)
class Range:
    start: float
    end: float

    @property
    def span(self) -> float:
        return self.end - self.start

    @property
    def is_degenerate(self) -> bool:
        return self.end == self.start


def extent(values: Iterable[float]) -> Domain:
    arr = np.asarray(list(values), dtype=float)
    arr = arr[np.isfinite(arr)]
    if arr.size == 0:
        return Domain(0.0, 0.0)
    return Domain(float(arr.min()), float(arr.max()))


def _lerp(a: float, b: float, t: float) -> float:
    # exact at both ends: t=0 gives a, t=1 gives b
    return a * (1 - t) + b * t


def _round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def _tick_spec(start: float, stop: float, count: float) -> tuple[int, int, float]:
    step = (stop - start) / max(0.0, count)
    power = math.floor(math.log10(step))
    error = step / 10 ** power
    if error >= E10:
        factor = 10
    elif error >= E5:
        factor = 5
    elif error >= E2:
        factor = 2
    else:
        factor = 1

    if power < 0:
        # work in inverse steps so 0.1 * 3 stays 0.3 instead of 0.30000000000000004
        inc = 10 ** -power / factor
        i1 = _round_half_up(start * inc)
        i2 = _round_half_up(stop * inc)
        if i1 / inc < start:
            i1 += 1
        if i2 / inc > stop:
            i2 -= 1
        inc = -inc
    else:
        inc = 10 ** power * factor
        i1 = _round_half_up(start / inc)
        i2 = _round_half_up(stop / inc)
        if i1 * inc < start:
            i1 += 1
        if i2 * inc > stop:
            i2 -= 1

    if i2 < i1 and 0.5 <= count < 2:
        return _tick_spec(start, stop, count * 2)
    return i1, i2, float(inc)


def nice_ticks(start: float, stop: float, count: int = 10) -> list[float]:
    """
    Evenly spaced, human-friendly values within [start, stop].
    Steps are 1, 2 or 5 times a power of ten; roughly `count` values come back.
    """
    start, stop = float(start), float(stop)
    if not count > 0:
        return []
    if not (math.isfinite(start) and math.isfinite(stop)):
        return []
    if start == stop:
        return [start]
    if start > stop:
        start, stop = stop, start

    i1, i2, inc = _tick_spec(start, stop, count)
    if i2 < i1:
        return []
    if inc < 0:
        return [(i1 + i) / -inc for i in range(i2 - i1 + 1)]
    return [(i1 + i) * inc for i in range(i2 - i1 + 1)]


class LinearScale:
    """
    Affine map from a data domain to a pixel range.

    A degenerate domain (min == max) maps every value to the middle of the
    range, so a single data point lands in the centre of the plot instead of
    producing NaN.
    """

    def __init__(self, domain: Domain, range: Range):
        self.domain = domain
        self.range = range

    def __repr__(self) -> str:
        return f"LinearScale(domain={self.domain}, range={self.range})"

    @property
    def factor(self) -> float:
        """Pixels per data unit (0 for a degenerate domain)."""
        if self.domain.is_degenerate:
            return 0.0
        return self.range.span / self.domain.width

    def __call__(self, value: float) -> float:
        if self.domain.is_degenerate:
            return _lerp(self.range.start, self.range.end, 0.5)
        t = (float(value) - self.domain.min) / self.domain.width
        return _lerp(self.range.start, self.range.end, t)

    def invert(self, pixel: float) -> float:
        if self.range.is_degenerate:
            return self.domain.min
        t = (float(pixel) - self.range.start) / self.range.span
        return _lerp(self.domain.min, self.domain.max, t)

    def ticks(self, count: int = 10) -> list[float]:
        return nice_ticks(self.domain.min, self.domain.max, count)
