"""
Pan/zoom for interactive charts.

The visible window is always a sub-interval of the data-derived base domain,
of width `base_width / zoom_level`, with `1 <= zoom_level <= max_zoom`.
Transitions are pure functions over `ZoomState`; `ZoomPanController` owns
one state per chart and feeds input events through them.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Union

from podcast_app.utils.scales import Domain, LinearScale, Range

# wheel factors saturate at 2**64 and 2**-64
MAX_WHEEL_EXPONENT = 64.0


@dataclass(frozen=True)
class ZoomState:
    domain_x: Domain
    domain_y: Domain
    zoom_level: float = 1.0


@dataclass(frozen=True)
class Viewport:
    base_x: Domain
    base_y: Domain
    range_x: Range
    range_y: Range
    max_zoom: float = 12.0


# ---- input events ----

@dataclass(frozen=True)
class ZoomEvent:
    factor: float
    pointer: tuple[float, float]


@dataclass(frozen=True)
class WheelEvent:
    delta_y: float
    pointer: tuple[float, float]
    delta_mode: int = 0  # 0 pixels, 1 lines, 2 pages


@dataclass(frozen=True)
class PanEvent:
    dx: float
    dy: float


@dataclass(frozen=True)
class ResetEvent:
    pass


Event = Union[ZoomEvent, WheelEvent, PanEvent, ResetEvent]


def wheel_factor(delta_y: float, delta_mode: int = 0) -> float:
    """Scroll delta -> zoom factor; scrolling up (negative delta) zooms in."""
    k = 0.05 if delta_mode == 1 else (1.0 if delta_mode else 0.002)
    if not math.isfinite(delta_y):
        return 1.0
    return 2 ** _clamp(-delta_y * k, -MAX_WHEEL_EXPONENT, MAX_WHEEL_EXPONENT)


def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def _clamp_window(lo: float, width: float, base: Domain) -> Domain:
    if width >= base.width:
        return base
    # windows pinned to an edge keep that edge exact
    if lo >= base.max - width:
        return Domain(base.max - width, base.max)
    if lo <= base.min:
        return Domain(base.min, min(base.min + width, base.max))
    return Domain(lo, min(lo + width, base.max))


def _zoom_axis(window: Domain, base: Domain, rng: Range, level: float, pointer: float) -> Domain:
    width = base.width / level
    if rng.is_degenerate:
        t = 0.5
    else:
        t = _clamp((pointer - rng.start) / rng.span, 0.0, 1.0)
    anchor = window.min + t * window.width
    return _clamp_window(anchor - t * width, width, base)


def _pan_axis(window: Domain, base: Domain, rng: Range, pixel_delta: float) -> Domain:
    scale = LinearScale(window, rng)
    if scale.factor == 0:
        return window
    domain_delta = pixel_delta / scale.factor
    return _clamp_window(window.min - domain_delta, window.width, base)


def initial_state(viewport: Viewport) -> ZoomState:
    return ZoomState(domain_x=viewport.base_x, domain_y=viewport.base_y, zoom_level=1.0)


def zoom_state(state: ZoomState, viewport: Viewport, factor: float, pointer: tuple[float, float]) -> ZoomState:
    if not factor > 0:
        return state
    level = _clamp(state.zoom_level * factor, 1.0, viewport.max_zoom)
    if level == 1.0:
        return reset_state(viewport)
    px, py = pointer
    return ZoomState(
        domain_x=_zoom_axis(state.domain_x, viewport.base_x, viewport.range_x, level, px),
        domain_y=_zoom_axis(state.domain_y, viewport.base_y, viewport.range_y, level, py),
        zoom_level=level,
    )


def pan_state(state: ZoomState, viewport: Viewport, dx: float, dy: float) -> ZoomState:
    if state.zoom_level <= 1.0:
        return state
    return replace(
        state,
        domain_x=_pan_axis(state.domain_x, viewport.base_x, viewport.range_x, dx),
        domain_y=_pan_axis(state.domain_y, viewport.base_y, viewport.range_y, dy),
    )


def reset_state(viewport: Viewport) -> ZoomState:
    return initial_state(viewport)


def is_valid(state: ZoomState, viewport: Viewport) -> bool:
    if not 1.0 <= state.zoom_level <= viewport.max_zoom:
        return False
    for window, base in ((state.domain_x, viewport.base_x), (state.domain_y, viewport.base_y)):
        if not base.covers(window):
            return False
        if not math.isclose(window.width, base.width / state.zoom_level, rel_tol=1e-9, abs_tol=1e-12):
            return False
    return True


class ZoomPanController:
    """Owns a chart's ZoomState; every change goes through a transition function."""

    def __init__(self, viewport: Viewport, state: ZoomState | None = None):
        self.viewport = viewport
        if state is None or not is_valid(state, viewport):
            state = initial_state(viewport)
        self._state = state

    @property
    def state(self) -> ZoomState:
        return self._state

    @property
    def zoom_level(self) -> float:
        return self._state.zoom_level

    def zoom(self, factor: float, pointer: tuple[float, float]) -> ZoomState:
        self._state = zoom_state(self._state, self.viewport, factor, pointer)
        return self._state

    def wheel(self, delta_y: float, pointer: tuple[float, float], delta_mode: int = 0) -> ZoomState:
        return self.zoom(wheel_factor(delta_y, delta_mode), pointer)

    def pan(self, dx: float, dy: float) -> ZoomState:
        self._state = pan_state(self._state, self.viewport, dx, dy)
        return self._state

    def reset(self) -> ZoomState:
        self._state = reset_state(self.viewport)
        return self._state

    def dispatch(self, event: Event) -> ZoomState:
        if isinstance(event, ZoomEvent):
            return self.zoom(event.factor, event.pointer)
        if isinstance(event, WheelEvent):
            return self.wheel(event.delta_y, event.pointer, event.delta_mode)
        if isinstance(event, PanEvent):
            return self.pan(event.dx, event.dy)
        if isinstance(event, ResetEvent):
            return self.reset()
        raise TypeError(f"Unsupported zoom event: {type(event).__name__}")

    def scales(self) -> tuple[LinearScale, LinearScale]:
        return (
            LinearScale(self._state.domain_x, self.viewport.range_x),
            LinearScale(self._state.domain_y, self.viewport.range_y),
        )
