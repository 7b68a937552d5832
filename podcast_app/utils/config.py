"""
Chart layout configuration.

Values come from `config/config.yaml` (or $PODCAST_CONFIG):

    charts:
      defaults:
        width: 640
        height: 360
        margin: {top: 24, right: 32, bottom: 52, left: 68}
      duration_completion:
        max_zoom: 12

Anything missing falls back to the built-in defaults below.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from podcast_app.utils.scales import Range
from podcast_app.utils.tooltip import InnerBounds

CONFIG_PATH = Path(os.environ.get("PODCAST_CONFIG", "config/config.yaml"))

CHART_KEYS = ("duration_completion", "listener_mix", "subscriber_growth", "shares_subscribers")


@dataclass(frozen=True)
class Margin:
    top: float = 24
    right: float = 32
    bottom: float = 52
    left: float = 68


@dataclass(frozen=True)
class ChartLayout:
    width: float = 640
    height: float = 360
    margin: Margin = field(default_factory=Margin)
    max_zoom: float = 12.0

    def __post_init__(self):
        m = self.margin
        if self.width - m.left - m.right <= 0:
            raise ValueError(f"Chart width {self.width} leaves no room inside margins {m}")
        if self.height - m.top - m.bottom <= 0:
            raise ValueError(f"Chart height {self.height} leaves no room inside margins {m}")
        if self.max_zoom < 1:
            raise ValueError(f"max_zoom must be >= 1 (got {self.max_zoom})")

    @property
    def x_range(self) -> Range:
        return Range(self.margin.left, self.width - self.margin.right)

    @property
    def y_range(self) -> Range:
        # SVG-style pixels: y grows downwards, so larger values sit higher up
        return Range(self.height - self.margin.bottom, self.margin.top)

    @property
    def inner(self) -> InnerBounds:
        return InnerBounds(
            left=self.margin.left,
            top=self.margin.top,
            right=self.width - self.margin.right,
            bottom=self.height - self.margin.bottom,
        )


SCATTER_LAYOUT = ChartLayout()
SERIES_LAYOUT = ChartLayout(margin=Margin(top=24, right=24, bottom=42, left=60))

DEFAULT_LAYOUTS = {
    "duration_completion": SCATTER_LAYOUT,
    "listener_mix": SERIES_LAYOUT,
    "subscriber_growth": SERIES_LAYOUT,
    "shares_subscribers": SCATTER_LAYOUT,
}


def load_cfg(path: Optional[Path] = None) -> dict:
    path = Path(path) if path is not None else CONFIG_PATH
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _apply(layout: ChartLayout, overrides: dict[str, Any]) -> ChartLayout:
    if not overrides:
        return layout
    margin = layout.margin
    if overrides.get("margin"):
        margin = replace(margin, **{k: float(v) for k, v in overrides["margin"].items()})
    kwargs = {k: float(overrides[k]) for k in ("width", "height", "max_zoom") if k in overrides}
    return replace(layout, margin=margin, **kwargs)


def chart_layouts(cfg: Optional[dict] = None) -> dict[str, ChartLayout]:
    cfg = load_cfg() if cfg is None else cfg
    charts = cfg.get("charts", {}) or {}
    defaults = charts.get("defaults", {}) or {}
    layouts = {}
    for key in CHART_KEYS:
        layout = _apply(DEFAULT_LAYOUTS[key], defaults)
        layouts[key] = _apply(layout, charts.get(key, {}) or {})
    return layouts


def chart_layout(key: str, cfg: Optional[dict] = None) -> ChartLayout:
    if key not in CHART_KEYS:
        raise ValueError(f"Unknown chart '{key}' (expected one of {', '.join(CHART_KEYS)})")
    return chart_layouts(cfg)[key]
