"""
Draw a ChartScene with Altair.

Every encoding is unscaled (`scale=None`), so Vega paints the pixel geometry
computed in `charts.py` as-is: y grows downwards, (0, 0) is the top-left.
"""
from __future__ import annotations

import math
from typing import Optional

import altair as alt
import pandas as pd

from podcast_app.utils.charts import ChartScene

PALETTE = {
    "dot": "#38bdf8",
    "dot-highlight": "#facc15",
    "line-secondary": "#818cf8",
    "stack-returning": "#38bdf8",
    "stack-new": "#f472b6",
    "area": "rgba(129, 140, 248, 0.35)",
    "grid": "#334155",
    "label": "#94a3b8",
    "tooltip-bg": "#0f172a",
    "tooltip-text": "#e2e8f0",
}

ALIGN = {"start": "left", "middle": "center", "end": "right"}


def _x(field: str) -> alt.X:
    return alt.X(f"{field}:Q", scale=None, axis=None)


def _y(field: str) -> alt.Y:
    return alt.Y(f"{field}:Q", scale=None, axis=None)


def _gridlines(scene: ChartScene) -> Optional[alt.Chart]:
    if not scene.gridlines:
        return None
    df = pd.DataFrame([vars(s) for s in scene.gridlines])
    return alt.Chart(df).mark_rule(color=PALETTE["grid"], strokeWidth=1).encode(
        x=_x("x1"), x2=alt.X2("x2"), y=_y("y1"), y2=alt.Y2("y2"),
    )


def _series(scene: ChartScene) -> list[alt.Chart]:
    layers = []
    for s in scene.series:
        df = pd.DataFrame({"x": s.xs, "y": s.ys})
        color = PALETTE.get(s.style, PALETTE["line-secondary"])
        if s.kind == "area":
            df["y0"] = list(s.baseline) if s.baseline else [scene.layout.height - scene.layout.margin.bottom] * len(df)
            layers.append(
                alt.Chart(df).mark_area(interpolate=s.curve, color=color, opacity=0.85).encode(
                    x=_x("x"), y=_y("y"), y2=alt.Y2("y0"),
                )
            )
        else:
            layers.append(
                alt.Chart(df).mark_line(interpolate=s.curve, color=color, strokeWidth=2).encode(
                    x=_x("x"), y=_y("y"),
                )
            )
    return layers


def _trend(scene: ChartScene) -> Optional[alt.Chart]:
    if scene.trend is None:
        return None
    df = pd.DataFrame([vars(scene.trend)])
    return alt.Chart(df).mark_rule(
        color=PALETTE["line-secondary"], strokeWidth=2, strokeDash=[6, 4], clip=True,
    ).encode(x=_x("x1"), x2=alt.X2("x2"), y=_y("y1"), y2=alt.Y2("y2"))


def _marks(scene: ChartScene) -> Optional[alt.Chart]:
    if not scene.marks:
        return None
    df = pd.DataFrame({
        "cx": [m.cx for m in scene.marks],
        "cy": [m.cy for m in scene.marks],
        "size": [math.pi * m.r ** 2 * 2 for m in scene.marks],
        "fill": [PALETTE["dot-highlight"] if m.highlight else PALETTE["dot"] for m in scene.marks],
        "episode": [m.label for m in scene.marks],
        "details": [" | ".join(m.lines) for m in scene.marks],
        "description": [m.description or f"Episode {m.label}" for m in scene.marks],
    })
    return alt.Chart(df).mark_circle(opacity=0.9, aria=True).encode(
        x=_x("cx"),
        y=_y("cy"),
        size=alt.Size("size:Q", scale=None, legend=None),
        color=alt.Color("fill:N", scale=None, legend=None),
        tooltip=[alt.Tooltip("episode:N", title="Episode"), alt.Tooltip("details:N", title="")],
        description=alt.Description("description:N"),
    )


def _labels(scene: ChartScene) -> list[alt.Chart]:
    if not scene.labels:
        return []
    df = pd.DataFrame([vars(lb) for lb in scene.labels])
    layers = []
    for (align, angle), group in df.groupby(["align", "angle"], sort=False):
        layers.append(
            alt.Chart(group).mark_text(
                align=ALIGN.get(align, "center"), angle=float(angle) % 360, color=PALETTE["label"], fontSize=11,
            ).encode(x=_x("x"), y=_y("y"), text="text:N")
        )
    return layers


def _tooltip(scene: ChartScene) -> list[alt.Chart]:
    tip = scene.tooltip
    if tip is None:
        return []
    box = pd.DataFrame([{"x1": tip.x, "x2": tip.x + tip.width, "y1": tip.y, "y2": tip.y + tip.height}])
    text = pd.DataFrame({
        "x": [tip.x + 12] * len(tip.lines),
        "y": [tip.y + 20 + i * 18 for i in range(len(tip.lines))],
        "text": list(tip.lines),
    })
    return [
        alt.Chart(box).mark_rect(color=PALETTE["tooltip-bg"], opacity=0.92, cornerRadius=8).encode(
            x=_x("x1"), x2=alt.X2("x2"), y=_y("y1"), y2=alt.Y2("y2"),
        ),
        alt.Chart(text).mark_text(align="left", color=PALETTE["tooltip-text"], fontSize=12).encode(
            x=_x("x"), y=_y("y"), text="text:N",
        ),
    ]


def _legend(scene: ChartScene) -> list[alt.Chart]:
    if not scene.legend:
        return []
    # laid out right-to-left along the top margin, ending at the plot's right edge
    rows = []
    x = scene.layout.width - scene.layout.margin.right
    y = scene.layout.margin.top - 10
    for name, style in reversed(scene.legend):
        x -= len(name) * 6.2
        rows.append({"x": x, "y": y, "swatch_x": x - 10, "text": name, "fill": PALETTE.get(style, PALETTE["dot"])})
        x -= 28
    df = pd.DataFrame(rows)
    return [
        alt.Chart(df).mark_square(size=70, opacity=0.9).encode(
            x=_x("swatch_x"), y=_y("y"), color=alt.Color("fill:N", scale=None, legend=None),
        ),
        alt.Chart(df).mark_text(align="left", baseline="middle", color=PALETTE["label"], fontSize=11).encode(
            x=_x("x"), y=_y("y"), text="text:N",
        ),
    ]


def scene_to_chart(scene: ChartScene) -> alt.LayerChart:
    layers = [
        _gridlines(scene), *_series(scene), _trend(scene), _marks(scene),
        *_labels(scene), *_legend(scene), *_tooltip(scene),
    ]
    layers = [layer for layer in layers if layer is not None]
    return (
        alt.layer(*layers)
        .properties(width=scene.layout.width, height=scene.layout.height, description=scene.aria_label)
        .configure_view(stroke=None)
    )
