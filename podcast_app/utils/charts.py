"""
Chart builders: episode rows -> positioned scene (pure data, no drawing).

Every builder returns a `ChartScene` whose coordinates are already in pixels,
so any renderer (Altair in the app, matplotlib in snapshots) only has to draw
what it is given.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

import pandas as pd

from podcast_app.utils.config import ChartLayout, chart_layout
from podcast_app.utils.episodes import (
    duration_points,
    episode_label,
    listener_shares,
    require_columns,
    share_points,
)
from podcast_app.utils.insights import (
    Point,
    RegressionResult,
    best_by,
    duration_completion_insights,
    fit,
    listener_mix_insights,
    r_squared,
    shares_subscribers_insights,
    subscriber_growth_insights,
)
from podcast_app.utils.scales import Domain, LinearScale, extent
from podcast_app.utils.tooltip import place, tooltip_size
from podcast_app.utils.zoom import Viewport, ZoomState

DOT_RADIUS = 4
HIGHLIGHT_RADIUS = 6


@dataclass(frozen=True)
class Tick:
    value: float
    pixel: float
    label: str


@dataclass(frozen=True)
class Label:
    x: float
    y: float
    text: str
    align: str = "middle"  # start | middle | end
    angle: float = 0.0


@dataclass(frozen=True)
class Segment:
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass(frozen=True)
class Mark:
    cx: float
    cy: float
    r: float
    label: str
    highlight: bool = False
    lines: tuple[str, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class Series:
    name: str
    kind: str  # "area" (filled between baseline and y) or "line"
    xs: tuple[float, ...]
    ys: tuple[float, ...]
    baseline: tuple[float, ...] = ()
    style: str = "line-secondary"
    curve: str = "monotone"


@dataclass(frozen=True)
class Tooltip:
    x: float
    y: float
    width: float
    height: float
    lines: tuple[str, ...]


@dataclass
class ChartScene:
    key: str
    title: str
    description: str
    layout: ChartLayout
    x_scale: LinearScale
    y_scale: LinearScale
    x_ticks: list[Tick] = field(default_factory=list)
    y_ticks: list[Tick] = field(default_factory=list)
    gridlines: list[Segment] = field(default_factory=list)
    labels: list[Label] = field(default_factory=list)
    series: list[Series] = field(default_factory=list)
    marks: list[Mark] = field(default_factory=list)
    trend: Optional[Segment] = None
    tooltip: Optional[Tooltip] = None
    legend: list[tuple[str, str]] = field(default_factory=list)
    insights: list[str] = field(default_factory=list)
    regression: Optional[RegressionResult] = None
    r2: Optional[float] = None
    aria_label: str = ""


# ---- label formats ----

def fmt_percent(v: float) -> str:
    return f"{v * 100:.0f}%"


def fmt_minutes(v: float) -> str:
    return f"{v:.0f} min"


def fmt_thousands(v: float) -> str:
    return f"{round(v):,}"


def fmt_episode(v: float) -> str:
    return f"Ep {episode_label(v)}"


# ---- shared scaffolding ----

def _ticks(scale: LinearScale, values: Sequence[float], fmt: Callable[[float], str]) -> list[Tick]:
    return [Tick(value=v, pixel=scale(v), label=fmt(v)) for v in values]


def _y_axis(scene: ChartScene, gap: float = 16, grid: bool = True) -> None:
    layout = scene.layout
    for t in scene.y_ticks:
        if grid:
            scene.gridlines.append(Segment(layout.margin.left, t.pixel, layout.width - layout.margin.right, t.pixel))
        scene.labels.append(Label(layout.margin.left - gap, t.pixel + 4, t.label, align="end"))


def _x_axis(scene: ChartScene, offset: float = 30) -> None:
    y = scene.layout.height - scene.layout.margin.bottom + offset
    for t in scene.x_ticks:
        scene.labels.append(Label(t.pixel, y, t.label))


def _scatter_titles(scene: ChartScene, x_title: str, y_title: str, bottom_gap: float = 10) -> None:
    layout = scene.layout
    scene.labels.append(Label(layout.width / 2, layout.height - bottom_gap, x_title))
    scene.labels.append(Label(layout.margin.left - 42, layout.height / 2, y_title, angle=-90))


def _trend(reg: RegressionResult, domain: Domain, xs: LinearScale, ys: LinearScale) -> Segment:
    (x1, y1), (x2, y2) = reg.segment(domain)
    return Segment(xs(x1), ys(y1), xs(x2), ys(y2))


def _tooltip(mark: Mark, layout: ChartLayout) -> Tooltip:
    bounds = layout.inner
    size = tooltip_size(mark.lines, bounds)
    x, y = place((mark.cx, mark.cy), size, bounds)
    return Tooltip(x=x, y=y, width=size[0], height=size[1], lines=mark.lines)


def _hovered(marks: Sequence[Mark], hovered: Optional[str], layout: ChartLayout) -> Optional[Tooltip]:
    if hovered is None:
        return None
    for m in marks:
        if m.label == hovered:
            return _tooltip(m, layout)
    return None


# ---- Duration vs completion (interactive) ----

def duration_completion_domains(points: Sequence[Point]) -> tuple[Domain, Domain]:
    x_domain = extent(p.x for p in points)
    if not points:
        return x_domain, Domain(0.45, 0.95)
    ys = [p.y for p in points]
    return x_domain, Domain(min(0.45, min(ys) - 0.02), max(0.95, max(ys) + 0.02))


def duration_completion_viewport(df: pd.DataFrame, layout: Optional[ChartLayout] = None) -> Viewport:
    layout = layout or chart_layout("duration_completion")
    base_x, base_y = duration_completion_domains(duration_points(df))
    return Viewport(base_x, base_y, layout.x_range, layout.y_range, max_zoom=layout.max_zoom)


def _duration_lines(p: Point) -> tuple[str, ...]:
    return (
        f"Episode {p.label}",
        f"Duration: {p.x:.1f} min",
        f"Completion: {p.y * 100:.1f}%",
    )


def _duration_description(p: Point) -> str:
    return f"Episode {p.label}, duration {p.x:.1f} minutes, completion {p.y * 100:.1f} percent"


def build_duration_completion(
    df: pd.DataFrame,
    layout: Optional[ChartLayout] = None,
    zoom: Optional[ZoomState] = None,
    hovered: Optional[str] = None,
) -> ChartScene:
    layout = layout or chart_layout("duration_completion")
    points = duration_points(df)
    base_x, base_y = duration_completion_domains(points)
    dom_x = zoom.domain_x if zoom else base_x
    dom_y = zoom.domain_y if zoom else base_y

    xs = LinearScale(dom_x, layout.x_range)
    ys = LinearScale(dom_y, layout.y_range)

    reg = fit(points)
    r2 = r_squared(points, reg)
    best = best_by(points, "y")

    scene = ChartScene(
        key="duration_completion",
        title="Episode Duration vs Completion",
        description=(
            "Check whether tighter edits or longer conversations keep listeners engaged, "
            "and cluster runtimes that need rethinking."
        ),
        layout=layout,
        x_scale=xs,
        y_scale=ys,
        x_ticks=_ticks(xs, xs.ticks(6), fmt_minutes),
        y_ticks=_ticks(ys, ys.ticks(5), fmt_percent),
        legend=[("Episode", "dot"), ("Highest completion", "dot-highlight")],
        insights=duration_completion_insights(points, reg, r2),
        regression=reg,
        r2=r2,
        aria_label="Scatter plot showing duration versus completion rate",
    )
    _y_axis(scene)
    _x_axis(scene)
    _scatter_titles(scene, "Episode duration (minutes)", "Completion rate")

    if points:
        scene.trend = _trend(reg, dom_x, xs, ys)

    for p in points:
        # zoomed-out-of-view points are not drawn
        if not (dom_x.contains(p.x) and dom_y.contains(p.y)):
            continue
        is_best = best is not None and p.label == best.label
        scene.marks.append(Mark(
            cx=xs(p.x),
            cy=ys(p.y),
            r=HIGHLIGHT_RADIUS if is_best else DOT_RADIUS,
            label=p.label,
            highlight=is_best,
            lines=_duration_lines(p),
            description=_duration_description(p),
        ))

    scene.tooltip = _hovered(scene.marks, hovered, layout)
    return scene


# ---- Listener mix ----

def build_listener_mix(df: pd.DataFrame, layout: Optional[ChartLayout] = None) -> ChartScene:
    layout = layout or chart_layout("listener_mix")
    shares = listener_shares(df)
    episodes = shares["episode"].tolist()

    xs = LinearScale(extent(episodes), layout.x_range)
    ys = LinearScale(Domain(0.0, 1.0), layout.y_range)

    scene = ChartScene(
        key="listener_mix",
        title="Listener Mix",
        description=(
            "See how the audience blend between new and returning listeners shifts, "
            "so you can balance acquisition campaigns and retention hooks."
        ),
        layout=layout,
        x_scale=xs,
        y_scale=ys,
        x_ticks=_ticks(xs, xs.ticks(6), fmt_episode),
        y_ticks=_ticks(ys, [0, 0.25, 0.5, 0.75, 1], fmt_percent),
        legend=[("Returning listeners", "stack-returning"), ("New listeners", "stack-new")],
        insights=listener_mix_insights(shares["new_share"].tolist()),
        aria_label="Stacked area showing listener composition",
    )
    _y_axis(scene)
    _x_axis(scene, offset=28)
    scene.labels.append(Label(layout.margin.left, layout.margin.top - 10, "Audience share", align="start"))

    if episodes:
        px = tuple(xs(e) for e in episodes)
        returning = shares["returning_share"].tolist()
        top = [r + n for r, n in zip(returning, shares["new_share"].tolist())]
        scene.series.append(Series(
            name="Returning listeners",
            kind="area",
            xs=px,
            ys=tuple(ys(v) for v in returning),
            baseline=tuple(ys(0.0) for _ in returning),
            style="stack-returning",
        ))
        scene.series.append(Series(
            name="New listeners",
            kind="area",
            xs=px,
            ys=tuple(ys(v) for v in top),
            baseline=tuple(ys(v) for v in returning),
            style="stack-new",
        ))
    return scene


# ---- Subscriber growth ----

def build_subscriber_growth(df: pd.DataFrame, layout: Optional[ChartLayout] = None) -> ChartScene:
    layout = layout or chart_layout("subscriber_growth")
    require_columns(df, ["episode", "cumulative_subscribers"])
    episodes = df["episode"].astype(float).tolist()
    cumulative = df["cumulative_subscribers"].astype(float).tolist()

    top = max(cumulative) * 1.05 if cumulative else 0.0
    xs = LinearScale(extent(episodes), layout.x_range)
    ys = LinearScale(Domain(0.0, top), layout.y_range)

    scene = ChartScene(
        key="subscriber_growth",
        title="Subscriber Trajectory",
        description=(
            "Cumulative subscriber growth shows which seasons or campaigns produced "
            "inflection points and where momentum slowed."
        ),
        layout=layout,
        x_scale=xs,
        y_scale=ys,
        x_ticks=_ticks(xs, xs.ticks(6), fmt_episode),
        y_ticks=_ticks(ys, ys.ticks(5), fmt_thousands),
        legend=[("Total subscribers", "area")],
        insights=subscriber_growth_insights(episodes, cumulative),
        aria_label="Cumulative subscribers over time",
    )
    _y_axis(scene, gap=12)
    _x_axis(scene, offset=28)
    scene.labels.append(Label(layout.margin.left, layout.margin.top - 10, "Total subscribers", align="start"))

    if episodes:
        px = tuple(xs(e) for e in episodes)
        py = tuple(ys(v) for v in cumulative)
        scene.series.append(Series(
            name="Total subscribers",
            kind="area",
            xs=px,
            ys=py,
            baseline=tuple(ys(0.0) for _ in px),
            style="area",
        ))
        scene.series.append(Series(name="Total subscribers", kind="line", xs=px, ys=py))
    return scene


# ---- Social shares vs subscribers ----

def _share_lines(p: Point) -> tuple[str, ...]:
    head = f"Ep {p.label}: {p.title}" if p.title else f"Ep {p.label}"
    return (head, f"{p.x:,.0f} shares → {p.y:,.0f} subscribers")


def _share_description(p: Point) -> str:
    return f"Episode {p.label}, {p.x:,.0f} social shares, {p.y:,.0f} subscribers gained"


def build_shares_subscribers(
    df: pd.DataFrame,
    layout: Optional[ChartLayout] = None,
    hovered: Optional[str] = None,
) -> ChartScene:
    layout = layout or chart_layout("shares_subscribers")
    points = share_points(df)

    x_domain = extent(p.x for p in points)
    y_top = max(p.y for p in points) * 1.1 if points else 0.0
    xs = LinearScale(x_domain, layout.x_range)
    ys = LinearScale(Domain(0.0, y_top), layout.y_range)

    reg = fit(points)
    r2 = r_squared(points, reg)
    top_share = best_by(points, "x")

    scene = ChartScene(
        key="shares_subscribers",
        title="Social Share Conversion",
        description=(
            "Correlate social push energy with subscriber lift to decide where to double down on promotion."
        ),
        layout=layout,
        x_scale=xs,
        y_scale=ys,
        x_ticks=_ticks(xs, xs.ticks(5), fmt_thousands),
        y_ticks=_ticks(ys, ys.ticks(5), fmt_thousands),
        legend=[("Episode", "dot"), ("Highest share push", "dot-highlight")],
        insights=shares_subscribers_insights(points, reg, r2),
        regression=reg,
        r2=r2,
        aria_label="Scatter plot of social shares vs subscribers",
    )
    _y_axis(scene)
    _x_axis(scene)
    _scatter_titles(scene, "Social media shares", "Subscribers gained", bottom_gap=12)

    if points:
        scene.trend = _trend(reg, x_domain, xs, ys)

    for p in points:
        is_top = top_share is not None and p.label == top_share.label
        scene.marks.append(Mark(
            cx=xs(p.x),
            cy=ys(p.y),
            r=HIGHLIGHT_RADIUS if is_top else DOT_RADIUS,
            label=p.label,
            highlight=is_top,
            lines=_share_lines(p),
            description=_share_description(p),
        ))

    scene.tooltip = _hovered(scene.marks, hovered, layout)
    return scene


BUILDERS = {
    "duration_completion": build_duration_completion,
    "listener_mix": build_listener_mix,
    "subscriber_growth": build_subscriber_growth,
    "shares_subscribers": build_shares_subscribers,
}


def build_all(df: pd.DataFrame, layouts: Optional[dict[str, ChartLayout]] = None) -> list[ChartScene]:
    layouts = layouts or {}
    return [builder(df, layouts.get(key)) for key, builder in BUILDERS.items()]
