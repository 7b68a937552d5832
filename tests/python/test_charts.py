import math

import pandas as pd
import pytest

from podcast_app.utils.charts import (
    BUILDERS,
    build_all,
    build_duration_completion,
    build_listener_mix,
    build_shares_subscribers,
    build_subscriber_growth,
    duration_completion_viewport,
)
from podcast_app.utils.config import SCATTER_LAYOUT, SERIES_LAYOUT
from podcast_app.utils.episodes import EPISODE_COLUMNS, generate_demo_episodes
from podcast_app.utils.scales import Domain
from podcast_app.utils.zoom import ZoomPanController


@pytest.fixture(scope="module")
def season():
    return generate_demo_episodes(n=30, seed=5)


def _finite_scene(scene):
    values = []
    for m in scene.marks:
        values += [m.cx, m.cy]
    for s in scene.series:
        values += list(s.xs) + list(s.ys) + list(s.baseline)
    for t in scene.x_ticks + scene.y_ticks:
        values.append(t.pixel)
    if scene.trend:
        values += [scene.trend.x1, scene.trend.y1, scene.trend.x2, scene.trend.y2]
    return all(math.isfinite(v) for v in values)


def test_duration_scene_marks_and_highlight(season):
    scene = build_duration_completion(season, SCATTER_LAYOUT)
    inner = SCATTER_LAYOUT.inner

    assert len(scene.marks) == len(season)
    for m in scene.marks:
        assert inner.left - 1e-9 <= m.cx <= inner.right + 1e-9
        assert inner.top - 1e-9 <= m.cy <= inner.bottom + 1e-9

    highlighted = [m for m in scene.marks if m.highlight]
    assert len(highlighted) == 1
    best_ep = season.loc[season["completion_rate"].idxmax(), "episode"]
    assert highlighted[0].label == str(best_ep)
    assert highlighted[0].r > scene.marks[0].r or scene.marks[0].highlight

    assert scene.trend is not None
    assert scene.x_ticks and all(t.label.endswith(" min") for t in scene.x_ticks)
    assert scene.y_ticks and all(t.label.endswith("%") for t in scene.y_ticks)
    assert len(scene.gridlines) == len(scene.y_ticks)
    assert _finite_scene(scene)


def test_duration_y_domain_keeps_reference_band():
    df = generate_demo_episodes(n=5, seed=1)
    df["completion_rate"] = [0.6, 0.7, 0.65, 0.8, 0.75]
    scene = build_duration_completion(df, SCATTER_LAYOUT)
    assert scene.y_scale.domain == Domain(0.45, 0.95)

    df["completion_rate"] = [0.3, 0.7, 0.65, 0.99, 0.75]
    scene = build_duration_completion(df, SCATTER_LAYOUT)
    assert scene.y_scale.domain.min == pytest.approx(0.28)
    assert scene.y_scale.domain.max == pytest.approx(1.01)


def test_duration_trend_follows_visible_window(season):
    viewport = duration_completion_viewport(season, SCATTER_LAYOUT)
    ctrl = ZoomPanController(viewport)
    ctrl.zoom(4.0, (338.0, 171.0))
    scene = build_duration_completion(season, SCATTER_LAYOUT, zoom=ctrl.state)

    assert scene.x_scale.domain == ctrl.state.domain_x
    assert scene.trend.x1 == pytest.approx(SCATTER_LAYOUT.x_range.start)
    assert scene.trend.x2 == pytest.approx(SCATTER_LAYOUT.x_range.end)
    assert len(scene.marks) <= len(season)
    for m in scene.marks:
        assert SCATTER_LAYOUT.margin.left - 1e-6 <= m.cx <= SCATTER_LAYOUT.width - SCATTER_LAYOUT.margin.right + 1e-6


def test_duration_tooltip_for_hovered_episode(season):
    scene = build_duration_completion(season, SCATTER_LAYOUT, hovered="3")
    tip = scene.tooltip
    assert tip is not None
    assert tip.lines[0] == "Episode 3"
    assert tip.lines[1].startswith("Duration: ")
    assert tip.x >= SCATTER_LAYOUT.inner.left
    assert tip.y >= SCATTER_LAYOUT.inner.top

    assert build_duration_completion(season, SCATTER_LAYOUT, hovered="999").tooltip is None


def test_empty_input_builds_safe_scenes():
    empty = pd.DataFrame(columns=EPISODE_COLUMNS)
    for key, builder in BUILDERS.items():
        scene = builder(empty)
        assert scene.marks == []
        assert scene.trend is None
        assert scene.tooltip is None
        assert scene.insights, key
        assert _finite_scene(scene), key


def test_single_episode_sits_in_the_middle():
    df = generate_demo_episodes(n=1, seed=1)
    scene = build_duration_completion(df, SCATTER_LAYOUT)
    mid = (SCATTER_LAYOUT.x_range.start + SCATTER_LAYOUT.x_range.end) / 2
    assert scene.marks[0].cx == pytest.approx(mid)
    assert scene.regression.slope == 0.0
    assert _finite_scene(scene)


def test_listener_mix_bands_stack_to_full_height(season):
    scene = build_listener_mix(season, SERIES_LAYOUT)
    returning, new = scene.series
    assert returning.style == "stack-returning" and new.style == "stack-new"
    assert returning.baseline == tuple(SERIES_LAYOUT.y_range.start for _ in returning.xs)
    assert new.baseline == returning.ys
    for y in new.ys:
        assert y == pytest.approx(SERIES_LAYOUT.margin.top)
    assert [t.value for t in scene.y_ticks] == [0, 0.25, 0.5, 0.75, 1]
    assert all(t.label.startswith("Ep ") for t in scene.x_ticks)


def test_listener_mix_zero_total_counts_as_zero_share():
    df = generate_demo_episodes(n=3, seed=2)
    df.loc[1, ["new_listeners", "returning_listeners", "listeners_total"]] = 0
    scene = build_listener_mix(df, SERIES_LAYOUT)
    baseline = SERIES_LAYOUT.y_range.start
    assert scene.series[0].ys[1] == pytest.approx(baseline)
    assert scene.series[1].ys[1] == pytest.approx(baseline)


def test_subscriber_growth_area_and_line(season):
    scene = build_subscriber_growth(season, SERIES_LAYOUT)
    assert scene.y_scale.domain.max == pytest.approx(season["cumulative_subscribers"].max() * 1.05)
    area, line = scene.series
    assert (area.kind, line.kind) == ("area", "line")
    assert area.ys == line.ys
    assert set(area.baseline) == {SERIES_LAYOUT.y_range.start}
    assert all("," in t.label or len(t.label) <= 3 for t in scene.y_ticks)


def test_shares_scene_highlights_top_share(season):
    scene = build_shares_subscribers(season, SCATTER_LAYOUT)
    top_ep = season.loc[season["social_media_shares"].idxmax(), "episode"]
    highlighted = [m for m in scene.marks if m.highlight]
    assert [m.label for m in highlighted] == [str(top_ep)]
    assert scene.y_scale.domain.max == pytest.approx(season["subscribers_gained"].max() * 1.1)
    assert "shares →" in highlighted[0].lines[1]
    assert scene.regression.slope > 0
    assert scene.trend.x1 == pytest.approx(SCATTER_LAYOUT.x_range.start)


def test_build_all_returns_every_chart(season):
    scenes = build_all(season)
    assert [s.key for s in scenes] == list(BUILDERS)
    assert all(_finite_scene(s) for s in scenes)


def test_panning_to_either_edge_keeps_the_extreme_episodes(season):
    df = season.copy()
    df["completion_rate"] = 0.7
    viewport = duration_completion_viewport(df, SCATTER_LAYOUT)
    center = (
        (SCATTER_LAYOUT.x_range.start + SCATTER_LAYOUT.x_range.end) / 2,
        (SCATTER_LAYOUT.y_range.start + SCATTER_LAYOUT.y_range.end) / 2,
    )
    longest = str(df.loc[df["duration_minutes"].idxmax(), "episode"])
    shortest = str(df.loc[df["duration_minutes"].idxmin(), "episode"])

    ctrl = ZoomPanController(viewport)
    ctrl.zoom(5.0, center)
    ctrl.pan(-1e6, 0.0)
    scene = build_duration_completion(df, SCATTER_LAYOUT, zoom=ctrl.state)
    assert scene.x_scale.domain.max == df["duration_minutes"].max()
    assert longest in [m.label for m in scene.marks]

    ctrl.pan(1e6, 0.0)
    scene = build_duration_completion(df, SCATTER_LAYOUT, zoom=ctrl.state)
    assert scene.x_scale.domain.min == df["duration_minutes"].min()
    assert shortest in [m.label for m in scene.marks]


def test_marks_carry_an_accessible_description(season):
    scene = build_duration_completion(season, SCATTER_LAYOUT)
    row, mark = season.iloc[0], scene.marks[0]
    assert mark.description == (
        f"Episode {mark.label}, duration {row['duration_minutes']:.1f} minutes, "
        f"completion {row['completion_rate'] * 100:.1f} percent"
    )

    shares = build_shares_subscribers(season, SCATTER_LAYOUT)
    assert all(m.description.startswith(f"Episode {m.label}, ") for m in shares.marks)
