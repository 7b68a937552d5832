#!/usr/bin/env python3
"""
Create lightweight chart screenshots as CI artifacts (no browser needed).
Outputs one PNG per chart:
  artifacts/duration_completion.png
  artifacts/listener_mix.png
  artifacts/subscriber_growth.png
  artifacts/shares_subscribers.png
"""
from __future__ import annotations

import os
from pathlib import Path

import duckdb
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.patches import FancyBboxPatch

from podcast_app.utils.charts import ChartScene, build_all
from podcast_app.utils.config import chart_layouts
from podcast_app.utils.render import PALETTE

DB = os.environ.get("DUCKDB_PATH", "warehouse/podcast.duckdb")
ART = Path(os.environ.get("ARTIFACTS_DIR", "artifacts"))

HA = {"start": "left", "middle": "center", "end": "right"}


def _read_df(sql: str) -> pd.DataFrame:
    try:
        with duckdb.connect(DB, read_only=True) as con:
            return con.execute(sql).fetchdf()
    except duckdb.Error:
        return pd.DataFrame()


def _color(key: str) -> str:
    c = PALETTE.get(key, PALETTE["line-secondary"])
    return "#818cf8" if c.startswith("rgba") else c


def draw_scene(scene: ChartScene, ax) -> None:
    """Paint a scene on a matplotlib axis using the scene's own pixel space."""
    layout = scene.layout
    ax.set_xlim(0, layout.width)
    ax.set_ylim(layout.height, 0)
    ax.axis("off")

    for g in scene.gridlines:
        ax.plot([g.x1, g.x2], [g.y1, g.y2], color=PALETTE["grid"], linewidth=0.6)
    for s in scene.series:
        if s.kind == "area":
            alpha = 0.35 if s.style == "area" else 0.85
            ax.fill_between(s.xs, s.baseline, s.ys, color=_color(s.style), alpha=alpha, linewidth=0)
        else:
            ax.plot(s.xs, s.ys, color=_color(s.style), linewidth=1.8)
    if scene.trend is not None:
        t = scene.trend
        ax.plot([t.x1, t.x2], [t.y1, t.y2], color=PALETTE["line-secondary"], linestyle="--", linewidth=1.5)
    for m in scene.marks:
        ax.scatter(
            [m.cx], [m.cy], s=(m.r * 1.6) ** 2,
            color=PALETTE["dot-highlight"] if m.highlight else PALETTE["dot"], zorder=3,
        )
    for lb in scene.labels:
        ax.text(lb.x, lb.y, lb.text, ha=HA.get(lb.align, "center"), va="baseline",
                rotation=-lb.angle, fontsize=7, color="#475569")
    if scene.tooltip is not None:
        tip = scene.tooltip
        ax.add_patch(FancyBboxPatch((tip.x, tip.y), tip.width, tip.height,
                                    boxstyle="round,pad=0,rounding_size=8",
                                    color=PALETTE["tooltip-bg"], alpha=0.92, zorder=4))
        for i, line in enumerate(tip.lines):
            ax.text(tip.x + 12, tip.y + 20 + i * 18, line, color=PALETTE["tooltip-text"], fontsize=7, zorder=5)
    ax.set_title(scene.title, fontsize=10)


def snapshot(df: pd.DataFrame, out_dir: Path = ART) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for scene in build_all(df, chart_layouts()):
        fig, ax = plt.subplots(figsize=(scene.layout.width / 80, scene.layout.height / 80))
        draw_scene(scene, ax)
        out = out_dir / f"{scene.key}.png"
        fig.tight_layout()
        fig.savefig(out)
        plt.close(fig)
        written.append(out)
        print(f"[snapshot] Wrote {out}")
    return written


def main():
    df = _read_df("SELECT * FROM episodes ORDER BY episode")
    if df.empty:
        print("[snapshot] No episodes found; run scripts/ingest_episodes.py first.")
        return
    snapshot(df)


if __name__ == "__main__":
    main()
