"""
Episode table schema, demo data, and the row -> point derivations the charts use.
"""
from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd

from podcast_app.utils.insights import Point

EPISODE_COLUMNS = [
    "episode",
    "title",
    "release_date",
    "duration_minutes",
    "completion_rate",
    "new_listeners",
    "returning_listeners",
    "listeners_total",
    "cumulative_subscribers",
    "social_media_shares",
    "subscribers_gained",
]

NUMERIC_COLUMNS = EPISODE_COLUMNS[3:]

# raw_episodes is whatever ingest loaded; the app only ever reads this typed view
EPISODES_VIEW_SQL = """
    CREATE OR REPLACE VIEW episodes AS
    SELECT
      episode::INTEGER                  AS episode,
      title::VARCHAR                    AS title,
      release_date::DATE                AS release_date,
      duration_minutes::DOUBLE          AS duration_minutes,
      completion_rate::DOUBLE           AS completion_rate,
      new_listeners::BIGINT             AS new_listeners,
      returning_listeners::BIGINT       AS returning_listeners,
      listeners_total::BIGINT           AS listeners_total,
      cumulative_subscribers::BIGINT    AS cumulative_subscribers,
      social_media_shares::BIGINT       AS social_media_shares,
      subscribers_gained::BIGINT        AS subscribers_gained
    FROM raw_episodes
    ORDER BY episode;
"""

TOPICS = [
    "Cold Open", "The Long Interview", "Listener Mailbag", "Behind the Mic",
    "Data Deep Dive", "Guest Roundtable", "Myth Busting", "Season Recap",
    "Quick Takes", "Field Recording", "Ask Me Anything", "Industry Pulse",
]


def require_columns(df: pd.DataFrame, columns: Iterable[str]) -> None:
    miss = set(columns) - set(df.columns)
    if miss:
        raise ValueError(f"Episode data is missing columns: {sorted(miss)}")


def generate_demo_episodes(n: int = 36, seed: int = 7) -> pd.DataFrame:
    """
    Small, deterministic episode set with believable shapes: completion falls
    with runtime, the audience drifts towards returning listeners, and shares
    drive subscriber gains.
    """
    rng = np.random.default_rng(seed)
    ep = np.arange(1, n + 1)

    duration = np.round(rng.uniform(18, 78, size=n), 1)
    completion = 0.92 - 0.0045 * (duration - 18) + rng.normal(0, 0.025, size=n)
    completion = np.round(np.clip(completion, 0.35, 0.98), 3)

    total = np.round(1500 + 85 * ep + rng.normal(0, 120, size=n)).astype(int)
    total = np.maximum(total, 100)
    returning_share = np.clip(np.linspace(0.35, 0.68, n) + rng.normal(0, 0.03, size=n), 0.05, 0.95)
    returning = np.round(total * returning_share).astype(int)
    new = total - returning

    shares = rng.integers(40, 900, size=n)
    gained = np.round(15 + 0.32 * shares + rng.normal(0, 18, size=n)).astype(int)
    gained = np.maximum(gained, 0)
    cumulative = 500 + np.cumsum(gained)

    release = pd.date_range("2024-01-04", periods=n, freq="7D")

    return pd.DataFrame({
        "episode": ep,
        "title": [f"{TOPICS[i % len(TOPICS)]} #{i // len(TOPICS) + 1}" for i in range(n)],
        "release_date": release.date,
        "duration_minutes": duration,
        "completion_rate": completion,
        "new_listeners": new,
        "returning_listeners": returning,
        "listeners_total": total,
        "cumulative_subscribers": cumulative,
        "social_media_shares": shares,
        "subscribers_gained": gained,
    })


def episode_label(value) -> str:
    return format(float(value), "g")


def _points(df: pd.DataFrame, x_col: str, y_col: str) -> list[Point]:
    require_columns(df, ["episode", x_col, y_col])
    titles = df["title"] if "title" in df.columns else pd.Series([""] * len(df), index=df.index)
    return [
        Point(x=float(x), y=float(y), label=episode_label(ep), title=str(t))
        for ep, x, y, t in zip(df["episode"], df[x_col], df[y_col], titles)
    ]


def duration_points(df: pd.DataFrame) -> list[Point]:
    return _points(df, "duration_minutes", "completion_rate")


def share_points(df: pd.DataFrame) -> list[Point]:
    return _points(df, "social_media_shares", "subscribers_gained")


def listener_shares(df: pd.DataFrame) -> pd.DataFrame:
    """Per-episode share of returning vs new listeners; 0/0 counts as 0."""
    require_columns(df, ["episode", "new_listeners", "returning_listeners", "listeners_total"])
    total = df["listeners_total"].astype(float)
    safe = total.where(total != 0)
    return pd.DataFrame({
        "episode": df["episode"].astype(float).to_numpy(),
        "returning_share": (df["returning_listeners"] / safe).fillna(0.0).to_numpy(),
        "new_share": (df["new_listeners"] / safe).fillna(0.0).to_numpy(),
    })
