import numpy as np
import pandas as pd
import pytest

from podcast_app.utils.episodes import (
    EPISODE_COLUMNS,
    duration_points,
    generate_demo_episodes,
    listener_shares,
    require_columns,
    share_points,
)


def test_demo_season_is_deterministic_and_consistent():
    a = generate_demo_episodes(n=24, seed=3)
    b = generate_demo_episodes(n=24, seed=3)
    pd.testing.assert_frame_equal(a, b)

    assert list(a.columns) == EPISODE_COLUMNS
    assert (a["new_listeners"] + a["returning_listeners"] == a["listeners_total"]).all()
    assert a["completion_rate"].between(0, 1).all()
    assert (np.diff(a["cumulative_subscribers"]) >= 0).all()
    assert a["episode"].is_unique


def test_points_carry_episode_label_and_title():
    df = generate_demo_episodes(n=4, seed=1)
    pts = duration_points(df)
    assert [p.label for p in pts] == ["1", "2", "3", "4"]
    assert pts[0].x == df["duration_minutes"].iloc[0]
    assert pts[0].title == df["title"].iloc[0]

    shares = share_points(df)
    assert shares[2].y == df["subscribers_gained"].iloc[2]


def test_listener_shares_handles_zero_totals():
    df = pd.DataFrame({
        "episode": [1, 2],
        "new_listeners": [30, 0],
        "returning_listeners": [70, 0],
        "listeners_total": [100, 0],
    })
    shares = listener_shares(df)
    assert shares["new_share"].tolist() == [0.3, 0.0]
    assert shares["returning_share"].tolist() == [0.7, 0.0]


def test_missing_columns_raise():
    with pytest.raises(ValueError, match="duration_minutes"):
        require_columns(pd.DataFrame({"episode": [1]}), ["episode", "duration_minutes"])
