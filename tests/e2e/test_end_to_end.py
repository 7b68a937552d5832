"""
E2E smoke: proves the pipeline can ingest → pass data contracts → build every chart.
Runs against a throwaway DuckDB file, so nothing under warehouse/ is touched.
"""

import math

import duckdb
import pytest

from podcast_app.utils.charts import build_all
from podcast_app.utils.episodes import EPISODE_COLUMNS, generate_demo_episodes
from scripts import ingest_episodes, quality_checks, snapshot_charts


@pytest.fixture(scope="module")
def db_path(tmp_path_factory):
    tmp = tmp_path_factory.mktemp("e2e")
    csv = tmp / "episodes.csv"
    generate_demo_episodes(n=24, seed=3).to_csv(csv, index=False)
    db = tmp / "podcast.duckdb"
    ingest_episodes.main(["--csv", str(csv), "--db", str(db)])
    return db


def _episodes(db):
    with duckdb.connect(str(db), read_only=True) as con:
        return con.execute("SELECT * FROM episodes ORDER BY episode").fetchdf()


@pytest.mark.order(1)
def test_ingest_builds_typed_episode_view(db_path):
    with duckdb.connect(str(db_path), read_only=True) as con:
        n = con.execute("SELECT COUNT(*) FROM episodes").fetchone()[0]
        cols = [r[0] for r in con.execute(
            "SELECT column_name FROM information_schema.columns WHERE table_name='episodes' ORDER BY ordinal_position"
        ).fetchall()]
    assert n == 24
    assert cols == EPISODE_COLUMNS


@pytest.mark.order(2)
def test_quality_checks_pass_on_clean_data(db_path):
    with duckdb.connect(str(db_path), read_only=True) as con:
        failures = quality_checks.check_episodes(con, {})
    assert failures == [], failures


@pytest.mark.order(3)
def test_quality_checks_flag_broken_rows(tmp_path):
    db = tmp_path / "broken.duckdb"
    with duckdb.connect(str(db)) as con:
        ingest_episodes.load_demo(con, n=10, seed=1)
        con.execute("UPDATE raw_episodes SET completion_rate = 1.5 WHERE episode = 2")
        con.execute("UPDATE raw_episodes SET cumulative_subscribers = 0 WHERE episode = 5")
        con.execute("INSERT INTO raw_episodes SELECT * FROM raw_episodes WHERE episode = 7")
        ingest_episodes.create_episodes_view(con)
        failures = quality_checks.check_episodes(con, {})

    joined = "\n".join(failures)
    assert "completion_rate outside [0, 1]" in joined
    assert "cumulative_subscribers decreases" in joined
    assert "Episode number not unique" in joined


@pytest.mark.order(4)
def test_quality_checks_report_missing_view(tmp_path):
    with duckdb.connect(str(tmp_path / "empty.duckdb")) as con:
        failures = quality_checks.check_episodes(con, {})
    assert failures and "episodes" in failures[0]


@pytest.mark.order(5)
def test_ingest_rejects_incomplete_csv(tmp_path):
    csv = tmp_path / "partial.csv"
    generate_demo_episodes(n=3).drop(columns=["social_media_shares"]).to_csv(csv, index=False)
    with duckdb.connect(str(tmp_path / "partial.duckdb")) as con:
        ingest_episodes.read_csv_into_table(con, csv)
        with pytest.raises(ValueError, match="social_media_shares"):
            ingest_episodes.create_episodes_view(con)
        with pytest.raises(FileNotFoundError):
            ingest_episodes.read_csv_into_table(con, tmp_path / "nope.csv")


@pytest.mark.order(6)
def test_every_chart_builds_from_the_warehouse(db_path):
    df = _episodes(db_path)
    scenes = build_all(df)
    assert len(scenes) == 4
    for scene in scenes:
        assert scene.insights
        coords = [v for m in scene.marks for v in (m.cx, m.cy)]
        coords += [v for s in scene.series for v in s.ys]
        assert all(math.isfinite(v) for v in coords), scene.key


@pytest.mark.order(7)
def test_snapshots_are_written(db_path, tmp_path):
    written = snapshot_charts.snapshot(_episodes(db_path), out_dir=tmp_path)
    assert sorted(p.name for p in written) == [
        "duration_completion.png",
        "listener_mix.png",
        "shares_subscribers.png",
        "subscriber_growth.png",
    ]
    assert all(p.stat().st_size > 0 for p in written)
