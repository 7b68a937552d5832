#!/usr/bin/env python3
"""
Fast-fail data contracts & sanity checks on the episode table before the app reads it.

Usage:
  python scripts/quality_checks.py --db warehouse/podcast.duckdb
"""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

import duckdb

from podcast_app.utils.config import load_cfg
from podcast_app.utils.episodes import NUMERIC_COLUMNS


def connect(db_path: str) -> duckdb.DuckDBPyConnection:
    if not Path(db_path).exists():
        raise FileNotFoundError(f"DuckDB not found at {db_path}. Did you run ingest?")
    return duckdb.connect(db_path, read_only=True)


def _run_count(con: duckdb.DuckDBPyConnection, sql: str) -> int:
    return int(con.execute(sql).fetchone()[0])


def _assert_zero(con: duckdb.DuckDBPyConnection, sql: str, msg: str, failures: list[str]) -> None:
    cnt = _run_count(con, sql)
    if cnt != 0:
        failures.append(f"{msg} (violations={cnt})")


def _assert_positive(con: duckdb.DuckDBPyConnection, sql: str, msg: str, failures: list[str]) -> None:
    cnt = _run_count(con, sql)
    if cnt <= 0:
        failures.append(f"{msg} (count={cnt})")


def check_episodes(con: duckdb.DuckDBPyConnection, cfg: dict) -> list[str]:
    """Contracts for the typed `episodes` view."""
    failures: list[str] = []
    limits = cfg.get("quality", {}) or {}
    max_duration = float(limits.get("max_duration_minutes", 600))

    # ---------- presence ----------
    try:
        _assert_positive(con, "SELECT COUNT(*) FROM episodes", "Missing or empty view: episodes", failures)
    except duckdb.Error:
        return ["Missing view: episodes (run scripts/ingest_episodes.py)"]
    if failures:
        return failures

    # ---------- PK ----------
    _assert_zero(
        con,
        "WITH a AS (SELECT episode, COUNT(*) c FROM episodes GROUP BY episode) SELECT COUNT(*) FROM a WHERE c>1",
        "Episode number not unique",
        failures,
    )
    _assert_zero(con, "SELECT COUNT(*) FROM episodes WHERE episode IS NULL", "NULL episode number", failures)

    # ---------- finite numerics ----------
    for col in NUMERIC_COLUMNS:
        _assert_zero(
            con,
            f"SELECT COUNT(*) FROM episodes WHERE {col} IS NULL OR NOT isfinite({col}::DOUBLE)",
            f"NULL or non-finite {col}",
            failures,
        )

    # ---------- value constraints ----------
    _assert_zero(con, "SELECT COUNT(*) FROM episodes WHERE completion_rate < 0 OR completion_rate > 1",
                 "completion_rate outside [0, 1]", failures)
    _assert_zero(con, f"SELECT COUNT(*) FROM episodes WHERE duration_minutes <= 0 OR duration_minutes > {max_duration}",
                 f"duration_minutes outside (0, {max_duration:g}]", failures)
    _assert_zero(
        con,
        """
        SELECT COUNT(*) FROM episodes
        WHERE new_listeners < 0 OR returning_listeners < 0 OR listeners_total < 0
           OR social_media_shares < 0 OR subscribers_gained < 0 OR cumulative_subscribers < 0
        """,
        "Negative counts in episodes",
        failures,
    )
    _assert_zero(
        con,
        "SELECT COUNT(*) FROM episodes WHERE new_listeners + returning_listeners > listeners_total",
        "new + returning listeners exceed listeners_total",
        failures,
    )

    # ---------- time consistency ----------
    _assert_zero(
        con,
        """
        WITH ordered AS (
          SELECT cumulative_subscribers,
                 lag(cumulative_subscribers) OVER (ORDER BY episode) AS prev
          FROM episodes
        )
        SELECT COUNT(*) FROM ordered WHERE prev IS NOT NULL AND cumulative_subscribers < prev
        """,
        "cumulative_subscribers decreases between episodes",
        failures,
    )

    return failures


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Episode data quality checks")
    p.add_argument("--db", default=os.environ.get("DUCKDB_PATH", "warehouse/podcast.duckdb"))
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    cfg = load_cfg()
    con = connect(args.db)

    print(f"[quality] DB={args.db}")

    failures = check_episodes(con, cfg)

    if failures:
        print("\n[QUALITY FAIL] One or more data contracts were violated:")
        for i, f in enumerate(failures, 1):
            print(f" {i:02d}. {f}")
        print("\nFix the above issues (or data files) and rerun.")
        sys.exit(2)

    print("[quality] All checks passed ✔")
    con.close()


if __name__ == "__main__":
    try:
        main()
    except FileNotFoundError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(2)
    except duckdb.Error as e:
        print(f"[FATAL][DuckDB] {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"[FATAL] {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)
