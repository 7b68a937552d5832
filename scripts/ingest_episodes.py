#!/usr/bin/env python3
"""
Ingest an episode CSV (or the built-in demo season) into DuckDB as raw_episodes,
then (re)create the typed `episodes` view the app reads.

Usage:
  python scripts/ingest_episodes.py --csv data/episodes.csv --db warehouse/podcast.duckdb
  python scripts/ingest_episodes.py --demo
Env (optional):
  DUCKDB_PATH (default: warehouse/podcast.duckdb)
  EPISODES_CSV (default: data/episodes.csv)
"""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

import duckdb

from podcast_app.utils.episodes import EPISODE_COLUMNS, EPISODES_VIEW_SQL, generate_demo_episodes


def eprint(*a, **k):
    print(*a, file=sys.stderr, **k)


def connect(db_path: str) -> duckdb.DuckDBPyConnection:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    con = duckdb.connect(db_path)
    con.execute("PRAGMA enable_progress_bar=false;")
    return con


def read_csv_into_table(con: duckdb.DuckDBPyConnection, csv_path: Path, table: str = "raw_episodes") -> int:
    """
    Create or replace a DuckDB table from a CSV using read_csv_auto.
    Returns row count loaded.
    """
    if not csv_path.exists():
        raise FileNotFoundError(f"Episode CSV not found: {csv_path}")
    q = f"""
    CREATE OR REPLACE TABLE {table} AS
    SELECT * FROM read_csv_auto(
        '{csv_path.as_posix()}',
        header = true,
        sample_size = -1,
        normalize_names = true
    );
    """
    con.execute(q)
    count = con.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    return int(count)


def load_demo(con: duckdb.DuckDBPyConnection, n: int = 36, seed: int = 7) -> int:
    demo = generate_demo_episodes(n=n, seed=seed)
    con.register("df_episodes", demo)
    con.execute("CREATE OR REPLACE TABLE raw_episodes AS SELECT * FROM df_episodes")
    con.unregister("df_episodes")
    return len(demo)


def missing_columns(con: duckdb.DuckDBPyConnection, table: str = "raw_episodes") -> list[str]:
    have = {
        r[0] for r in con.execute(
            "SELECT column_name FROM information_schema.columns WHERE table_name = ?", [table]
        ).fetchall()
    }
    return [c for c in EPISODE_COLUMNS if c not in have]


def create_episodes_view(con: duckdb.DuckDBPyConnection) -> None:
    missing = missing_columns(con)
    if missing:
        raise ValueError(f"raw_episodes is missing columns: {', '.join(missing)}")
    con.execute(EPISODES_VIEW_SQL)


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Ingest episode CSV into DuckDB")
    src = p.add_mutually_exclusive_group()
    src.add_argument("--csv", default=os.environ.get("EPISODES_CSV", "data/episodes.csv"), help="Episode CSV")
    src.add_argument("--demo", action="store_true", help="Load the generated demo season instead of a CSV")
    p.add_argument("--db", default=os.environ.get("DUCKDB_PATH", "warehouse/podcast.duckdb"), help="DuckDB path")
    p.add_argument("--episodes", type=int, default=36, help="Demo season length")
    p.add_argument("--seed", type=int, default=7, help="Demo RNG seed")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    con = connect(args.db)
    eprint(f"Connected to DuckDB at {args.db}")

    if args.demo:
        eprint(f"→ Generating demo season ({args.episodes} episodes, seed={args.seed}) → raw_episodes")
        rows = load_demo(con, n=args.episodes, seed=args.seed)
    else:
        eprint(f"→ Loading {args.csv} → raw_episodes")
        rows = read_csv_into_table(con, Path(args.csv))

    create_episodes_view(con)

    info = con.execute(
        "SELECT column_name, data_type FROM information_schema.columns "
        "WHERE table_name = 'episodes' ORDER BY ordinal_position"
    ).fetchall()
    eprint("[schema] episodes: " + ", ".join(f"{c}:{d}" for c, d in info))
    eprint(f"[ingest] raw_episodes rows={rows:,}")

    con.close()


if __name__ == "__main__":
    try:
        main()
    except FileNotFoundError as e:
        eprint(f"[ERROR] {e}")
        sys.exit(2)
    except duckdb.Error as e:
        eprint(f"[FATAL][DuckDB] {e}")
        sys.exit(1)
    except Exception as e:
        eprint(f"[FATAL] {type(e).__name__}: {e}")
        sys.exit(1)
