import os
from functools import lru_cache
from typing import Any

import duckdb
import pandas as pd
import streamlit as st

from podcast_app.utils.episodes import EPISODES_VIEW_SQL, generate_demo_episodes

DUCKDB_PATH = st.secrets.get("DUCKDB_PATH", os.environ.get("DUCKDB_PATH", "warehouse/podcast.duckdb"))


@lru_cache(maxsize=1)
def _connect() -> duckdb.DuckDBPyConnection:
    parent = os.path.dirname(DUCKDB_PATH)
    if parent:
        os.makedirs(parent, exist_ok=True)
    return duckdb.connect(DUCKDB_PATH, read_only=False)

def get_con() -> duckdb.DuckDBPyConnection:
    return _connect()

@st.cache_data(show_spinner=False)
def query_df(sql: str, params: tuple[Any, ...] = ()) -> pd.DataFrame:
    con = get_con()
    return con.execute(sql, params).fetchdf()

def table_exists(name: str) -> bool:
    con = get_con()
    try:
        con.execute(f"SELECT 1 FROM {name} LIMIT 1")
        return True
    except duckdb.Error:
        return False

def load_episodes() -> pd.DataFrame:
    return query_df("SELECT * FROM episodes ORDER BY episode")

def ensure_demo_db() -> None:
    """
    If the DuckDB file has no `episodes` view, load a small deterministic demo
    season so the dashboard works on a fresh checkout without running ingest.
    """
    con = get_con()
    if table_exists("episodes"):
        return

    demo = generate_demo_episodes()
    con.register("df_episodes", demo)
    con.execute("CREATE OR REPLACE TABLE raw_episodes AS SELECT * FROM df_episodes")
    con.unregister("df_episodes")
    con.execute(EPISODES_VIEW_SQL)

    print(f"[bootstrap] Demo DuckDB created with {len(demo)} episodes.")
