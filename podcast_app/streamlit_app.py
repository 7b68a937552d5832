import os
from pathlib import Path

import streamlit as st


from podcast_app.utils.glossary import KPI_TOOLTIPS
from podcast_app.utils.db import table_exists, load_episodes, ensure_demo_db

# ensure a tiny demo DB exists on a fresh checkout
ensure_demo_db()

APP_TITLE = "Podcast Analytics"
MODE = st.secrets.get("MODE", os.environ.get("MODE", "demo"))
DUCKDB_PATH = st.secrets.get("DUCKDB_PATH", os.environ.get("DUCKDB_PATH", "warehouse/podcast.duckdb"))

st.set_page_config(page_title=APP_TITLE, layout="wide")

# ---- Header / status ----
with st.sidebar:
    st.markdown(f"### {APP_TITLE}")
    st.caption("DuckDB + Altair + Streamlit")
    st.write(f"**Mode:** `{MODE}`")
    st.write(f"**DB:** `{DUCKDB_PATH}`")
    run_checks = st.checkbox("Run quick health checks", value=True)
    if st.button("Refresh"):
        st.cache_data.clear()
        st.rerun()

st.title(APP_TITLE)
st.write("Use the left sidebar to switch charts. This home view shows a quick health/status summary.")

# ---- Health checks ----
def health() -> dict:
    checks = {}
    checks["db_file_present"] = Path(DUCKDB_PATH).exists()
    ks = ["raw_episodes", "episodes"]
    checks["known_tables"] = {k: table_exists(k) for k in ks}
    return checks

if run_checks:
    with st.expander("Health checks", expanded=True):
        h = health()
        st.write(f"DB file present: **{h['db_file_present']}**")
        st.write("Known tables:")
        st.json(h["known_tables"])

# ---- Season snapshot ----
def render_kpis():
    if not table_exists("episodes"):
        st.info("Waiting for ingest… Expected view `episodes` not found yet.")
        return
    df = load_episodes()
    if df.empty:
        st.info("Episode table is empty.")
        return

    last = df.iloc[-1].to_dict()
    cols = st.columns(5)
    def tile(col, label, value, tooltip_key=None, fmt="{:,.2f}"):
        with col:
            if tooltip_key and tooltip_key in KPI_TOOLTIPS:
                st.caption(f"{label}  ⓘ")
                st.caption(KPI_TOOLTIPS[tooltip_key])
            else:
                st.caption(label)
            st.metric(label=label, value=fmt.format(value), label_visibility="collapsed")

    tile(cols[0], "Episodes", len(df), None, "{:,.0f}")
    tile(cols[1], "Subscribers", last.get("cumulative_subscribers", 0), "Subscribers", "{:,.0f}")
    tile(cols[2], "Avg completion", 100 * float(df["completion_rate"].mean()), "Completion", "{:,.1f}%")
    tile(cols[3], "Avg duration", float(df["duration_minutes"].mean()), "Duration", "{:,.1f} min")
    tile(cols[4], "Shares (season)", float(df["social_media_shares"].sum()), "Shares", "{:,.0f}")

    with st.expander("Listeners per episode", expanded=True):
        st.line_chart(df.set_index("episode")[["new_listeners", "returning_listeners", "listeners_total"]])

render_kpis()

st.caption("Tip: run `python scripts/ingest_episodes.py --csv data/episodes.csv` to load your own season.")
