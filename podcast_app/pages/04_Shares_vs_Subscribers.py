import streamlit as st

from podcast_app.utils.charts import build_shares_subscribers
from podcast_app.utils.config import chart_layout
from podcast_app.utils.db import ensure_demo_db, load_episodes, table_exists
from podcast_app.utils.glossary import CHART_HELP
from podcast_app.utils.render import scene_to_chart

st.set_page_config(page_title="Social Share Conversion", layout="wide")
st.title("Social Share Conversion")

ensure_demo_db()
if not table_exists("episodes"):
    st.warning("Expected view `episodes` not found. Run `python scripts/ingest_episodes.py`.")
    st.stop()

df = load_episodes()
if df.empty:
    st.info("No episodes loaded yet.")
    st.stop()

hovered = st.selectbox(
    "Inspect episode",
    ["(none)"] + [f"{e:g}" for e in df["episode"].astype(float)],
)
scene = build_shares_subscribers(
    df, chart_layout("shares_subscribers"), hovered=None if hovered == "(none)" else hovered,
)

k1, k2, k3 = st.columns(3)
k1.metric("Shares (season)", f"{int(df['social_media_shares'].sum()):,}")
k2.metric("Subscribers per 100 shares", f"{scene.regression.slope * 100:,.1f}")
k3.metric("R² (fit quality)", f"{scene.r2:.3f}")

st.subheader(scene.title)
st.caption(scene.description)
st.altair_chart(scene_to_chart(scene), use_container_width=False)
st.caption(CHART_HELP["shares_subscribers"])

with st.expander("Auto-insights", expanded=True):
    st.markdown("\n".join(scene.insights))

cols = ["episode", "title", "social_media_shares", "subscribers_gained"]
st.download_button(
    "Download points as CSV",
    data=df[cols].to_csv(index=False).encode("utf-8"),
    file_name="shares_vs_subscribers.csv",
    mime="text/csv",
)
