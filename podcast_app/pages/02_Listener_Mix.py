import streamlit as st

from podcast_app.utils.charts import build_listener_mix
from podcast_app.utils.config import chart_layout
from podcast_app.utils.db import ensure_demo_db, load_episodes, table_exists
from podcast_app.utils.episodes import listener_shares
from podcast_app.utils.glossary import CHART_HELP
from podcast_app.utils.render import scene_to_chart

st.set_page_config(page_title="Listener Mix", layout="wide")
st.title("Listener Mix")

ensure_demo_db()
if not table_exists("episodes"):
    st.warning("Expected view `episodes` not found. Run `python scripts/ingest_episodes.py`.")
    st.stop()

df = load_episodes()
if df.empty:
    st.info("No episodes loaded yet.")
    st.stop()

scene = build_listener_mix(df, chart_layout("listener_mix"))
shares = listener_shares(df)

c1, c2, c3 = st.columns(3)
c1.metric("New share (latest)", f"{shares['new_share'].iloc[-1]:.1%}")
c2.metric("New share (avg)", f"{shares['new_share'].mean():.1%}")
c3.metric("Returning share (avg)", f"{shares['returning_share'].mean():.1%}")

st.subheader(scene.title)
st.caption(scene.description)
st.altair_chart(scene_to_chart(scene), use_container_width=False)
st.caption(CHART_HELP["listener_mix"])

with st.expander("Auto-insights", expanded=True):
    st.markdown("\n".join(scene.insights))

with st.expander("Shares per episode"):
    st.dataframe(shares, use_container_width=True)
