import streamlit as st

from podcast_app.utils.charts import build_subscriber_growth
from podcast_app.utils.config import chart_layout
from podcast_app.utils.db import ensure_demo_db, load_episodes, table_exists
from podcast_app.utils.glossary import CHART_HELP
from podcast_app.utils.render import scene_to_chart

st.set_page_config(page_title="Subscriber Growth", layout="wide")
st.title("Subscriber Growth")

ensure_demo_db()
if not table_exists("episodes"):
    st.warning("Expected view `episodes` not found. Run `python scripts/ingest_episodes.py`.")
    st.stop()

df = load_episodes()
if df.empty:
    st.info("No episodes loaded yet.")
    st.stop()

scene = build_subscriber_growth(df, chart_layout("subscriber_growth"))

last = df.iloc[-1]
c1, c2 = st.columns(2)
c1.metric("Total subscribers", f"{int(last['cumulative_subscribers']):,}")
c2.metric("Gained last episode", f"{int(last['subscribers_gained']):,}")

st.subheader(scene.title)
st.caption(scene.description)
st.altair_chart(scene_to_chart(scene), use_container_width=False)
st.caption(CHART_HELP["subscriber_growth"])

with st.expander("Auto-insights", expanded=True):
    st.markdown("\n".join(scene.insights))
