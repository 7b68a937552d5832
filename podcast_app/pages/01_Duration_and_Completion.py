import streamlit as st

from podcast_app.utils.charts import build_duration_completion, duration_completion_viewport
from podcast_app.utils.config import chart_layout
from podcast_app.utils.db import ensure_demo_db, load_episodes, table_exists
from podcast_app.utils.glossary import CHART_HELP
from podcast_app.utils.render import scene_to_chart
from podcast_app.utils.zoom import PanEvent, ResetEvent, ZoomEvent, ZoomPanController

st.set_page_config(page_title="Duration & Completion", layout="wide")
st.title("Duration & Completion")

ensure_demo_db()
if not table_exists("episodes"):
    st.warning("Expected view `episodes` not found. Run `python scripts/ingest_episodes.py`.")
    st.stop()

df = load_episodes()
if df.empty:
    st.info("No episodes loaded yet.")
    st.stop()

layout = chart_layout("duration_completion")
viewport = duration_completion_viewport(df, layout)
zoom = ZoomPanController(viewport, st.session_state.get("duration_zoom"))
inner = layout.inner

# -------- Controls --------
PAN_STEP = 40
left, right = st.columns([1, 2])
with left:
    anchor_x = st.slider(
        "Zoom anchor (x, px)", int(inner.left), int(inner.right), int((inner.left + inner.right) / 2),
        help="Pixel column kept fixed while zooming.",
    )
    anchor_y = st.slider(
        "Zoom anchor (y, px)", int(inner.top), int(inner.bottom), int((inner.top + inner.bottom) / 2),
    )
    pointer = (float(anchor_x), float(anchor_y))

    z1, z2, z3 = st.columns(3)
    events = []
    if z1.button("Zoom in"):
        events.append(ZoomEvent(factor=2.0, pointer=pointer))
    if z2.button("Zoom out"):
        events.append(ZoomEvent(factor=0.5, pointer=pointer))
    if z3.button("Reset"):
        events.append(ResetEvent())

    p1, p2, p3, p4 = st.columns(4)
    # buttons describe the drag direction, content follows the cursor
    if p1.button("◀"):
        events.append(PanEvent(dx=-PAN_STEP, dy=0))
    if p2.button("▶"):
        events.append(PanEvent(dx=PAN_STEP, dy=0))
    if p3.button("▲"):
        events.append(PanEvent(dx=0, dy=-PAN_STEP))
    if p4.button("▼"):
        events.append(PanEvent(dx=0, dy=PAN_STEP))

    for event in events:
        zoom.dispatch(event)
    st.session_state["duration_zoom"] = zoom.state

    hovered = st.selectbox(
        "Inspect episode",
        ["(none)"] + [f"{e:g}" for e in df["episode"].astype(float)],
        help="Shows the chart tooltip for one episode.",
    )
with right:
    st.caption(CHART_HELP["duration_completion"])
    st.caption(f"Zoom level: **{zoom.zoom_level:.2f}×** (max {layout.max_zoom:g}×)")

scene = build_duration_completion(
    df, layout, zoom=zoom.state, hovered=None if hovered == "(none)" else hovered,
)

# -------- KPIs --------
k1, k2, k3 = st.columns(3)
k1.metric("Episodes", f"{len(df):,}")
k2.metric("Slope (Δ completion per 10 min)", f"{scene.regression.slope * 10:+.2%}")
k3.metric("R² (fit quality)", f"{scene.r2:.3f}")

# -------- Plot --------
st.subheader(scene.title)
st.caption(scene.description)
st.altair_chart(scene_to_chart(scene), use_container_width=False)

with st.expander("Auto-insights", expanded=True):
    st.markdown("\n".join(scene.insights))

cols = ["episode", "title", "duration_minutes", "completion_rate"]
st.download_button(
    "Download points as CSV",
    data=df[cols].to_csv(index=False).encode("utf-8"),
    file_name="duration_vs_completion.csv",
    mime="text/csv",
)
