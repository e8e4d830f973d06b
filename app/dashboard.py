import streamlit as st
import sys
import os
import logging
from datetime import date, timedelta

# --- LOGGING ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [DASHBOARD] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

# Fix path to allow importing from traffic/ and config/
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../')))

from config.settings import DEFAULT_CUSTOM_RANGE_DAYS
from traffic.utils import load_config, get_api_base_url
from traffic.time_range import Preset
from traffic.shaping import records_to_frame, jams_to_frame
from traffic.schema import MessagePayload
from traffic.exceptions import DashboardError

from app.constants import (
    PAGE_TITLE, PAGE_ICON, NO_JAMS_MESSAGE, EXPORT_FILENAME
)
from app.api_client import TrafficAPIClient
from app.controller import ViewController
from app.visualization import create_traffic_chart, build_metric_cards

# --- CONFIGURATION ---
st.set_page_config(page_title=PAGE_TITLE, page_icon=PAGE_ICON, layout="wide")
CONFIG = load_config()
DASHBOARD_CONFIG = CONFIG['dashboard']


def get_controller():
    """One controller per browser session, kept in session_state."""
    if 'controller' not in st.session_state:
        client = TrafficAPIClient(get_api_base_url(CONFIG), timeout=CONFIG['api']['timeout'])
        st.session_state.controller = ViewController(
            client,
            traffic_cam_id=DASHBOARD_CONFIG['traffic_cam_id'],
            speed_threshold=DASHBOARD_CONFIG['speed_threshold'],
            preset=DASHBOARD_CONFIG['default_preset'],
        )
        logger.info("✅ Dashboard session initialized")
    return st.session_state.controller


controller = get_controller()
presets = list(Preset)

# --- MAIN UI ---
st.title(f"{PAGE_ICON} {PAGE_TITLE}")
st.markdown("### Analytics Overview")

# Sidebar
st.sidebar.header("🕹️ Filters")
preset = st.sidebar.selectbox(
    "Time Range", presets,
    index=presets.index(controller.preset),
    format_func=lambda p: p.label,
)

picked_day = None
picked_range = None
if preset is Preset.DAY:
    picked_day = st.sidebar.date_input("Date", value=controller.day_anchor or date.today())
elif preset is Preset.CUSTOM:
    custom = controller.custom_range
    if custom is not None and custom.is_complete:
        default_range = (custom.start, custom.end)
    else:
        default_range = (date.today() - timedelta(days=DEFAULT_CUSTOM_RANGE_DAYS), date.today())
    picked_range = tuple(st.sidebar.date_input("Date range", value=default_range))

traffic_cam_id = int(st.sidebar.number_input(
    "Traffic Camera ID", min_value=1, step=1, value=int(controller.traffic_cam_id)
))
speed_threshold = st.sidebar.number_input(
    "Speed Threshold (km/h)", min_value=0.0, step=5.0,
    value=float(controller.speed_threshold) if controller.speed_threshold is not None else None,
    placeholder="API default",
)
refresh = st.sidebar.button("🔄 Refresh Data")

settings_changed = (
    traffic_cam_id != controller.traffic_cam_id
    or speed_threshold != controller.speed_threshold
)
controller.traffic_cam_id = traffic_cam_id
controller.speed_threshold = speed_threshold

# Streamlit reruns the script on every interaction; only fetch when the
# selection changed, on refresh, or when nothing has been fetched yet.
selection = (preset, picked_day, picked_range)
with st.spinner("Loading traffic data..."):
    if selection != st.session_state.get('last_selection'):
        st.session_state.last_selection = selection
        if preset is Preset.DAY:
            controller.select_day(picked_day)
        elif preset is Preset.CUSTOM:
            start = picked_range[0] if len(picked_range) > 0 else None
            end = picked_range[1] if len(picked_range) > 1 else None
            controller.select_custom_range(start, end)
        else:
            controller.select_preset(preset)
    elif refresh or settings_changed or controller.state.cycle == 0:
        controller.refresh()

state = controller.state

if preset is Preset.CUSTOM and picked_range is not None and len(picked_range) < 2:
    st.info("Select an end date to load the custom range.")

if state.time_range is not None:
    range_label = state.preset.label if state.preset is not None else "Selected range"
    st.caption(
        f"{range_label}: {state.time_range.start:%b %d, %Y %H:%M} → "
        f"{state.time_range.end:%b %d, %Y %H:%M}"
    )

if state.error:
    st.error(state.error)
    st.info("Use 🔄 Refresh Data in the sidebar to retry.")

# --- SUMMARY CARDS ---
for col, (title, value, caption) in zip(st.columns(4), build_metric_cards(state)):
    col.metric(title, value)
    if caption:
        col.caption(caption)

# --- CHART ---
st.divider()
st.subheader("📈 Traffic Flow Metrics")
st.caption("Traffic volume and speed over time")
if state.chart_points:
    fig = create_traffic_chart(state.chart_points, height=DASHBOARD_CONFIG['chart_height'])
    st.plotly_chart(fig, use_container_width=True)
elif state.notice:
    st.info(state.notice)
elif state.is_loaded:
    st.info("No chart data for this period.")

# --- RECORD TABLE ---
st.subheader("📂 Historical Data")
st.caption("Traffic records for the selected time period")
records_df = records_to_frame(state.records) if state.records is not None else None
if records_df is not None and not records_df.empty:
    st.dataframe(records_df, use_container_width=True, hide_index=True)
    st.download_button(
        "⬇️ Export CSV",
        data=records_df.to_csv(index=False).encode('utf-8'),
        file_name=EXPORT_FILENAME.format(start=state.time_range.start, end=state.time_range.end),
        mime="text/csv",
    )
elif state.notice:
    st.info(state.notice)

# --- TRAFFIC JAMS ---
with st.expander("🚨 Traffic Jam Alerts"):
    if st.button("Load traffic jams"):
        try:
            jams = controller.fetch_traffic_jams()
        except DashboardError as e:
            logger.error(f"Traffic jams fetch failed: {e.message}")
            st.error(e.message)
        else:
            if jams is None:
                st.info("Select a complete time range first.")
            elif isinstance(jams, MessagePayload):
                st.info(NO_JAMS_MESSAGE)
            else:
                st.dataframe(jams_to_frame(jams), use_container_width=True, hide_index=True)
