import altair as alt
import pandas as pd
import streamlit as st
from contextlib import contextmanager
from dataclasses import asdict
from typing import List, Optional

from visitstats.aggregate import aggregate
from visitstats.charts import all_stations_bar, top_places_pie, top_stations_pie
from visitstats.config import configure_logging, get_settings
from visitstats.data import load_dashboard_data
from visitstats.models import RankingEntry, WindowMetric
from visitstats.options import CHART_MODES, normalize_options
from visitstats.rankings import select_chart_entries

alt.data_transformers.disable_max_rows()
settings = get_settings()
configure_logging(settings.LOG_LEVEL)


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #374151;margin-bottom: 8px;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def ranking_table(entries: List[RankingEntry]) -> pd.DataFrame:
    df = pd.DataFrame([asdict(e) for e in entries], columns=["name", "visit_count"])
    return df.rename(columns={"name": "Name", "visit_count": "Visits"})


@st.cache_data(ttl=300, show_spinner="Loading visitor data…")
def cached_dashboard_data() -> dict:
    return load_dashboard_data(settings)


def render_metric(col, title: str, metric: Optional[WindowMetric]):
    if metric is None:
        col.metric(title, "N/A")
        return
    col.metric(
        title,
        f"{metric.count:,}",
        delta=f"{metric.trend_percent:.2f}%",
        help="Change versus the previous equivalent period; 0% when the previous period had no visits.",
    )


# ---------- UI setup ----------
st.set_page_config(page_title="Station Visit Dashboard", layout="wide")
inject_base_styles()
st.markdown(
    "<div class='app-top-bar'><div class='page-title'>Station Visit Dashboard</div></div>",
    unsafe_allow_html=True,
)
st.caption(f"Source: {settings.BASE_URL}")

with st.sidebar:
    st.markdown("### Settings")
    station_source = st.radio(
        "Station ranking source",
        ["records", "catalog"],
        format_func=lambda s: "Visit records" if s == "records" else "Station visitor totals",
    )
    timezone = st.text_input("Timezone", settings.TIMEZONE)
    if st.button("Refresh"):
        cached_dashboard_data.clear()
        st.rerun()

data_ctx = cached_dashboard_data()
if not data_ctx.get("stations") and not data_ctx.get("records"):
    st.error("No data loaded. Check VISITSTATS_BASE_URL and the content API logs.")
    st.stop()

options = normalize_options(
    {"station_source": station_source, "timezone": timezone},
    default_timezone=settings.TIMEZONE,
)
result = aggregate(data_ctx["stations"], data_ctx["places"], data_ctx["records"], options)

top_cols = st.columns([2, 3])
with top_cols[0]:
    with card("Top 5 Most Visited Stations"):
        if result.top_stations:
            st.altair_chart(top_stations_pie(result.top_stations), use_container_width=True)
        else:
            st.info("No station visits recorded yet.")
with top_cols[1]:
    with card("Visitors"):
        metrics = result.window_metrics
        row1 = st.columns(2)
        row2 = st.columns(2)
        render_metric(row1[0], "Daily Visitors", metrics.daily if metrics else None)
        render_metric(row1[1], "Weekly Visitors", metrics.weekly if metrics else None)
        render_metric(row2[0], "Monthly Visitors", metrics.monthly if metrics else None)
        render_metric(row2[1], "Yearly Visitors", metrics.yearly if metrics else None)
        if result.diagnostics.skipped_records:
            st.caption(f"{result.diagnostics.skipped_records:,} record(s) without a valid timestamp were skipped.")

with card("Top 5 Most Visited Places"):
    if result.top_places:
        place_cols = st.columns([3, 2])
        place_cols[0].altair_chart(top_places_pie(result.top_places), use_container_width=True)
        place_cols[1].dataframe(ranking_table(result.top_places), hide_index=True, use_container_width=True)
    else:
        st.info("No place visits recorded yet.")

with card("All Stations Visit Count"):
    station_names = list(dict.fromkeys(e.name for e in result.all_stations))
    ctrl_cols = st.columns([3, 1])
    with ctrl_cols[0]:
        with st.expander("Select Stations", expanded=False):
            selected = st.multiselect("Stations", options=station_names, default=station_names)
    chart_mode = ctrl_cols[1].radio(
        "Show",
        list(CHART_MODES),
        format_func=lambda m: {"all": "All", "top10": "Top 10", "least10": "Least 10"}[m],
        horizontal=True,
    )
    chart_entries = select_chart_entries(result.all_stations, selected, chart_mode)
    if chart_entries:
        st.altair_chart(all_stations_bar(chart_entries), use_container_width=True)
    else:
        st.info("No stations selected.")
    st.download_button(
        "Export CSV",
        data=ranking_table(result.all_stations).to_csv(index=False).encode("utf-8"),
        file_name="stations.csv",
        mime="text/csv",
    )
