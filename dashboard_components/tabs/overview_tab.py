# ABOUTME: Overview tab showing summary metrics, station cards and statistics charts
# ABOUTME: Renders a published DashboardSnapshot into the active panel; never fetches on its own

import pandas as pd
import streamlit as st

from dashboard_components.constants import (
    ENHANCED_COLORS,
    METRIC_PLACEHOLDER,
    SUMMARY_ERROR_MESSAGE,
    TAB_DISCHARGE,
    TAB_LABELS,
    TAB_OVERVIEW,
    TAB_RAIN_GAUGE,
    TAB_WEATHER,
)
from dashboard_components.statistics import WEATHER_CHARTS, bar_label

# panel -> (snapshot section, station attribute, statistics attribute, card fields, colour, chart columns)
PANELS = {
    TAB_DISCHARGE: ('discharge', 'discharge_stations', 'discharge_statistics', [
        ('discharge', 'Discharge (m3/s)'),
        ('velocity', 'Velocity (m/s)'),
        ('water_level', 'Water Level (m)'),
    ], ENHANCED_COLORS['blue'], 3),
    TAB_WEATHER: ('aws', 'weather_stations', 'weather_statistics', [
        ('temperature', 'Temp (°C)'),
        ('relative_humidity', 'Humidity (%)'),
        ('air_pressure', 'Pressure (hPa)'),
        ('wind_speed', 'Wind Speed (m/s)'),
        ('wind_direction', 'Wind Dir (°)'),
        ('rainfall_total', 'Rainfall Total (mm)'),
    ], ENHANCED_COLORS['green'], 3),
    TAB_RAIN_GAUGE: ('rain_gauge', 'rain_gauge_stations', 'rain_gauge_statistics', [
        ('rainfall_hr', 'Rainfall HR (mm)'),
        ('rainfall_total', 'Rainfall Total (mm)'),
    ], ENHANCED_COLORS['orange'], 2),
}


def _bar_chart(series, color, highlighted):
    """Bar chart whose y axis ends at the series' headroom maximum."""
    frame = pd.DataFrame(series.data, columns=['name', 'value'])
    st.markdown(f"**{series.title}**")
    if frame.empty:
        st.caption("No stations")
        return
    frame['selected'] = frame['name'].isin(highlighted)
    bar_color = {'value': color}
    if highlighted:
        bar_color['condition'] = {'test': 'datum.selected', 'value': ENHANCED_COLORS['highlight']}
    st.vega_lite_chart(frame, {
        'mark': {'type': 'bar'},
        'encoding': {
            'x': {'field': 'name', 'type': 'nominal', 'title': None, 'sort': None},
            'y': {
                'field': 'value',
                'type': 'quantitative',
                'title': None,
                'scale': {'domain': [0, series.max_value]},
            },
            'color': bar_color,
        },
        'height': 180,
    }, use_container_width=True)


def _render_statistics(charts, color, highlighted=(), columns=3):
    charts = list(charts.values())
    for start in range(0, len(charts), columns):
        cols = st.columns(columns)
        for col, series in zip(cols, charts[start:start + columns]):
            with col:
                _bar_chart(series, color, list(highlighted))


def _render_summary(snapshot, on_select_tab):
    metrics = snapshot.summary if snapshot is not None else None
    if not metrics:
        cols = st.columns(5)
        for col, label in zip(cols, ['Discharge Stations', 'Automatic Weather Stations',
                                     'Rain Gauge Stations', 'Dam', 'Vyasi Dam Level']):
            col.metric(label, METRIC_PLACEHOLDER)
        return

    cols = st.columns(len(metrics))
    for col, metric in zip(cols, metrics):
        with col:
            st.metric(metric.title, metric.value)
            if metric.clickable and metric.id in TAB_LABELS:
                st.button("Open", key=f"summary_open_{metric.id}", on_click=on_select_tab, args=(metric.id,))


def _render_station_cards(stations, fields, panels, columns=3):
    for start in range(0, len(stations), columns):
        cols = st.columns(columns)
        for col, station in zip(cols, stations[start:start + columns]):
            key = bar_label(station)
            selected = panels.is_selected(key)
            with col.container(border=True):
                st.markdown(f"**{station.title}**")
                for attr, label in fields:
                    st.caption(f"{label}: {getattr(station, attr)}")
                st.button(
                    "Selected" if selected else "Select",
                    key=f"card_{panels.active_tab}_{station.id}",
                    type="primary" if selected else "secondary",
                    on_click=panels.toggle_station,
                    args=(key, station.title),
                )


def _render_parameter_toggles(panels):
    cols = st.columns(len(WEATHER_CHARTS))
    for col, (key, title, _) in zip(cols, WEATHER_CHARTS):
        col.button(
            title,
            key=f"param_{key}",
            type="primary" if key in panels.selection.parameters else "secondary",
            on_click=panels.toggle_parameter,
            args=(key,),
        )


def _render_panel(snapshot, panel, panels):
    section, stations_attr, statistics_attr, fields, color, chart_columns = PANELS[panel]
    stations = getattr(snapshot, stations_attr)

    col_title, col_clear = st.columns([5, 1])
    col_title.subheader(TAB_LABELS[panel])
    if panels.selection.has_selection:
        col_clear.button("Clear All", key=f"clear_{panel}", on_click=panels.clear)

    if section in snapshot.section_errors:
        if not stations:
            st.error(SUMMARY_ERROR_MESSAGE)
            return
        st.caption("Showing last known values")
    if not stations:
        st.caption("No stations available")
        return

    _render_station_cards(stations, fields, panels)

    if panels.selection.titles:
        st.caption("Selected: " + ", ".join(panels.selection.titles))
    if panel == TAB_WEATHER:
        _render_parameter_toggles(panels)

    st.markdown("---")
    bundle = getattr(snapshot, statistics_attr)
    _render_statistics(panels.visible_charts(bundle), color, panels.selection.chart_keys, chart_columns)


def render_overview_tab(snapshot, is_loading, error, panels, on_retry, on_select_tab):
    """
    Render the overview's active panel from the latest snapshot.

    Parameters:
    -----------
    snapshot : DashboardSnapshot or None
        Latest published snapshot (None before the first load)
    is_loading : bool
        Initial load in progress
    error : str or None
        Summary banner text
    panels : OverviewPanels
        Active panel and its station/parameter selection
    on_retry : callable
        Invoked when the operator presses Retry
    on_select_tab : callable
        Invoked with a tab id when a summary card is opened
    """
    if error:
        col_msg, col_btn = st.columns([5, 1])
        col_msg.error(error)
        if col_btn.button("Retry", key="overview_retry"):
            on_retry()

    if is_loading:
        st.info("Loading latest data...")

    _render_summary(snapshot, on_select_tab)

    if snapshot is None:
        return

    if snapshot.is_partial:
        failed = sorted(snapshot.section_errors) + (['summary'] if snapshot.error else [])
        st.caption("Partial data, unavailable sources: " + ", ".join(failed))

    st.markdown("---")
    panel = TAB_DISCHARGE if panels.active_tab == TAB_OVERVIEW else panels.active_tab
    _render_panel(snapshot, panel, panels)

    if panels.active_tab == TAB_OVERVIEW:
        if snapshot.dam_station is not None:
            st.markdown("---")
            st.subheader(snapshot.dam_station.title)
            _render_statistics(snapshot.dam_statistics.charts, ENHANCED_COLORS['highlight'], columns=1)
        elif 'dam' in snapshot.section_errors:
            st.error(SUMMARY_ERROR_MESSAGE)

    if snapshot.last_updated:
        st.caption(f"Last updated {snapshot.last_updated.strftime('%Y-%m-%d %H:%M:%S')}")
