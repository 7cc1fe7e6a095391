#!/usr/bin/env python3
# ABOUTME: Main entry point for the hydrological monitoring operations dashboard.
# ABOUTME: Wires the snapshot aggregator, report engines and auto-loop into Streamlit.

"""
Hydrological Monitoring Dashboard
=================================

Features:
- Overview with summary metrics and discharge, weather and rain gauge
  panels (station cards and derived statistics), refreshed every 5 minutes
  with per-section fallbacks
- Discharge, weather and rain gauge report views with a validated time
  window, station filter, server-side pagination and PDF/Excel export
- Unattended rotation of the three panels on wall-screen displays after
  30 s without input

Usage:
    streamlit run dashboard.py
"""

import asyncio
import logging
import sys
from pathlib import Path

import streamlit as st
from streamlit_autorefresh import st_autorefresh

# Add project root to path
project_root = Path(__file__).parent
sys.path.append(str(project_root))

from dashboard_components import (
    AutoLoopScheduler,
    DashboardAggregator,
    ExportCoordinator,
    LastKnownCache,
    ReportQueryEngine,
    REPORT_CONFIGS,
)

from dashboard_components.constants import (
    PAGE_CONFIG,
    PAGE_OVERVIEW,
    REPORT_PAGES,
    TAB_OVERVIEW,
    TAB_MAP,
    TAB_LABELS,
    LOOP_TABS,
)

from dashboard_components.data_loader import DashboardDataLoader
from dashboard_components.overview_panels import OverviewPanels
from dashboard_components.tabs import render_overview_tab, render_report_tab

from scripts.core_processing.config_loader import load_dashboard_settings
from scripts.external_apis import HydroMonitorClient
from scripts.utils.logging_config import setup_main_logger

PAGE_LABELS = {PAGE_OVERVIEW: 'Live Overview', **REPORT_PAGES}

# Rerun heartbeat driving the auto-loop and the overview poll
HEARTBEAT_MS = 5000
DEFAULT_VIEWPORT_WIDTH = 1920

logger = logging.getLogger(__name__)

# Configure Streamlit page
st.set_page_config(**PAGE_CONFIG)


def run(coro):
    """Run a coroutine to completion from the synchronous Streamlit script."""
    return asyncio.run(coro)


def _activate_tab(tab):
    """Shared tab-activation handler: switches the panel and resets its selection."""
    st.session_state.panels.activate(tab)


def _select_tab(tab):
    _activate_tab(tab)
    st.session_state.scheduler.record_activity(tab=tab)


def _on_tab_change():
    _select_tab(st.session_state.active_tab)


def _build_session(settings):
    """Create the long-lived components once per browser session."""
    client = HydroMonitorClient(settings['api_base_url'], timeout=settings['request_timeout_s'])
    loader = DashboardDataLoader(client)

    engines = {}
    coordinators = {}
    for station_class, config in REPORT_CONFIGS.items():
        engine = ReportQueryEngine(config, loader.report_fetcher(station_class), page_size=settings['page_size'])
        engines[station_class] = engine
        coordinators[station_class] = ExportCoordinator(
            loader.exporter(station_class, settings['export_dir']),
            engine,
        )

    loop_settings = settings['auto_loop']
    st.session_state.loader = loader
    st.session_state.aggregator = DashboardAggregator(
        loader,
        poll_interval=settings['poll_interval_s'],
        cache=LastKnownCache(),
    )
    st.session_state.engines = engines
    st.session_state.coordinators = coordinators
    st.session_state.station_options = {}
    st.session_state.panels = OverviewPanels(TAB_OVERVIEW)
    st.session_state.scheduler = AutoLoopScheduler(
        LOOP_TABS,
        on_activate_tab=_activate_tab,
        inactivity_ms=loop_settings['inactivity_ms'],
        dwell_ms=loop_settings['dwell_ms'],
        min_viewport_width=loop_settings['min_viewport_width'],
        current_tab=TAB_OVERVIEW,
    )
    st.session_state.heartbeat = 0
    logger.info("Dashboard session initialized")


def _drive_auto_loop():
    """A heartbeat rerun advances the scheduler; any other rerun is operator activity."""
    scheduler = st.session_state.scheduler
    count = st_autorefresh(interval=HEARTBEAT_MS, key="auto_loop_heartbeat")

    width = st.sidebar.number_input(
        "Display width (px)",
        min_value=320,
        max_value=10000,
        value=DEFAULT_VIEWPORT_WIDTH,
        step=10,
        help="Wall screens at or above the threshold rotate panels when idle",
    )
    scheduler.update_viewport(int(width))

    if count != st.session_state.heartbeat:
        st.session_state.heartbeat = count
        scheduler.tick()
    else:
        scheduler.record_activity()

    loop_state = scheduler.state()
    if loop_state.is_rotating:
        st.sidebar.caption("🔁 Auto-loop active")
    elif loop_state.is_eligible:
        st.sidebar.caption(f"Auto-loop in {loop_state.ms_until_next_action / 1000:.0f} s")


def _station_options(station_class):
    cache = st.session_state.station_options
    if station_class not in cache:
        cache[station_class] = run(st.session_state.loader.fetch_station_options(station_class))
    return cache[station_class]


def _render_live_overview():
    _drive_auto_loop()

    panels = st.session_state.panels
    # The panel may have moved (auto-loop, summary card) since the radio was last drawn
    st.session_state.active_tab = panels.active_tab

    st.header("📊 Overview")
    st.radio(
        "Navigation",
        options=list(TAB_LABELS),
        format_func=TAB_LABELS.get,
        horizontal=True,
        key="active_tab",
        on_change=_on_tab_change,
        label_visibility="collapsed",
    )

    aggregator = st.session_state.aggregator
    run(aggregator.refresh_if_due())

    if panels.active_tab == TAB_MAP:
        st.info("Map view is not available in this build.")
        return

    render_overview_tab(
        aggregator.snapshot,
        aggregator.is_loading,
        aggregator.error,
        panels,
        on_retry=lambda: run(aggregator.retry()),
        on_select_tab=_select_tab,
    )


def main():
    """Main application logic."""
    settings = load_dashboard_settings("config/dashboard_config.json", project_root)
    setup_main_logger(settings['log_file'])

    if 'scheduler' not in st.session_state:
        _build_session(settings)

    st.sidebar.title("Display")
    page = st.sidebar.radio("Page", options=list(PAGE_LABELS), format_func=PAGE_LABELS.get, key="page")

    if page == PAGE_OVERVIEW:
        _render_live_overview()
        return

    # Working in a report counts as activity for the overview's idle countdown
    st.session_state.scheduler.record_activity()
    render_report_tab(
        st.session_state.engines[page],
        st.session_state.coordinators[page],
        _station_options(page),
        run,
    )


if __name__ == "__main__":
    main()
