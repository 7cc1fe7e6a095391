"""
Constants and Configuration for the Hydrological Monitoring Dashboard

This module contains all constants, colour schemes, timings and tab
definitions used throughout the dashboard.
"""

from datetime import timedelta

# Colour scheme shared by the station cards and statistics charts
ENHANCED_COLORS = {
    'blue': '#2E86AB',
    'orange': '#F18F01',
    'green': '#2D9A6B',
    'yellow': '#FFC107',
    'highlight': '#7C3AED',
    'error': '#E63946',
    'grid': '#E5E5E5',
    'text': '#303030',
    'background': '#F5F5F5',
}

# Per-class colour cycles for station cards
DISCHARGE_COLORS = ['blue', 'orange', 'green', 'yellow']
WEATHER_COLORS = ['blue', 'green', 'orange']
RAIN_GAUGE_COLORS = ['blue', 'green', 'orange', 'yellow']

# Page configuration
PAGE_CONFIG = {
    "page_title": "Hydrological Monitoring Dashboard",
    "page_icon": "🌊",
    "layout": "wide",
    "initial_sidebar_state": "collapsed"
}

# Overview panel identifiers and labels (header navigation order)
TAB_OVERVIEW = 'overview'
TAB_DISCHARGE = 'discharge'
TAB_WEATHER = 'weather'
TAB_RAIN_GAUGE = 'rain-gauge'
TAB_MAP = 'map'

TAB_LABELS = {
    TAB_OVERVIEW: 'Overview',
    TAB_DISCHARGE: 'Discharge Stations',
    TAB_WEATHER: 'Automatic Weather Stations',
    TAB_RAIN_GAUGE: 'Rain Gauge Stations',
    TAB_MAP: 'Map',
}

# The three live content panels take part in the unattended rotation
LOOP_TABS = [TAB_DISCHARGE, TAB_WEATHER, TAB_RAIN_GAUGE]

# Sidebar pages: the live overview and one report view per station class
PAGE_OVERVIEW = 'overview'
REPORT_PAGES = {
    'discharge': 'Discharge Reports',
    'aws': 'AWS Reports',
    'rain_gauge': 'Rain Gauge Reports',
}

# Auto-loop timings
AUTO_LOOP_PARAMS = {
    'inactivity_ms': 30_000,
    'dwell_ms': 30_000,
    'min_viewport_width': 2500,  # ~55" wall screens
    'tick_seconds': 1.0,
}

# Overview polling
POLL_INTERVAL_SECONDS = 5 * 60

# Report engine
PAGE_SIZE = 100
MAX_WINDOW_SPAN = timedelta(days=7)
HEADER_LABEL_LIMIT = 18
HEADER_LABEL_KEEP = 15

# Export notification lifetime
EXPORT_NOTIFICATION_SECONDS = 4.0

# Axis headroom for derived statistics charts
AXIS_HEADROOM = 1.2
AXIS_FLOOR = 1

# Banner shown when the summary metrics source fails
SUMMARY_ERROR_MESSAGE = 'Data not received – API failed'

# Placeholder value shown before the first successful summary
METRIC_PLACEHOLDER = '--'

# Export all constants
__all__ = [
    'ENHANCED_COLORS',
    'DISCHARGE_COLORS',
    'WEATHER_COLORS',
    'RAIN_GAUGE_COLORS',
    'PAGE_CONFIG',
    'TAB_OVERVIEW',
    'TAB_DISCHARGE',
    'TAB_WEATHER',
    'TAB_RAIN_GAUGE',
    'TAB_MAP',
    'TAB_LABELS',
    'LOOP_TABS',
    'PAGE_OVERVIEW',
    'REPORT_PAGES',
    'AUTO_LOOP_PARAMS',
    'POLL_INTERVAL_SECONDS',
    'PAGE_SIZE',
    'MAX_WINDOW_SPAN',
    'HEADER_LABEL_LIMIT',
    'HEADER_LABEL_KEEP',
    'EXPORT_NOTIFICATION_SECONDS',
    'AXIS_HEADROOM',
    'AXIS_FLOOR',
    'SUMMARY_ERROR_MESSAGE',
    'METRIC_PLACEHOLDER',
]
