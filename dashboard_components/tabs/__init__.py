"""
ABOUTME: Dashboard Tabs Package
ABOUTME: Streamlit renderers for the overview and report views.
"""

from .overview_tab import render_overview_tab
from .report_tab import render_report_tab

__all__ = [
    'render_overview_tab',
    'render_report_tab',
]
