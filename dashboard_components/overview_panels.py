# ABOUTME: Active overview panel and its tab-scoped station and parameter selection.
# ABOUTME: The single tab-activation handler shared by manual navigation and the auto-loop.

"""
Overview panels

The overview switches between a discharge, a weather and a rain gauge
panel (plus the summary landing view and the map). Clicking station cards
in a panel highlights their bars in the panel's statistics; on the weather
panel the operator can also narrow the statistics to chosen parameters.

Both selections belong to the panel they were made on. ``activate`` is the
one handler every tab change goes through, whether it comes from a click or
from the auto-loop, and it always starts the new panel with nothing selected.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from dashboard_components.constants import TAB_LABELS, TAB_OVERVIEW
from dashboard_components.statistics import BarSeries, StatisticsBundle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PanelSelection:
    chart_keys: Tuple[str, ...] = ()
    titles: Tuple[str, ...] = ()
    parameters: Tuple[str, ...] = ()

    @property
    def has_selection(self) -> bool:
        return bool(self.chart_keys or self.parameters)


class OverviewPanels:
    """
    Holds the active overview tab and the selection made on it.

    Args:
        active_tab: Tab shown first
    """

    def __init__(self, active_tab: str = TAB_OVERVIEW):
        if active_tab not in TAB_LABELS:
            raise ValueError(f"Unknown tab: {active_tab}")
        self.active_tab = active_tab
        self.selection = PanelSelection()

    def activate(self, tab: str) -> bool:
        """
        Switch to ``tab`` and reset the station and parameter selection.

        Returns:
            True if the active tab changed
        """
        if tab not in TAB_LABELS:
            raise ValueError(f"Unknown tab: {tab}")
        if tab == self.active_tab:
            return False
        logger.debug(f"Overview panel {self.active_tab} -> {tab}")
        self.active_tab = tab
        self.selection = PanelSelection()
        return True

    def toggle_station(self, chart_key: Optional[str], title: Optional[str] = None):
        """Add or remove a station card; a missing key clears the station selection."""
        current = self.selection
        if not chart_key:
            self.selection = PanelSelection(parameters=current.parameters)
            return
        if chart_key in current.chart_keys:
            index = current.chart_keys.index(chart_key)
            self.selection = PanelSelection(
                chart_keys=current.chart_keys[:index] + current.chart_keys[index + 1:],
                titles=current.titles[:index] + current.titles[index + 1:],
                parameters=current.parameters,
            )
        else:
            self.selection = PanelSelection(
                chart_keys=current.chart_keys + (chart_key,),
                titles=current.titles + (title or chart_key,),
                parameters=current.parameters,
            )

    def toggle_parameter(self, parameter: str):
        current = self.selection
        if parameter in current.parameters:
            parameters = tuple(p for p in current.parameters if p != parameter)
        else:
            parameters = current.parameters + (parameter,)
        self.selection = PanelSelection(current.chart_keys, current.titles, parameters)

    def clear(self):
        self.selection = PanelSelection()

    def is_selected(self, chart_key: str) -> bool:
        return chart_key in self.selection.chart_keys

    def visible_charts(self, bundle: StatisticsBundle) -> Dict[str, BarSeries]:
        """Charts of a bundle narrowed to the selected parameters (all when none are selected)."""
        parameters = self.selection.parameters
        if not parameters:
            return dict(bundle.charts)
        return {key: series for key, series in bundle.charts.items() if key in parameters}
