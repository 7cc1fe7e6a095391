# ABOUTME: Paginated report engine shared by the discharge, AWS and rain gauge report views.
# ABOUTME: Owns selection, time window and page state; fetches through an injected collaborator.

"""
Report Query Engine

One engine instance backs one report view. All view state lives in a
single immutable ``ReportState`` that is replaced on every transition, so
the ordering rules can be checked in one place:

- the report loads once on activation (all stations, page 1, today so far)
- ``generate`` resets to page 1 and refuses to fetch while the window is invalid
- ``change_page`` re-uses the selection that produced the displayed page
- every load takes a request token; a response that is not the newest is
  dropped instead of overwriting newer state
"""

import inspect
import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from dashboard_components.constants import (
    PAGE_SIZE,
    MAX_WINDOW_SPAN,
    HEADER_LABEL_LIMIT,
    HEADER_LABEL_KEEP,
)
from dashboard_components.time_window import (
    TimeWindow,
    WindowValidation,
    default_window,
    validate_window,
)

logger = logging.getLogger(__name__)

DEFAULT_FETCH_ERROR = 'Failed to load data. Please try again.'


@dataclass(frozen=True)
class ReportColumn:
    key: str
    label: str
    align: str = 'left'

    @property
    def header(self) -> str:
        if len(self.label) > HEADER_LABEL_LIMIT:
            return self.label[:HEADER_LABEL_KEEP] + '...'
        return self.label


@dataclass(frozen=True)
class ReportPageConfig:
    id: str
    title: str
    badge: str
    station_label: str
    station_class: str
    columns: Tuple[ReportColumn, ...]


REPORT_CONFIGS = {
    'discharge': ReportPageConfig(
        id='discharge',
        title='Discharge Station Reports',
        badge='MULTI RIVER • TIME SERIES • EXPORT READY',
        station_label='Rivers',
        station_class='discharge',
        columns=(
            ReportColumn('sno', 'S.No', 'center'),
            ReportColumn('timestamp', 'TimeStamp'),
            ReportColumn('river', 'River'),
            ReportColumn('discharge', 'Discharge (m3/s)', 'right'),
            ReportColumn('velocity', 'Velocity (m/s)', 'right'),
            ReportColumn('water_level', 'Water Level (m)', 'right'),
        ),
    ),
    'aws': ReportPageConfig(
        id='aws',
        title='Automatic Weather Station Reports',
        badge='MULTI STATION • TIME SERIES • EXPORT READY',
        station_label='Stations',
        station_class='aws',
        columns=(
            ReportColumn('sno', 'S.No', 'center'),
            ReportColumn('timestamp', 'TimeStamp'),
            ReportColumn('station', 'Station'),
            ReportColumn('temperature', 'Temp (°C)', 'right'),
            ReportColumn('humidity', 'Humidity (%)', 'right'),
            ReportColumn('pressure', 'Pressure (hPa)', 'right'),
            ReportColumn('wind_speed', 'Wind Speed (m/s)', 'right'),
            ReportColumn('wind_direction', 'Wind Dir (°)', 'right'),
            ReportColumn('rainfall_hour', 'Rainfall HR (mm)', 'right'),
            ReportColumn('rainfall_day', 'Rainfall Day (mm)', 'right'),
            ReportColumn('rainfall_total', 'Rainfall Total (mm)', 'right'),
        ),
    ),
    'rain_gauge': ReportPageConfig(
        id='rain-gauge',
        title='Rain Gauge Station Reports',
        badge='MULTI STATION • TIME SERIES • EXPORT READY',
        station_label='Stations',
        station_class='rain_gauge',
        columns=(
            ReportColumn('sno', 'S.No', 'center'),
            ReportColumn('timestamp', 'TimeStamp'),
            ReportColumn('station', 'Station'),
            ReportColumn('rainfall_hour', 'Rainfall HR (mm)', 'right'),
            ReportColumn('rainfall_total', 'Rainfall Total (mm)', 'right'),
        ),
    ),
}


@dataclass(frozen=True)
class FetchRequest:
    selection: Tuple[str, ...]
    start: datetime
    end: datetime
    page: int
    page_size: int


@dataclass(frozen=True)
class ReportResult:
    rows: List[Dict[str, Any]]
    total: int


@dataclass(frozen=True)
class ReportState:
    window: TimeWindow
    selected_ids: Tuple[str, ...] = ()
    active_selection: Tuple[str, ...] = ()
    page: int = 1
    rows: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0
    selected_row: Optional[int] = 0
    is_loading: bool = False
    error: Optional[str] = None
    last_updated: Optional[datetime] = None


def normalize_selection(selection: Optional[Sequence[str]]) -> Tuple[str, ...]:
    """Drop duplicates, keep first-seen order. None and [] both mean all stations."""
    return tuple(dict.fromkeys(selection or ()))


def page_count(total: int, page_size: int = PAGE_SIZE) -> int:
    return max(1, math.ceil(total / page_size))


def coerce_result(result) -> ReportResult:
    if isinstance(result, ReportResult):
        return result
    rows = list(result.get('rows') or [])
    total = result.get('total')
    return ReportResult(rows=rows, total=len(rows) if total is None else int(total))


class ReportQueryEngine:
    """
    Query engine for one report view.

    Args:
        config: Report page configuration (columns, labels, station class)
        fetch_data: Callable taking a FetchRequest and returning a ReportResult
                    (or a ``{'rows', 'total'}`` dict), sync or async; may raise
        clock: Returns the current local time; injectable for tests
        page_size: Rows per page
        max_span: Longest allowed time window
    """

    def __init__(
        self,
        config: ReportPageConfig,
        fetch_data: Callable[[FetchRequest], Any],
        clock: Callable[[], datetime] = datetime.now,
        page_size: int = PAGE_SIZE,
        max_span: timedelta = MAX_WINDOW_SPAN,
    ):
        self.config = config
        self.fetch_data = fetch_data
        self.clock = clock
        self.page_size = page_size
        self.max_span = max_span
        self._state = ReportState(window=default_window(clock()))
        self._initialized = False
        self._latest_token = 0

    # ===== Read-only view state =====

    @property
    def state(self) -> ReportState:
        return self._state

    @property
    def window(self) -> TimeWindow:
        return self._state.window

    @property
    def selected_ids(self) -> Tuple[str, ...]:
        return self._state.selected_ids

    @property
    def validation(self) -> WindowValidation:
        return validate_window(self._state.window, self.max_span)

    @property
    def page_count(self) -> int:
        return page_count(self._state.total, self.page_size)

    def _update(self, **changes):
        self._state = replace(self._state, **changes)

    # ===== Operator input =====

    def set_window(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> WindowValidation:
        """Change either end of the window and return the fresh validation."""
        current = self._state.window
        self._update(window=TimeWindow(
            start=current.start if start is None else start,
            end=current.end if end is None else end,
        ))
        return self.validation

    def set_selection(self, selection: Optional[Sequence[str]]):
        self._update(selected_ids=normalize_selection(selection))

    def clear_selection(self):
        self._update(selected_ids=())

    # ===== Operations =====

    async def initialize(self) -> bool:
        """Load every station's first page once; later calls do nothing."""
        if self._initialized:
            return False
        self._initialized = True
        await self._load((), 1)
        return True

    async def generate(self, selection: Optional[Sequence[str]] = None):
        """
        Load page 1 for a selection (the live operator selection by default).

        While the window is invalid the table is cleared and nothing is
        fetched; ``validation`` carries the reason.
        """
        if selection is None:
            selection = self._state.selected_ids
        self._update(page=1)
        await self._load(normalize_selection(selection), 1)

    async def change_page(self, delta: int) -> bool:
        """
        Move by delta pages, clamped to [1, page_count]. Nothing moves while
        the window is invalid.

        Returns:
            True if a fetch was issued
        """
        state = self._state
        if state.is_loading:
            return False
        if not self.validation.is_valid:
            logger.info(f"{self.config.id} page change ignored: {self.validation.message}")
            return False
        target = min(max(1, state.page + delta), self.page_count)
        if target == state.page:
            return False
        self._update(page=target)
        await self._load(state.active_selection, target)
        return True

    async def _load(self, selection: Tuple[str, ...], page: int):
        validation = self.validation
        if not validation.is_valid:
            logger.info(f"{self.config.id} report not fetched: {validation.message}")
            # Supersede anything still in flight so it cannot refill the table
            self._latest_token += 1
            self._update(rows=[], total=0, page=1, is_loading=False)
            return

        self._latest_token += 1
        token = self._latest_token
        window = self._state.window
        self._update(active_selection=selection, is_loading=True, error=None)

        request = FetchRequest(
            selection=selection,
            start=window.start,
            end=window.end,
            page=page,
            page_size=self.page_size,
        )
        try:
            result = self.fetch_data(request)
            if inspect.isawaitable(result):
                result = await result
            result = coerce_result(result)
        except Exception as e:
            if token != self._latest_token:
                logger.debug(f"Ignoring failure of superseded {self.config.id} request {token}: {e}")
                return
            logger.error(f"Failed to load {self.config.id} report page {page}: {e}")
            self._update(rows=[], total=0, error=str(e) or DEFAULT_FETCH_ERROR, is_loading=False)
            return

        if token != self._latest_token:
            logger.debug(f"Discarding stale {self.config.id} response {token} (latest {self._latest_token})")
            return

        rows = result.rows
        if len(rows) > self.page_size:
            logger.warning(f"Backend returned {len(rows)} rows for page size {self.page_size}; truncating")
            rows = rows[:self.page_size]

        self._update(
            rows=rows,
            total=max(0, result.total),
            selected_row=0,
            is_loading=False,
            error=None,
            last_updated=self.clock(),
        )

    # ===== Presentation helpers =====

    def status_text(self) -> str:
        state = self._state
        text = f"Showing {len(state.rows)} of {state.total} records"
        count = len(state.selected_ids)
        if count:
            plural = '' if count == 1 else 's'
            return f"{text} for {count} selected station{plural}"
        return f"{text} (all stations)"

    def page_label(self) -> str:
        return f"Page {self._state.page} of {self.page_count}"

    def status_badge(self) -> Optional[str]:
        state = self._state
        if state.is_loading:
            return 'Loading latest data...'
        if state.error:
            return state.error
        if state.last_updated:
            return f"Updated at {state.last_updated.strftime('%H:%M:%S')}"
        return None
