# ABOUTME: Periodic multi-source snapshot for the overview tab.
# ABOUTME: Fetches all overview sources concurrently and degrades per section on failure.

"""
Dashboard Aggregator

A snapshot is one consolidated read of the summary counts, the three
station lists and the dam readings, plus the statistics derived from them.

Failure handling per section:

- station lists and dam: previous snapshot, then the on-disk last-known
  cache; the failure is recorded in ``section_errors``. With no history at
  all the section is published empty (dam: None) so the overview shows its
  error state instead of invented readings
- summary: the snapshot's ``error`` carries the banner text and the
  previous summary is kept; on the very first load the summary is None so
  the overview never shows made-up zero counts
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from dashboard_components.cache_manager import LastKnownCache
from dashboard_components.constants import POLL_INTERVAL_SECONDS, SUMMARY_ERROR_MESSAGE
from dashboard_components.station_metadata import (
    DamStation,
    DischargeStation,
    RainGaugeStation,
    SummaryMetric,
    WeatherStation,
    from_records,
    to_records,
)
from dashboard_components.statistics import (
    StatisticsBundle,
    build_dam_statistics,
    build_discharge_statistics,
    build_rain_gauge_statistics,
    build_weather_statistics,
)

logger = logging.getLogger(__name__)

# section -> (loader coroutine name, snapshot attribute)
STATION_SECTIONS = {
    'discharge': ('fetch_discharge_stations', 'discharge_stations'),
    'aws': ('fetch_weather_stations', 'weather_stations'),
    'rain_gauge': ('fetch_rain_gauge_stations', 'rain_gauge_stations'),
}


@dataclass(frozen=True)
class DashboardSnapshot:
    summary: Optional[List[SummaryMetric]]
    discharge_stations: List[DischargeStation]
    weather_stations: List[WeatherStation]
    rain_gauge_stations: List[RainGaugeStation]
    dam_station: Optional[DamStation]
    discharge_statistics: StatisticsBundle
    weather_statistics: StatisticsBundle
    rain_gauge_statistics: StatisticsBundle
    dam_statistics: StatisticsBundle
    error: Optional[str] = None
    section_errors: Dict[str, str] = field(default_factory=dict)
    last_updated: Optional[datetime] = None

    @property
    def is_partial(self) -> bool:
        return bool(self.section_errors) or self.error is not None


class DashboardAggregator:
    """
    Owns the overview snapshot and its poll timer.

    Args:
        loader: Object with async ``fetch_summary``, ``fetch_discharge_stations``,
                ``fetch_weather_stations``, ``fetch_rain_gauge_stations`` and
                ``fetch_dam_station`` (normally a DashboardDataLoader)
        clock: Returns the current local time
        poll_interval: Seconds between refreshes
        cache: Optional LastKnownCache for cross-restart fallback
    """

    def __init__(
        self,
        loader,
        clock: Callable[[], datetime] = datetime.now,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        cache: Optional[LastKnownCache] = None,
    ):
        self.loader = loader
        self.clock = clock
        self.poll_interval = poll_interval
        self.cache = cache
        self.is_loading = False
        self.error: Optional[str] = None
        self._snapshot: Optional[DashboardSnapshot] = None
        self._last_refresh: Optional[datetime] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def snapshot(self) -> Optional[DashboardSnapshot]:
        return self._snapshot

    # ===== Fallbacks =====

    def _fallback_stations(self, section: str):
        _, attribute = STATION_SECTIONS[section]
        if self._snapshot is not None and getattr(self._snapshot, attribute):
            return getattr(self._snapshot, attribute)
        if self.cache is not None:
            records = self.cache.load(section)
            if records:
                try:
                    return from_records(section, records)
                except TypeError as e:
                    logger.warning(f"Ignoring incompatible cached {section} stations: {e}")
        return []

    def _fallback_dam(self) -> Optional[DamStation]:
        if self._snapshot is not None and self._snapshot.dam_station is not None:
            return self._snapshot.dam_station
        if self.cache is not None:
            records = self.cache.load('dam')
            if records:
                try:
                    return DamStation(**records[0])
                except TypeError as e:
                    logger.warning(f"Ignoring incompatible cached dam record: {e}")
        return None

    def _remember(self, section: str, records):
        if self.cache is not None:
            self.cache.save(section, records)

    # ===== Snapshot =====

    async def fetch_snapshot(self) -> DashboardSnapshot:
        """Fetch every source concurrently and settle each one into the snapshot."""
        sections = ['summary'] + list(STATION_SECTIONS) + ['dam']
        coroutines = [self.loader.fetch_summary()]
        coroutines += [getattr(self.loader, name)() for name, _ in STATION_SECTIONS.values()]
        coroutines.append(self.loader.fetch_dam_station())
        results = dict(zip(sections, await asyncio.gather(*coroutines, return_exceptions=True)))

        section_errors = {}
        stations = {}
        for section in STATION_SECTIONS:
            result = results[section]
            if isinstance(result, BaseException):
                logger.warning(f"{section} stations unavailable, using last known list: {result}")
                section_errors[section] = str(result) or type(result).__name__
                stations[section] = self._fallback_stations(section)
            else:
                stations[section] = result
                self._remember(section, to_records(result))

        dam = results['dam']
        if isinstance(dam, BaseException):
            logger.warning(f"Dam data unavailable, using last known values: {dam}")
            section_errors['dam'] = str(dam) or type(dam).__name__
            dam = self._fallback_dam()
        else:
            self._remember('dam', to_records([dam]))

        summary = results['summary']
        error = None
        if isinstance(summary, BaseException):
            logger.error(f"Overview summary fetch failed: {summary}")
            error = SUMMARY_ERROR_MESSAGE
            summary = self._snapshot.summary if self._snapshot is not None else None

        return DashboardSnapshot(
            summary=summary,
            discharge_stations=stations['discharge'],
            weather_stations=stations['aws'],
            rain_gauge_stations=stations['rain_gauge'],
            dam_station=dam,
            discharge_statistics=build_discharge_statistics(stations['discharge']),
            weather_statistics=build_weather_statistics(stations['aws']),
            rain_gauge_statistics=build_rain_gauge_statistics(stations['rain_gauge']),
            dam_statistics=build_dam_statistics(dam),
            error=error,
            section_errors=section_errors,
            last_updated=self.clock(),
        )

    async def refresh(self, initial: bool = False) -> Optional[DashboardSnapshot]:
        """
        Fetch and publish a new snapshot. Never raises.

        Args:
            initial: Show the loading indicator while fetching (first load, retry)
        """
        if initial:
            self.is_loading = True
        try:
            snapshot = await self.fetch_snapshot()
        except Exception as e:
            # The last published snapshot stays in place
            logger.exception(f"Snapshot refresh failed: {e}")
            self.error = SUMMARY_ERROR_MESSAGE
            return None
        finally:
            self.is_loading = False
            self._last_refresh = self.clock()

        self._snapshot = snapshot
        self.error = snapshot.error
        if snapshot.section_errors:
            logger.info(f"Snapshot published with fallbacks for: {', '.join(sorted(snapshot.section_errors))}")
        else:
            logger.debug("Snapshot published")
        return snapshot

    async def retry(self) -> Optional[DashboardSnapshot]:
        """Operator-triggered reload after a summary failure."""
        return await self.refresh(initial=True)

    async def refresh_if_due(self, now: Optional[datetime] = None) -> bool:
        """
        Refresh when the poll interval has elapsed; for hosts that re-run
        instead of keeping a background task (Streamlit).

        Returns:
            True if a refresh ran
        """
        now = self.clock() if now is None else now
        if self._last_refresh is not None and now - self._last_refresh < timedelta(seconds=self.poll_interval):
            return False
        await self.refresh(initial=self._snapshot is None)
        return True

    # ===== Poll timer =====

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        """Load now, then every poll interval, on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._poll())

    async def _poll(self):
        initial = self._snapshot is None
        while True:
            await self.refresh(initial=initial)
            initial = False
            await asyncio.sleep(self.poll_interval)

    async def stop(self):
        """Cancel the poll timer; an in-flight fetch is abandoned with the task."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
