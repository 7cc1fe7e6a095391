# ABOUTME: Async data loading adapters for the monitoring dashboard
# ABOUTME: Wraps the blocking backend client and maps envelopes to dashboard records

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List

from dashboard_components.cache_manager import monitor_performance
from dashboard_components.errors import ExportError, FetchError
from dashboard_components.export_coordinator import ExportFormat
from dashboard_components.report_engine import FetchRequest, ReportResult
from dashboard_components.station_metadata import (
    StationOption,
    fmt2,
    get_fallback_station_names,
    map_dam_station,
    map_discharge_stations,
    map_rain_gauge_stations,
    map_summary_metrics,
    map_weather_stations,
    station_options,
)
from dashboard_components.time_window import TimeWindow, require_valid_window

from scripts.external_apis.hydromon_client import HydroMonitorClient

logger = logging.getLogger(__name__)

EXPORT_FILE_STEMS = {
    'discharge': 'discharge-station-report',
    'aws': 'aws-station-report',
    'rain_gauge': 'rain-gauge-report',
}


def _discharge_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'timestamp': row.get('timestamp'),
        'river': row.get('station'),
        'discharge': fmt2(row.get('discharge')),
        'velocity': fmt2(row.get('velocity')),
        'water_level': fmt2(row.get('water_level')),
    }


def _aws_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'timestamp': row.get('timestamp'),
        'station': row.get('station'),
        'temperature': fmt2(row.get('temperature')),
        'humidity': fmt2(row.get('humidity')),
        'pressure': fmt2(row.get('pressure')),
        'wind_speed': fmt2(row.get('wind_speed')),
        'wind_direction': fmt2(row.get('wind_direction')),
        'rainfall_day': fmt2(row.get('rainfall_day')),
        'rainfall_hour': fmt2(row.get('rainfall_hour')),
        'rainfall_total': fmt2(row.get('rainfall_total')),
    }


def _rain_gauge_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'timestamp': row.get('timestamp'),
        'station': row.get('station'),
        'rainfall_hour': fmt2(row.get('hour')),
        'rainfall_total': fmt2(row.get('total')),
    }


ROW_MAPPERS = {
    'discharge': _discharge_row,
    'aws': _aws_row,
    'rain_gauge': _rain_gauge_row,
}


def map_report_rows(station_class: str, raw_rows: List[Dict[str, Any]], page: int, page_size: int):
    """Map backend rows to table rows with a running serial number across pages."""
    mapper = ROW_MAPPERS[station_class]
    offset = (page - 1) * page_size
    rows = []
    for i, raw in enumerate(raw_rows):
        row = {'sno': offset + i + 1}
        row.update(mapper(raw))
        rows.append(row)
    return rows


class DashboardDataLoader:
    """
    Async facade over HydroMonitorClient.

    Each call runs the blocking request in a worker thread so the event
    loop keeps serving the UI while a fetch is outstanding.
    """

    def __init__(self, client: HydroMonitorClient):
        self.client = client

    async def _overview(self, source: str):
        return await asyncio.to_thread(self.client.get_overview, source)

    # ===== Overview sources =====

    @monitor_performance
    async def fetch_summary(self):
        entity = await self._overview('summary')
        try:
            return map_summary_metrics(entity)
        except (KeyError, TypeError, ValueError) as e:
            raise FetchError(f"Malformed overview summary: {e}") from e

    @monitor_performance
    async def fetch_discharge_stations(self):
        return map_discharge_stations(await self._overview('discharge'))

    @monitor_performance
    async def fetch_weather_stations(self):
        return map_weather_stations(await self._overview('aws'))

    @monitor_performance
    async def fetch_rain_gauge_stations(self):
        return map_rain_gauge_stations(await self._overview('rain_gauge'))

    @monitor_performance
    async def fetch_dam_station(self):
        return map_dam_station(await self._overview('dam'))

    async def fetch_station_options(self, station_class: str) -> List[StationOption]:
        """Station picker entries, falling back to the static lists when the backend is down."""
        name_field = 'station_name' if station_class == 'aws' else 'name'
        try:
            entities = await self._overview(station_class)
            names = [entity[name_field] for entity in entities]
        except (FetchError, KeyError, TypeError) as e:
            logger.warning(f"Failed to fetch {station_class} station names, using static list: {e}")
            names = get_fallback_station_names(station_class)
        return station_options(station_class, names)

    # ===== Report collaborators =====

    def report_fetcher(self, station_class: str) -> Callable[[FetchRequest], Any]:
        """Fetch collaborator for a ReportQueryEngine of the given station class."""

        async def fetch(request: FetchRequest) -> ReportResult:
            require_valid_window(TimeWindow(request.start, request.end))
            payload = await asyncio.to_thread(
                self.client.get_report,
                station_class,
                list(request.selection),
                request.start,
                request.end,
                request.page,
                request.page_size,
            )
            rows = map_report_rows(station_class, payload['entity'], request.page, request.page_size)
            return ReportResult(rows=rows, total=payload['total'])

        return fetch

    def exporter(self, station_class: str, export_dir) -> Callable[..., Any]:
        """Export collaborator writing the downloaded file into export_dir."""
        export_dir = Path(export_dir)

        async def export(fmt, selection, window: TimeWindow) -> Path:
            fmt = ExportFormat(fmt)
            require_valid_window(window)
            try:
                body = await asyncio.to_thread(
                    self.client.download_export,
                    station_class,
                    fmt.value,
                    list(selection),
                    window.start,
                    window.end,
                )
            except FetchError as e:
                raise ExportError(f"Failed to download {fmt.label}: {e}") from e

            target = export_dir / f"{EXPORT_FILE_STEMS[station_class]}.{fmt.extension}"
            try:
                export_dir.mkdir(parents=True, exist_ok=True)
                target.write_bytes(body)
            except OSError as e:
                raise ExportError(f"Failed to save {fmt.label}: {e}") from e
            logger.info(f"Saved {fmt.label} export to {target}")
            return target

        return export
