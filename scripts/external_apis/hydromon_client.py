# ABOUTME: HTTP client for the hydrological monitoring backend
# ABOUTME: Retrieves overview envelopes, paginated station reports and export files

import logging
import time
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

import requests

from dashboard_components.errors import FetchError
from dashboard_components.time_window import format_timestamp

# Backend path segment per station class for reports and exports
REPORT_PATHS = {
    "discharge": "discharge-stations",
    "aws": "aws-stations",
    "rain_gauge": "rain-gauge-stations/list",
}

EXPORT_PATHS = {
    "discharge": "discharge-stations",
    "aws": "aws-stations",
    "rain_gauge": "rain-gauge-stations",
}

OVERVIEW_PATHS = {
    "summary": "overview/summary",
    "discharge": "overview/discharge_stations",
    "aws": "overview/aws",
    "rain_gauge": "overview/rain_gauges",
    "dam": "overview/dam",
}

EXPORT_FORMATS = ("pdf", "excel")


class HydroMonitorAPIError(FetchError):
    """Raised when the backend is unreachable or answers with a failure envelope."""


class HydroMonitorClient:
    """
    Client for the monitoring backend's external API.

    Every overview endpoint answers with an envelope
    ``{"status": int, "message": str, "entity": ...}``; report endpoints add
    a ``total`` field for server-side pagination. Export endpoints return a
    binary body.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000/api/external",
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the backend client.

        Args:
            base_url: Base URL of the external API (no trailing slash needed)
            timeout: Per-request timeout in seconds
            session: Optional pre-configured session (tests inject a mock)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": "HydroMonitor-Dashboard/1.0"})

        # Be gentle with the backend when several panels poll at once
        self.min_request_interval = 0.05
        self.last_request_time = 0

        self.logger = logging.getLogger(__name__)

    def _rate_limit(self):
        current_time = time.time()
        time_since_last = current_time - self.last_request_time

        if time_since_last < self.min_request_interval:
            time.sleep(self.min_request_interval - time_since_last)

        self.last_request_time = time.time()

    def _make_request(self, path: str, params=None) -> requests.Response:
        """
        Make a rate-limited GET request with error handling.

        Raises:
            HydroMonitorAPIError: On connection failure or non-2xx HTTP status
        """
        self._rate_limit()
        url = f"{self.base_url}/{path}"

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response
        except requests.exceptions.RequestException as e:
            self.logger.error(f"API request to {url} failed: {e}")
            raise HydroMonitorAPIError(f"Request to {path} failed: {e}") from e

    def _get_envelope(self, path: str, params=None) -> Dict:
        response = self._make_request(path, params)
        try:
            payload = response.json()
        except ValueError as e:
            raise HydroMonitorAPIError(f"Invalid JSON from {path}") from e

        if not isinstance(payload, dict):
            raise HydroMonitorAPIError(f"{path} answered with {type(payload).__name__} instead of an envelope")

        status = payload.get("status", 200)
        try:
            code = int(status)
        except (TypeError, ValueError) as e:
            raise HydroMonitorAPIError(f"{path} answered with unreadable status {status!r}") from e
        if not 200 <= code < 300:
            message = payload.get("message") or f"status {status}"
            raise HydroMonitorAPIError(f"{path} answered with {message}")
        if "entity" not in payload:
            raise HydroMonitorAPIError(f"{path} answered without an entity")
        return payload

    # ===== Overview =====

    def get_overview(self, source: str):
        """
        Fetch the entity of one overview source.

        Args:
            source: 'summary', 'discharge', 'aws', 'rain_gauge' or 'dam'

        Returns:
            The envelope's entity (dict for summary/dam, list for station lists)
        """
        path = OVERVIEW_PATHS[source]
        self.logger.debug(f"Fetching overview source {source}")
        return self._get_envelope(path)["entity"]

    # ===== Reports =====

    @staticmethod
    def _report_params(
        stations: Sequence[str], start: datetime, end: datetime, extra: Optional[Dict] = None
    ) -> List[Tuple[str, str]]:
        params = [
            ("start_time", format_timestamp(start)),
            ("end_time", format_timestamp(end)),
        ]
        for key, value in (extra or {}).items():
            params.append((key, str(value)))
        # Repeated parameter; omitted entirely for "all stations"
        for station in stations:
            params.append(("stations", station))
        return params

    def get_report(
        self,
        station_class: str,
        stations: Sequence[str],
        start: datetime,
        end: datetime,
        page: int = 1,
        page_size: int = 100,
    ) -> Dict:
        """
        Fetch one page of a station-class time series report.

        Returns:
            Dict with 'entity' (list of raw rows) and 'total' (defaults to the row count)
        """
        self.logger.info(
            f"Fetching {station_class} report page {page} for "
            f"{len(stations) or 'all'} station(s) from {start} to {end}"
        )
        params = self._report_params(
            stations, start, end, {"page": page, "page_size": page_size}
        )
        payload = self._get_envelope(REPORT_PATHS[station_class], params)
        rows = payload["entity"] or []
        total = payload.get("total")
        try:
            total = len(rows) if total is None else int(total)
        except (TypeError, ValueError) as e:
            raise HydroMonitorAPIError(f"{station_class} report answered with unreadable total {total!r}") from e
        return {"entity": rows, "total": total}

    # ===== Exports =====

    def download_export(
        self,
        station_class: str,
        fmt: str,
        stations: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> bytes:
        """
        Download a PDF or spreadsheet export.

        Args:
            station_class: 'discharge', 'aws' or 'rain_gauge'
            fmt: 'pdf' or 'excel'

        Returns:
            The file body
        """
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unknown export format: {fmt}")
        path = f"{EXPORT_PATHS[station_class]}/export/{fmt}"
        self.logger.info(f"Requesting {fmt} export of {station_class} report")
        response = self._make_request(path, self._report_params(stations, start, end))
        return response.content
