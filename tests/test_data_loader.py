# ABOUTME: Tests for the async data loading adapters.
# ABOUTME: Wraps a mocked client; checks row mapping, window guards and export files.

import pytest
from datetime import datetime, timedelta
from unittest.mock import Mock

from dashboard_components.data_loader import DashboardDataLoader, map_report_rows
from dashboard_components.errors import ExportError, TimeWindowError
from dashboard_components.export_coordinator import ExportFormat
from dashboard_components.report_engine import FetchRequest
from dashboard_components.time_window import TimeWindow
from scripts.external_apis.hydromon_client import HydroMonitorAPIError, HydroMonitorClient

START = datetime(2024, 6, 15, 0, 0, 0)
END = datetime(2024, 6, 15, 14, 30, 0)


@pytest.fixture
def client():
    return Mock()


@pytest.fixture
def loader(client):
    return DashboardDataLoader(client)


class TestRowMapping:

    @pytest.mark.unit
    def test_serial_numbers_continue_across_pages(self):
        raw = [{'timestamp': '2024-06-15 10:00', 'station': 'Vyasi', 'temperature': 21.456}]

        rows = map_report_rows('aws', raw, page=3, page_size=100)

        assert rows[0]['sno'] == 201
        assert rows[0]['temperature'] == '21.46'
        assert rows[0]['humidity'] == '0.00'

    @pytest.mark.unit
    def test_discharge_station_becomes_river(self):
        raw = [{'timestamp': 't', 'station': 'Tons River', 'discharge': 80, 'velocity': 1, 'water_level': 2}]

        row = map_report_rows('discharge', raw, page=1, page_size=100)[0]

        assert row['river'] == 'Tons River'
        assert row['discharge'] == '80.00'

    @pytest.mark.unit
    def test_rain_gauge_hour_and_total(self):
        raw = [{'timestamp': 't', 'station': 'KalsiGate', 'hour': 1.5, 'total': 40}]

        row = map_report_rows('rain_gauge', raw, page=1, page_size=100)[0]

        assert row['rainfall_hour'] == '1.50'
        assert row['rainfall_total'] == '40.00'


class TestOverviewSources:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fetch_summary(self, loader, client, summary_entity):
        client.get_overview.return_value = summary_entity

        metrics = await loader.fetch_summary()

        client.get_overview.assert_called_once_with('summary')
        assert len(metrics) == 5

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fetch_discharge_stations(self, loader, client, discharge_entities):
        client.get_overview.return_value = discharge_entities

        stations = await loader.fetch_discharge_stations()

        client.get_overview.assert_called_once_with('discharge')
        assert stations[0].river_name == 'Yamuna'

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fetch_error_propagates(self, loader, client):
        client.get_overview.side_effect = HydroMonitorAPIError('down')

        with pytest.raises(HydroMonitorAPIError):
            await loader.fetch_dam_station()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_station_options_fall_back_to_static_list(self, loader, client):
        client.get_overview.side_effect = HydroMonitorAPIError('down')

        options = await loader.fetch_station_options('aws')

        assert [o.id for o in options] == ['Vyasi', 'Lakhwar', 'Juddo']

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_station_options_survive_malformed_envelope(self):
        session = Mock()
        session.headers = {}
        session.get.return_value.json.return_value = {'status': 'OK', 'entity': [{'name': 'Yamuna River'}]}
        backend = HydroMonitorClient("http://backend.test/api/external", session=session)
        backend.min_request_interval = 0

        options = await DashboardDataLoader(backend).fetch_station_options('discharge')

        assert [o.id for o in options] == ['Yamuna River', 'Tons River', 'Giri River', 'Aglar River']

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_station_options_from_backend(self, loader, client, rain_gauge_entities):
        client.get_overview.return_value = rain_gauge_entities

        options = await loader.fetch_station_options('rain_gauge')

        assert [o.chart_key for o in options] == ['KG', 'Da']


class TestReportFetcher:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fetch_maps_rows_and_total(self, loader, client):
        client.get_report.return_value = {
            'entity': [{'timestamp': 't', 'station': 'Vyasi', 'hour': 0, 'total': 3}],
            'total': 120,
        }
        fetch = loader.report_fetcher('rain_gauge')

        result = await fetch(FetchRequest(('Vyasi',), START, END, page=2, page_size=100))

        client.get_report.assert_called_once_with('rain_gauge', ['Vyasi'], START, END, 2, 100)
        assert result.total == 120
        assert result.rows[0]['sno'] == 101

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_invalid_window_never_reaches_backend(self, loader, client):
        fetch = loader.report_fetcher('aws')

        with pytest.raises(TimeWindowError):
            await fetch(FetchRequest((), START, START + timedelta(days=8), page=1, page_size=100))
        client.get_report.assert_not_called()


class TestExporter:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_writes_export_file(self, loader, client, temp_output_dir):
        client.download_export.return_value = b'PK\x03\x04'
        export = loader.exporter('aws', temp_output_dir / 'exports')

        path = await export(ExportFormat.SPREADSHEET, ('Vyasi',), TimeWindow(START, END))

        assert path == temp_output_dir / 'exports' / 'aws-station-report.xlsx'
        assert path.read_bytes() == b'PK\x03\x04'
        client.download_export.assert_called_once_with('aws', 'excel', ['Vyasi'], START, END)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_download_failure_becomes_export_error(self, loader, client, temp_output_dir):
        client.download_export.side_effect = HydroMonitorAPIError('timeout')
        export = loader.exporter('discharge', temp_output_dir)

        with pytest.raises(ExportError, match='Failed to download PDF'):
            await export('pdf', (), TimeWindow(START, END))
        assert not (temp_output_dir / 'discharge-station-report.pdf').exists()
