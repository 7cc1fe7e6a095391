# ABOUTME: Pytest fixtures and configuration for the monitoring dashboard test suite.
# ABOUTME: Provides fake clocks, backend-shaped entities and report fetch stubs.

import pytest
import json
import shutil
import sys
import tempfile
from pathlib import Path
from datetime import datetime

# Project root for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dashboard_components.report_engine import ReportResult  # noqa: E402


class FakeClock:
    """Manually advanced clock; callable like time.monotonic or datetime.now."""

    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, delta):
        self.now = self.now + delta
        return self.now


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def config_dir(project_root):
    """Return the config directory."""
    return project_root / 'config'


@pytest.fixture
def stations_config(config_dir):
    """Load the stations configuration."""
    config_path = config_dir / 'stations_config.json'
    if config_path.exists():
        with open(config_path) as f:
            return json.load(f)
    return {}


@pytest.fixture
def ms_clock():
    """Millisecond clock for the auto-loop scheduler, starting at 0."""
    return FakeClock(0.0)


@pytest.fixture
def seconds_clock():
    """Monotonic-seconds clock for export notifications."""
    return FakeClock(100.0)


@pytest.fixture
def now():
    """Fixed 'current time' for report windows: 2024-06-15 14:30."""
    return datetime(2024, 6, 15, 14, 30, 0)


@pytest.fixture
def discharge_entities():
    """Overview discharge entities as returned by the backend."""
    return [
        {'name': 'Yamuna River', 'discharge': 120.456, 'velocity': 1.2, 'water_level': 3.456},
        {'name': 'Tons River', 'discharge': 80.1, 'velocity': 0.9, 'water_level': 2.1},
        {'name': 'Giri River', 'discharge': None, 'velocity': 0.5, 'water_level': 1.0},
    ]


@pytest.fixture
def weather_entities():
    """Overview AWS entities as returned by the backend."""
    return [
        {
            'station_name': 'Vyasi', 'wind_speed': 3.2, 'wind_direction': 180,
            'temperature': 24.5, 'humidity': 65, 'pressure': 1012.3,
            'rainfall_hour': 0.5, 'rainfall_day': 4.0, 'rainfall_total': 120.0,
        },
        {
            'station_name': 'Lakhwar', 'wind_speed': 2.0, 'wind_direction': 90,
            'temperature': 22.0, 'humidity': 70, 'pressure': 1010.0,
            'rainfall_hour': 0.0, 'rainfall_day': 2.5, 'rainfall_total': 98.2,
        },
    ]


@pytest.fixture
def rain_gauge_entities():
    """Overview rain gauge entities as returned by the backend."""
    return [
        {'name': 'KalsiGate', 'hour': 1.5, 'total': 40.0},
        {'name': 'Dakpathar', 'hour': 0.0, 'total': 12.25},
    ]


@pytest.fixture
def summary_entity():
    return {'discharge_stations': 4, 'aws': 3, 'rain_gauge_stations': 4, 'dam': 1, 'vyasi_dam_level': 12}


@pytest.fixture
def dam_entity():
    return {
        'id': 'dam-1', 'name': 'Vyasi Dam', 'head_loss': 0.45,
        'intech_level': 120.5, 'level_pier1': 450.2, 'level_pier6': 448.8,
    }


def make_rows(count, start=1):
    return [{'sno': start + i, 'station': 'Yamuna River'} for i in range(count)]


@pytest.fixture
def fixed_fetch():
    """Fetch stub returning a fixed total, paginated by the request."""

    def factory(total):
        calls = []

        def fetch(request):
            calls.append(request)
            offset = (request.page - 1) * request.page_size
            count = max(0, min(request.page_size, total - offset))
            return ReportResult(rows=make_rows(count, offset + 1), total=total)

        fetch.calls = calls
        return fetch

    return factory


@pytest.fixture
def temp_output_dir():
    """Create a temporary directory for test outputs."""
    temp_dir = tempfile.mkdtemp(prefix='hydromon_test_')
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


# Markers for test categorization
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
