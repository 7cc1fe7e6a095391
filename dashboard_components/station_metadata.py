# ABOUTME: Station records and the mapping from backend entities to dashboard stations.
# ABOUTME: Single source of truth for chart keys, river names, colours and fallback lists.

"""
Station Metadata Helper for the Hydrological Monitoring Dashboard

Converts the raw entities returned by the overview endpoints into typed
station records, derives the short chart keys used to label statistics
bars, and loads the static station names from stations_config.json that
keep the report pickers usable when the backend is unavailable.
"""

import json
import re
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional, Dict, Any, List
from functools import lru_cache

from dashboard_components.constants import (
    DISCHARGE_COLORS,
    WEATHER_COLORS,
    RAIN_GAUGE_COLORS,
)

# Project root for config loading
PROJECT_ROOT = Path(__file__).parent.parent


@dataclass(frozen=True)
class DischargeStation:
    id: str
    title: str
    river_name: str
    chart_key: str
    discharge: str
    velocity: str
    water_level: str
    color: str


@dataclass(frozen=True)
class WeatherStation:
    id: str
    title: str
    chart_key: str
    color: str
    wind_speed: str
    wind_direction: str
    temperature: str
    relative_humidity: str
    air_pressure: str
    solar_radiation: str
    rainfall_hr: str
    rainfall_day: str
    rainfall_total: str


@dataclass(frozen=True)
class RainGaugeStation:
    id: str
    title: str
    chart_key: str
    color: str
    rainfall_hr: str
    rainfall_total: str


@dataclass(frozen=True)
class DamStation:
    id: str
    title: str
    head_loss: str
    intech_level: str
    level_pier1: str
    level_pier6: str


@dataclass(frozen=True)
class SummaryMetric:
    id: str
    title: str
    value: str
    clickable: bool


@dataclass(frozen=True)
class StationOption:
    """Entry of a report station picker. The id is sent verbatim to the backend."""
    id: str
    title: str
    chart_key: str


def fmt2(value) -> str:
    """Format a numeric reading to two decimals, treating missing values as zero."""
    if value is None:
        value = 0.0
    return f"{float(value):.2f}"


def pad2(value) -> str:
    return str(int(value)).zfill(2)


def initials_key(name: str) -> str:
    """Upper-cased first letter of every space-separated word."""
    return ''.join(word[0].upper() for word in name.split(' ') if word)


def rain_gauge_key(name: str) -> str:
    """
    Chart key for rain gauges, whose names are often CamelCase.

    'KalsiGate' -> 'KG', 'Dakpathar' -> 'Da'.
    """
    words = re.sub(r'([A-Z])', r' \1', name).strip().split()
    if len(words) > 1:
        return ''.join(word[0].upper() for word in words)
    return name[:2]


def river_name(name: str) -> str:
    """Strip a trailing 'River' from a discharge station name."""
    return re.sub(r'\s+River$', '', name, flags=re.IGNORECASE).strip()


def station_id(prefix: str, index: int) -> str:
    return f"{prefix}-{index + 1:03d}"


def map_discharge_stations(entities: List[Dict[str, Any]]) -> List[DischargeStation]:
    stations = []
    for i, entity in enumerate(entities):
        name = entity['name']
        stations.append(DischargeStation(
            id=station_id('ds', i),
            title=name,
            river_name=river_name(name),
            chart_key=initials_key(name),
            discharge=fmt2(entity.get('discharge')),
            velocity=fmt2(entity.get('velocity')),
            water_level=fmt2(entity.get('water_level')),
            color=DISCHARGE_COLORS[i % len(DISCHARGE_COLORS)],
        ))
    return stations


def map_weather_stations(entities: List[Dict[str, Any]]) -> List[WeatherStation]:
    stations = []
    for i, entity in enumerate(entities):
        name = entity['station_name']
        stations.append(WeatherStation(
            id=station_id('ws', i),
            title=name,
            chart_key=name,
            color=WEATHER_COLORS[i % len(WEATHER_COLORS)],
            wind_speed=fmt2(entity.get('wind_speed')),
            wind_direction=fmt2(entity.get('wind_direction')),
            temperature=fmt2(entity.get('temperature')),
            relative_humidity=fmt2(entity.get('humidity')),
            air_pressure=fmt2(entity.get('pressure')),
            # Not reported by the AWS backend
            solar_radiation=fmt2(0),
            rainfall_hr=fmt2(entity.get('rainfall_hour')),
            rainfall_day=fmt2(entity.get('rainfall_day')),
            rainfall_total=fmt2(entity.get('rainfall_total')),
        ))
    return stations


def map_rain_gauge_stations(entities: List[Dict[str, Any]]) -> List[RainGaugeStation]:
    stations = []
    for i, entity in enumerate(entities):
        name = entity['name']
        stations.append(RainGaugeStation(
            id=station_id('rg', i),
            title=name,
            chart_key=rain_gauge_key(name),
            color=RAIN_GAUGE_COLORS[i % len(RAIN_GAUGE_COLORS)],
            rainfall_hr=fmt2(entity.get('hour')),
            rainfall_total=fmt2(entity.get('total')),
        ))
    return stations


def map_dam_station(entity: Dict[str, Any]) -> DamStation:
    return DamStation(
        id=entity.get('id', 'dam-1'),
        title=entity.get('name', 'Vyasi Dam'),
        head_loss=fmt2(entity.get('head_loss')),
        intech_level=fmt2(entity.get('intech_level')),
        level_pier1=fmt2(entity.get('level_pier1')),
        level_pier6=fmt2(entity.get('level_pier6')),
    )


def map_summary_metrics(entity: Dict[str, Any]) -> List[SummaryMetric]:
    """Map the overview summary counts onto the five metric cards."""
    return [
        SummaryMetric('discharge', 'Discharge Stations', pad2(entity['discharge_stations']), True),
        SummaryMetric('weather', 'Automatic Weather Stations', pad2(entity['aws']), True),
        SummaryMetric('rain-gauge', 'Rain Gauge Stations', pad2(entity['rain_gauge_stations']), True),
        SummaryMetric('dam', 'Dam', pad2(entity['dam']), True),
        SummaryMetric('vyasi-dam-level', 'Vyasi Dam Level', pad2(entity['vyasi_dam_level']), False),
    ]


def station_options(station_class: str, names: List[str]) -> List[StationOption]:
    key_fn = rain_gauge_key if station_class == 'rain_gauge' else initials_key
    return [StationOption(id=name, title=name, chart_key=key_fn(name)) for name in names]


def to_records(stations) -> List[Dict[str, Any]]:
    """Plain dicts for caching and DataFrame construction."""
    return [asdict(s) for s in stations]


STATION_TYPES = {
    'discharge': DischargeStation,
    'aws': WeatherStation,
    'rain_gauge': RainGaugeStation,
}


def from_records(station_class: str, records: List[Dict[str, Any]]):
    cls = STATION_TYPES[station_class]
    return [cls(**record) for record in records]


@lru_cache(maxsize=1)
def _load_stations_config() -> Dict[str, Any]:
    """Load and cache the stations configuration file."""
    config_path = PROJECT_ROOT / "config" / "stations_config.json"
    if config_path.exists():
        with open(config_path, 'r') as f:
            return json.load(f)
    return {}


def get_fallback_station_names(station_class: str) -> List[str]:
    """Static station names for a picker ('discharge', 'aws', 'rain_gauge') when the backend is down."""
    if station_class not in STATION_TYPES:
        raise ValueError(f"Unknown station class: {station_class}")
    return list(_load_stations_config().get(station_class, []))
