# ABOUTME: Derived statistics bundles for the overview statistics panels.
# ABOUTME: Reduces station lists into per-station bar series with a shared axis rule.

"""
Statistics builders for the overview dashboard.

Each station list is reduced into bar-chart series keyed by a short
per-station label. Every series gets its axis maximum from the single
``axis_max`` rule so the discharge, weather, rain gauge and dam panels
round identically.
"""

import math
from dataclasses import dataclass, field, fields
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from dashboard_components.constants import AXIS_HEADROOM, AXIS_FLOOR
from dashboard_components.station_metadata import (
    DamStation,
    DischargeStation,
    RainGaugeStation,
    WeatherStation,
    river_name,
    to_records,
)


@dataclass(frozen=True)
class BarSeries:
    title: str
    data: List[Dict[str, object]]
    max_value: int


@dataclass(frozen=True)
class StatisticsBundle:
    section_title: str
    charts: Dict[str, BarSeries] = field(default_factory=dict)


DISCHARGE_CHARTS: Tuple[Tuple[str, str, str], ...] = (
    ('discharge', 'Discharge', 'discharge'),
    ('velocity', 'Velocity', 'velocity'),
    ('water_level', 'Water Level', 'water_level'),
)

WEATHER_CHARTS: Tuple[Tuple[str, str, str], ...] = (
    ('wind_speed', 'Wind Speed', 'wind_speed'),
    ('wind_direction', 'Wind Direction', 'wind_direction'),
    ('temperature', 'Temperature', 'temperature'),
    ('relative_humidity', 'Humidity', 'relative_humidity'),
    ('air_pressure', 'Air Pressure', 'air_pressure'),
    ('solar_radiation', 'Solar Radiation', 'solar_radiation'),
    ('rainfall_hr', 'Rainfall HR', 'rainfall_hr'),
    ('rainfall_day', 'Rainfall Day', 'rainfall_day'),
    ('rainfall_total', 'Rainfall Total', 'rainfall_total'),
)

RAIN_GAUGE_CHARTS: Tuple[Tuple[str, str, str], ...] = (
    ('rainfall_hr', 'Rainfall - HR (mm)', 'rainfall_hr'),
    ('rainfall_total', 'Rainfall - Total (mm)', 'rainfall_total'),
)


def axis_max(values: Iterable[float], headroom: float = AXIS_HEADROOM, floor: int = AXIS_FLOOR) -> int:
    """
    Axis maximum with 20% headroom: ``max(floor, ceil(max(values) * headroom))``.

    Missing values are ignored; an empty or all-missing input yields the
    floor, as does an all-zero input, so no chart ever gets a zero-height axis.

    >>> axis_max([10, 20, 5])
    24
    >>> axis_max([0, 0])
    1
    """
    arr = np.asarray(list(values), dtype=float)
    arr = arr[~np.isnan(arr)]
    if arr.size == 0:
        return floor
    peak = float(arr.max())
    # Drop binary float noise (0.1 * 3 * 1.2) before taking the ceiling
    return max(floor, math.ceil(round(peak * headroom, 9)))


def bar_label(station) -> str:
    """Label of a station's bars: the river name for discharge stations, else the chart key."""
    if isinstance(station, DischargeStation):
        return station.river_name or river_name(station.title)
    return station.chart_key


def _frame(stations: Sequence, station_type) -> pd.DataFrame:
    columns = [f.name for f in fields(station_type)]
    return pd.DataFrame(to_records(stations), columns=columns)


def build_series(frame: pd.DataFrame, title: str, label_column: str, value_column: str) -> BarSeries:
    values = pd.to_numeric(frame[value_column], errors='coerce').fillna(0.0)
    data = [
        {'name': label, 'value': float(value)}
        for label, value in zip(frame[label_column], values)
    ]
    return BarSeries(title=title, data=data, max_value=axis_max(values))


def _build_bundle(frame: pd.DataFrame, label_column: str, charts) -> StatisticsBundle:
    return StatisticsBundle(
        section_title='Statistics',
        charts={
            key: build_series(frame, title, label_column, column)
            for key, title, column in charts
        },
    )


def build_discharge_statistics(stations: Sequence[DischargeStation]) -> StatisticsBundle:
    """Discharge, velocity and water level bars, labelled by river name."""
    frame = _frame(stations, DischargeStation)
    frame['label'] = [bar_label(s) for s in stations]
    return _build_bundle(frame, 'label', DISCHARGE_CHARTS)


def build_weather_statistics(stations: Sequence[WeatherStation]) -> StatisticsBundle:
    """The nine AWS parameters, labelled by chart key."""
    return _build_bundle(_frame(stations, WeatherStation), 'chart_key', WEATHER_CHARTS)


def build_rain_gauge_statistics(stations: Sequence[RainGaugeStation]) -> StatisticsBundle:
    """Hourly and cumulative rainfall, labelled by chart key."""
    return _build_bundle(_frame(stations, RainGaugeStation), 'chart_key', RAIN_GAUGE_CHARTS)


def build_dam_statistics(dam: Optional[DamStation]) -> StatisticsBundle:
    """Current dam readings side by side in one comparison chart."""
    if dam is None:
        return StatisticsBundle(section_title='Dam Statistics')
    frame = pd.DataFrame({
        'name': ['Head Loss', 'Intech Level', 'Level Pier 1', 'Level Pier 6'],
        'value': [dam.head_loss, dam.intech_level, dam.level_pier1, dam.level_pier6],
    })
    return StatisticsBundle(
        section_title='Dam Statistics',
        charts={'combined': build_series(frame, 'Dam Levels Comparison', 'name', 'value')},
    )
