"""
Frame conversion module for the District AQI System.

The data feed and the table renderers exchange tabular data with the core as
pandas DataFrames. This module converts incoming frames into readings,
stations and districts, and converts a finished AggregationResult back into
frames. Rows that cannot be converted are returned as DroppedRecord entries
rather than raised, so one bad row never costs the whole feed.

Expected input columns:
- readings: station_id, pollutant, index_value (other columns, such as a
  category label supplied by the feed, are ignored)
- stations: station_id, name, x, y
- districts: GeoJSON-like features with a "name" property and a geometry
"""

import logging
from typing import Any, Iterable, Mapping, Optional

import pandas as pd
from shapely.errors import ShapelyError
from shapely.geometry import Point

from .aggregation_result import AggregationResult
from .cycle_report import (
    INVALID_LOCATION,
    MISSING_IDENTITY,
    UNKNOWN_POLLUTANT,
    DroppedRecord,
)
from .district import District
from .geometry import boundary_from_mapping
from .pollutant import PollutantKind
from .pollutant_reading import PollutantReading
from .station import Station

logger = logging.getLogger(__name__)

READING_COLUMNS = ['station_id', 'pollutant', 'index_value']
STATION_COLUMNS = ['station_id', 'name', 'x', 'y']


def _require_columns(df: pd.DataFrame, columns: list[str], what: str) -> None:
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise ValueError(f"{what} frame is missing columns: {missing}")


def _station_id(raw: Any) -> Optional[str]:
    """Normalizes a station id cell; NaN, None and blanks become None."""
    if raw is None or (not isinstance(raw, str) and pd.isna(raw)):
        return None
    # Integer ids read into a float column (because of NaN) lose their ".0"
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    text = str(raw).strip()
    return text or None


def readings_from_frame(df: pd.DataFrame) -> tuple[list[PollutantReading], list[DroppedRecord]]:
    """
    Converts a readings frame into PollutantReading records.

    Index values are coerced to numbers; unparseable values become NaN and
    are rejected later by PollutantReading.validate. Rows with an unknown
    pollutant kind are dropped here.

    Args:
        df: Frame with station_id, pollutant and index_value columns

    Returns:
        A tuple of (readings, dropped records)

    Raises:
        ValueError: If a required column is missing
    """
    _require_columns(df, READING_COLUMNS, "readings")

    values = pd.to_numeric(df['index_value'], errors='coerce')
    readings: list[PollutantReading] = []
    dropped: list[DroppedRecord] = []

    for station_raw, pollutant_raw, value in zip(df['station_id'], df['pollutant'], values):
        station_id = _station_id(station_raw)
        try:
            pollutant = PollutantKind.parse(pollutant_raw)
        except ValueError as e:
            dropped.append(DroppedRecord(UNKNOWN_POLLUTANT, station_id, str(e)))
            continue
        readings.append(PollutantReading(station_id, pollutant, float(value)))

    return readings, dropped


def stations_from_frame(df: pd.DataFrame) -> tuple[list[Station], list[DroppedRecord]]:
    """
    Converts a station metadata frame into Station records without readings.

    Args:
        df: Frame with station_id, name, x and y columns

    Returns:
        A tuple of (stations, dropped records)

    Raises:
        ValueError: If a required column is missing
    """
    _require_columns(df, STATION_COLUMNS, "stations")

    xs = pd.to_numeric(df['x'], errors='coerce')
    ys = pd.to_numeric(df['y'], errors='coerce')
    stations: list[Station] = []
    dropped: list[DroppedRecord] = []

    for station_raw, name, x, y in zip(df['station_id'], df['name'], xs, ys):
        station_id = _station_id(station_raw)
        if station_id is None:
            dropped.append(DroppedRecord(MISSING_IDENTITY, None, f"station {name!r} has no station_id"))
            continue
        if pd.isna(x) or pd.isna(y):
            dropped.append(DroppedRecord(INVALID_LOCATION, station_id, "station coordinates are missing"))
            continue
        display_name = station_id if pd.isna(name) else str(name)
        stations.append(Station(station_id, display_name, Point(float(x), float(y))))

    return stations, dropped


def districts_from_features(
    features: Iterable[Mapping[str, Any]],
    name_field: str = "name",
) -> list[District]:
    """
    Converts GeoJSON-like features into District records.

    Features whose geometry cannot be built keep a None boundary; the
    aggregation cycle then reports them as failed districts instead of this
    function raising.

    Args:
        features: Features with "properties" and "geometry" keys (a
            FeatureCollection's "features" list)
        name_field: Property holding the district name

    Returns:
        List of District records in feature order
    """
    districts = []
    for position, feature in enumerate(features):
        properties = feature.get("properties") or {}
        name = properties.get(name_field)
        if name is None:
            name = f"district-{position}"
            logger.warning("Feature %d has no %r property, naming it %s", position, name_field, name)

        boundary = None
        geometry = feature.get("geometry")
        if geometry is not None:
            try:
                boundary = boundary_from_mapping(geometry)
            except (ShapelyError, ValueError, KeyError, TypeError, AttributeError) as e:
                logger.warning("Could not build geometry of district %s: %s", name, e)

        districts.append(District(name=str(name), boundary=boundary))
    return districts


def stations_to_frame(stations: Iterable[Station]) -> pd.DataFrame:
    return pd.DataFrame([station.to_dict() for station in stations])


def districts_to_frame(districts: Iterable[District]) -> pd.DataFrame:
    return pd.DataFrame([district.to_dict() for district in districts])


def result_to_frames(result: AggregationResult) -> dict[str, pd.DataFrame]:
    """
    Converts a cycle result into frames for table renderers.

    Returns:
        Dictionary with "stations", "districts" and "mappings" frames
    """
    return {
        "stations": stations_to_frame(result.stations),
        "districts": districts_to_frame(result.districts),
        "mappings": pd.DataFrame(
            [mapping.to_dict() for mapping in result.mappings],
            columns=['station_id', 'district', 'tier'],
        ),
    }
