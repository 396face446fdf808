"""
Tests for the frame conversion helpers.

Tests cover:
- Readings frames: pollutant aliases, ignored feed columns, bad rows
- Station frames: missing ids and coordinates
- District features: valid, missing and broken geometries
- Result frames and the frame-based refresh
"""

import math

import numpy as np
import pandas as pd
import pytest
from shapely.geometry import box, mapping
from districtaqi.air_quality_system import AirQualitySystem
from districtaqi.config import Settings
from districtaqi.cycle_report import INVALID_LOCATION, INVALID_VALUE, MISSING_IDENTITY, UNKNOWN_POLLUTANT
from districtaqi.frames import (
    districts_from_features,
    readings_from_frame,
    result_to_frames,
    stations_from_frame,
)
from districtaqi.pollutant import PollutantKind


def feature(name, geometry):
    return {"type": "Feature", "properties": {"name": name}, "geometry": geometry}


@pytest.fixture
def features():
    return [
        feature("A", mapping(box(0, 0, 10000, 10000))),
        feature("B", mapping(box(10000, 0, 20000, 10000))),
    ]


@pytest.fixture
def stations_df():
    return pd.DataFrame({
        'station_id': ['S1', 'S2', 'S3'],
        'name': ['Mitte', 'Nord', 'Ost'],
        'x': [5000.0, 2000.0, 15000.0],
        'y': [5000.0, 2000.0, 5000.0],
    })


@pytest.fixture
def readings_df():
    return pd.DataFrame({
        'station_id': ['S1', 'S1', 'S2', 'S3'],
        'pollutant': ['Ozon', 'PM10', 'NO2', 'PM2.5'],
        'index_value': [2.0, 4.6, 1.0, 2.4],
        'category': ['sehr gut', 'gut', 'gut', 'gut'],
    })


class TestReadingsFromFrame:
    """Test suite for readings_from_frame."""

    def test_rows_converted(self, readings_df):
        readings, dropped = readings_from_frame(readings_df)

        assert dropped == []
        assert len(readings) == 4
        assert readings[0].pollutant == PollutantKind.OZONE
        assert readings[1].index_value == 4.6

    def test_feed_category_column_ignored(self, readings_df):
        readings, _ = readings_from_frame(readings_df)
        assert all(not hasattr(reading, 'category') for reading in readings)

    def test_unknown_pollutant_dropped(self):
        df = pd.DataFrame({'station_id': ['S1'], 'pollutant': ['SO2'], 'index_value': [1.0]})

        readings, dropped = readings_from_frame(df)

        assert readings == []
        assert dropped[0].kind == UNKNOWN_POLLUTANT
        assert dropped[0].station_id == 'S1'

    def test_unparseable_value_becomes_nan(self):
        df = pd.DataFrame({'station_id': ['S1'], 'pollutant': ['O3'], 'index_value': ['n/a']})

        [reading], dropped = readings_from_frame(df)

        assert dropped == []
        assert math.isnan(reading.index_value)
        assert reading.validate() == (False, "index_value must be finite")

    def test_missing_station_id(self):
        df = pd.DataFrame({'station_id': [np.nan, '  '], 'pollutant': ['O3', 'O3'], 'index_value': [1.0, 1.0]})

        readings, _ = readings_from_frame(df)

        assert [reading.station_id for reading in readings] == [None, None]

    def test_float_ids_lose_trailing_zero(self):
        df = pd.DataFrame({'station_id': [101.0, np.nan], 'pollutant': ['O3', 'O3'], 'index_value': [1.0, 1.0]})

        readings, _ = readings_from_frame(df)

        assert readings[0].station_id == '101'

    def test_missing_column(self):
        with pytest.raises(ValueError, match="index_value"):
            readings_from_frame(pd.DataFrame({'station_id': ['S1'], 'pollutant': ['O3']}))


class TestStationsFromFrame:
    """Test suite for stations_from_frame."""

    def test_rows_converted(self, stations_df):
        stations, dropped = stations_from_frame(stations_df)

        assert dropped == []
        assert [s.station_id for s in stations] == ['S1', 'S2', 'S3']
        assert (stations[0].location.x, stations[0].location.y) == (5000.0, 5000.0)
        assert all(s.readings == [] for s in stations)

    def test_bad_rows_dropped(self):
        df = pd.DataFrame({
            'station_id': [None, 'S2', 'S3'],
            'name': ['Ohne', 'Nord', np.nan],
            'x': [1.0, np.nan, 3.0],
            'y': [1.0, 2.0, 3.0],
        })

        stations, dropped = stations_from_frame(df)

        assert [record.kind for record in dropped] == [MISSING_IDENTITY, INVALID_LOCATION]
        assert len(stations) == 1
        assert stations[0].name == 'S3'

    def test_missing_column(self):
        with pytest.raises(ValueError, match="x"):
            stations_from_frame(pd.DataFrame({'station_id': ['S1'], 'name': ['A'], 'y': [1.0]}))


class TestDistrictsFromFeatures:
    """Test suite for districts_from_features."""

    def test_features_converted(self, features):
        districts = districts_from_features(features)

        assert [d.name for d in districts] == ['A', 'B']
        assert districts[0].boundary.equals(box(0, 0, 10000, 10000))

    def test_broken_geometry_kept_without_boundary(self):
        [district] = districts_from_features([feature("X", {"type": "Blob", "coordinates": []})])

        assert district.name == "X"
        assert district.boundary is None

    def test_missing_geometry(self):
        [district] = districts_from_features([feature("X", None)])
        assert district.boundary is None

    def test_missing_name(self):
        districts = districts_from_features([{"properties": {}, "geometry": mapping(box(0, 0, 1, 1))}])
        assert districts[0].name == "district-0"

    def test_custom_name_field(self):
        features = [{"properties": {"Gemeinde": "Bonn"}, "geometry": mapping(box(0, 0, 1, 1))}]
        assert districts_from_features(features, name_field="Gemeinde")[0].name == "Bonn"


class TestFrameRefresh:
    """Test suite for the frame-based pipeline entry point."""

    @pytest.fixture
    def system(self, tmp_path):
        return AirQualitySystem(settings=Settings(synthetic_seed=1, log_dir=tmp_path))

    def test_refresh_from_frames(self, system, readings_df, stations_df, features):
        result = system.refresh_from_frames(readings_df, stations_df, features)

        assert result.district("A").index_value == pytest.approx(2.8)
        assert result.district("B").index_value == pytest.approx(2.4)
        assert system.current is result

    def test_conversion_drops_reported(self, system, stations_df, features):
        readings_df = pd.DataFrame({
            'station_id': ['S1', 'S1', 'S2'],
            'pollutant': ['O3', 'CO', 'NO2'],
            'index_value': [2.0, 1.0, 'kaputt'],
        })

        result = system.refresh_from_frames(readings_df, stations_df, features)

        assert len(result.report.dropped(UNKNOWN_POLLUTANT)) == 1
        assert len(result.report.dropped(INVALID_VALUE)) == 1
        assert result.station("S2").needs_fallback is True

    def test_broken_feature_reported_as_failed(self, system, readings_df, stations_df, features):
        features.append(feature("C", {"type": "Blob", "coordinates": []}))

        result = system.refresh_from_frames(readings_df, stations_df, features)

        assert result.report.failed_districts == {"C": "boundary is missing"}

    def test_result_to_frames(self, system, readings_df, stations_df, features):
        frames = result_to_frames(system.refresh_from_frames(readings_df, stations_df, features))

        assert list(frames) == ['stations', 'districts', 'mappings']
        assert len(frames['stations']) == 3
        assert list(frames['mappings'].columns) == ['station_id', 'district', 'tier']
        assert frames['districts'].set_index('name').loc['A', 'category'] == 'moderate'
        assert frames['stations'].set_index('station_id').loc['S1', 'critical_pollutant'] == 'PM10'

    def test_empty_mappings_frame_keeps_columns(self, system, features):
        empty = pd.DataFrame({'station_id': [], 'name': [], 'x': [], 'y': []})
        readings = pd.DataFrame({'station_id': [], 'pollutant': [], 'index_value': []})

        frames = result_to_frames(system.refresh_from_frames(readings, empty, features))

        assert frames['mappings'].empty
        assert list(frames['mappings'].columns) == ['station_id', 'district', 'tier']
