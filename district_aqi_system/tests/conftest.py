"""
Pytest configuration for District AQI System tests.

Registers custom markers and provides shared fixtures. All geometries use a
planar coordinate system in metres.
"""

import pytest
from shapely.geometry import Point, box

from districtaqi.district import District
from districtaqi.pollutant import PollutantKind
from districtaqi.pollutant_reading import PollutantReading
from districtaqi.station import Station


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def district_a():
    """10 km x 10 km square with its lower-left corner at the origin."""
    return District(name="A", boundary=box(0, 0, 10000, 10000))


@pytest.fixture
def district_b():
    """Square sharing district A's eastern edge (x = 10000)."""
    return District(name="B", boundary=box(10000, 0, 20000, 10000))


@pytest.fixture
def district_c():
    """Square north of A, separated from it by a 10 km gap."""
    return District(name="C", boundary=box(0, 20000, 10000, 30000))


@pytest.fixture
def districts(district_a, district_b, district_c):
    return [district_a, district_b, district_c]


@pytest.fixture
def stations():
    """
    Station metadata for a full cycle:
    - S1, S2 inside A
    - S3 inside B, S5 inside B without readings
    - S4 far outside every district
    """
    return [
        Station("S1", "Mitte", Point(5000, 5000)),
        Station("S2", "Nord", Point(2000, 2000)),
        Station("S3", "Ost", Point(15000, 5000)),
        Station("S4", "Fern", Point(100000, 100000)),
        Station("S5", "Leer", Point(16000, 6000)),
    ]


@pytest.fixture
def readings():
    return [
        PollutantReading("S1", PollutantKind.OZONE, 2.0),
        PollutantReading("S1", PollutantKind.PM10, 4.6),
        PollutantReading("S2", PollutantKind.NITROGEN_DIOXIDE, 1.0),
        PollutantReading("S3", PollutantKind.OZONE, 1.2),
        PollutantReading("S3", PollutantKind.NITROGEN_DIOXIDE, 2.2),
        PollutantReading("S3", PollutantKind.PM10, 1.8),
        PollutantReading("S3", PollutantKind.PM2_5, 2.4),
        PollutantReading("S4", PollutantKind.PM10, 3.0),
    ]
