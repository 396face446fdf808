"""
Cycle report module for the District AQI System.

This module defines the CycleReport dataclass which records everything that
did not flow cleanly through an aggregation cycle: dropped records, stations
waiting for a fallback reading, unresolved stations, synthetic districts and
districts whose boundary could not be used. None of these abort the cycle;
they are reported to the caller instead.
"""

from dataclasses import asdict, dataclass, field
from typing import Optional


# Reasons a record can be dropped before aggregation
MISSING_IDENTITY = "missing_identity"
INVALID_VALUE = "invalid_value"
UNKNOWN_STATION = "unknown_station"
UNKNOWN_POLLUTANT = "unknown_pollutant"
INVALID_LOCATION = "invalid_location"
DUPLICATE_STATION = "duplicate_station"


@dataclass(frozen=True)
class DroppedRecord:
    """
    A reading or station that was excluded from the cycle.

    Attributes:
        kind: One of the module-level reason constants
        station_id: Station the record referred to, if it had one
        detail: Human-readable description of the problem
    """

    kind: str
    station_id: Optional[str]
    detail: str


@dataclass
class CycleReport:
    """
    Summary of the expected-but-irregular states of one cycle.

    Attributes:
        dropped_records: Readings and stations excluded from the cycle
        needs_fallback: Ids of stations that arrived without readings
        unresolved_stations: Ids of stations matched to no district
        synthetic_districts: Names of districts with a synthetic index
        failed_districts: District name -> reason its boundary was rejected
        complete_stations: Stations with all tracked pollutants present
        incomplete_stations: Aggregated stations missing some pollutant
    """

    dropped_records: list[DroppedRecord] = field(default_factory=list)
    needs_fallback: list[str] = field(default_factory=list)
    unresolved_stations: list[str] = field(default_factory=list)
    synthetic_districts: list[str] = field(default_factory=list)
    failed_districts: dict[str, str] = field(default_factory=dict)
    complete_stations: int = 0
    incomplete_stations: int = 0

    def dropped(self, kind: str) -> list[DroppedRecord]:
        """Returns the dropped records of one kind."""
        return [record for record in self.dropped_records if record.kind == kind]

    def to_dict(self) -> dict[str, object]:
        return asdict(self)
