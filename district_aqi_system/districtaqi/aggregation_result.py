"""
Aggregation result module for the District AQI System.

This module defines the AggregationResult dataclass which holds the complete
output of one aggregation cycle. A result is only handed out once its cycle
has finished, and it is never modified afterwards; the next cycle builds a
new one.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .cycle_report import CycleReport
from .district import District
from .station import Station
from .station_district_mapping import StationDistrictMapping


@dataclass
class AggregationResult:
    """
    Output of one complete aggregation cycle.

    Attributes:
        timestamp: When the cycle completed
        stations: Every aggregated station, resolved or not
        districts: Every district aggregate, in input order
        mappings: Station-to-district table of the cycle
        report: Dropped records and other irregular states
    """

    timestamp: datetime
    stations: list[Station]
    districts: list[District]
    mappings: list[StationDistrictMapping]
    report: CycleReport

    def station(self, station_id: str) -> Optional[Station]:
        for station in self.stations:
            if station.station_id == station_id:
                return station
        return None

    def district(self, name: str) -> Optional[District]:
        for district in self.districts:
            if district.name == name:
                return district
        return None

    def worst_district(self) -> Optional[District]:
        """District with the highest index, first in order on ties."""
        worst = None
        for district in self.districts:
            if district.index_value is None:
                continue
            if worst is None or district.index_value > worst.index_value:
                worst = district
        return worst

    def to_dict(self) -> dict[str, object]:
        """
        Converts the result to a serializable dictionary.

        Returns:
            A dictionary with the timestamp, station and district records,
            mapping rows and the cycle report
        """
        return {
            "timestamp": self.timestamp.isoformat(),
            "stations": [station.to_dict() for station in self.stations],
            "districts": [district.to_dict() for district in self.districts],
            "mappings": [mapping.to_dict() for mapping in self.mappings],
            "report": self.report.to_dict(),
        }
