"""
Station-to-district mapping module for the District AQI System.

This module defines the StationDistrictMapping dataclass, one row of the
association table produced by the DistrictResolver. The table is rebuilt
from scratch on every aggregation cycle.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class StationDistrictMapping:
    """
    Associates a station with the district it resolved to.

    Attributes:
        station_id: The resolved station
        district_name: The district it belongs to
        tier: Name of the resolution tier that matched:
            - "contains": station lies inside or on the district boundary
            - "buffer": station's tolerance buffer intersects the district
            - "nearest": nearest district within the distance ceiling
    """

    station_id: str
    district_name: str
    tier: str

    def to_dict(self) -> dict[str, str]:
        return {
            "station_id": self.station_id,
            "district": self.district_name,
            "tier": self.tier,
        }
