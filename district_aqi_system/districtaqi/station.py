"""
Station module for the District AQI System.

This module defines the Station dataclass: a measuring station with a
location, the readings it owns, and the aggregate fields written by the
StationAggregator. The station's category is never stored; it is derived
from the current index value each time it is read, so the two can never
disagree.
"""

from dataclasses import dataclass, field
from typing import Optional

from shapely.geometry import Point

from .category import Category, classify
from .pollutant import PollutantKind, TRACKED_KIND_COUNT
from .pollutant_reading import PollutantReading


@dataclass
class Station:
    """
    A measuring station and its aggregated air quality.

    Attributes:
        station_id: Unique station identifier
        name: Display name of the station
        location: Station position in the shared planar CRS (metres)
        readings: Pollutant readings owned by this station
        index_value: Worst pollutant index, None until aggregated or when
            the station has no readings
        critical_pollutant: Pollutant that produced index_value
        pollutant_count: Number of distinct pollutant kinds observed (0-4)
        pollutant_list: Sorted, comma-joined display names of those kinds
        needs_fallback: True if the station arrived without any readings
        district_name: District the station resolved to, None if unresolved
    """

    station_id: str
    name: str
    location: Point
    readings: list[PollutantReading] = field(default_factory=list)
    index_value: Optional[float] = None
    critical_pollutant: Optional[PollutantKind] = None
    pollutant_count: int = 0
    pollutant_list: str = ""
    needs_fallback: bool = False
    district_name: Optional[str] = None

    @property
    def category(self) -> Optional[Category]:
        """Category of the current index value, or None if there is none."""
        if self.index_value is None:
            return None
        return classify(self.index_value)

    def is_complete(self) -> bool:
        """True if all tracked pollutant kinds are present."""
        return self.pollutant_count == TRACKED_KIND_COUNT

    def is_resolved(self) -> bool:
        return self.district_name is not None

    def to_dict(self) -> dict[str, object]:
        """
        Converts the station to a serializable dictionary.

        Returns:
            A flat dictionary suitable for table renderers
        """
        category = self.category
        return {
            "station_id": self.station_id,
            "name": self.name,
            "x": self.location.x,
            "y": self.location.y,
            "index_value": self.index_value,
            "category": category.label if category is not None else None,
            "critical_pollutant": self.critical_pollutant.display_name if self.critical_pollutant else None,
            "pollutant_count": self.pollutant_count,
            "pollutant_list": self.pollutant_list,
            "complete": self.is_complete(),
            "needs_fallback": self.needs_fallback,
            "district": self.district_name,
        }
