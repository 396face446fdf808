"""
District module for the District AQI System.

This module defines the District dataclass: a named administrative boundary
together with the aggregate written by the DistrictAggregator. Like Station,
a district derives its category from its index value on every read.
"""

from dataclasses import dataclass
from typing import Optional, Union

from shapely.geometry import MultiPolygon, Polygon

from .category import Category, classify
from .pollutant import PollutantKind


@dataclass
class District:
    """
    An administrative district and its aggregated air quality.

    Attributes:
        name: Unique district name
        boundary: District polygon in the shared planar CRS (metres)
        index_value: Mean index of the mapped stations, or a synthetic value
            when no station contributes (see synthetic)
        critical_pollutant: Critical pollutant of the single worst station
        station_count: Number of stations contributing to index_value
        min_index: Lowest contributing station index
        max_index: Highest contributing station index
        synthetic: True if index_value was generated rather than measured
    """

    name: str
    boundary: Union[Polygon, MultiPolygon]
    index_value: Optional[float] = None
    critical_pollutant: Optional[PollutantKind] = None
    station_count: int = 0
    min_index: Optional[float] = None
    max_index: Optional[float] = None
    synthetic: bool = False

    @property
    def category(self) -> Optional[Category]:
        if self.index_value is None:
            return None
        return classify(self.index_value)

    def to_dict(self) -> dict[str, object]:
        category = self.category
        return {
            "name": self.name,
            "index_value": self.index_value,
            "category": category.label if category is not None else None,
            "critical_pollutant": self.critical_pollutant.display_name if self.critical_pollutant else None,
            "station_count": self.station_count,
            "min_index": self.min_index,
            "max_index": self.max_index,
            "synthetic": self.synthetic,
        }
