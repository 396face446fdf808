"""
District aggregator module for the District AQI System.

This module contains the DistrictAggregator class which rolls the aggregated
stations of each district up into one district index. It runs once per
cycle, after every station has been resolved.

Aggregation rules:
- index_value: arithmetic mean of the stations' indices (undefined ignored)
- critical_pollutant: taken from the single worst station
- station_count: number of stations contributing to the mean
- Districts without any contributing station get a synthetic index drawn
  uniformly from [1.5, 4.5] and are flagged synthetic
"""

import logging
import math
from typing import Optional, Sequence

import numpy as np

from ..district import District
from ..station import Station
from ..station_district_mapping import StationDistrictMapping
from .selection import worst_of

logger = logging.getLogger(__name__)


def _is_defined(index_value: Optional[float]) -> bool:
    return index_value is not None and not math.isnan(index_value)


class DistrictAggregator:
    """
    Reduces the stations mapped to each district to a district index.

    Synthetic values come from a numpy generator created fresh for every
    aggregate() call from the configured seed, so seeded runs are exactly
    reproducible and unseeded runs draw new values each cycle.
    """

    # Range of synthetic index values for districts without stations
    SYNTHETIC_LOW = 1.5
    SYNTHETIC_HIGH = 4.5

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed

    def aggregate(
        self,
        districts: Sequence[District],
        stations: Sequence[Station],
        mappings: Sequence[StationDistrictMapping],
    ) -> list[District]:
        """
        Aggregates every district of the snapshot.

        Args:
            districts: District snapshot, in input order (not modified)
            stations: Aggregated stations, resolved or not
            mappings: Station-to-district table of this cycle

        Returns:
            New District records in the same order as districts
        """
        rng = np.random.default_rng(self.seed)
        stations_by_id = {station.station_id: station for station in stations}

        members: dict[str, list[Station]] = {district.name: [] for district in districts}
        for mapping in mappings:
            station = stations_by_id.get(mapping.station_id)
            if station is not None and mapping.district_name in members:
                members[mapping.district_name].append(station)

        return [
            self._aggregate_district(district, members[district.name], rng)
            for district in districts
        ]

    def _aggregate_district(
        self,
        district: District,
        stations: list[Station],
        rng: np.random.Generator,
    ) -> District:
        measured = [station for station in stations if _is_defined(station.index_value)]

        if not measured:
            synthetic_value = float(rng.uniform(self.SYNTHETIC_LOW, self.SYNTHETIC_HIGH))
            logger.info(
                "District %s has no measured stations, using synthetic index %.2f",
                district.name, synthetic_value,
            )
            return District(
                name=district.name,
                boundary=district.boundary,
                index_value=synthetic_value,
                station_count=0,
                synthetic=True,
            )

        values = np.array([station.index_value for station in measured], dtype=float)
        worst = worst_of(
            measured,
            value=lambda station: station.index_value,
            rank=lambda station: station.station_id,
        )

        return District(
            name=district.name,
            boundary=district.boundary,
            index_value=float(values.mean()),
            critical_pollutant=worst.critical_pollutant,
            station_count=len(measured),
            min_index=float(values.min()),
            max_index=float(values.max()),
        )
