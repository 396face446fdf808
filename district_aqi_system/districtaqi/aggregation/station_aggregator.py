"""
Station aggregator module for the District AQI System.

This module contains the StationAggregator class which reduces the pollutant
readings of one station to a single worst-case index. The aggregation of a
station only looks at that station's own readings, so stations can be
aggregated in any order or in parallel.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional, Sequence

from ..pollutant import PollutantKind
from ..pollutant_reading import PollutantReading
from ..station import Station
from .selection import worst_of

logger = logging.getLogger(__name__)

# Supplies a synthetic reading for a station that arrived without readings
FallbackReading = Callable[[Station], Optional[PollutantReading]]


@dataclass(frozen=True)
class StationAggregate:
    """
    Aggregated values of one station.

    Attributes:
        index_value: Maximum index over the readings, None without readings
        critical_pollutant: Pollutant of the maximal reading
        pollutant_count: Number of distinct pollutant kinds (0-4)
        pollutant_list: Sorted, comma-joined distinct display names
        needs_fallback: True if the station had no readings of its own
    """

    index_value: Optional[float]
    critical_pollutant: Optional[PollutantKind]
    pollutant_count: int
    pollutant_list: str
    needs_fallback: bool = False


EMPTY_AGGREGATE = StationAggregate(
    index_value=None,
    critical_pollutant=None,
    pollutant_count=0,
    pollutant_list="",
    needs_fallback=True,
)


class StationAggregator:
    """
    Reduces a station's readings to its worst pollutant.

    The worst pollutant dominates: the station index is the maximum reading.
    Ties between pollutants go to the earlier kind in PollutantKind order,
    never to whichever reading came first in the input.
    """

    def aggregate(self, readings: Sequence[PollutantReading]) -> StationAggregate:
        """
        Aggregates a set of readings belonging to one station.

        Args:
            readings: The station's validated readings

        Returns:
            The StationAggregate; EMPTY_AGGREGATE (flagged needs_fallback)
            if there are no readings
        """
        if not readings:
            return EMPTY_AGGREGATE

        worst = worst_of(
            readings,
            value=lambda reading: reading.index_value,
            rank=lambda reading: reading.pollutant.rank,
        )
        kinds = {reading.pollutant for reading in readings}

        return StationAggregate(
            index_value=float(worst.index_value),
            critical_pollutant=worst.pollutant,
            pollutant_count=len(kinds),
            pollutant_list=", ".join(sorted(kind.display_name for kind in kinds)),
        )

    def aggregate_station(
        self,
        station: Station,
        fallback: Optional[FallbackReading] = None,
    ) -> StationAggregate:
        """
        Aggregates a station, consulting the fallback if it has no readings.

        A station without readings stays flagged needs_fallback even when the
        fallback supplies a synthetic reading, so completeness reporting can
        still tell it apart from a station that measured something.

        Args:
            station: Station to aggregate (not modified)
            fallback: Optional callable returning a synthetic reading

        Returns:
            The StationAggregate for the station
        """
        if station.readings or fallback is None:
            return self.aggregate(station.readings)

        synthetic = fallback(station)
        if synthetic is None:
            return EMPTY_AGGREGATE

        valid, reason = synthetic.validate()
        if not valid:
            logger.warning("Ignoring fallback reading for station %s: %s", station.station_id, reason)
            return EMPTY_AGGREGATE

        return replace(self.aggregate([synthetic]), needs_fallback=True)

    @staticmethod
    def apply(station: Station, aggregate: StationAggregate) -> Station:
        """Writes the aggregate onto the station and returns it."""
        station.index_value = aggregate.index_value
        station.critical_pollutant = aggregate.critical_pollutant
        station.pollutant_count = aggregate.pollutant_count
        station.pollutant_list = aggregate.pollutant_list
        station.needs_fallback = aggregate.needs_fallback
        return station
