"""
Pollutant reading module for the District AQI System.

This module defines the PollutantReading dataclass which represents a single
index value reported by a measuring station for one pollutant kind. It
provides validation so that records without a station identity or without a
usable index are dropped before aggregation.
"""

import math
import numbers
from dataclasses import dataclass
from typing import Optional

from .pollutant import PollutantKind


@dataclass(frozen=True)
class PollutantReading:
    """
    Represents one pollutant index reported by a station.

    Several readings share a station_id; a station needs at least one of
    them to be aggregable. Readings carry no category: any label supplied by
    the data feed is discarded when the reading is built.

    Attributes:
        station_id: Identifier of the reporting station (must be non-blank)
        pollutant: Which pollutant the index refers to
        index_value: Air quality index for that pollutant (finite, >= 0)
    """

    station_id: Optional[str]
    pollutant: PollutantKind
    index_value: float

    def has_identity(self) -> bool:
        return self.station_id is not None and bool(str(self.station_id).strip())

    def validate(self) -> tuple[bool, Optional[str]]:
        """
        Validates the reading before it is used for aggregation.

        Checks:
        - station_id must be present and not blank (missing identity)
        - index_value must be a finite number
        - index_value must be non-negative

        Returns:
            A tuple containing:
            - bool: True if all validations pass, False otherwise
            - Optional[str]: None if valid, or a descriptive error message if invalid
        """
        if not self.has_identity():
            return (False, "station_id is missing")

        if not isinstance(self.index_value, numbers.Real) or isinstance(self.index_value, bool):
            return (False, "index_value must be numeric")

        if not math.isfinite(self.index_value):
            return (False, "index_value must be finite")

        if self.index_value < 0:
            return (False, "index_value must be >= 0")

        return (True, None)
