"""
Exceptions raised by the District AQI System.

Expected states (stations without readings, unresolved stations, districts
without stations) are reported in the cycle result and never raised. These
exceptions are reserved for inputs the pipeline cannot work with.
"""


class MalformedGeometryError(ValueError):
    """A district boundary is missing, empty, not polygonal, or invalid."""

    def __init__(self, district_name: str, reason: str):
        super().__init__(f"district {district_name!r} has a malformed boundary: {reason}")
        self.district_name = district_name
        self.reason = reason


class MalformedInputError(ValueError):
    """The input set as a whole is unusable; the aggregation cycle is aborted."""
