"""
Pollutant module for the District AQI System.

Defines the four tracked pollutant kinds. The declaration order of
PollutantKind is the stable ordering used to break ties when two readings of
a station share the maximum index.
"""

from enum import Enum


class PollutantKind(Enum):
    """Tracked pollutant kinds, declared in tie-break order."""

    OZONE = "O3"
    NITROGEN_DIOXIDE = "NO2"
    PM10 = "PM10"
    PM2_5 = "PM2.5"

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        """Position in the stable tie-break order (0 = first)."""
        return _RANKS[self]

    @classmethod
    def parse(cls, raw: "str | PollutantKind") -> "PollutantKind":
        """
        Parses a pollutant kind from a display name, enum name or alias.

        Matching is case-insensitive and ignores spaces, dots, commas,
        dashes and underscores, so "PM2.5", "pm25", "PM2,5" and "pm2_5" all
        map to PM2_5. German feed names ("Ozon", "Stickstoffdioxid",
        "Feinstaub PM10") are accepted as well.

        Args:
            raw: Name to parse, or an existing PollutantKind

        Returns:
            The matching PollutantKind

        Raises:
            ValueError: If the name does not match any tracked pollutant
        """
        if isinstance(raw, PollutantKind):
            return raw
        key = _normalize(str(raw))
        if key not in _ALIASES:
            raise ValueError(f"unknown pollutant kind: {raw!r}")
        return _ALIASES[key]


# Number of tracked kinds; a station with this many distinct kinds is complete
TRACKED_KIND_COUNT = len(PollutantKind)

_RANKS = {kind: position for position, kind in enumerate(PollutantKind)}


def _normalize(name: str) -> str:
    for char in " .,-_":
        name = name.replace(char, "")
    return name.lower()


_ALIASES = {
    "o3": PollutantKind.OZONE,
    "ozone": PollutantKind.OZONE,
    "ozon": PollutantKind.OZONE,
    "no2": PollutantKind.NITROGEN_DIOXIDE,
    "nitrogendioxide": PollutantKind.NITROGEN_DIOXIDE,
    "stickstoffdioxid": PollutantKind.NITROGEN_DIOXIDE,
    "pm10": PollutantKind.PM10,
    "feinstaubpm10": PollutantKind.PM10,
    "pm25": PollutantKind.PM2_5,
    "feinstaubpm25": PollutantKind.PM2_5,
}
