"""
District resolver module for the District AQI System.

This module contains the DistrictResolver class which assigns a station
location to exactly one district, or to none. Station coordinates sometimes
fall just outside a district polygon because of digitization error or
rounding, so the resolver works through an ordered list of tiers and stops
at the first tier that yields a candidate:

1. contains: the point lies inside or on the boundary of a district
2. buffer: a small disc around the point (50 m) intersects a district
3. nearest: the nearest district, if it is closer than 5 km

A point matching no tier is unresolved. Within a tier, the first district in
input order wins. Points on a shared edge of two districts therefore go to
whichever district was supplied first; no area or distance rule is applied.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from shapely.geometry import Point

from .district import District
from .geometry import GeometryAdapter

logger = logging.getLogger(__name__)

# A tier maps a point and the district snapshot to (district, distance) candidates
CandidateFinder = Callable[[Point, Sequence[District]], list[tuple[District, float]]]


@dataclass(frozen=True)
class ResolutionTier:
    """
    One matching strategy of the resolver.

    Attributes:
        name: Tier name recorded in the mapping table
        find_candidates: Returns matching districts in input order, each
            paired with its distance to the point
    """

    name: str
    find_candidates: CandidateFinder


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of resolving one location.

    Attributes:
        district_name: Matched district, or None if unresolved
        tier: Name of the tier that matched, or None if unresolved
        distance: Distance from the point to the matched district
        candidate_count: How many districts the matching tier offered
    """

    district_name: Optional[str]
    tier: Optional[str] = None
    distance: Optional[float] = None
    candidate_count: int = 0

    def is_resolved(self) -> bool:
        return self.district_name is not None


UNRESOLVED = Resolution(district_name=None)


def contains_tier(geometry: GeometryAdapter) -> ResolutionTier:
    """Tier 1: exact containment, boundary inclusive."""

    def find_candidates(point: Point, districts: Sequence[District]) -> list[tuple[District, float]]:
        return [(district, 0.0) for district in districts if geometry.contains(district.boundary, point)]

    return ResolutionTier("contains", find_candidates)


def buffer_tier(geometry: GeometryAdapter, radius: float) -> ResolutionTier:
    """Tier 2: the point inflated by radius intersects the district."""

    def find_candidates(point: Point, districts: Sequence[District]) -> list[tuple[District, float]]:
        return [
            (district, geometry.distance(district.boundary, point))
            for district in districts
            if geometry.intersects_buffer(district.boundary, point, radius)
        ]

    return ResolutionTier("buffer", find_candidates)


def nearest_tier(geometry: GeometryAdapter, max_distance: float) -> ResolutionTier:
    """Tier 3: nearest district, only if strictly closer than max_distance."""

    def find_candidates(point: Point, districts: Sequence[District]) -> list[tuple[District, float]]:
        nearest: Optional[tuple[District, float]] = None
        for district in districts:
            distance = geometry.distance(district.boundary, point)
            # Strict comparison keeps the first district on equal distance
            if nearest is None or distance < nearest[1]:
                nearest = (district, distance)
        if nearest is None or nearest[1] >= max_distance:
            return []
        return [nearest]

    return ResolutionTier("nearest", find_candidates)


class DistrictResolver:
    """
    Resolves station locations to districts with a three-tier fallback.

    The tiers are kept as an ordered list so each one (and its threshold) can
    be tested on its own; a custom list may be passed in to replace them.
    """

    # Tolerance radius for tier 2, in metres
    BUFFER_RADIUS = 50.0

    # Distance ceiling for tier 3, in metres
    MAX_DISTANCE = 5000.0

    def __init__(
        self,
        buffer_radius: float = BUFFER_RADIUS,
        max_distance: float = MAX_DISTANCE,
        geometry: Optional[GeometryAdapter] = None,
        tiers: Optional[Sequence[ResolutionTier]] = None,
    ) -> None:
        if buffer_radius < 0:
            raise ValueError("buffer_radius must be >= 0")
        if max_distance < 0:
            raise ValueError("max_distance must be >= 0")

        self.buffer_radius = buffer_radius
        self.max_distance = max_distance
        self.geometry = geometry or GeometryAdapter()
        if tiers is None:
            tiers = (
                contains_tier(self.geometry),
                buffer_tier(self.geometry, buffer_radius),
                nearest_tier(self.geometry, max_distance),
            )
        self.tiers: tuple[ResolutionTier, ...] = tuple(tiers)

    def resolve(self, location: Point, districts: Sequence[District]) -> Resolution:
        """
        Resolves a location to a single district.

        Evaluates the tiers in order and returns the first candidate of the
        first tier that yields any. When a tier offers several districts
        (e.g. a point on a shared edge), the first one in input order wins.

        Args:
            location: Point in the shared planar CRS
            districts: Read-only snapshot of the districts, in input order

        Returns:
            The Resolution; UNRESOLVED if no tier matched
        """
        for tier in self.tiers:
            candidates = tier.find_candidates(location, districts)
            if not candidates:
                continue

            district, distance = candidates[0]
            if len(candidates) > 1:
                logger.debug(
                    "Point (%.1f, %.1f) matched %d districts in tier %s, using first: %s",
                    location.x, location.y, len(candidates), tier.name, district.name,
                )
            return Resolution(
                district_name=district.name,
                tier=tier.name,
                distance=distance,
                candidate_count=len(candidates),
            )

        return UNRESOLVED
