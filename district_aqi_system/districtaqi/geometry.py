"""
Geometry adapter module for the District AQI System.

Thin adapter over shapely providing the three spatial queries the district
resolver needs (containment, buffered intersection, distance) and boundary
validation. All geometries are assumed to share one planar coordinate
reference system measured in metres; no reprojection happens here.
"""

from typing import Any, Mapping, Union

from shapely.geometry import MultiPolygon, Point, Polygon, shape
from shapely.geometry.base import BaseGeometry
from shapely.validation import explain_validity

from .errors import MalformedGeometryError

Boundary = Union[Polygon, MultiPolygon]


class GeometryAdapter:
    """
    Spatial queries between station points and district boundaries.
    """

    def contains(self, boundary: Boundary, point: Point) -> bool:
        """
        True if the point lies inside the boundary or on its edge.

        Uses covers rather than contains so that points exactly on a
        boundary line count as inside.
        """
        return boundary.covers(point)

    def intersects_buffer(self, boundary: Boundary, point: Point, radius: float) -> bool:
        """True if a disc of the given radius around the point touches the boundary."""
        return point.buffer(radius).intersects(boundary)

    def distance(self, boundary: Boundary, point: Point) -> float:
        """Planar distance from the point to the boundary (0 when inside)."""
        return boundary.distance(point)

    def validate_boundary(self, district_name: str, boundary: Any) -> Boundary:
        """
        Checks that a district boundary can be used for resolution.

        Args:
            district_name: Name used in the error message
            boundary: Candidate geometry

        Returns:
            The boundary, unchanged

        Raises:
            MalformedGeometryError: If the boundary is missing, not a
                (multi)polygon, empty, or topologically invalid
        """
        if boundary is None:
            raise MalformedGeometryError(district_name, "boundary is missing")
        if not isinstance(boundary, (Polygon, MultiPolygon)):
            kind = boundary.geom_type if isinstance(boundary, BaseGeometry) else type(boundary).__name__
            raise MalformedGeometryError(district_name, f"expected a polygon, got {kind}")
        if boundary.is_empty:
            raise MalformedGeometryError(district_name, "boundary is empty")
        if not boundary.is_valid:
            raise MalformedGeometryError(district_name, explain_validity(boundary))
        return boundary


def boundary_from_mapping(geometry: Mapping[str, Any]) -> BaseGeometry:
    """Builds a shapely geometry from a GeoJSON-like geometry mapping."""
    return shape(geometry)
