"""
Delivery zone geometry.

Zones are GeoJSON Polygon or MultiPolygon geometries with [lng, lat]
coordinates. Containment uses ray casting; a point inside a polygon hole is
outside the polygon.
"""

from typing import Iterable, List, Optional, Sequence, Tuple, TypeVar

import structlog

logger = structlog.get_logger()

Point = Tuple[float, float]  # (lng, lat)
T = TypeVar("T")


def point_in_ring(point: Point, ring: Sequence[Sequence[float]]) -> bool:
    if not ring or len(ring) < 3:
        return False

    x, y = point
    inside = False
    j = len(ring) - 1

    for i in range(len(ring)):
        xi, yi = ring[i][0], ring[i][1]
        xj, yj = ring[j][0], ring[j][1]

        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i

    return inside


def point_in_polygon(point: Point, coordinates: Sequence) -> bool:
    """First ring is the outer boundary, the rest are holes"""
    if not coordinates:
        return False

    if not point_in_ring(point, coordinates[0]):
        return False

    return not any(point_in_ring(point, hole) for hole in coordinates[1:])


def point_in_multipolygon(point: Point, coordinates: Sequence) -> bool:
    if not coordinates:
        return False
    return any(point_in_polygon(point, polygon) for polygon in coordinates)


def point_in_geometry(point: Point, geometry: Optional[dict]) -> bool:
    if not geometry or not geometry.get("coordinates"):
        return False

    geometry_type = geometry.get("type")
    if geometry_type == "Polygon":
        return point_in_polygon(point, geometry["coordinates"])
    if geometry_type == "MultiPolygon":
        return point_in_multipolygon(point, geometry["coordinates"])

    logger.warning("Unsupported geometry type", geometry_type=geometry_type)
    return False


def find_matching_zone(point: Point, zones: Iterable[T], geometry_attr: str = "geometry") -> Optional[T]:
    """First zone whose geometry contains the point"""
    for zone in zones:
        geometry = getattr(zone, geometry_attr, None)
        if geometry and point_in_geometry(point, geometry):
            return zone
    return None


def first_active(zones: Iterable[T]) -> Optional[T]:
    """First active zone, used when no address point is known"""
    active: List[T] = [z for z in zones if getattr(z, "is_active", True)]
    return active[0] if active else None
