"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Optional, Sequence

from shapely.errors import GEOSException
from shapely.geometry import MultiPoint, Point, Polygon
from shapely.prepared import PreparedGeometry, prep

from ..models.domain import Coordinate

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = math.pi * EARTH_RADIUS_KM / 180.0


def km_to_degrees(distance_km: float) -> float:
    """Approximate a ground distance as degrees of arc along a meridian."""

    return distance_km / KM_PER_DEGREE


def close_ring(ring: Sequence[Coordinate]) -> list[Coordinate]:
    """Return the ring with its first vertex repeated at the end if it was open."""

    closed = [(float(lat), float(lon)) for lat, lon in ring]
    if closed and closed[0] != closed[-1]:
        closed.append(closed[0])
    return closed


def ring_to_polygon(ring: Sequence[Coordinate]) -> Optional[Polygon]:
    """Build a shapely polygon from (lat, lon) pairs, or None for degenerate rings."""

    closed = close_ring(ring)
    if len(set(closed)) < 3:
        return None
    try:
        polygon = Polygon([(lon, lat) for lat, lon in closed])
    except (GEOSException, ValueError):
        return None
    # self-intersecting rings stay usable; only all-collinear vertices are rejected
    if polygon.is_empty or MultiPoint(polygon.exterior.coords).convex_hull.geom_type != "Polygon":
        return None
    return polygon


def prepare_ring(ring: Sequence[Coordinate]) -> Optional[PreparedGeometry]:
    """Prepare a ring for repeated containment tests."""

    polygon = ring_to_polygon(ring)
    if polygon is None:
        return None
    return prep(polygon)


def covers_point(prepared: Optional[PreparedGeometry], lat: float, lon: float) -> bool:
    """Containment test against a prepared ring; boundary points count as inside."""

    if prepared is None:
        return False
    try:
        return prepared.covers(Point(lon, lat))
    except GEOSException:
        return False


def point_in_polygon(point: Coordinate, ring: Sequence[Coordinate]) -> bool:
    """Return True if the (lat, lon) point lies inside or on the given ring."""

    lat, lon = point
    return covers_point(prepare_ring(ring), lat, lon)
