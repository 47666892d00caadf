"""
Spatial Queries - Points, Polygons and Distances

Stateless helpers that answer "where is this relative to that":

- Is the aircraft inside the no-fly zone?          point_in_polygon
- How close is it to the zone boundary?             distance_to_polygon_edge
- Do two footprints overlap?                        polygons_intersect
- How high is it above the (possibly tilted) roof?  height_above_polygon

Polygons may be passed as a Polygon2D or as a plain vertex sequence.
"""

from __future__ import annotations
from typing import Sequence, Union

from .vector import Vec3
from .primitives import GeoCoordinate, Plane
from .polygon import Polygon2D
from .validation import point_in_ring, segments_intersect
from .geodesy import DistanceCalculator

PolygonLike = Union[Polygon2D, Sequence[Vec3]]


def _ring(polygon: PolygonLike) -> Sequence[Vec3]:
    if isinstance(polygon, Polygon2D):
        return polygon.vertices
    return polygon


class SpatialQuery:
    """Point/polygon/geo queries. All methods are static."""

    @staticmethod
    def point_in_polygon(point: Vec3, polygon: PolygonLike) -> bool:
        return point_in_ring(point, _ring(polygon))

    @staticmethod
    def geo_point_in_polygon(point: GeoCoordinate, polygon: Sequence[GeoCoordinate]) -> bool:
        """Containment in lon/lat space (x = longitude, y = latitude)."""
        ring = [Vec3(c.longitude, c.latitude, 0.0) for c in polygon]
        return point_in_ring(Vec3(point.longitude, point.latitude, 0.0), ring)

    @staticmethod
    def closest_point_on_polygon_edge(point: Vec3, polygon: PolygonLike) -> Vec3:
        """Nearest point on the polygon boundary (3D projection onto each edge)."""
        ring = _ring(polygon)
        n = len(ring)
        if n == 0:
            return point

        best = ring[0]
        best_dist = point.distance_squared_to(best)
        for i in range(n):
            start, end = ring[i], ring[(i + 1) % n]
            edge = end - start
            length_sq = edge.magnitude_squared()
            if length_sq == 0:
                candidate = start
            else:
                t = max(0.0, min(1.0, (point - start).dot(edge) / length_sq))
                candidate = start + edge * t

            dist = point.distance_squared_to(candidate)
            if dist < best_dist:
                best, best_dist = candidate, dist
        return best

    @staticmethod
    def distance_to_polygon_edge(point: Vec3, polygon: PolygonLike) -> float:
        closest = SpatialQuery.closest_point_on_polygon_edge(point, polygon)
        return point.distance_to(closest)

    @staticmethod
    def polygons_intersect(a: PolygonLike, b: PolygonLike) -> bool:
        """
        True when either polygon has a vertex inside the other, or any two
        edges properly cross. Edges that only touch do not count.
        """
        ring_a, ring_b = _ring(a), _ring(b)

        if any(point_in_ring(v, ring_b) for v in ring_a):
            return True
        if any(point_in_ring(v, ring_a) for v in ring_b):
            return True

        na, nb = len(ring_a), len(ring_b)
        for i in range(na):
            a1, a2 = ring_a[i], ring_a[(i + 1) % na]
            for j in range(nb):
                if segments_intersect(a1, a2, ring_b[j], ring_b[(j + 1) % nb]):
                    return True
        return False

    @staticmethod
    def distance_between(a: GeoCoordinate, b: GeoCoordinate) -> float:
        """Ellipsoidal (Vincenty) distance in meters."""
        return DistanceCalculator.vincenty_distance(a, b)

    @staticmethod
    def bearing_between(a: GeoCoordinate, b: GeoCoordinate) -> float:
        return DistanceCalculator.initial_bearing(a, b)

    @staticmethod
    def height_above_polygon(point: Vec3, polygon: PolygonLike) -> float:
        """Signed distance to the plane through the first three vertices."""
        ring = _ring(polygon)
        if len(ring) < 3:
            raise ValueError("Polygon must have at least 3 vertices")
        return Plane.from_points(ring[0], ring[1], ring[2]).signed_distance(point)
