"""
2D Polygons - Footprints That Become Solids

A Polygon2D is the footprint of a building, a no-fly zone, a survey area.
It lives in the XY plane (z is carried along but ignored by the 2D math).

KEY ALGORITHM: Ear Clipping Triangulation

An "ear" is a vertex whose triangle (prev, curr, next):
- turns left (convex corner for a counter-clockwise ring), and
- contains no other remaining vertex.

Every simple polygon with more than 3 vertices has at least two ears
(Meisters' two-ears theorem), so we can keep cutting ears off until a
single triangle remains: n vertices -> n - 2 triangles.

Each scan is O(n) and each ear test is O(n), so the whole thing is
O(n^2) per clipped ear, O(n^3) worst case. Fine for footprints with a
few hundred vertices.

Degenerate or self-intersecting rings can run out of ears. The loop is
bounded (n^2 iterations) and returns whatever triangles it produced so
far. Validate first if you need a guarantee.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple
import logging
import math
import numpy as np

from .vector import Vec3, EPSILON
from .primitives import BoundingBox, GeoCoordinate, Plane, Triangle
from .validation import (
    PolygonValidator,
    ValidationResult,
    WindingOrder,
    has_self_intersection,
    is_convex_ring,
    point_in_ring,
    signed_area,
    winding_from_area,
)

if TYPE_CHECKING:
    from .extrusion import Polygon3D

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtrusionOptions:
    """
    How to turn a footprint into a solid.

    - height: distance from bottom ring to top ring (meters)
    - top_scale: top ring size relative to the bottom (1 = prism, <1 = taper)
    - rotation: Euler angles in radians, applied X then Y then Z
      about the footprint centroid
    - position: translation applied after rotation
    - cap_top / cap_bottom: close the solid with triangulated caps
    """
    height: float = 1.0
    top_scale: float = 1.0
    rotation: Vec3 = field(default_factory=Vec3.zero)
    position: Vec3 = field(default_factory=Vec3.zero)
    cap_top: bool = True
    cap_bottom: bool = True

    def with_changes(self, **changes) -> "ExtrusionOptions":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "height": self.height,
            "top_scale": self.top_scale,
            "rotation": self.rotation.to_dict(),
            "position": self.position.to_dict(),
            "cap_top": self.cap_top,
            "cap_bottom": self.cap_bottom,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExtrusionOptions":
        rotation = data.get("rotation")
        position = data.get("position")
        return cls(
            height=data.get("height", 1.0),
            top_scale=data.get("top_scale", 1.0),
            rotation=Vec3.from_dict(rotation) if rotation else Vec3.zero(),
            position=Vec3.from_dict(position) if position else Vec3.zero(),
            cap_top=data.get("cap_top", True),
            cap_bottom=data.get("cap_bottom", True),
        )


def _remove_duplicates(vertices: List[Vec3]) -> List[Vec3]:
    """Drop consecutive near-equal vertices and the closing duplicate."""
    result: List[Vec3] = []
    for v in vertices:
        if not result or result[-1].distance_to(v) > EPSILON:
            result.append(v)
    if len(result) > 1 and result[0].distance_to(result[-1]) < EPSILON:
        result.pop()
    return result


class Polygon2D:
    """
    Immutable polygon in the XY plane.

    Derived values (area, centroid, winding, convexity, bounds,
    triangulation) are computed on first access and cached. They are
    pure functions of the vertices, so concurrent first access just
    computes the same value twice.

    Usage:
        square = Polygon2D.from_vertices([
            Vec3(0, 0, 0), Vec3(10, 0, 0), Vec3(10, 10, 0), Vec3(0, 10, 0)
        ])
        square.area            # 100.0
        square.triangulate()   # 2 triangles
        solid = square.extrude(ExtrusionOptions(height=30))
    """

    def __init__(self, vertices: Iterable[Vec3]):
        cleaned = _remove_duplicates(list(vertices))
        if len(cleaned) < 3:
            raise ValueError(
                f"Polygon must have at least 3 vertices, got {len(cleaned)} after removing duplicates"
            )
        self._vertices: Tuple[Vec3, ...] = tuple(cleaned)

    # ------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------

    @classmethod
    def from_vertices(cls, vertices: Iterable[Vec3]) -> Polygon2D:
        return cls(vertices)

    @classmethod
    def from_geo_coordinates(cls, coordinates: Iterable[GeoCoordinate]) -> Polygon2D:
        """Plate carree mapping: x = longitude, y = latitude, z = altitude."""
        return cls(Vec3(c.longitude, c.latitude, c.altitude) for c in coordinates)

    @classmethod
    def create_regular(cls, sides: int, radius: float, center: Optional[Vec3] = None) -> Polygon2D:
        """Regular n-gon, counter-clockwise, first vertex at the bottom (-90°)."""
        if sides < 3:
            raise ValueError(f"Regular polygon must have at least 3 sides, got {sides}")

        center = center or Vec3.zero()
        step = 2 * math.pi / sides
        return cls(
            Vec3(
                center.x + radius * math.cos(i * step - math.pi / 2),
                center.y + radius * math.sin(i * step - math.pi / 2),
                center.z,
            )
            for i in range(sides)
        )

    # ------------------------------------------------------------
    # Derived properties
    # ------------------------------------------------------------

    @property
    def vertices(self) -> Tuple[Vec3, ...]:
        return self._vertices

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @cached_property
    def signed_area(self) -> float:
        """Positive for counter-clockwise, negative for clockwise."""
        return signed_area(self._vertices)

    @cached_property
    def area(self) -> float:
        return abs(self.signed_area)

    @cached_property
    def centroid(self) -> Vec3:
        """
        Arithmetic mean of the vertices.

        This is NOT the area centroid. For irregular vertex spacing
        (e.g. many points along one edge) it drifts toward the dense side.
        """
        coords = np.array([v.to_list() for v in self._vertices])
        return Vec3.from_array(coords.mean(axis=0))

    @cached_property
    def winding_order(self) -> WindingOrder:
        return winding_from_area(self.signed_area)

    @cached_property
    def is_convex(self) -> bool:
        return is_convex_ring(self._vertices)

    @cached_property
    def bounds(self) -> BoundingBox:
        return BoundingBox.from_points(self._vertices)

    @property
    def base_plane(self) -> Plane:
        return Plane.from_points(self._vertices[0], self._vertices[1], self._vertices[2])

    def get_edges(self) -> List[Vec3]:
        """Edge vectors, edge i running from vertex i to vertex i+1."""
        n = len(self._vertices)
        return [self._vertices[(i + 1) % n] - self._vertices[i] for i in range(n)]

    def get_edge(self, index: int) -> Tuple[Vec3, Vec3]:
        n = len(self._vertices)
        return self._vertices[index], self._vertices[(index + 1) % n]

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    def contains_point(self, point: Vec3) -> bool:
        """Ray casting (even-odd rule) against a ray toward +X."""
        return point_in_ring(point, self._vertices)

    def is_self_intersecting(self) -> bool:
        return has_self_intersection(self._vertices)

    def validate(self) -> ValidationResult:
        return PolygonValidator().validate(self._vertices)

    # ------------------------------------------------------------
    # Triangulation
    # ------------------------------------------------------------

    def triangulate(self) -> List[Triangle]:
        """Ear-clipping triangulation, counter-clockwise triangles."""
        return [
            Triangle(self._vertices[i], self._vertices[j], self._vertices[k])
            for i, j, k in self._triangle_indices
        ]

    def triangulate_indices(self) -> List[Tuple[int, int, int]]:
        """Same triangulation as index triples into `vertices`."""
        return list(self._triangle_indices)

    @cached_property
    def _triangle_indices(self) -> Tuple[Tuple[int, int, int], ...]:
        vertices = self._vertices
        remaining = list(range(len(vertices)))

        # Ear test below assumes counter-clockwise traversal
        if self.winding_order == WindingOrder.CLOCKWISE:
            remaining.reverse()

        triangles: List[Tuple[int, int, int]] = []
        max_iterations = len(remaining) * len(remaining)
        iterations = 0

        while len(remaining) > 3 and iterations < max_iterations:
            iterations += 1
            ear_found = False

            count = len(remaining)
            for i in range(count):
                prev = remaining[(i - 1) % count]
                curr = remaining[i]
                nxt = remaining[(i + 1) % count]

                if self._is_ear(remaining, prev, curr, nxt):
                    triangles.append((prev, curr, nxt))
                    remaining.pop(i)
                    ear_found = True
                    break

            if not ear_found:
                break

        if len(remaining) == 3:
            triangles.append((remaining[0], remaining[1], remaining[2]))
        else:
            logger.warning(
                f"Ear clipping stopped with {len(remaining)} vertices left "
                f"({len(triangles)} triangles); polygon may be degenerate or self-intersecting"
            )

        return tuple(triangles)

    def _is_ear(self, remaining: Sequence[int], prev: int, curr: int, nxt: int) -> bool:
        a, b, c = self._vertices[prev], self._vertices[curr], self._vertices[nxt]

        # Must be a left turn for a counter-clockwise ring
        cross = (b.x - a.x) * (c.y - b.y) - (b.y - a.y) * (c.x - b.x)
        if cross <= 0:
            return False

        triangle = Triangle(a, b, c)
        for idx in remaining:
            if idx in (prev, curr, nxt):
                continue
            if triangle.contains(self._vertices[idx]):
                return False
        return True

    # ------------------------------------------------------------
    # Transforms (all return new polygons)
    # ------------------------------------------------------------

    def reverse_winding(self) -> Polygon2D:
        return Polygon2D(reversed(self._vertices))

    def ensure_counter_clockwise(self) -> Polygon2D:
        if self.winding_order == WindingOrder.CLOCKWISE:
            return self.reverse_winding()
        return self

    def translate(self, offset: Vec3) -> Polygon2D:
        return Polygon2D(v + offset for v in self._vertices)

    def scale(self, factor: float) -> Polygon2D:
        """Scale about the vertex centroid."""
        center = self.centroid
        return Polygon2D(center + (v - center) * factor for v in self._vertices)

    def extrude(self, options: Optional[ExtrusionOptions] = None) -> "Polygon3D":
        from .extrusion import Polygon3D

        return Polygon3D.extrude(self, options or ExtrusionOptions())

    def __len__(self) -> int:
        return len(self._vertices)

    def __iter__(self):
        return iter(self._vertices)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Polygon2D):
            return NotImplemented
        return self._vertices == other._vertices

    __hash__ = None

    def __repr__(self) -> str:
        return f"Polygon2D({self.vertex_count} vertices, area={self.area:.3f})"
