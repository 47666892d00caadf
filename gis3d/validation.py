"""
Polygon Validation - Is This Footprint Usable?

Checks a vertex list before it is triangulated or extruded:

1. VERTEX COUNT
   Fewer than 3 vertices is not a polygon.

2. SELF-INTERSECTION
   Every pair of non-adjacent edges is tested for a proper crossing.
   Two segments properly cross when each one's endpoints lie strictly
   on opposite sides of the other (2D cross-product sign test).
   Touching or collinear overlaps do not count.

3. WINDING ORDER
   Sign of the shoelace area: positive = counter-clockwise,
   negative = clockwise, |area| < 1e-10 = degenerate.

4. CONVEXITY
   The turn direction (cross product of consecutive edges) must have
   the same sign everywhere. Near-zero turns (collinear points) are
   ignored.

Polygon2D uses the same helpers, so the validator and the polygon can
never disagree about self-intersection or winding.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence
import logging

from .vector import Vec3, EPSILON

logger = logging.getLogger(__name__)

# Polygons smaller than this are valid but flagged
SMALL_AREA_WARNING = 1e-6


class WindingOrder(str, Enum):
    COUNTER_CLOCKWISE = "counter_clockwise"
    CLOCKWISE = "clockwise"
    DEGENERATE = "degenerate"


def cross_2d(a: Vec3, b: Vec3) -> float:
    """Z component of a x b, treating both as XY vectors."""
    return a.x * b.y - a.y * b.x


def signed_area(vertices: Sequence[Vec3]) -> float:
    """Shoelace formula. Positive for counter-clockwise rings."""
    n = len(vertices)
    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += vertices[i].x * vertices[j].y
        area -= vertices[j].x * vertices[i].y
    return area / 2.0


def winding_from_area(area: float) -> WindingOrder:
    if abs(area) < EPSILON:
        return WindingOrder.DEGENERATE
    return WindingOrder.COUNTER_CLOCKWISE if area > 0 else WindingOrder.CLOCKWISE


def segments_intersect(a1: Vec3, a2: Vec3, b1: Vec3, b2: Vec3) -> bool:
    """True when segment a1-a2 properly crosses segment b1-b2 in the XY plane."""
    d1 = cross_2d(b2 - b1, a1 - b1)
    d2 = cross_2d(b2 - b1, a2 - b1)
    d3 = cross_2d(a2 - a1, b1 - a1)
    d4 = cross_2d(a2 - a1, b2 - a1)

    return (
        ((d1 > 0 and d2 < 0) or (d1 < 0 and d2 > 0))
        and ((d3 > 0 and d4 < 0) or (d3 < 0 and d4 > 0))
    )


def has_self_intersection(vertices: Sequence[Vec3]) -> bool:
    """Test every pair of non-adjacent edges of the closed ring."""
    n = len(vertices)
    for i in range(n):
        a1, a2 = vertices[i], vertices[(i + 1) % n]
        for j in range(i + 2, n):
            if i == 0 and j == n - 1:
                continue  # first and last edge share vertex 0
            b1, b2 = vertices[j], vertices[(j + 1) % n]
            if segments_intersect(a1, a2, b1, b2):
                return True
    return False


def point_in_ring(point: Vec3, vertices: Sequence[Vec3]) -> bool:
    """Ray casting (even-odd rule) with a ray toward +X. Rings under 3 vertices contain nothing."""
    n = len(vertices)
    if n < 3:
        return False

    inside = False
    for i in range(n):
        vi = vertices[i]
        vj = vertices[(i + 1) % n]
        if (vi.y <= point.y < vj.y) or (vj.y <= point.y < vi.y):
            t = (point.y - vi.y) / (vj.y - vi.y)
            if point.x < vi.x + t * (vj.x - vi.x):
                inside = not inside
    return inside


def is_convex_ring(vertices: Sequence[Vec3]) -> bool:
    n = len(vertices)
    if n < 3:
        return False

    sign = None
    for i in range(n):
        v0 = vertices[i]
        v1 = vertices[(i + 1) % n]
        v2 = vertices[(i + 2) % n]

        cross = (v1.x - v0.x) * (v2.y - v1.y) - (v1.y - v0.y) * (v2.x - v1.x)
        if abs(cross) < EPSILON:
            continue

        current = cross > 0
        if sign is None:
            sign = current
        elif sign != current:
            return False

    return True


@dataclass
class ValidationResult:
    """Outcome of PolygonValidator.validate()."""
    is_valid: bool
    is_convex: bool = False
    has_self_intersection: bool = False
    winding_order: WindingOrder = WindingOrder.DEGENERATE
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def valid(cls, is_convex: bool, winding_order: WindingOrder) -> "ValidationResult":
        return cls(is_valid=True, is_convex=is_convex, winding_order=winding_order)

    @classmethod
    def invalid(cls, error: str) -> "ValidationResult":
        return cls(is_valid=False, errors=[error])

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "is_convex": self.is_convex,
            "has_self_intersection": self.has_self_intersection,
            "winding_order": self.winding_order.value,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


class PolygonValidator:
    """
    Stateless polygon checks.

    Usage:
        result = PolygonValidator().validate(vertices)
        if not result.is_valid:
            print(result.errors)
    """

    def validate(self, vertices: Sequence[Vec3]) -> ValidationResult:
        if len(vertices) < 3:
            return ValidationResult.invalid("Polygon must have at least 3 vertices")

        errors: List[str] = []
        warnings: List[str] = []

        self_intersecting = self.is_self_intersecting(vertices)
        if self_intersecting:
            errors.append("Polygon has self-intersecting edges")

        winding = self.get_winding_order(vertices)
        if winding == WindingOrder.DEGENERATE:
            errors.append("Polygon has zero or near-zero area (degenerate)")

        convex = self.is_convex(vertices)

        area = abs(signed_area(vertices))
        if 0 < area < SMALL_AREA_WARNING:
            warnings.append("Polygon has very small area")

        result = ValidationResult(
            is_valid=not errors,
            is_convex=convex,
            has_self_intersection=self_intersecting,
            winding_order=winding,
            errors=errors,
            warnings=warnings,
        )
        logger.debug(
            f"Validated {len(vertices)}-vertex polygon: valid={result.is_valid} "
            f"winding={winding.value} convex={convex}"
        )
        return result

    def is_convex(self, vertices: Sequence[Vec3]) -> bool:
        return is_convex_ring(vertices)

    def is_self_intersecting(self, vertices: Sequence[Vec3]) -> bool:
        return has_self_intersection(vertices)

    def get_winding_order(self, vertices: Sequence[Vec3]) -> WindingOrder:
        return winding_from_area(signed_area(vertices))
