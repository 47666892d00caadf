"""
Spatial Primitives - Small Immutable Value Types

Everything the polygon, solid and flight-path modules pass around:

- GeoCoordinate: WGS84 latitude/longitude/altitude, range-checked
- BoundingBox: axis-aligned box, min/max corrected on construction
- Plane: point + unit normal
- Triangle: three vertices with normal, area, centroid, containment
- Matrix3x3: rotation matrix (numpy-backed) built from axis angles

Plus the capability protocols that solids implement structurally
(Geometry3D, Triangulatable, HasNormals). There is no shared base
class; a shape is "triangulatable" because it has faces, not because
it inherits from something.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Protocol, Sequence, Tuple, runtime_checkable
import math
import numpy as np

from .vector import Vec3, EPSILON


@dataclass(frozen=True, eq=False)
class GeoCoordinate:
    """
    WGS84 geographic coordinate.

    latitude in [-90, 90] degrees, longitude in [-180, 180] degrees,
    altitude in meters above the ellipsoid. Out-of-range values raise
    ValueError; they are never clamped.
    """
    latitude: float
    longitude: float
    altitude: float = 0.0

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(
                f"Latitude must be between -90 and 90 degrees, got {self.latitude}"
            )
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(
                f"Longitude must be between -180 and 180 degrees, got {self.longitude}"
            )

    @property
    def latitude_radians(self) -> float:
        return math.radians(self.latitude)

    @property
    def longitude_radians(self) -> float:
        return math.radians(self.longitude)

    def with_altitude(self, altitude: float) -> GeoCoordinate:
        return GeoCoordinate(self.latitude, self.longitude, altitude)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GeoCoordinate):
            return NotImplemented
        return (
            abs(self.latitude - other.latitude) < EPSILON
            and abs(self.longitude - other.longitude) < EPSILON
            and abs(self.altitude - other.altitude) < 1e-6
        )

    __hash__ = None

    def to_dict(self) -> dict:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitude": self.altitude,
        }

    def __repr__(self) -> str:
        return f"GeoCoordinate({self.latitude:.6f}°, {self.longitude:.6f}°, {self.altitude:.2f}m)"


class BoundingBox:
    """Axis-aligned bounding box. Corners are sorted per axis on construction."""

    __slots__ = ("min", "max")

    def __init__(self, min_corner: Vec3, max_corner: Vec3):
        self.min = Vec3(
            min(min_corner.x, max_corner.x),
            min(min_corner.y, max_corner.y),
            min(min_corner.z, max_corner.z),
        )
        self.max = Vec3(
            max(min_corner.x, max_corner.x),
            max(min_corner.y, max_corner.y),
            max(min_corner.z, max_corner.z),
        )

    @classmethod
    def from_points(cls, points: Iterable[Vec3]) -> BoundingBox:
        """Smallest box containing every point (zero box for no points)."""
        coords = np.array([p.to_list() for p in points], dtype=float)
        if coords.size == 0:
            return cls(Vec3.zero(), Vec3.zero())
        return cls(Vec3.from_array(coords.min(axis=0)), Vec3.from_array(coords.max(axis=0)))

    @property
    def size(self) -> Vec3:
        return self.max - self.min

    @property
    def center(self) -> Vec3:
        return (self.min + self.max) * 0.5

    @property
    def volume(self) -> float:
        size = self.size
        return size.x * size.y * size.z

    def contains(self, point: Vec3) -> bool:
        return (
            self.min.x <= point.x <= self.max.x
            and self.min.y <= point.y <= self.max.y
            and self.min.z <= point.z <= self.max.z
        )

    def intersects(self, other: BoundingBox) -> bool:
        return (
            self.min.x <= other.max.x and self.max.x >= other.min.x
            and self.min.y <= other.max.y and self.max.y >= other.min.y
            and self.min.z <= other.max.z and self.max.z >= other.min.z
        )

    def expand(self, amount: float) -> BoundingBox:
        pad = Vec3(amount, amount, amount)
        return BoundingBox(self.min - pad, self.max + pad)

    def union(self, other: BoundingBox) -> BoundingBox:
        return BoundingBox.from_points([self.min, self.max, other.min, other.max])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundingBox):
            return NotImplemented
        return self.min == other.min and self.max == other.max

    __hash__ = None

    def to_dict(self) -> dict:
        return {"min": self.min.to_dict(), "max": self.max.to_dict()}

    def __repr__(self) -> str:
        return f"BoundingBox({self.min} -> {self.max})"


@dataclass(frozen=True, eq=False)
class Plane:
    """Infinite plane through `point`. The normal is stored normalized."""
    point: Vec3
    normal: Vec3

    def __post_init__(self):
        object.__setattr__(self, "normal", self.normal.normalized())

    @classmethod
    def from_points(cls, a: Vec3, b: Vec3, c: Vec3) -> Plane:
        """Plane through three points, normal by the right-hand rule (a, b, c)."""
        return cls(a, (b - a).cross(c - a))

    def signed_distance(self, point: Vec3) -> float:
        return (point - self.point).dot(self.normal)

    def project(self, point: Vec3) -> Vec3:
        return point - self.normal * self.signed_distance(point)

    def is_above(self, point: Vec3) -> bool:
        return self.signed_distance(point) > 0

    def is_below(self, point: Vec3) -> bool:
        return self.signed_distance(point) < 0

    def is_on(self, point: Vec3, tolerance: float = EPSILON) -> bool:
        return abs(self.signed_distance(point)) < tolerance

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Plane):
            return NotImplemented
        return self.point == other.point and self.normal == other.normal

    __hash__ = None


@dataclass(frozen=True, eq=False)
class Triangle:
    """
    Triangle in 3D space.

    The normal follows the right-hand rule over (v0, v1, v2), so a
    counter-clockwise triangle seen from above points up (+Z).
    """
    v0: Vec3
    v1: Vec3
    v2: Vec3

    @property
    def normal(self) -> Vec3:
        return (self.v1 - self.v0).cross(self.v2 - self.v0).normalized()

    @property
    def area(self) -> float:
        return (self.v1 - self.v0).cross(self.v2 - self.v0).magnitude() * 0.5

    @property
    def centroid(self) -> Vec3:
        return (self.v0 + self.v1 + self.v2) / 3.0

    @property
    def edges(self) -> Tuple[Vec3, Vec3, Vec3]:
        return (self.v1 - self.v0, self.v2 - self.v1, self.v0 - self.v2)

    def contains(self, point: Vec3) -> bool:
        """
        Barycentric containment test (boundary counts as inside).

        Degenerate (zero-area) triangles contain nothing.
        """
        e1 = self.v1 - self.v0
        e2 = self.v2 - self.v0
        vp = point - self.v0

        dot00 = e2.dot(e2)
        dot01 = e2.dot(e1)
        dot02 = e2.dot(vp)
        dot11 = e1.dot(e1)
        dot12 = e1.dot(vp)

        denom = dot00 * dot11 - dot01 * dot01
        if denom == 0:
            return False

        u = (dot11 * dot02 - dot01 * dot12) / denom
        v = (dot00 * dot12 - dot01 * dot02) / denom
        return u >= 0 and v >= 0 and u + v <= 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Triangle):
            return NotImplemented
        return self.v0 == other.v0 and self.v1 == other.v1 and self.v2 == other.v2

    __hash__ = None


class Matrix3x3:
    """
    3x3 rotation matrix.

    Composition uses the usual convention: (A @ B).transform(v) applies
    B first, then A. `from_euler` therefore builds Rz @ Ry @ Rx so that
    X is applied first.
    """

    __slots__ = ("_values",)

    def __init__(self, values):
        arr = np.array(values, dtype=float)
        if arr.shape != (3, 3):
            raise ValueError(f"Matrix must be 3x3, got shape {arr.shape}")
        arr.setflags(write=False)
        self._values = arr

    @classmethod
    def identity(cls) -> Matrix3x3:
        return cls(np.eye(3))

    @classmethod
    def rotation_x(cls, angle: float) -> Matrix3x3:
        c, s = math.cos(angle), math.sin(angle)
        return cls([[1, 0, 0], [0, c, -s], [0, s, c]])

    @classmethod
    def rotation_y(cls, angle: float) -> Matrix3x3:
        c, s = math.cos(angle), math.sin(angle)
        return cls([[c, 0, s], [0, 1, 0], [-s, 0, c]])

    @classmethod
    def rotation_z(cls, angle: float) -> Matrix3x3:
        c, s = math.cos(angle), math.sin(angle)
        return cls([[c, -s, 0], [s, c, 0], [0, 0, 1]])

    @classmethod
    def from_euler(cls, euler: Vec3) -> Matrix3x3:
        """Rotation applying X, then Y, then Z."""
        return cls.rotation_z(euler.z) @ cls.rotation_y(euler.y) @ cls.rotation_x(euler.x)

    @property
    def values(self) -> np.ndarray:
        return self._values

    def __getitem__(self, index) -> float:
        return float(self._values[index])

    def __matmul__(self, other: Matrix3x3) -> Matrix3x3:
        return Matrix3x3(self._values @ other._values)

    __mul__ = __matmul__

    def transform(self, v: Vec3) -> Vec3:
        return Vec3.from_array(self._values @ v.to_array())

    def transpose(self) -> Matrix3x3:
        return Matrix3x3(self._values.T)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix3x3):
            return NotImplemented
        return bool(np.allclose(self._values, other._values, atol=EPSILON, rtol=0.0))

    __hash__ = None

    def __repr__(self) -> str:
        return f"Matrix3x3({self._values.tolist()})"


# ============================================================
# Capability protocols
# ============================================================

@runtime_checkable
class Geometry3D(Protocol):
    """Anything with a vertex list and the basic solid measurements."""

    @property
    def vertices(self) -> Sequence[Vec3]: ...

    @property
    def bounds(self) -> BoundingBox: ...

    @property
    def centroid(self) -> Vec3: ...

    @property
    def volume(self) -> float: ...

    @property
    def surface_area(self) -> float: ...


@runtime_checkable
class Triangulatable(Protocol):
    """Exposes triangles and their index triples into `vertices`."""

    @property
    def faces(self) -> Sequence[Tuple[int, int, int]]: ...

    @property
    def triangles(self) -> Sequence[Triangle]: ...


@runtime_checkable
class HasNormals(Protocol):
    @property
    def face_normals(self) -> Sequence[Vec3]: ...

    def get_face_normal(self, face_index: int) -> Vec3: ...


def triangles_from_faces(vertices: Sequence[Vec3], faces: Iterable[Tuple[int, int, int]]) -> List[Triangle]:
    """Resolve index triples into Triangle values."""
    return [Triangle(vertices[i], vertices[j], vertices[k]) for i, j, k in faces]
