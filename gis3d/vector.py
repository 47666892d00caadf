"""
3D Vector Math - The Foundation of Every Shape and Path

Everything in the engine is built out of vectors:
- Vertices: where is the corner of a footprint? (x, y, z) meters
- Offsets: how far is the top ring from the bottom ring?
- Velocities: how fast is the flight path moving at time t? (m/s)

Coordinate system is local ENU (East-North-Up):
- x: East
- y: North
- z: Up

Vectors are immutable. Every operation returns a new Vec3, so a vertex
shared between a polygon and its extrusion can never change underneath
either of them.
"""

from __future__ import annotations
from dataclasses import dataclass
import math
import numpy as np

# Component tolerance used for equality and zero checks
EPSILON = 1e-10


@dataclass(frozen=True, eq=False)
class Vec3:
    """
    An immutable 3D vector.

    Equality is tolerant: two vectors are equal when every component
    differs by less than EPSILON. Tolerant equality is not transitive,
    so vectors are unhashable.
    """
    x: float
    y: float
    z: float

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vec3:
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar: float) -> Vec3:
        return self * scalar

    def __truediv__(self, scalar: float) -> Vec3:
        return Vec3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return (
            abs(self.x - other.x) < EPSILON
            and abs(self.y - other.y) < EPSILON
            and abs(self.z - other.z) < EPSILON
        )

    __hash__ = None

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def dot(self, other: Vec3) -> float:
        """Dot product: measures how aligned two vectors are."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vec3) -> Vec3:
        """Cross product: gives vector perpendicular to both inputs."""
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x
        )

    def magnitude(self) -> float:
        """Length of the vector (Euclidean norm)."""
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def magnitude_squared(self) -> float:
        return self.x**2 + self.y**2 + self.z**2

    def normalized(self) -> Vec3:
        """Unit vector (same direction, length = 1). Zero stays zero."""
        mag = self.magnitude()
        if mag <= EPSILON:
            return Vec3.zero()
        return self / mag

    def distance_to(self, other: Vec3) -> float:
        """Distance between two points."""
        return (other - self).magnitude()

    def distance_squared_to(self, other: Vec3) -> float:
        return (other - self).magnitude_squared()

    def lerp(self, other: Vec3, t: float) -> Vec3:
        """
        Linear interpolation: t=0 gives self, t=1 gives other.

        t is not clamped, so values outside [0, 1] extrapolate.
        """
        return Vec3(
            self.x + (other.x - self.x) * t,
            self.y + (other.y - self.y) * t,
            self.z + (other.z - self.z) * t
        )

    def with_x(self, x: float) -> Vec3:
        return Vec3(x, self.y, self.z)

    def with_y(self, y: float) -> Vec3:
        return Vec3(self.x, y, self.z)

    def with_z(self, z: float) -> Vec3:
        return Vec3(self.x, self.y, z)

    def rotate_x(self, angle: float) -> Vec3:
        """Rotate around the X axis by angle (radians)."""
        cos, sin = math.cos(angle), math.sin(angle)
        return Vec3(self.x, self.y * cos - self.z * sin, self.y * sin + self.z * cos)

    def rotate_y(self, angle: float) -> Vec3:
        """Rotate around the Y axis by angle (radians)."""
        cos, sin = math.cos(angle), math.sin(angle)
        return Vec3(self.x * cos + self.z * sin, self.y, -self.x * sin + self.z * cos)

    def rotate_z(self, angle: float) -> Vec3:
        """Rotate around the Z axis by angle (radians)."""
        cos, sin = math.cos(angle), math.sin(angle)
        return Vec3(self.x * cos - self.y * sin, self.x * sin + self.y * cos, self.z)

    def rotate(self, euler: Vec3) -> Vec3:
        """Apply Euler rotation: X first, then Y, then Z (radians)."""
        return self.rotate_x(euler.x).rotate_y(euler.y).rotate_z(euler.z)

    @staticmethod
    def distance(a: Vec3, b: Vec3) -> float:
        return (b - a).magnitude()

    @staticmethod
    def distance_squared(a: Vec3, b: Vec3) -> float:
        return a.distance_squared_to(b)

    def to_array(self) -> np.ndarray:
        """Convert to numpy array for math operations."""
        return np.array([self.x, self.y, self.z])

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Vec3":
        """Create from numpy array."""
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    @classmethod
    def zero(cls) -> "Vec3":
        """Origin / no movement."""
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def one(cls) -> "Vec3":
        return cls(1.0, 1.0, 1.0)

    @classmethod
    def unit_x(cls) -> "Vec3":
        return cls(1.0, 0.0, 0.0)

    @classmethod
    def unit_y(cls) -> "Vec3":
        return cls(0.0, 1.0, 0.0)

    @classmethod
    def unit_z(cls) -> "Vec3":
        return cls(0.0, 0.0, 1.0)

    def to_list(self) -> list:
        return [self.x, self.y, self.z]

    def to_dict(self) -> dict:
        """For JSON serialization."""
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def from_dict(cls, data: dict) -> "Vec3":
        return cls(float(data["x"]), float(data["y"]), float(data["z"]))

    def __repr__(self) -> str:
        return f"Vec3({self.x:.4f}, {self.y:.4f}, {self.z:.4f})"
