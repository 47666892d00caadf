"""
Pyramids - A Footprint Pulled to a Point

A Pyramid joins every edge of a base polygon to a single apex:

                 apex
                /|  \\
               / |   \\
              /  |    \\
            b0 ------- b1 ...

VERTEX LAYOUT:
    [b_0 .. b_{n-1}, apex]

FACE LAYOUT:
    n lateral triangles (b_i, b_{i+1}, apex), then the optional base cap.

The apex is stored in the same local frame as the base. World positions
come from: scale about the base centroid, rotate (X, then Y, then Z)
about it, then translate by `position`.

Measurements are closed form (volume = base area * height / 3) rather
than summed over the mesh, so an open pyramid still reports its volume.
"""

from __future__ import annotations
from functools import cached_property
from typing import List, Optional, Tuple
import math

from .vector import Vec3
from .primitives import BoundingBox, Matrix3x3, Triangle, triangles_from_faces
from .polygon import ExtrusionOptions, Polygon2D
from .validation import WindingOrder
from .extrusion import Polygon3D

# Apex projection tolerance for is_regular
REGULAR_TOLERANCE = 1e-6

Face = Tuple[int, int, int]


class Pyramid:
    """
    Immutable pyramid.

    Satisfies the Geometry3D, Triangulatable and HasNormals protocols.

    Usage:
        p = Pyramid.create_square_pyramid(side=230.0, height=146.0)
        p.volume            # ~2.57 million m^3
        frustum = p.truncate(0.5)
    """

    def __init__(
        self,
        base: Polygon2D,
        apex: Vec3,
        position: Optional[Vec3] = None,
        rotation: Optional[Vec3] = None,
        scale: float = 1.0,
        include_base_cap: bool = True,
    ):
        self._base = base
        self._apex = apex
        self._position = position or Vec3.zero()
        self._rotation = rotation or Vec3.zero()
        self._scale = scale
        self._include_base_cap = include_base_cap
        self._matrix = Matrix3x3.from_euler(self._rotation)
        self._vertices, self._faces, self._face_normals = self._build()

    # ------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------

    @classmethod
    def create(cls, base: Polygon2D, height: float) -> Pyramid:
        """Right pyramid: apex directly above the base centroid."""
        return cls(base, base.centroid + Vec3(0.0, 0.0, height))

    @classmethod
    def create_with_apex(cls, base: Polygon2D, apex: Vec3) -> Pyramid:
        return cls(base, apex)

    @classmethod
    def create_regular(
        cls, sides: int, radius: float, height: float, position: Optional[Vec3] = None
    ) -> Pyramid:
        base = Polygon2D.create_regular(sides, radius)
        return cls(base, base.centroid + Vec3(0.0, 0.0, height), position=position)

    @classmethod
    def create_tetrahedron(cls, side: float) -> Pyramid:
        """Regular tetrahedron: every edge has length `side`."""
        radius = side / math.sqrt(3.0)
        height = side * math.sqrt(2.0 / 3.0)
        return cls.create_regular(3, radius, height)

    @classmethod
    def create_square_pyramid(
        cls, side: float, height: float, position: Optional[Vec3] = None
    ) -> Pyramid:
        half = side / 2.0
        base = Polygon2D([
            Vec3(-half, -half, 0.0),
            Vec3(half, -half, 0.0),
            Vec3(half, half, 0.0),
            Vec3(-half, half, 0.0),
        ])
        return cls(base, Vec3(0.0, 0.0, height), position=position)

    # ------------------------------------------------------------
    # Mesh construction
    # ------------------------------------------------------------

    def _to_world(self, point: Vec3) -> Vec3:
        center = self._base.centroid
        return self._matrix.transform((point - center) * self._scale) + center + self._position

    def _build(self) -> Tuple[Tuple[Vec3, ...], Tuple[Face, ...], Tuple[Vec3, ...]]:
        n = self._base.vertex_count
        vertices = tuple(
            [self._to_world(v) for v in self._base.vertices] + [self._to_world(self._apex)]
        )

        faces: List[Face] = []
        normals: List[Vec3] = []
        clockwise = self._base.winding_order == WindingOrder.CLOCKWISE

        for i in range(n):
            j = (i + 1) % n
            face = (j, i, n) if clockwise else (i, j, n)
            faces.append(face)
            normals.append(Triangle(*(vertices[k] for k in face)).normal)

        if self._include_base_cap:
            faces.extend((i2, i1, i0) for i0, i1, i2 in self._base.triangulate_indices())
            normals.append(-self._matrix.transform(Vec3.unit_z()))

        return vertices, tuple(faces), tuple(normals)

    # ------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------

    @property
    def base(self) -> Polygon2D:
        return self._base

    @property
    def apex(self) -> Vec3:
        """Apex in world coordinates."""
        return self._vertices[-1]

    @property
    def position(self) -> Vec3:
        return self._position

    @property
    def rotation(self) -> Vec3:
        return self._rotation

    @property
    def scale_factor(self) -> float:
        return self._scale

    @property
    def include_base_cap(self) -> bool:
        return self._include_base_cap

    @property
    def vertices(self) -> Tuple[Vec3, ...]:
        return self._vertices

    @property
    def base_vertices(self) -> Tuple[Vec3, ...]:
        return self._vertices[:-1]

    @property
    def faces(self) -> Tuple[Face, ...]:
        return self._faces

    @cached_property
    def triangles(self) -> Tuple[Triangle, ...]:
        return tuple(triangles_from_faces(self._vertices, self._faces))

    @property
    def face_normals(self) -> Tuple[Vec3, ...]:
        """One normal per lateral face, then the base cap normal."""
        return self._face_normals

    def get_face_normal(self, face_index: int) -> Vec3:
        if 0 <= face_index < len(self._face_normals):
            return self._face_normals[face_index]
        return Vec3.unit_z()

    @property
    def height(self) -> float:
        return abs(self._apex.z - self._base.centroid.z) * self._scale

    @property
    def base_area(self) -> float:
        return self._base.area * self._scale * self._scale

    @property
    def volume(self) -> float:
        return self.base_area * self.height / 3.0

    @property
    def centroid(self) -> Vec3:
        """A quarter of the way from the base centroid to the apex."""
        center = self._base.centroid
        return self._to_world(center + (self._apex - center) * 0.25)

    @cached_property
    def bounds(self) -> BoundingBox:
        return BoundingBox.from_points(self._vertices)

    @property
    def slant_height(self) -> float:
        """Apex to the midpoint of the first base edge."""
        base = self.base_vertices
        midpoint = (base[0] + base[1 % len(base)]) * 0.5
        return self.apex.distance_to(midpoint)

    @property
    def is_regular(self) -> bool:
        center = self._base.centroid
        dx = self._apex.x - center.x
        dy = self._apex.y - center.y
        return math.sqrt(dx * dx + dy * dy) < REGULAR_TOLERANCE

    @property
    def lateral_surface_area(self) -> float:
        n = self._base.vertex_count
        return sum(t.area for t in self.triangles[:n])

    @property
    def surface_area(self) -> float:
        if self._include_base_cap:
            return self.lateral_surface_area + self.base_area
        return self.lateral_surface_area

    def contains_point(self, point: Vec3) -> bool:
        """
        Inside every face plane (boundary counts as inside).

        Exact for convex bases; concave bases give the convex-hull answer
        at best.
        """
        n = self._base.vertex_count
        down = -self._matrix.transform(Vec3.unit_z())
        if (point - self._vertices[0]).dot(down) > 1e-9:
            return False

        for i in range(n):
            tri = self.triangles[i]
            if (point - tri.v0).dot(tri.normal) > 1e-9:
                return False
        return True

    def get_base_edges(self) -> List[Tuple[Vec3, Vec3]]:
        base = self.base_vertices
        n = len(base)
        return [(base[i], base[(i + 1) % n]) for i in range(n)]

    def get_lateral_edges(self) -> List[Tuple[Vec3, Vec3]]:
        apex = self.apex
        return [(v, apex) for v in self.base_vertices]

    def truncate(self, relative_height: float) -> Polygon3D:
        """
        Cut the pyramid parallel to its base, keeping the bottom part.

        relative_height is the fraction of the height kept (0 < r < 1).
        The result is a frustum extruded from the (scaled) base.
        """
        if not 0.0 < relative_height < 1.0:
            raise ValueError(
                f"Relative height must be between 0 and 1 (exclusive), got {relative_height}"
            )

        base = self._base if self._scale == 1.0 else self._base.scale(self._scale)
        options = ExtrusionOptions(
            height=self.height * relative_height,
            top_scale=1.0 - relative_height,
            position=self._position,
            rotation=self._rotation,
            cap_top=True,
            cap_bottom=True,
        )
        return Polygon3D.extrude(base, options)

    # ------------------------------------------------------------
    # Transforms (all return new pyramids)
    # ------------------------------------------------------------

    def _copy(self, **changes) -> Pyramid:
        args = {
            "base": self._base,
            "apex": self._apex,
            "position": self._position,
            "rotation": self._rotation,
            "scale": self._scale,
            "include_base_cap": self._include_base_cap,
        }
        args.update(changes)
        return Pyramid(**args)

    def translate(self, offset: Vec3) -> Pyramid:
        return self._copy(position=self._position + offset)

    def scale(self, factor: float) -> Pyramid:
        return self._copy(scale=self._scale * factor)

    def scale_axes(self, factors: Vec3) -> Pyramid:
        """Base scales by the mean of x and y; the apex scales per axis."""
        center = self._base.centroid
        offset = self._apex - center
        apex = center + Vec3(offset.x * factors.x, offset.y * factors.y, offset.z * factors.z)
        return self._copy(base=self._base.scale((factors.x + factors.y) / 2.0), apex=apex)

    def rotate(self, euler: Vec3) -> Pyramid:
        return self._copy(rotation=self._rotation + euler)

    def rotate_x(self, angle: float) -> Pyramid:
        return self.rotate(Vec3(angle, 0.0, 0.0))

    def rotate_y(self, angle: float) -> Pyramid:
        return self.rotate(Vec3(0.0, angle, 0.0))

    def rotate_z(self, angle: float) -> Pyramid:
        return self.rotate(Vec3(0.0, 0.0, angle))

    def __repr__(self) -> str:
        return (
            f"Pyramid({self._base.vertex_count}-gon base, height={self.height:.2f}, "
            f"volume={self.volume:.2f})"
        )
