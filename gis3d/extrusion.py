"""
Extruded Solids - Footprint + Height = Building

Polygon3D sweeps a Polygon2D footprint upward into a closed solid:

    top ring     t0 ---- t1         t_i = rot((v_i - c) * top_scale) + c
                 |  \\    |                + position + rot((0, 0, height))
                 |    \\  |
    bottom ring  b0 ---- b1         b_i = rot(v_i - c) + c + position

c is the footprint centroid, rot the Euler rotation (X, then Y, then Z).

VERTEX LAYOUT:
    [b_0 .. b_{n-1}, t_0 .. t_{n-1}]    bottom ring, then top ring

FACE LAYOUT:
    2 triangles per side quad (n quads), then the bottom cap, then the top cap.
    Caps reuse the footprint's ear-clipping triangulation.

Every face winds counter-clockwise seen from outside, so normals point
out of the solid for both clockwise and counter-clockwise footprints.

top_scale < 1 gives a frustum (tapered tower), top_scale = 0 collapses
the top ring to a point (use Pyramid for that instead).
"""

from __future__ import annotations
from dataclasses import replace
from enum import Enum
from functools import cached_property
from typing import List, Tuple
import math

from .vector import Vec3
from .primitives import BoundingBox, Matrix3x3, Triangle, triangles_from_faces
from .polygon import ExtrusionOptions, Polygon2D
from .validation import WindingOrder


class EdgeKind(str, Enum):
    BOTTOM = "bottom"
    TOP = "top"
    VERTICAL = "vertical"


Face = Tuple[int, int, int]


class Polygon3D:
    """
    Immutable extruded solid.

    Satisfies the Geometry3D, Triangulatable and HasNormals protocols.

    Usage:
        footprint = Polygon2D.create_regular(6, 20.0)
        tower = Polygon3D.create_tapered(footprint, height=120.0, top_scale=0.6)
        tower.volume
        tower.rotate_z(math.pi / 4).translate(Vec3(100, 0, 0))
    """

    def __init__(self, base: Polygon2D, options: ExtrusionOptions):
        self._base = base
        self._options = options
        self._rotation = Matrix3x3.from_euler(options.rotation)
        self._vertices, self._faces, self._face_normals = self._build()

    # ------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------

    @classmethod
    def extrude(cls, base: Polygon2D, options: ExtrusionOptions) -> Polygon3D:
        return cls(base, options)

    @classmethod
    def create_prism(cls, base: Polygon2D, height: float) -> Polygon3D:
        return cls(base, ExtrusionOptions(height=height))

    @classmethod
    def create_tapered(cls, base: Polygon2D, height: float, top_scale: float) -> Polygon3D:
        return cls(base, ExtrusionOptions(height=height, top_scale=top_scale))

    # ------------------------------------------------------------
    # Mesh construction
    # ------------------------------------------------------------

    def _build(self) -> Tuple[Tuple[Vec3, ...], Tuple[Face, ...], Tuple[Vec3, ...]]:
        opts = self._options
        rot = self._rotation
        base = self._base.vertices
        center = self._base.centroid
        n = len(base)

        top_offset = rot.transform(Vec3(0.0, 0.0, opts.height))
        bottom = [rot.transform(v - center) + center + opts.position for v in base]
        top = [
            rot.transform((v - center) * opts.top_scale) + center + opts.position + top_offset
            for v in base
        ]
        vertices = tuple(bottom + top)

        faces: List[Face] = []
        normals: List[Vec3] = []
        clockwise = self._base.winding_order == WindingOrder.CLOCKWISE

        for i in range(n):
            j = (i + 1) % n
            if clockwise:
                # Walk the edge backwards so the quad still faces outward
                left, right = j, i
            else:
                left, right = i, j
            faces.append((left, right, n + right))
            faces.append((left, n + right, n + left))

            bl, br, tl = vertices[left], vertices[right], vertices[n + left]
            normals.append((br - bl).cross(tl - bl).normalized())

        up = rot.transform(Vec3.unit_z())
        cap = self._base.triangulate_indices()

        if opts.cap_bottom:
            faces.extend((i2, i1, i0) for i0, i1, i2 in cap)
            normals.append(-up)

        if opts.cap_top:
            faces.extend((n + i0, n + i1, n + i2) for i0, i1, i2 in cap)
            normals.append(up)

        return vertices, tuple(faces), tuple(normals)

    # ------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------

    @property
    def base(self) -> Polygon2D:
        return self._base

    @property
    def options(self) -> ExtrusionOptions:
        return self._options

    @property
    def height(self) -> float:
        return self._options.height

    @property
    def vertices(self) -> Tuple[Vec3, ...]:
        return self._vertices

    @property
    def faces(self) -> Tuple[Face, ...]:
        return self._faces

    @cached_property
    def triangles(self) -> Tuple[Triangle, ...]:
        return tuple(triangles_from_faces(self._vertices, self._faces))

    @property
    def face_normals(self) -> Tuple[Vec3, ...]:
        """One normal per side quad, then bottom cap, then top cap."""
        return self._face_normals

    def get_face_normal(self, face_index: int) -> Vec3:
        if 0 <= face_index < len(self._face_normals):
            return self._face_normals[face_index]
        return Vec3.unit_z()

    @property
    def bottom_vertices(self) -> Tuple[Vec3, ...]:
        return self._vertices[: self._base.vertex_count]

    @property
    def top_vertices(self) -> Tuple[Vec3, ...]:
        return self._vertices[self._base.vertex_count:]

    @cached_property
    def footprint(self) -> Polygon2D:
        """The bottom ring as a polygon (after rotation and translation)."""
        return Polygon2D(self.bottom_vertices)

    @cached_property
    def bounds(self) -> BoundingBox:
        return BoundingBox.from_points(self._vertices)

    @cached_property
    def centroid(self) -> Vec3:
        """Vertex mean, like Polygon2D.centroid."""
        total = Vec3.zero()
        for v in self._vertices:
            total = total + v
        return total / len(self._vertices)

    @cached_property
    def volume(self) -> float:
        """
        Divergence theorem over the closed mesh.

        Each face plus the centroid forms a tetrahedron; the signed volumes
        sum to the enclosed volume. Only meaningful when both caps exist.
        """
        c = self.centroid
        total = 0.0
        for t in self.triangles:
            total += (t.v0 - c).dot((t.v1 - c).cross(t.v2 - c)) / 6.0
        return abs(total)

    @cached_property
    def surface_area(self) -> float:
        return sum(t.area for t in self.triangles)

    def get_edges(self) -> List[Tuple[Vec3, Vec3, EdgeKind]]:
        """Bottom ring edges, top ring edges, then the vertical edges."""
        n = self._base.vertex_count
        bottom, top = self.bottom_vertices, self.top_vertices

        edges = [(bottom[i], bottom[(i + 1) % n], EdgeKind.BOTTOM) for i in range(n)]
        edges += [(top[i], top[(i + 1) % n], EdgeKind.TOP) for i in range(n)]
        edges += [(bottom[i], top[i], EdgeKind.VERTICAL) for i in range(n)]
        return edges

    # ------------------------------------------------------------
    # Transforms (all return new solids)
    # ------------------------------------------------------------

    def _with_options(self, **changes) -> Polygon3D:
        return Polygon3D(self._base, replace(self._options, **changes))

    def translate(self, offset: Vec3) -> Polygon3D:
        return self._with_options(position=self._options.position + offset)

    def scale(self, factor: float) -> Polygon3D:
        return self.scale_axes(Vec3(factor, factor, factor))

    def scale_axes(self, factors: Vec3) -> Polygon3D:
        """
        Non-uniform scale.

        The footprint stays similar to itself, so x and y collapse into a
        single factor (their geometric mean). z scales the height.
        """
        planar = math.sqrt(abs(factors.x * factors.y))
        return Polygon3D(
            self._base.scale(planar),
            replace(self._options, height=self._options.height * factors.z),
        )

    def rotate(self, euler: Vec3) -> Polygon3D:
        return self._with_options(rotation=self._options.rotation + euler)

    def rotate_x(self, angle: float) -> Polygon3D:
        return self.rotate(Vec3(angle, 0.0, 0.0))

    def rotate_y(self, angle: float) -> Polygon3D:
        return self.rotate(Vec3(0.0, angle, 0.0))

    def rotate_z(self, angle: float) -> Polygon3D:
        return self.rotate(Vec3(0.0, 0.0, angle))

    def __repr__(self) -> str:
        return (
            f"Polygon3D({self._base.vertex_count}-gon, height={self._options.height:.2f}, "
            f"top_scale={self._options.top_scale:.2f})"
        )
