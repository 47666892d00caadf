"""
Fluent Builders

Step-by-step construction for polygons, pyramids and flight paths:

    tower = (
        PolygonBuilder()
        .add_vertex(0, 0).add_vertex(20, 0).add_vertex(20, 30).add_vertex(0, 30)
        .build_extruded(height=90.0)
    )

    path = (
        FlightPathBuilder()
        .with_default_speed(15.0)
        .add_positions([Vec3(0, 0, 50), Vec3(200, 0, 50), Vec3(200, 200, 60)])
        .smooth()
        .build()
    )

Builders are mutable scratch objects; everything they build is immutable.
"""

from __future__ import annotations
from typing import Iterable, List, Optional
import logging

from .vector import Vec3
from .primitives import GeoCoordinate, Geometry3D
from .polygon import ExtrusionOptions, Polygon2D
from .extrusion import Polygon3D
from .pyramid import Pyramid
from .flight import (
    DEFAULT_TENSION,
    FlightPath,
    InterpolationType,
    Waypoint,
    WaypointType,
)
from .geodesy import CoordinateTransformer
from .validation import WindingOrder

logger = logging.getLogger(__name__)


class PolygonBuilder:
    """
    Collects vertices, local or geographic.

    Geographic coordinates take precedence once three or more have been
    added; they are converted to ENU meters about the first coordinate.
    """

    def __init__(self):
        self._vertices: List[Vec3] = []
        self._geo_coordinates: List[GeoCoordinate] = []

    def add_vertex(self, x: float, y: float, z: float = 0.0) -> PolygonBuilder:
        self._vertices.append(Vec3(x, y, z))
        return self

    def add_point(self, point: Vec3) -> PolygonBuilder:
        self._vertices.append(point)
        return self

    def add_vertices(self, vertices: Iterable[Vec3]) -> PolygonBuilder:
        self._vertices.extend(vertices)
        return self

    def add_geo_coordinate(
        self, latitude: float, longitude: float, altitude: float = 0.0
    ) -> PolygonBuilder:
        self._geo_coordinates.append(GeoCoordinate(latitude, longitude, altitude))
        return self

    def add_geo_coordinates(self, coordinates: Iterable[GeoCoordinate]) -> PolygonBuilder:
        self._geo_coordinates.extend(coordinates)
        return self

    def ensure_counter_clockwise(self) -> PolygonBuilder:
        polygon = self._build_polygon()
        if polygon.winding_order == WindingOrder.CLOCKWISE:
            self._vertices = list(reversed(polygon.vertices))
            self._geo_coordinates.clear()
        return self

    def build(self) -> Polygon2D:
        return self._build_polygon()

    def build_extruded(self, height: float, top_scale: float = 1.0) -> Polygon3D:
        return self._build_polygon().extrude(ExtrusionOptions(height=height, top_scale=top_scale))

    def build_pyramid(self, height: float) -> Pyramid:
        return Pyramid.create(self._build_polygon(), height)

    def _build_polygon(self) -> Polygon2D:
        if len(self._geo_coordinates) >= 3:
            reference = self._geo_coordinates[0]
            return Polygon2D(
                CoordinateTransformer.geo_to_enu(c, reference) for c in self._geo_coordinates
            )
        return Polygon2D(self._vertices)


class PyramidBuilder:
    """Base is required; everything else has a default (height 10 m)."""

    def __init__(self):
        self._base: Optional[Polygon2D] = None
        self._height = 10.0
        self._apex: Optional[Vec3] = None
        self._position = Vec3.zero()
        self._rotation = Vec3.zero()
        self._scale = 1.0
        self._include_base_cap = True

    def with_base(self, base: Polygon2D) -> PyramidBuilder:
        self._base = base
        return self

    def with_regular_base(self, sides: int, radius: float) -> PyramidBuilder:
        self._base = Polygon2D.create_regular(sides, radius)
        return self

    def with_square_base(self, side: float) -> PyramidBuilder:
        half = side / 2.0
        self._base = Polygon2D([
            Vec3(-half, -half, 0.0),
            Vec3(half, -half, 0.0),
            Vec3(half, half, 0.0),
            Vec3(-half, half, 0.0),
        ])
        return self

    def with_height(self, height: float) -> PyramidBuilder:
        self._height = height
        return self

    def with_apex(self, apex: Vec3) -> PyramidBuilder:
        """Apex in the base's frame. Overrides with_height."""
        self._apex = apex
        return self

    def at_position(self, position: Vec3) -> PyramidBuilder:
        self._position = position
        return self

    def with_rotation(self, rotation: Vec3) -> PyramidBuilder:
        self._rotation = rotation
        return self

    def with_scale(self, scale: float) -> PyramidBuilder:
        self._scale = scale
        return self

    def with_base_cap(self, include: bool = True) -> PyramidBuilder:
        self._include_base_cap = include
        return self

    def build(self) -> Pyramid:
        if self._base is None:
            raise RuntimeError("Base polygon must be specified before building a pyramid")

        apex = self._apex
        if apex is None:
            apex = self._base.centroid + Vec3(0.0, 0.0, self._height)

        return Pyramid(
            self._base,
            apex,
            position=self._position,
            rotation=self._rotation,
            scale=self._scale,
            include_base_cap=self._include_base_cap,
        )


class FlightPathBuilder:
    """
    Accumulates waypoints and path settings.

    add_waypoint_at_speed / add_positions time each new waypoint from the
    straight-line distance to the previous one.
    """

    def __init__(self):
        self._waypoints: List[Waypoint] = []
        self._interpolation_type = InterpolationType.LINEAR
        self._is_looping = False
        self._tension = DEFAULT_TENSION
        self._default_speed = 10.0
        self._geo_reference: Optional[GeoCoordinate] = None

    def add_waypoint(
        self, position: Vec3, time: float, type: WaypointType = WaypointType.SMOOTH
    ) -> FlightPathBuilder:
        self._waypoints.append(Waypoint(position, time, None, type))
        return self

    def add_waypoint_at_speed(self, position: Vec3, speed: float) -> FlightPathBuilder:
        if speed <= 0:
            raise ValueError(f"Speed must be positive, got {speed}")

        time = 0.0
        if self._waypoints:
            last = self._waypoints[-1]
            time = last.time + last.position.distance_to(position) / speed
        self._waypoints.append(Waypoint(position, time, speed))
        return self

    def add_positions(self, positions: Iterable[Vec3]) -> FlightPathBuilder:
        for position in positions:
            self.add_waypoint_at_speed(position, self._default_speed)
        return self

    def add_geo_waypoint(
        self, coordinate: GeoCoordinate, time: float, reference: Optional[GeoCoordinate] = None
    ) -> FlightPathBuilder:
        """
        Waypoint from a geographic coordinate, converted to ENU meters.

        Without an explicit reference, the first geo waypoint becomes the
        ENU origin for every later one.
        """
        if reference is None:
            if self._geo_reference is None:
                self._geo_reference = coordinate
            reference = self._geo_reference

        position = CoordinateTransformer.geo_to_enu(coordinate, reference)
        self._waypoints.append(Waypoint(position, time))
        return self

    def with_interpolation(self, interpolation_type: InterpolationType) -> FlightPathBuilder:
        self._interpolation_type = interpolation_type
        return self

    def linear(self) -> FlightPathBuilder:
        return self.with_interpolation(InterpolationType.LINEAR)

    def smooth(self) -> FlightPathBuilder:
        return self.with_interpolation(InterpolationType.CATMULL_ROM)

    def looping(self, loop: bool = True) -> FlightPathBuilder:
        self._is_looping = loop
        return self

    def with_tension(self, tension: float) -> FlightPathBuilder:
        self._tension = tension
        return self

    def with_default_speed(self, speed: float) -> FlightPathBuilder:
        if speed <= 0:
            raise ValueError(f"Speed must be positive, got {speed}")
        self._default_speed = speed
        return self

    def build(self) -> FlightPath:
        logger.debug(f"Building flight path from {len(self._waypoints)} waypoints")
        return FlightPath(
            self._waypoints,
            self._interpolation_type,
            self._is_looping,
            self._tension,
        )

    @staticmethod
    def create_tour(geometries: Iterable[Geometry3D], altitude: float, speed: float) -> FlightPath:
        """Smooth path over each geometry's centroid, `altitude` above its top."""
        positions = [g.centroid.with_z(g.bounds.max.z + altitude) for g in geometries]
        return FlightPath.create_with_speed(positions, speed, InterpolationType.CATMULL_ROM)
