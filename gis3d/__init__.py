"""
gis3d - geometric modeling and flight-path animation for GIS scenes.

This package provides:
- Vec3 and spatial primitives (GeoCoordinate, BoundingBox, Plane, Triangle, Matrix3x3)
- Polygon2D footprints with validation and ear-clipping triangulation
- Solids: extruded Polygon3D and Pyramid
- WGS84 geodesy: ECEF/ENU conversion, Haversine and Vincenty distances
- Time-parameterized FlightPath with linear and Catmull-Rom interpolation
- Fluent builders and OBJ/STL/GeoJSON export
"""

from .vector import Vec3
from .primitives import (
    GeoCoordinate,
    BoundingBox,
    Plane,
    Triangle,
    Matrix3x3,
    Geometry3D,
    Triangulatable,
    HasNormals,
)
from .validation import PolygonValidator, ValidationResult, WindingOrder
from .polygon import ExtrusionOptions, Polygon2D
from .extrusion import EdgeKind, Polygon3D
from .pyramid import Pyramid
from .geodesy import CoordinateTransformer, DistanceCalculator
from .spatial import SpatialQuery
from .flight import FlightPath, InterpolationType, Waypoint, WaypointType
from .easing import LinearInterpolator, SmoothStepInterpolator
from .builders import FlightPathBuilder, PolygonBuilder, PyramidBuilder
from .export import MeshExporter

__version__ = "0.1.0"

__all__ = [
    "Vec3",
    "GeoCoordinate",
    "BoundingBox",
    "Plane",
    "Triangle",
    "Matrix3x3",
    "Geometry3D",
    "Triangulatable",
    "HasNormals",
    "PolygonValidator",
    "ValidationResult",
    "WindingOrder",
    "ExtrusionOptions",
    "Polygon2D",
    "EdgeKind",
    "Polygon3D",
    "Pyramid",
    "CoordinateTransformer",
    "DistanceCalculator",
    "SpatialQuery",
    "FlightPath",
    "InterpolationType",
    "Waypoint",
    "WaypointType",
    "LinearInterpolator",
    "SmoothStepInterpolator",
    "FlightPathBuilder",
    "PolygonBuilder",
    "PyramidBuilder",
    "MeshExporter",
]
