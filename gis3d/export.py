"""
Mesh and Path Export

Text formats for handing geometry to other tools:

- Wavefront OBJ: vertices, face normals, 1-based triangle indices
- ASCII STL: one facet per triangle with its normal
- GeoJSON: solids as a Polygon feature over their footprint, flight
  paths as a sampled LineString feature

GeoJSON documents are pydantic models. Property names are snake_case in
Python and camelCase on the wire (surfaceArea, totalDistance, ...).
Positions are local ENU meters unless an `origin` is given, in which
case they are converted to [longitude, latitude, altitude].
"""

from __future__ import annotations
from typing import List, Literal, Optional, Sequence
import logging

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .vector import Vec3
from .primitives import GeoCoordinate, Geometry3D, HasNormals, Triangulatable
from .extrusion import Polygon3D
from .pyramid import Pyramid
from .flight import FlightPath
from .geodesy import CoordinateTransformer

logger = logging.getLogger(__name__)

DEFAULT_SOLID_NAME = "gis3d"
DEFAULT_PATH_SAMPLES = 100

Position = List[float]


# ============================================================
# GeoJSON Models
# ============================================================

class GeoJSONModel(BaseModel):
    """Base for GeoJSON documents: camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PolygonGeometry(GeoJSONModel):
    type: Literal["Polygon"] = "Polygon"
    coordinates: List[List[Position]]


class LineStringGeometry(GeoJSONModel):
    type: Literal["LineString"] = "LineString"
    coordinates: List[Position]


class SolidProperties(GeoJSONModel):
    volume: float
    surface_area: float
    centroid: Position


class FlightPathProperties(GeoJSONModel):
    total_distance: float
    total_duration: float
    waypoint_count: int
    is_looping: bool


class SolidFeature(GeoJSONModel):
    type: Literal["Feature"] = "Feature"
    geometry: PolygonGeometry
    properties: SolidProperties


class FlightPathFeature(GeoJSONModel):
    type: Literal["Feature"] = "Feature"
    geometry: LineStringGeometry
    properties: FlightPathProperties


# ============================================================
# Exporter
# ============================================================

def _footprint(geometry: Geometry3D) -> Sequence[Vec3]:
    if isinstance(geometry, Polygon3D):
        return geometry.bottom_vertices
    if isinstance(geometry, Pyramid):
        return geometry.base_vertices
    return geometry.vertices


class MeshExporter:
    """
    Stateless exporter. Every method returns the document as a string.

    Usage:
        exporter = MeshExporter()
        Path("tower.obj").write_text(exporter.export_to_obj(tower))
    """

    def export_to_obj(self, geometry: Geometry3D, include_normals: bool = True) -> str:
        vertices = geometry.vertices
        lines = [
            "# gis3d OBJ Export",
            f"# Vertices: {len(vertices)}",
            "",
        ]
        lines += [f"v {v.x:.6f} {v.y:.6f} {v.z:.6f}" for v in vertices]
        lines.append("")

        if include_normals and isinstance(geometry, HasNormals):
            lines += [f"vn {n.x:.6f} {n.y:.6f} {n.z:.6f}" for n in geometry.face_normals]
            lines.append("")

        face_count = 0
        if isinstance(geometry, Triangulatable):
            for i, j, k in geometry.faces:
                lines.append(f"f {i + 1} {j + 1} {k + 1}")
                face_count += 1

        logger.info(f"Exported OBJ: {len(vertices)} vertices, {face_count} faces")
        return "\n".join(lines) + "\n"

    def export_to_stl(self, geometry: Geometry3D, name: str = DEFAULT_SOLID_NAME) -> str:
        lines = [f"solid {name}"]

        facet_count = 0
        if isinstance(geometry, Triangulatable):
            for tri in geometry.triangles:
                n = tri.normal
                lines.append(f"  facet normal {n.x:e} {n.y:e} {n.z:e}")
                lines.append("    outer loop")
                for v in (tri.v0, tri.v1, tri.v2):
                    lines.append(f"      vertex {v.x:e} {v.y:e} {v.z:e}")
                lines.append("    endloop")
                lines.append("  endfacet")
                facet_count += 1

        lines.append(f"endsolid {name}")
        logger.info(f"Exported STL '{name}': {facet_count} facets")
        return "\n".join(lines) + "\n"

    def solid_feature(
        self, geometry: Geometry3D, origin: Optional[GeoCoordinate] = None
    ) -> SolidFeature:
        ring = [self._position(v, origin) for v in _footprint(geometry)]
        if ring:
            ring.append(list(ring[0]))

        return SolidFeature(
            geometry=PolygonGeometry(coordinates=[ring]),
            properties=SolidProperties(
                volume=geometry.volume,
                surface_area=geometry.surface_area,
                centroid=geometry.centroid.to_list(),
            ),
        )

    def export_to_geojson(
        self, geometry: Geometry3D, origin: Optional[GeoCoordinate] = None
    ) -> str:
        feature = self.solid_feature(geometry, origin)
        logger.info(f"Exported GeoJSON polygon: {len(feature.geometry.coordinates[0])} positions")
        return feature.model_dump_json(indent=2, by_alias=True)

    def flight_path_feature(
        self,
        path: FlightPath,
        sample_count: int = DEFAULT_PATH_SAMPLES,
        origin: Optional[GeoCoordinate] = None,
    ) -> FlightPathFeature:
        coordinates = [self._position(p, origin) for p in path.sample_path(sample_count)]
        return FlightPathFeature(
            geometry=LineStringGeometry(coordinates=coordinates),
            properties=FlightPathProperties(
                total_distance=path.total_distance,
                total_duration=path.total_duration,
                waypoint_count=len(path.waypoints),
                is_looping=path.is_looping,
            ),
        )

    def export_flight_path_to_geojson(
        self,
        path: FlightPath,
        sample_count: int = DEFAULT_PATH_SAMPLES,
        origin: Optional[GeoCoordinate] = None,
    ) -> str:
        feature = self.flight_path_feature(path, sample_count, origin)
        logger.info(f"Exported GeoJSON flight path: {sample_count + 1} samples")
        return feature.model_dump_json(indent=2, by_alias=True)

    @staticmethod
    def _position(point: Vec3, origin: Optional[GeoCoordinate]) -> Position:
        if origin is None:
            return point.to_list()
        geo = CoordinateTransformer.enu_to_geo(point, origin)
        return [geo.longitude, geo.latitude, geo.altitude]
