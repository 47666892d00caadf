"""
Geodesy - Placing Local Geometry on the Earth

Three coordinate frames:

1. GEODETIC (WGS84)
   latitude/longitude in degrees, altitude in meters above the ellipsoid.

2. ECEF (Earth-Centered, Earth-Fixed)
   Cartesian meters. Origin at the Earth's center, +X through
   (0°N, 0°E), +Z through the north pole.

3. ENU (East-North-Up)
   Local tangent plane at a reference point. This is the frame every
   polygon, solid and flight path in the engine is modelled in.

The ellipsoid is what makes this non-trivial: the Earth is flatter at
the poles (a - b ~ 21 km), so the prime-vertical radius of curvature

    N(lat) = a / sqrt(1 - e^2 sin^2(lat))

varies with latitude and cartesian -> geodetic needs iteration.

DISTANCES:
- Haversine: sphere of radius 6371 km. Fast, ~0.5% error.
- Vincenty: ellipsoid, iterative, sub-millimeter. Can fail to converge
  for nearly antipodal points; we fall back to Haversine then.
"""

from __future__ import annotations
from typing import Tuple
import logging
import math

from .vector import Vec3
from .primitives import GeoCoordinate, Matrix3x3

logger = logging.getLogger(__name__)

# WGS84 ellipsoid
SEMI_MAJOR_AXIS = 6378137.0           # a, meters
SEMI_MINOR_AXIS = 6356752.314245      # b, meters
FLATTENING = 1 / 298.257223563        # f = (a - b) / a
ECCENTRICITY = 0.0818191908426
ECCENTRICITY_SQUARED = 0.00669437999014

# Mean Earth radius for spherical formulas
EARTH_RADIUS = 6371000.0  # meters

# Fixed refinement count for cartesian -> geodetic latitude
GEODETIC_ITERATIONS = 10

VINCENTY_MAX_ITERATIONS = 100
VINCENTY_TOLERANCE = 1e-12


def normalize_longitude(lon: float) -> float:
    """Wrap longitude into [-180, 180)."""
    return ((lon + 540.0) % 360.0) - 180.0


class CoordinateTransformer:
    """Conversions between geodetic, ECEF and local ENU frames."""

    @staticmethod
    def prime_vertical_radius(latitude_radians: float) -> float:
        sin_lat = math.sin(latitude_radians)
        return SEMI_MAJOR_AXIS / math.sqrt(1.0 - ECCENTRICITY_SQUARED * sin_lat * sin_lat)

    @staticmethod
    def geo_to_cartesian(coord: GeoCoordinate) -> Vec3:
        """Geodetic -> ECEF (meters)."""
        lat = coord.latitude_radians
        lon = coord.longitude_radians
        n = CoordinateTransformer.prime_vertical_radius(lat)

        x = (n + coord.altitude) * math.cos(lat) * math.cos(lon)
        y = (n + coord.altitude) * math.cos(lat) * math.sin(lon)
        z = (n * (1.0 - ECCENTRICITY_SQUARED) + coord.altitude) * math.sin(lat)
        return Vec3(x, y, z)

    @staticmethod
    def cartesian_to_geo(point: Vec3) -> GeoCoordinate:
        """
        ECEF -> geodetic.

        Starts from the latitude of a point on a sphere scaled by (1 - e^2)
        and refines a fixed number of times. Ten passes is far below a
        millimeter for anything near the surface.
        """
        lon = math.atan2(point.y, point.x)
        p = math.hypot(point.x, point.y)
        lat = math.atan2(point.z, p * (1.0 - ECCENTRICITY_SQUARED))

        for _ in range(GEODETIC_ITERATIONS):
            n = CoordinateTransformer.prime_vertical_radius(lat)
            lat = math.atan2(point.z + ECCENTRICITY_SQUARED * n * math.sin(lat), p)

        n = CoordinateTransformer.prime_vertical_radius(lat)
        cos_lat = math.cos(lat)
        if abs(cos_lat) > 1e-12:
            altitude = p / cos_lat - n
        else:
            # On the polar axis
            altitude = abs(point.z) - SEMI_MINOR_AXIS

        return GeoCoordinate(
            max(-90.0, min(90.0, math.degrees(lat))),
            math.degrees(lon),
            altitude,
        )

    @staticmethod
    def world_to_local(world: Vec3, origin: Vec3, rotation: Vec3) -> Vec3:
        """Inverse of local_to_world: undo Z, then Y, then X."""
        inverse = (
            Matrix3x3.rotation_x(-rotation.x)
            @ Matrix3x3.rotation_y(-rotation.y)
            @ Matrix3x3.rotation_z(-rotation.z)
        )
        return inverse.transform(world - origin)

    @staticmethod
    def local_to_world(local: Vec3, origin: Vec3, rotation: Vec3) -> Vec3:
        """Rotate X, then Y, then Z, then translate by origin."""
        return Matrix3x3.from_euler(rotation).transform(local) + origin

    @staticmethod
    def get_local_tangent_plane(reference: GeoCoordinate) -> Tuple[Vec3, Vec3, Vec3]:
        """(east, north, up) unit vectors at reference, in ECEF."""
        lat = reference.latitude_radians
        lon = reference.longitude_radians
        sin_lat, cos_lat = math.sin(lat), math.cos(lat)
        sin_lon, cos_lon = math.sin(lon), math.cos(lon)

        east = Vec3(-sin_lon, cos_lon, 0.0)
        north = Vec3(-sin_lat * cos_lon, -sin_lat * sin_lon, cos_lat)
        up = Vec3(cos_lat * cos_lon, cos_lat * sin_lon, sin_lat)
        return east, north, up

    @staticmethod
    def geo_to_enu(point: GeoCoordinate, reference: GeoCoordinate) -> Vec3:
        """Geodetic -> local ENU meters relative to reference."""
        delta = (
            CoordinateTransformer.geo_to_cartesian(point)
            - CoordinateTransformer.geo_to_cartesian(reference)
        )
        east, north, up = CoordinateTransformer.get_local_tangent_plane(reference)
        return Vec3(delta.dot(east), delta.dot(north), delta.dot(up))

    @staticmethod
    def enu_to_geo(local: Vec3, reference: GeoCoordinate) -> GeoCoordinate:
        """Local ENU meters relative to reference -> geodetic."""
        east, north, up = CoordinateTransformer.get_local_tangent_plane(reference)
        ecef = (
            CoordinateTransformer.geo_to_cartesian(reference)
            + east * local.x
            + north * local.y
            + up * local.z
        )
        return CoordinateTransformer.cartesian_to_geo(ecef)


class DistanceCalculator:
    """Great-circle and ellipsoidal distances, bearings and projections."""

    @staticmethod
    def haversine_distance(a: GeoCoordinate, b: GeoCoordinate) -> float:
        """Spherical great-circle distance in meters (altitude ignored)."""
        lat1, lat2 = a.latitude_radians, b.latitude_radians
        dlat = lat2 - lat1
        dlon = b.longitude_radians - a.longitude_radians

        h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
        c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
        return EARTH_RADIUS * c

    @staticmethod
    def vincenty_distance(a: GeoCoordinate, b: GeoCoordinate) -> float:
        """
        Ellipsoidal distance in meters (Vincenty inverse formula).

        Coincident points return 0. If lambda has not converged after
        VINCENTY_MAX_ITERATIONS, the Haversine distance is returned.
        """
        f = FLATTENING
        L = b.longitude_radians - a.longitude_radians
        u1 = math.atan((1 - f) * math.tan(a.latitude_radians))
        u2 = math.atan((1 - f) * math.tan(b.latitude_radians))
        sin_u1, cos_u1 = math.sin(u1), math.cos(u1)
        sin_u2, cos_u2 = math.sin(u2), math.cos(u2)

        lam = L
        iterations = 0
        while True:
            sin_lam, cos_lam = math.sin(lam), math.cos(lam)
            sin_sigma = math.sqrt(
                (cos_u2 * sin_lam) ** 2
                + (cos_u1 * sin_u2 - sin_u1 * cos_u2 * cos_lam) ** 2
            )
            if sin_sigma == 0:
                return 0.0

            cos_sigma = sin_u1 * sin_u2 + cos_u1 * cos_u2 * cos_lam
            sigma = math.atan2(sin_sigma, cos_sigma)
            sin_alpha = cos_u1 * cos_u2 * sin_lam / sin_sigma
            cos_sq_alpha = 1 - sin_alpha * sin_alpha
            # Equatorial line: cos^2(alpha) = 0
            cos_2sigma_m = cos_sigma - 2 * sin_u1 * sin_u2 / cos_sq_alpha if cos_sq_alpha != 0 else 0.0

            c = f / 16 * cos_sq_alpha * (4 + f * (4 - 3 * cos_sq_alpha))
            lam_prev = lam
            lam = L + (1 - c) * f * sin_alpha * (
                sigma + c * sin_sigma * (
                    cos_2sigma_m + c * cos_sigma * (-1 + 2 * cos_2sigma_m * cos_2sigma_m)
                )
            )
            iterations += 1

            if abs(lam - lam_prev) <= VINCENTY_TOLERANCE:
                break
            if iterations >= VINCENTY_MAX_ITERATIONS:
                logger.warning(
                    f"Vincenty did not converge after {iterations} iterations "
                    f"({a} -> {b}), using Haversine"
                )
                return DistanceCalculator.haversine_distance(a, b)

        a_sq, b_sq = SEMI_MAJOR_AXIS ** 2, SEMI_MINOR_AXIS ** 2
        u_sq = cos_sq_alpha * (a_sq - b_sq) / b_sq
        big_a = 1 + u_sq / 16384 * (4096 + u_sq * (-768 + u_sq * (320 - 175 * u_sq)))
        big_b = u_sq / 1024 * (256 + u_sq * (-128 + u_sq * (74 - 47 * u_sq)))
        delta_sigma = big_b * sin_sigma * (
            cos_2sigma_m + big_b / 4 * (
                cos_sigma * (-1 + 2 * cos_2sigma_m * cos_2sigma_m)
                - big_b / 6 * cos_2sigma_m
                * (-3 + 4 * sin_sigma * sin_sigma)
                * (-3 + 4 * cos_2sigma_m * cos_2sigma_m)
            )
        )
        return SEMI_MINOR_AXIS * big_a * (sigma - delta_sigma)

    @staticmethod
    def initial_bearing(a: GeoCoordinate, b: GeoCoordinate) -> float:
        """Forward azimuth from a to b in radians, [0, 2*pi), 0 = north."""
        lat1, lat2 = a.latitude_radians, b.latitude_radians
        dlon = b.longitude_radians - a.longitude_radians

        y = math.sin(dlon) * math.cos(lat2)
        x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
        return (math.atan2(y, x) + 2 * math.pi) % (2 * math.pi)

    @staticmethod
    def destination_point(start: GeoCoordinate, bearing: float, distance: float) -> GeoCoordinate:
        """Point reached travelling `distance` meters on `bearing` (radians)."""
        lat1 = start.latitude_radians
        lon1 = start.longitude_radians
        delta = distance / EARTH_RADIUS

        lat2 = math.asin(
            math.sin(lat1) * math.cos(delta)
            + math.cos(lat1) * math.sin(delta) * math.cos(bearing)
        )
        lon2 = lon1 + math.atan2(
            math.sin(bearing) * math.sin(delta) * math.cos(lat1),
            math.cos(delta) - math.sin(lat1) * math.sin(lat2),
        )
        return GeoCoordinate(
            max(-90.0, min(90.0, math.degrees(lat2))),
            normalize_longitude(math.degrees(lon2)),
            start.altitude,
        )

    @staticmethod
    def midpoint(a: GeoCoordinate, b: GeoCoordinate) -> GeoCoordinate:
        """Great-circle midpoint; altitude is the average."""
        lat1, lat2 = a.latitude_radians, b.latitude_radians
        lon1 = a.longitude_radians
        dlon = b.longitude_radians - lon1

        bx = math.cos(lat2) * math.cos(dlon)
        by = math.cos(lat2) * math.sin(dlon)
        lat3 = math.atan2(
            math.sin(lat1) + math.sin(lat2),
            math.sqrt((math.cos(lat1) + bx) ** 2 + by * by),
        )
        lon3 = lon1 + math.atan2(by, math.cos(lat1) + bx)
        return GeoCoordinate(
            math.degrees(lat3),
            normalize_longitude(math.degrees(lon3)),
            (a.altitude + b.altitude) / 2.0,
        )
