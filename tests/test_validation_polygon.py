"""
Tests for polygon validation and Polygon2D.
"""

import math
import unittest

from gis3d.vector import Vec3
from gis3d.primitives import GeoCoordinate
from gis3d.validation import (
    PolygonValidator,
    ValidationResult,
    WindingOrder,
    segments_intersect,
    signed_area,
)
from gis3d.polygon import ExtrusionOptions, Polygon2D
from gis3d.extrusion import Polygon3D


def ring(*points):
    return [Vec3(x, y, 0.0) for x, y in points]


SQUARE = ring((0, 0), (10, 0), (10, 10), (0, 10))
BOWTIE = ring((0, 0), (10, 10), (10, 0), (0, 10))
L_SHAPE = ring((0, 0), (20, 0), (20, 10), (10, 10), (10, 20), (0, 20))


class TestRingHelpers(unittest.TestCase):
    """Test the module-level ring functions."""

    def test_signed_area_sign(self):
        self.assertAlmostEqual(signed_area(SQUARE), 100.0)
        self.assertAlmostEqual(signed_area(list(reversed(SQUARE))), -100.0)

    def test_segments_intersect(self):
        self.assertTrue(segments_intersect(
            Vec3(0, 0, 0), Vec3(10, 10, 0), Vec3(0, 10, 0), Vec3(10, 0, 0)
        ))
        self.assertFalse(segments_intersect(
            Vec3(0, 0, 0), Vec3(10, 0, 0), Vec3(0, 5, 0), Vec3(10, 5, 0)
        ))

    def test_touching_segments_do_not_count(self):
        self.assertFalse(segments_intersect(
            Vec3(0, 0, 0), Vec3(10, 0, 0), Vec3(10, 0, 0), Vec3(10, 10, 0)
        ))


class TestPolygonValidator(unittest.TestCase):
    """Test PolygonValidator.validate()."""

    def setUp(self):
        self.validator = PolygonValidator()

    def test_too_few_vertices(self):
        result = self.validator.validate(ring((0, 0), (1, 0)))
        self.assertFalse(result.is_valid)
        self.assertEqual(result.errors, ["Polygon must have at least 3 vertices"])

    def test_valid_square(self):
        result = self.validator.validate(SQUARE)
        self.assertTrue(result.is_valid)
        self.assertTrue(result.is_convex)
        self.assertFalse(result.has_self_intersection)
        self.assertEqual(result.winding_order, WindingOrder.COUNTER_CLOCKWISE)
        self.assertEqual(result.errors, [])

    def test_bowtie_is_invalid(self):
        result = self.validator.validate(BOWTIE)
        self.assertFalse(result.is_valid)
        self.assertTrue(result.has_self_intersection)

    def test_degenerate_is_invalid(self):
        result = self.validator.validate(ring((0, 0), (1, 0), (2, 0)))
        self.assertFalse(result.is_valid)
        self.assertEqual(result.winding_order, WindingOrder.DEGENERATE)

    def test_small_area_is_a_warning(self):
        result = self.validator.validate(ring((0, 0), (0.001, 0), (0, 0.001)))
        self.assertTrue(result.is_valid)
        self.assertEqual(len(result.warnings), 1)

    def test_concave_is_not_convex(self):
        self.assertFalse(self.validator.is_convex(L_SHAPE))
        self.assertTrue(self.validator.validate(L_SHAPE).is_valid)

    def test_clockwise_winding(self):
        self.assertEqual(
            self.validator.get_winding_order(list(reversed(SQUARE))),
            WindingOrder.CLOCKWISE,
        )

    def test_result_to_dict(self):
        data = ValidationResult.invalid("boom").to_dict()
        self.assertFalse(data["is_valid"])
        self.assertEqual(data["errors"], ["boom"])
        self.assertEqual(data["winding_order"], "degenerate")


class TestPolygon2D(unittest.TestCase):
    """Test Polygon2D construction and derived values."""

    def test_square_properties(self):
        square = Polygon2D(SQUARE)
        self.assertAlmostEqual(square.area, 100.0)
        self.assertEqual(square.centroid, Vec3(5, 5, 0))
        self.assertEqual(square.winding_order, WindingOrder.COUNTER_CLOCKWISE)
        self.assertTrue(square.is_convex)
        self.assertEqual(square.bounds.max, Vec3(10, 10, 0))

    def test_bowtie_is_self_intersecting(self):
        self.assertTrue(Polygon2D(BOWTIE).is_self_intersecting())
        self.assertFalse(Polygon2D(SQUARE).is_self_intersecting())

    def test_equality_is_tolerant_and_unhashable(self):
        nudged = [v + Vec3(1e-12, 0, 0) for v in SQUARE]
        self.assertEqual(Polygon2D(SQUARE), Polygon2D(nudged))
        with self.assertRaises(TypeError):
            hash(Polygon2D(SQUARE))

    def test_duplicates_are_removed(self):
        polygon = Polygon2D(ring((0, 0), (0, 0), (1, 0), (1, 1), (0, 0)))
        self.assertEqual(polygon.vertex_count, 3)

    def test_too_few_vertices_after_cleanup(self):
        with self.assertRaises(ValueError):
            Polygon2D(ring((0, 0), (0, 0), (1, 0)))

    def test_create_regular(self):
        hexagon = Polygon2D.create_regular(6, 10.0)
        self.assertEqual(hexagon.vertex_count, 6)
        self.assertAlmostEqual(hexagon.area, 3 * math.sqrt(3) / 2 * 100.0, places=6)
        self.assertEqual(hexagon.vertices[0], Vec3(0, -10, 0))
        self.assertEqual(hexagon.winding_order, WindingOrder.COUNTER_CLOCKWISE)

    def test_create_regular_needs_three_sides(self):
        with self.assertRaises(ValueError):
            Polygon2D.create_regular(2, 1.0)

    def test_from_geo_coordinates(self):
        polygon = Polygon2D.from_geo_coordinates([
            GeoCoordinate(0, 0), GeoCoordinate(0, 1), GeoCoordinate(1, 1),
        ])
        self.assertEqual(polygon.vertices[1], Vec3(1, 0, 0))

    def test_contains_point(self):
        square = Polygon2D(SQUARE)
        self.assertTrue(square.contains_point(Vec3(5, 5, 0)))
        self.assertFalse(square.contains_point(Vec3(15, 5, 0)))

        l_shape = Polygon2D(L_SHAPE)
        self.assertTrue(l_shape.contains_point(Vec3(5, 15, 0)))
        self.assertFalse(l_shape.contains_point(Vec3(15, 15, 0)))

    def test_edges(self):
        square = Polygon2D(SQUARE)
        self.assertEqual(square.get_edges()[0], Vec3(10, 0, 0))
        self.assertEqual(square.get_edge(3), (Vec3(0, 10, 0), Vec3(0, 0, 0)))

    def test_validate_delegates(self):
        self.assertFalse(Polygon2D(BOWTIE).validate().is_valid)


class TestTriangulation(unittest.TestCase):
    """Test ear-clipping triangulation."""

    def test_convex_polygon_gives_n_minus_two(self):
        for sides in (3, 4, 5, 8, 12):
            polygon = Polygon2D.create_regular(sides, 7.0)
            triangles = polygon.triangulate()
            self.assertEqual(len(triangles), sides - 2)
            self.assertAlmostEqual(sum(t.area for t in triangles), polygon.area, delta=1e-6)

    def test_concave_polygon(self):
        polygon = Polygon2D(L_SHAPE)
        triangles = polygon.triangulate()
        self.assertEqual(len(triangles), 4)
        self.assertAlmostEqual(sum(t.area for t in triangles), 300.0, delta=1e-6)

    def test_clockwise_input_gives_upward_triangles(self):
        polygon = Polygon2D(list(reversed(SQUARE)))
        for tri in polygon.triangulate():
            self.assertEqual(tri.normal, Vec3.unit_z())

    def test_indices_match_triangles(self):
        polygon = Polygon2D(L_SHAPE)
        for (i, j, k), tri in zip(polygon.triangulate_indices(), polygon.triangulate()):
            self.assertEqual(polygon.vertices[i], tri.v0)
            self.assertEqual(polygon.vertices[j], tri.v1)
            self.assertEqual(polygon.vertices[k], tri.v2)

    def test_degenerate_polygon_returns_partial_result(self):
        polygon = Polygon2D(ring((0, 0), (1, 0), (2, 0), (3, 0)))
        with self.assertLogs("gis3d.polygon", level="WARNING"):
            triangles = polygon.triangulate()
        self.assertEqual(triangles, [])


class TestPolygonTransforms(unittest.TestCase):
    """Test Polygon2D transforms."""

    def test_reverse_winding_flips(self):
        square = Polygon2D(SQUARE)
        self.assertEqual(square.reverse_winding().winding_order, WindingOrder.CLOCKWISE)

    def test_ensure_counter_clockwise_is_idempotent(self):
        cw = Polygon2D(list(reversed(SQUARE)))
        once = cw.ensure_counter_clockwise()
        twice = once.ensure_counter_clockwise()
        self.assertEqual(once.winding_order, WindingOrder.COUNTER_CLOCKWISE)
        self.assertEqual(once, twice)

    def test_translate(self):
        moved = Polygon2D(SQUARE).translate(Vec3(5, -5, 2))
        self.assertEqual(moved.centroid, Vec3(10, 0, 2))
        self.assertAlmostEqual(moved.area, 100.0)

    def test_scale_about_centroid(self):
        scaled = Polygon2D(SQUARE).scale(2.0)
        self.assertAlmostEqual(scaled.area, 400.0)
        self.assertEqual(scaled.centroid, Vec3(5, 5, 0))

    def test_extrude(self):
        solid = Polygon2D(SQUARE).extrude(ExtrusionOptions(height=3.0))
        self.assertIsInstance(solid, Polygon3D)
        self.assertAlmostEqual(solid.volume, 300.0, places=6)


class TestExtrusionOptions(unittest.TestCase):
    """Test ExtrusionOptions defaults and serialization."""

    def test_defaults(self):
        options = ExtrusionOptions()
        self.assertEqual(options.height, 1.0)
        self.assertEqual(options.top_scale, 1.0)
        self.assertEqual(options.rotation, Vec3.zero())
        self.assertTrue(options.cap_top)
        self.assertTrue(options.cap_bottom)

    def test_dict_round_trip(self):
        options = ExtrusionOptions(
            height=12.0, top_scale=0.5, rotation=Vec3(0, 0, 1), position=Vec3(3, 4, 5), cap_top=False
        )
        self.assertEqual(ExtrusionOptions.from_dict(options.to_dict()), options)

    def test_with_changes(self):
        options = ExtrusionOptions().with_changes(height=7.0)
        self.assertEqual(options.height, 7.0)


if __name__ == "__main__":
    unittest.main()
