"""
Tests for extruded solids and pyramids.
"""

import math
import unittest
import warnings
from pathlib import Path

from gis3d.vector import Vec3
from gis3d.primitives import Geometry3D, HasNormals, Triangulatable
from gis3d.polygon import ExtrusionOptions, Polygon2D
from gis3d.extrusion import EdgeKind, Polygon3D
from gis3d.pyramid import Pyramid
from gis3d import extrusion, pyramid


def square(side=10.0):
    return Polygon2D([
        Vec3(0, 0, 0), Vec3(side, 0, 0), Vec3(side, side, 0), Vec3(0, side, 0)
    ])


def assert_outward(test, solid, interior):
    for tri in solid.triangles:
        test.assertGreater(tri.normal.dot(tri.centroid - interior), 0.0)


class TestPolygon3D(unittest.TestCase):
    """Test Polygon3D mesh and measurements."""

    def setUp(self):
        self.prism = Polygon3D.create_prism(square(), 5.0)

    def test_mesh_layout(self):
        self.assertEqual(len(self.prism.vertices), 8)
        self.assertEqual(len(self.prism.faces), 12)
        self.assertEqual(len(self.prism.face_normals), 6)
        self.assertEqual(self.prism.top_vertices[0], Vec3(0, 0, 5))

    def test_volume_and_surface_area(self):
        self.assertAlmostEqual(self.prism.volume, 500.0, places=6)
        self.assertAlmostEqual(self.prism.surface_area, 400.0, places=6)

    def test_volume_matches_area_times_height(self):
        base = Polygon2D.create_regular(7, 13.0)
        solid = Polygon3D.create_prism(base, 21.0)
        self.assertAlmostEqual(solid.volume, base.area * 21.0, places=6)

    def test_face_normals(self):
        self.assertEqual(self.prism.get_face_normal(0), Vec3(0, -1, 0))
        self.assertEqual(self.prism.face_normals[-2], Vec3(0, 0, -1))
        self.assertEqual(self.prism.face_normals[-1], Vec3(0, 0, 1))
        self.assertEqual(self.prism.get_face_normal(99), Vec3.unit_z())

    def test_faces_point_outward(self):
        assert_outward(self, self.prism, self.prism.centroid)

    def test_clockwise_base_faces_point_outward(self):
        clockwise = square().reverse_winding()
        solid = Polygon3D.create_prism(clockwise, 5.0)
        assert_outward(self, solid, solid.centroid)
        self.assertAlmostEqual(solid.volume, 500.0, places=6)

    def test_tapered_volume_is_frustum(self):
        frustum = Polygon3D.create_tapered(square(), 6.0, 0.5)
        # h/3 * (A1 + A2 + sqrt(A1 * A2))
        self.assertAlmostEqual(frustum.volume, 350.0, places=6)
        self.assertEqual(frustum.top_vertices[0], Vec3(2.5, 2.5, 6))

    def test_open_solid_has_no_caps(self):
        solid = Polygon3D.extrude(square(), ExtrusionOptions(height=2.0, cap_top=False, cap_bottom=False))
        self.assertEqual(len(solid.faces), 8)
        self.assertEqual(len(solid.face_normals), 4)

    def test_bounds_centroid_footprint(self):
        self.assertEqual(self.prism.bounds.max, Vec3(10, 10, 5))
        self.assertEqual(self.prism.centroid, Vec3(5, 5, 2.5))
        self.assertAlmostEqual(self.prism.footprint.area, 100.0)

    def test_edges(self):
        edges = self.prism.get_edges()
        self.assertEqual(len(edges), 12)
        kinds = [kind for _, _, kind in edges]
        self.assertEqual(kinds.count(EdgeKind.VERTICAL), 4)
        start, end, kind = edges[-1]
        self.assertEqual(kind, EdgeKind.VERTICAL)
        self.assertAlmostEqual(start.distance_to(end), 5.0)

    def test_protocols(self):
        self.assertIsInstance(self.prism, Geometry3D)
        self.assertIsInstance(self.prism, Triangulatable)
        self.assertIsInstance(self.prism, HasNormals)

    def test_mesh_diagrams_compile_cleanly(self):
        for module in (extrusion, pyramid):
            path = Path(module.__file__)
            with warnings.catch_warnings():
                warnings.simplefilter("error")
                compile(path.read_text(), str(path), "exec")


class TestPolygon3DTransforms(unittest.TestCase):
    """Test Polygon3D transforms return new solids."""

    def setUp(self):
        self.prism = Polygon3D.create_prism(square(), 5.0)

    def test_translate(self):
        moved = self.prism.translate(Vec3(100, 0, 10))
        self.assertEqual(moved.bounds.min, Vec3(100, 0, 10))
        self.assertEqual(self.prism.bounds.min, Vec3(0, 0, 0))

    def test_rotate_about_centroid(self):
        rotated = self.prism.rotate_z(math.pi / 2)
        self.assertEqual(rotated.bottom_vertices[0], Vec3(10, 0, 0))
        self.assertAlmostEqual(rotated.volume, 500.0, places=6)

    def test_rotate_x_tips_the_top(self):
        tipped = self.prism.rotate_x(math.pi / 2)
        # Height vector (0, 0, 5) rotated about X points along -Y
        offset = tipped.top_vertices[0] - tipped.bottom_vertices[0]
        self.assertEqual(offset, Vec3(0, -5, 0))

    def test_uniform_scale(self):
        self.assertAlmostEqual(self.prism.scale(2.0).volume, 4000.0, places=6)

    def test_scale_axes(self):
        self.assertAlmostEqual(self.prism.scale_axes(Vec3(1, 1, 3)).volume, 1500.0, places=6)
        self.assertAlmostEqual(self.prism.scale_axes(Vec3(2, 8, 1)).volume, 8000.0, places=6)


class TestPyramid(unittest.TestCase):
    """Test Pyramid construction and closed-form measurements."""

    def setUp(self):
        self.pyramid = Pyramid.create_square_pyramid(10.0, 6.0)

    def test_mesh_layout(self):
        self.assertEqual(len(self.pyramid.vertices), 5)
        self.assertEqual(len(self.pyramid.faces), 6)
        self.assertEqual(len(self.pyramid.face_normals), 5)
        self.assertEqual(self.pyramid.apex, Vec3(0, 0, 6))

    def test_square_pyramid_volume(self):
        self.assertAlmostEqual(self.pyramid.volume, 10.0 ** 2 * 6.0 / 3.0, delta=0.1)

    def test_measurements(self):
        self.assertAlmostEqual(self.pyramid.height, 6.0)
        self.assertTrue(self.pyramid.is_regular)
        self.assertEqual(self.pyramid.centroid, Vec3(0, 0, 1.5))
        self.assertAlmostEqual(self.pyramid.slant_height, math.sqrt(61.0))
        self.assertAlmostEqual(self.pyramid.lateral_surface_area, 20 * math.sqrt(61.0))
        self.assertAlmostEqual(self.pyramid.surface_area, 20 * math.sqrt(61.0) + 100.0)

    def test_open_pyramid_surface_area(self):
        base = Polygon2D.create_regular(4, 5.0)
        open_pyramid = Pyramid(base, base.centroid + Vec3(0, 0, 3), include_base_cap=False)
        self.assertEqual(len(open_pyramid.faces), 4)
        self.assertAlmostEqual(open_pyramid.surface_area, open_pyramid.lateral_surface_area)

    def test_oblique_apex_is_not_regular(self):
        oblique = Pyramid.create_with_apex(square(), Vec3(0, 0, 8))
        self.assertFalse(oblique.is_regular)
        self.assertAlmostEqual(oblique.height, 8.0)
        self.assertAlmostEqual(oblique.volume, 100.0 * 8.0 / 3.0)

    def test_tetrahedron_edges_are_equal(self):
        tetra = Pyramid.create_tetrahedron(2.0)
        for start, end in tetra.get_base_edges() + tetra.get_lateral_edges():
            self.assertAlmostEqual(start.distance_to(end), 2.0)
        self.assertAlmostEqual(tetra.volume, 8.0 / (6 * math.sqrt(2)))

    def test_create_regular(self):
        hexagonal = Pyramid.create_regular(6, 4.0, 9.0, position=Vec3(10, 0, 0))
        self.assertEqual(hexagonal.apex, Vec3(10, 0, 9))
        self.assertAlmostEqual(hexagonal.volume, hexagonal.base.area * 3.0)

    def test_contains_point(self):
        self.assertTrue(self.pyramid.contains_point(Vec3(0, 0, 1)))
        self.assertFalse(self.pyramid.contains_point(Vec3(0, 0, 7)))
        self.assertFalse(self.pyramid.contains_point(Vec3(4.9, 0, 5)))
        self.assertFalse(self.pyramid.contains_point(Vec3(0, 0, -1)))

    def test_faces_point_outward(self):
        assert_outward(self, self.pyramid, self.pyramid.centroid)

    def test_clockwise_base_faces_point_outward(self):
        pyramid = Pyramid.create(square().reverse_winding(), 6.0)
        assert_outward(self, pyramid, pyramid.centroid)

    def test_protocols(self):
        self.assertIsInstance(self.pyramid, Geometry3D)
        self.assertIsInstance(self.pyramid, Triangulatable)
        self.assertIsInstance(self.pyramid, HasNormals)


class TestPyramidTruncateAndTransforms(unittest.TestCase):
    """Test truncation and transforms."""

    def setUp(self):
        self.pyramid = Pyramid.create_square_pyramid(10.0, 6.0)

    def test_truncate(self):
        frustum = self.pyramid.truncate(0.5)
        self.assertIsInstance(frustum, Polygon3D)
        self.assertAlmostEqual(frustum.height, 3.0)
        self.assertAlmostEqual(frustum.volume, 175.0, places=6)

    def test_truncate_rejects_out_of_range(self):
        for value in (0.0, 1.0, -0.5, 1.5):
            with self.assertRaises(ValueError):
                self.pyramid.truncate(value)

    def test_translate(self):
        moved = self.pyramid.translate(Vec3(1, 2, 3))
        self.assertEqual(moved.apex, Vec3(1, 2, 9))
        self.assertEqual(self.pyramid.apex, Vec3(0, 0, 6))

    def test_rotate_x_flips_apex(self):
        flipped = self.pyramid.rotate_x(math.pi)
        self.assertEqual(flipped.apex, Vec3(0, 0, -6))
        self.assertAlmostEqual(flipped.volume, 200.0)

    def test_scale(self):
        scaled = self.pyramid.scale(2.0)
        self.assertAlmostEqual(scaled.height, 12.0)
        self.assertAlmostEqual(scaled.volume, 1600.0)

    def test_scale_axes(self):
        stretched = self.pyramid.scale_axes(Vec3(1, 1, 2))
        self.assertAlmostEqual(stretched.volume, 400.0)


if __name__ == "__main__":
    unittest.main()
