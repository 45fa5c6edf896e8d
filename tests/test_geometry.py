"""Tests for 4D primitives, polytopes, projections and rigid bodies."""

import math

import numpy as np
import pytest

from geometry import (
    Cell24, Matrix4x4, Point4D, Projection4Dto3D, ProjectionKind, RigidBody4D, Tesseract,
)
from pkgs.common import SingularProjection
from pkgs.rotations import SO4Rotation


class TestPrimitives:
    """Test Point4D and Matrix4x4."""

    def test_point_arithmetic(self):
        p = Point4D(1, 2, 3, 4)
        q = Point4D(0.5, 0, -1, 2)
        assert (p + q).as_array().tolist() == [1.5, 2.0, 2.0, 6.0]
        assert (2 * p).w == 8.0
        assert p.dot(q) == pytest.approx(0.5 - 3 + 8)

    def test_point_from_bad_array(self):
        with pytest.raises(ValueError):
            Point4D.from_array([1, 2, 3])

    def test_point_to_tensor(self):
        t = Point4D(1, 2, 3, 4).to_tensor()
        assert t.shape == (4,)
        assert t.get(3) == 4.0

    def test_matrix_from_rotation(self):
        R = SO4Rotation.from_plane("xw", math.pi / 2)
        M = Matrix4x4.from_rotation(R)
        np.testing.assert_allclose(M.transform([1, 0, 0, 0]).as_array(), [0, 0, 0, 1], atol=1e-12)
        assert M.determinant() == pytest.approx(1.0)


class TestPolytopes:
    """Test vertex counts, edge counts and deterministic ordering."""

    def test_tesseract_counts(self):
        t = Tesseract()
        assert len(t.vertices) == 16
        assert len(t.edges) == 32
        assert len(t.faces) == 24

    def test_tesseract_geometry(self):
        t = Tesseract(circumradius=2.0)
        assert t.circumradius() == pytest.approx(2.0)
        assert t.edge_length() == pytest.approx(2.0)
        for i, j in t.edges:
            assert t.vertices[i].distance(t.vertices[j]) == pytest.approx(2.0)

    def test_cell24_counts(self):
        c = Cell24()
        assert len(c.vertices) == 24
        assert len(c.edges) == 96
        assert len(c.faces) == 96

    def test_cell24_edge_equals_circumradius(self):
        c = Cell24(circumradius=1.5)
        assert c.circumradius() == pytest.approx(1.5)
        assert c.edge_length() == pytest.approx(1.5)

    def test_every_vertex_has_same_degree(self):
        for poly, degree in ((Tesseract(), 4), (Cell24(), 8)):
            counts = np.zeros(len(poly.vertices), dtype=int)
            for i, j in poly.edges:
                counts[i] += 1
                counts[j] += 1
            assert set(counts.tolist()) == {degree}

    def test_deterministic_order(self):
        a, b = Cell24(), Cell24()
        assert a.vertices == b.vertices
        assert a.edges == b.edges
        assert Tesseract().edges == Tesseract().edges

    def test_non_positive_circumradius(self):
        with pytest.raises(ValueError):
            Tesseract(0.0)
        with pytest.raises(ValueError):
            Cell24(-1.0)


class TestProjection:
    """Test 4D -> 3D projections."""

    def test_orthographic_drops_w(self):
        proj = Projection4Dto3D(ProjectionKind.ORTHOGRAPHIC)
        np.testing.assert_allclose(proj.project([1, 2, 3, 100]), [1, 2, 3])

    def test_perspective_scaling(self):
        proj = Projection4Dto3D(ProjectionKind.PERSPECTIVE, eye_w=2.0)
        np.testing.assert_allclose(proj.project([1, 1, 1, 1]), [2, 2, 2])
        np.testing.assert_allclose(proj.project([1, 1, 1, 0]), [1, 1, 1])

    @pytest.mark.parametrize("kind", list(ProjectionKind))
    def test_round_trip_with_w(self, kind):
        proj = Projection4Dto3D(kind)
        p = Point4D(0.3, -0.2, 0.7, 0.4)
        back = proj.unproject(proj.project(p), w=p.w)
        np.testing.assert_allclose(back.as_array(), p.as_array(), atol=1e-12)

    def test_stereographic_inverse_lands_on_sphere(self):
        proj = Projection4Dto3D(ProjectionKind.STEREOGRAPHIC, radius=2.0)
        p = proj.unproject([0.5, 1.0, -0.3])
        assert p.norm() == pytest.approx(2.0)
        np.testing.assert_allclose(proj.project(p), [0.5, 1.0, -0.3], atol=1e-12)

    @pytest.mark.parametrize("kind,w", [
        (ProjectionKind.PERSPECTIVE, 2.0),
        (ProjectionKind.PERSPECTIVE, 3.0),
        (ProjectionKind.STEREOGRAPHIC, 1.0),
    ])
    def test_singular_hyperplane_raises(self, kind, w):
        proj = Projection4Dto3D(kind)
        with pytest.raises(SingularProjection):
            proj.project([1.0, 0.0, 0.0, w])

    def test_perspective_unproject_needs_w(self):
        with pytest.raises(ValueError):
            Projection4Dto3D().unproject([1.0, 0.0, 0.0])

    def test_project_polytope(self):
        t = Tesseract()
        out = Projection4Dto3D().project_polytope(t)
        assert out.shape == (16, 3)
        assert np.all(np.isfinite(out))


class TestRigidBody4D:
    """Test poses applied to polytopes."""

    def test_apply_does_not_mutate(self):
        t = Tesseract()
        before = t.vertex_array()
        body = RigidBody4D(SO4Rotation.from_plane("xy", 0.7), translation=(1, 0, 0, 0))
        moved = body.apply(t)
        np.testing.assert_array_equal(t.vertex_array(), before)
        assert moved.edges == t.edges
        np.testing.assert_allclose(moved.centroid().as_array(), [1, 0, 0, 0], atol=1e-12)

    def test_rigid_motion_preserves_edge_lengths(self):
        c = Cell24()
        body = RigidBody4D(SO4Rotation.from_plane("zw", 1.3) @ SO4Rotation.from_plane("xy", -0.4),
                           translation=(0.2, -1.0, 3.0, 0.5))
        moved = body.apply(c)
        for i, j in moved.edges:
            assert moved.vertices[i].distance(moved.vertices[j]) == pytest.approx(1.0)

    def test_advance(self):
        body = RigidBody4D(velocity=(1, 0, 0, 0), angular_velocity={"xw": math.pi})
        later = body.advance(0.5)
        np.testing.assert_allclose(later.translation, [0.5, 0, 0, 0])
        np.testing.assert_allclose(later.transform_point([1, 0, 0, 0]).as_array(), [0.5, 0, 0, 1], atol=1e-12)
        assert body.translation == (0.0, 0.0, 0.0, 0.0)

    def test_compose(self):
        a = RigidBody4D(SO4Rotation.from_plane("xy", 0.3), translation=(1, 2, 3, 4))
        b = RigidBody4D(SO4Rotation.from_plane("yw", -0.9), translation=(0, 1, 0, -1))
        p = Point4D(0.1, 0.2, 0.3, 0.4)
        np.testing.assert_allclose(a.compose(b).transform_point(p).as_array(),
                                   a.transform_point(b.transform_point(p)).as_array(), atol=1e-12)

    def test_advance_rejects_non_finite(self):
        with pytest.raises(ValueError):
            RigidBody4D().advance(float("nan"))
