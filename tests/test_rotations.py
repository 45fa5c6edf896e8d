"""Tests for quaternions, SO(4) rotations and dual quaternions."""

import math

import numpy as np
import pytest

from pkgs.common import DegenerateAxis
from pkgs.rotations import DualQuat, Quat3D, SO4Rotation


def _random_axis_angles(n, seed=1):
    rng = np.random.default_rng(seed)
    for _ in range(n):
        yield rng.normal(size=3), rng.uniform(-2 * math.pi, 2 * math.pi)


class TestQuat3D:
    """Test SO(3) quaternion behaviour."""

    def test_quarter_turn_about_z(self):
        q = Quat3D.from_axis_angle([0, 0, 1], math.pi / 2)
        np.testing.assert_allclose(q.rotate_vector([1, 0, 0]), [0, 1, 0], atol=1e-12)

    def test_degenerate_axis(self):
        with pytest.raises(DegenerateAxis):
            Quat3D.from_axis_angle([0.0, 0.0, 1e-12], 1.0)

    def test_axis_is_normalised(self):
        q = Quat3D.from_axis_angle([0, 0, 5.0], 0.3)
        assert q.is_unit()

    def test_rotation_preserves_norm(self):
        v = np.array([0.3, -1.2, 2.5])
        for axis, angle in _random_axis_angles(50):
            r = Quat3D.from_axis_angle(axis, angle).rotate_vector(v)
            assert np.linalg.norm(r) == pytest.approx(np.linalg.norm(v), rel=1e-9)

    def test_composition_homomorphism(self):
        v = np.array([1.0, 2.0, -0.5])
        pairs = list(_random_axis_angles(20, seed=7))
        for (a1, t1), (a2, t2) in zip(pairs[::2], pairs[1::2]):
            p, q = Quat3D.from_axis_angle(a1, t1), Quat3D.from_axis_angle(a2, t2)
            np.testing.assert_allclose((p * q).rotate_vector(v), p.rotate_vector(q.rotate_vector(v)), atol=1e-12)

    def test_long_chain_stays_unit(self):
        q = Quat3D.identity()
        step = Quat3D.from_axis_angle([1, 2, 3], 0.01)
        for _ in range(10000):
            q = q * step
        assert q.is_unit()

    def test_rotation_matrix_round_trip(self):
        for axis, angle in _random_axis_angles(20, seed=3):
            q = Quat3D.from_axis_angle(axis, angle)
            q2 = Quat3D.from_rotation_matrix(q.to_rotation_matrix())
            assert abs(q.dot(q2)) == pytest.approx(1.0, abs=1e-12)

    def test_axis_angle_round_trip(self):
        q = Quat3D.from_axis_angle([0, 1, 0], 1.2)
        axis, angle = q.to_axis_angle()
        np.testing.assert_allclose(axis, [0, 1, 0], atol=1e-12)
        assert angle == pytest.approx(1.2)

    def test_inverse(self):
        q = Quat3D.from_axis_angle([1, 1, 0], 0.7)
        v = np.array([0.1, 0.2, 0.3])
        np.testing.assert_allclose(q.inverse().rotate_vector(q.rotate_vector(v)), v, atol=1e-12)

    def test_slerp_endpoints_and_midpoint(self):
        a = Quat3D.identity()
        b = Quat3D.from_axis_angle([0, 0, 1], math.pi / 2)
        assert abs(a.slerp(b, 0.0).dot(a)) == pytest.approx(1.0)
        assert abs(a.slerp(b, 1.0).dot(b)) == pytest.approx(1.0)
        mid = a.slerp(b, 0.5)
        assert abs(mid.dot(Quat3D.from_axis_angle([0, 0, 1], math.pi / 4))) == pytest.approx(1.0)

    def test_zero_quaternion_cannot_normalise(self):
        with pytest.raises(DegenerateAxis):
            Quat3D(0.0, 0.0, 0.0, 0.0).normalized()


class TestSO4Rotation:
    """Test isoclinic-pair rotations in 4D."""

    @pytest.mark.parametrize("plane,i,j", [
        ("xy", 0, 1), ("xz", 0, 2), ("yz", 1, 2),
        ("xw", 0, 3), ("yw", 1, 3), ("zw", 2, 3),
    ])
    def test_plane_rotation(self, plane, i, j):
        R = SO4Rotation.from_plane(plane, math.pi / 2)
        e = np.eye(4)
        np.testing.assert_allclose(R.apply(e[i]), e[j], atol=1e-12)
        # the other two axes are fixed
        for k in set(range(4)) - {i, j}:
            np.testing.assert_allclose(R.apply(e[k]), e[k], atol=1e-12)

    def test_unknown_plane(self):
        with pytest.raises(ValueError):
            SO4Rotation.from_plane("xq", 1.0)

    def test_matrix_is_orthogonal(self):
        R = SO4Rotation.from_plane("xy", 0.3) @ SO4Rotation.from_plane("zw", 1.1) @ SO4Rotation.from_plane("yw", -0.4)
        M = R.to_matrix()
        np.testing.assert_allclose(M.T @ M, np.eye(4), atol=1e-12)
        assert np.linalg.det(M) == pytest.approx(1.0)

    def test_compose_matches_matrix_product(self):
        a = SO4Rotation.from_plane("xw", 0.8)
        b = SO4Rotation.from_plane("yz", -0.5)
        np.testing.assert_allclose(a.compose(b).to_matrix(), a.to_matrix() @ b.to_matrix(), atol=1e-12)

    def test_inverse(self):
        R = SO4Rotation.from_plane("xw", 0.8) @ SO4Rotation.from_plane("yz", 0.2)
        p = np.array([1.0, -2.0, 0.5, 3.0])
        np.testing.assert_allclose(R.inverse().apply(R.apply(p)), p, atol=1e-12)


class TestDualQuat:
    """Test rigid motions as dual quaternions."""

    def test_rotation_then_translation(self):
        dq = DualQuat.from_rotation_translation(Quat3D.from_axis_angle([0, 0, 1], math.pi / 2), [1, 2, 3])
        np.testing.assert_allclose(dq.transform_point([1, 0, 0]), [1, 3, 3], atol=1e-12)
        np.testing.assert_allclose(dq.translation, [1, 2, 3], atol=1e-12)

    def test_composition(self):
        a = DualQuat.from_rotation_translation(Quat3D.from_axis_angle([1, 0, 0], 0.4), [0.5, 0, 0])
        b = DualQuat.from_rotation_translation(Quat3D.from_axis_angle([0, 1, 0], -1.1), [0, 1, 2])
        p = np.array([0.3, -0.2, 1.0])
        np.testing.assert_allclose((a * b).transform_point(p), a.transform_point(b.transform_point(p)), atol=1e-12)

    def test_composition_keeps_constraint(self):
        dq = DualQuat.identity()
        step = DualQuat.from_rotation_translation(Quat3D.from_axis_angle([1, 1, 1], 0.01), [0.01, 0, 0])
        for _ in range(1000):
            dq = dq * step
        assert dq.real.is_unit()
        assert dq.real.dot(dq.dual) == pytest.approx(0.0, abs=1e-12)

    def test_inverse(self):
        dq = DualQuat.from_rotation_translation(Quat3D.from_axis_angle([0, 1, 1], 0.9), [1, -1, 2])
        p = np.array([0.1, 0.2, 0.3])
        np.testing.assert_allclose(dq.inverse().transform_point(dq.transform_point(p)), p, atol=1e-12)

    def test_matrix4(self):
        dq = DualQuat.from_rotation_translation(Quat3D.from_axis_angle([0, 0, 1], 0.5), [1, 2, 3])
        p = np.array([0.4, 0.5, 0.6])
        np.testing.assert_allclose((dq.to_matrix4() @ np.append(p, 1.0))[:3], dq.transform_point(p), atol=1e-12)

    def test_blend_endpoints(self):
        a = DualQuat.from_translation([0, 0, 0])
        b = DualQuat.from_translation([2, 0, 0])
        np.testing.assert_allclose(a.blend(b, 0.5).translation, [1, 0, 0], atol=1e-12)
