"""Tests for the globe orientation quaternion."""

import numpy as np
import pytest

from viewport.quaternion import Quaternion

# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_identity_leaves_vectors_unchanged(self) -> None:
        v = np.array([0.3, -0.4, 0.866])
        assert np.allclose(Quaternion.identity().rotate(v), v)

    def test_axis_angle_quarter_turn_about_y(self) -> None:
        q = Quaternion.from_axis_angle((0.0, 1.0, 0.0), np.pi / 2)
        assert np.allclose(q.rotate((0.0, 0.0, 1.0)), [1.0, 0.0, 0.0])

    def test_axis_is_normalized(self) -> None:
        q = Quaternion.from_axis_angle((0.0, 5.0, 0.0), np.pi / 2)
        assert q.norm() == pytest.approx(1.0)

    def test_zero_axis_rejected(self) -> None:
        with pytest.raises(ValueError):
            Quaternion.from_axis_angle((0.0, 0.0, 0.0), 1.0)

    def test_euler_applies_pitch_then_yaw(self) -> None:
        q = Quaternion.from_euler(np.pi / 2, np.pi / 2, 0.0)
        # pitch turns +y onto +z, yaw then turns +z onto +x
        assert np.allclose(q.rotate((0.0, 1.0, 0.0)), [1.0, 0.0, 0.0])

    def test_spherical_round_trip(self) -> None:
        q = Quaternion.from_spherical(0.7, -0.4)
        assert q.w == 0.0
        lon, lat = q.to_spherical()
        assert lon == pytest.approx(0.7)
        assert lat == pytest.approx(-0.4)


# ---------------------------------------------------------------------------
# Algebra
# ---------------------------------------------------------------------------


class TestAlgebra:
    def test_product_composes_right_to_left(self) -> None:
        spin = Quaternion.from_axis_angle((0.0, 1.0, 0.0), np.pi / 2)
        tilt = Quaternion.from_axis_angle((1.0, 0.0, 0.0), np.pi / 2)
        v = np.array([0.0, 0.0, 1.0])
        assert np.allclose((tilt * spin).rotate(v), tilt.rotate(spin.rotate(v)))

    def test_inverse_undoes_rotation(self) -> None:
        q = Quaternion.from_euler(0.3, -1.1, 2.0)
        v = np.array([0.2, 0.5, -0.84])
        assert np.allclose(q.inverse().rotate(q.rotate(v)), v)

    def test_matrix_is_orthonormal(self) -> None:
        m = Quaternion.from_euler(0.5, 0.25, -0.75).to_matrix()
        assert np.allclose(m @ m.T, np.eye(3))
        assert np.linalg.det(m) == pytest.approx(1.0)

    def test_zero_quaternion_cannot_be_normalized(self) -> None:
        with pytest.raises(ValueError):
            Quaternion(0.0, 0.0, 0.0, 0.0).normalized()

    def test_slerp_endpoints_and_midpoint(self) -> None:
        a = Quaternion.identity()
        b = Quaternion.from_axis_angle((0.0, 0.0, 1.0), np.pi / 2)
        mid = a.slerp(b, 0.5)
        expected = Quaternion.from_axis_angle((0.0, 0.0, 1.0), np.pi / 4)
        assert np.allclose(mid.to_matrix(), expected.to_matrix())
        assert np.allclose(a.slerp(b, 1.0).to_matrix(), b.to_matrix())
