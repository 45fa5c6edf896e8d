"""
Unit quaternions for SO(3) rotations.

Components are ordered (w, x, y, z).  Composition always renormalises the product so
the unit-norm invariant survives arbitrarily long chains of rotations.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from pkgs.common import AXIS_EPS, UNIT_NORM_TOL, DegenerateAxis


def hamilton_product(p: np.ndarray, q: np.ndarray) -> np.ndarray:
    """Raw (un-normalised) quaternion product p⊗q on (w, x, y, z) arrays."""
    w1, x1, y1, z1 = p
    w2, x2, y2, z2 = q
    return np.array([
        w1*w2 - x1*x2 - y1*y2 - z1*z2,
        w1*x2 + x1*w2 + y1*z2 - z1*y2,
        w1*y2 - x1*z2 + y1*w2 + z1*x2,
        w1*z2 + x1*y2 - y1*x2 + z1*w2,
    ], dtype=np.float64)


def _vec3(v: Sequence[float], what: str = "vector") -> np.ndarray:
    arr = np.asarray(v, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"{what} must have 3 components, got shape {arr.shape}")
    return arr


@dataclass(frozen=True)
class Quat3D:
    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __post_init__(self):
        for name in ("w", "x", "y", "z"):
            object.__setattr__(self, name, float(getattr(self, name)))

    @classmethod
    def identity(cls) -> "Quat3D":
        return cls(1.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_array(cls, q: Sequence[float]) -> "Quat3D":
        w, x, y, z = np.asarray(q, dtype=np.float64)
        return cls(w, x, y, z)

    @classmethod
    def from_axis_angle(cls, axis: Sequence[float], angle: float) -> "Quat3D":
        """q = cos(θ/2) + sin(θ/2) n̂.  Fails with DegenerateAxis when ‖axis‖ < AXIS_EPS."""
        axis = _vec3(axis, "axis")
        n = float(np.linalg.norm(axis))
        if n < AXIS_EPS:
            raise DegenerateAxis(f"rotation axis norm {n:.3e} is below {AXIS_EPS:.0e}")
        s = math.sin(0.5 * angle) / n
        return cls(math.cos(0.5 * angle), axis[0]*s, axis[1]*s, axis[2]*s)

    @classmethod
    def from_rotation_matrix(cls, m) -> "Quat3D":
        """Shepperd's method: branch on the largest diagonal term for stability."""
        m = np.asarray(m, dtype=np.float64)
        if m.shape != (3, 3):
            raise ValueError(f"rotation matrix must be 3x3, got shape {m.shape}")
        tr = m[0, 0] + m[1, 1] + m[2, 2]
        if tr > 0:
            s = 2.0 * math.sqrt(tr + 1.0)
            q = (0.25*s, (m[2, 1] - m[1, 2])/s, (m[0, 2] - m[2, 0])/s, (m[1, 0] - m[0, 1])/s)
        elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
            s = 2.0 * math.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2])
            q = ((m[2, 1] - m[1, 2])/s, 0.25*s, (m[0, 1] + m[1, 0])/s, (m[0, 2] + m[2, 0])/s)
        elif m[1, 1] > m[2, 2]:
            s = 2.0 * math.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2])
            q = ((m[0, 2] - m[2, 0])/s, (m[0, 1] + m[1, 0])/s, 0.25*s, (m[1, 2] + m[2, 1])/s)
        else:
            s = 2.0 * math.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1])
            q = ((m[1, 0] - m[0, 1])/s, (m[0, 2] + m[2, 0])/s, (m[1, 2] + m[2, 1])/s, 0.25*s)
        return cls(*q).normalized()

    def as_array(self) -> np.ndarray:
        return np.array([self.w, self.x, self.y, self.z], dtype=np.float64)

    @property
    def vector(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def norm(self) -> float:
        return float(np.linalg.norm(self.as_array()))

    def is_unit(self, tol: float = UNIT_NORM_TOL) -> bool:
        return abs(self.norm() - 1.0) <= tol

    def normalized(self) -> "Quat3D":
        n = self.norm()
        if n < AXIS_EPS:
            raise DegenerateAxis("cannot normalise a zero quaternion")
        return Quat3D.from_array(self.as_array() / n)

    def conjugate(self) -> "Quat3D":
        return Quat3D(self.w, -self.x, -self.y, -self.z)

    def inverse(self) -> "Quat3D":
        n2 = self.norm() ** 2
        if n2 < AXIS_EPS ** 2:
            raise DegenerateAxis("zero quaternion has no inverse")
        return Quat3D.from_array(self.conjugate().as_array() / n2)

    def dot(self, other: "Quat3D") -> float:
        return float(np.dot(self.as_array(), other.as_array()))

    def __mul__(self, other: "Quat3D") -> "Quat3D":
        if not isinstance(other, Quat3D):
            return NotImplemented
        return Quat3D.from_array(hamilton_product(self.as_array(), other.as_array())).normalized()

    def rotate_vector(self, v: Sequence[float]) -> np.ndarray:
        """Vector part of q ⊗ (0, v) ⊗ q⁻¹."""
        v = _vec3(v)
        qv = np.concatenate(([0.0], v))
        r = hamilton_product(hamilton_product(self.as_array(), qv), self.inverse().as_array())
        return r[1:]

    def to_rotation_matrix(self) -> np.ndarray:
        w, x, y, z = self.normalized().as_array()
        return np.array([
            [1 - 2*(y*y + z*z), 2*(x*y - w*z),     2*(x*z + w*y)],
            [2*(x*y + w*z),     1 - 2*(x*x + z*z), 2*(y*z - w*x)],
            [2*(x*z - w*y),     2*(y*z + w*x),     1 - 2*(x*x + y*y)],
        ])

    def to_axis_angle(self) -> Tuple[np.ndarray, float]:
        q = self.normalized()
        w = min(1.0, max(-1.0, q.w))
        angle = 2.0 * math.acos(w)
        s = math.sqrt(max(0.0, 1.0 - w*w))
        if s < AXIS_EPS:
            # identity rotation: any axis will do
            return np.array([1.0, 0.0, 0.0]), 0.0
        return q.vector / s, angle

    def slerp(self, other: "Quat3D", t: float) -> "Quat3D":
        """Spherical interpolation along the shorter arc."""
        a, b = self.normalized().as_array(), other.normalized().as_array()
        d = float(np.dot(a, b))
        if d < 0.0:
            b, d = -b, -d
        if d > 0.9995:
            return Quat3D.from_array(a + t*(b - a)).normalized()
        theta = math.acos(d)
        s = math.sin(theta)
        return Quat3D.from_array((math.sin((1 - t)*theta)*a + math.sin(t*theta)*b) / s).normalized()
